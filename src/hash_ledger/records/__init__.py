"""Records module.

Slot byte layout and slot address derivation.
"""

from hash_ledger.records.codec import SLOT_CAPACITY, decode, encode, pad
from hash_ledger.records.derivation import derive_slot_id, seed_for

__all__ = [
    "SLOT_CAPACITY",
    "decode",
    "derive_slot_id",
    "encode",
    "pad",
    "seed_for",
]
