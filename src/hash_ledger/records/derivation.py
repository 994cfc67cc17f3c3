"""Storage slot address derivation.

A slot address is ``create_with_seed(owner, "{hospitalId}_{reportId}", program_id)``.
Anyone who knows the service identity's public key and the program id can
locate a record with the same seed format.
"""

from solders.pubkey import Pubkey

from hash_ledger.ledger.client import LedgerClient
from hash_ledger.utils.exceptions import EncodingError

# Ledger limit on create_with_seed seeds
MAX_SEED_LENGTH = 32


def seed_for(hospital_id: int, report_id: int) -> str:
    """Return the seed string for a hospital/report pair."""
    return f"{hospital_id}_{report_id}"


def derive_slot_id(owner: Pubkey, hospital_id: int, report_id: int, program_id: Pubkey) -> Pubkey:
    """Derive the storage slot address for a hospital/report pair.

    Args:
        owner: Public key of the service identity (base of the derivation)
        hospital_id: Hospital identifier
        report_id: Report identifier
        program_id: Program that owns the slot accounts

    Returns:
        Slot address

    Raises:
        EncodingError: If the seed exceeds the ledger's seed length limit

    Example:
        >>> owner = Pubkey.default()
        >>> derive_slot_id(owner, 5, 12, owner) == derive_slot_id(owner, 5, 12, owner)
        True
    """
    seed = seed_for(hospital_id, report_id)
    if len(seed.encode("utf-8")) > MAX_SEED_LENGTH:
        raise EncodingError(f"Seed '{seed}' exceeds {MAX_SEED_LENGTH} bytes")
    return LedgerClient.derive_address(owner, seed, program_id)
