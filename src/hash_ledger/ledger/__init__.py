"""Ledger module.

Solana ledger access: RPC client adapter, keypair files and the process context.
"""

from hash_ledger.ledger.client import LAMPORTS_PER_SOL, LedgerClient
from hash_ledger.ledger.context import LedgerContext, load_or_generate_identity
from hash_ledger.ledger.keys import load_keypair, load_program_id, save_keypair

__all__ = [
    "LAMPORTS_PER_SOL",
    "LedgerClient",
    "LedgerContext",
    "load_keypair",
    "load_or_generate_identity",
    "load_program_id",
    "save_keypair",
]
