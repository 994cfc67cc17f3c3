"""hash-ledger: document hashes stored in seeded Solana accounts."""

__version__ = "0.1.0"
