"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "ledger": {
        # Public Solana devnet
        "rpc_url": "https://api.devnet.solana.com",
        "commitment": "confirmed",
        # Written by the program deployment
        "program_keypair_path": "program/hash-store-keypair.json",
        "program_id": None,
        # No identity file: a fresh identity is generated per process
        "identity_path": None,
        "persist_identity": False,
        "confirm_timeout_seconds": 60.0,
        "poll_interval_seconds": 0.5,
        "rpc_timeout_seconds": 10.0,
        # Rent-exempt minimum for the slot size
        "slot_lamports": None,
    },
    "funding": {
        "enabled": True,
        # 5 SOL
        "airdrop_lamports": 5_000_000_000,
        # 1 SOL
        "min_balance_lamports": 1_000_000_000,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3000,
        # Always answer 200 with a status body unless enabled
        "strict_status_codes": False,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/hash-ledger.log",
        "redact_secrets": True,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
