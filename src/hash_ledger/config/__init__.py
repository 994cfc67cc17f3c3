"""Config module.

This module provides configuration management functionality.
"""

from hash_ledger.config.manager import (
    get_ledger_config,
    get_server_config,
    load_config,
)
from hash_ledger.config.schema import (
    Config,
    FundingConfig,
    LedgerConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_ledger_config",
    "get_server_config",
    # Configuration models
    "Config",
    "FundingConfig",
    "LedgerConfig",
    "LoggingConfig",
    "ServerConfig",
]
