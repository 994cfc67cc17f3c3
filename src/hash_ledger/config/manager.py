"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from hash_ledger.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from hash_ledger.config.schema import Config, LedgerConfig, ServerConfig
from hash_ledger.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "HASH_LEDGER_"


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


# (environment suffix, section, field, converter)
ENV_OVERRIDES: list[tuple[str, str, str, Callable[[str], Any]]] = [
    ("RPC_URL", "ledger", "rpc_url", str),
    ("COMMITMENT", "ledger", "commitment", str),
    ("PROGRAM_KEYPAIR_PATH", "ledger", "program_keypair_path", str),
    ("PROGRAM_ID", "ledger", "program_id", str),
    ("IDENTITY_PATH", "ledger", "identity_path", str),
    ("PERSIST_IDENTITY", "ledger", "persist_identity", _parse_bool),
    ("CONFIRM_TIMEOUT", "ledger", "confirm_timeout_seconds", float),
    ("POLL_INTERVAL", "ledger", "poll_interval_seconds", float),
    ("RPC_TIMEOUT", "ledger", "rpc_timeout_seconds", float),
    ("SLOT_LAMPORTS", "ledger", "slot_lamports", int),
    ("FUNDING_ENABLED", "funding", "enabled", _parse_bool),
    ("AIRDROP_LAMPORTS", "funding", "airdrop_lamports", int),
    ("MIN_BALANCE_LAMPORTS", "funding", "min_balance_lamports", int),
    ("HOST", "server", "host", str),
    ("PORT", "server", "port", int),
    ("STRICT_STATUS_CODES", "server", "strict_status_codes", _parse_bool),
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "log_file", str),
    ("REDACT_SECRETS", "logging", "redact_secrets", _parse_bool),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (HASH_LEDGER_* prefix, .env supported)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> rpc_url = config.ledger.rpc_url
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        )


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or the file is unreadable
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            )
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            )
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object at the top level"
            )
        return config_dict

    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Return a deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with HASH_LEDGER_ prefix.

    For example: HASH_LEDGER_RPC_URL, HASH_LEDGER_PORT, HASH_LEDGER_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied

    Raises:
        ConfigurationError: If a numeric override cannot be parsed
    """
    for suffix, section, field, convert in ENV_OVERRIDES:
        env_key = f"{ENV_PREFIX}{suffix}"
        value = os.getenv(env_key)
        if not value:
            continue
        try:
            config_dict.setdefault(section, {})[field] = convert(value)
        except ValueError:
            raise ConfigurationError(
                f"Invalid value for {env_key}: '{value}'.\n"
                f"Fix: Provide a valid {convert.__name__} value"
            )
        logger.debug(f"Override: {section}.{field} from environment")

    return config_dict


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when secret key material is placed directly in the config file.

    Args:
        config_dict: Configuration dictionary to check
    """
    ledger = config_dict.get("ledger", {})
    for key in ("secret_key", "identity_secret", "private_key"):
        if key in ledger:
            logger.warning(
                f"WARNING: '{key}' found in configuration file and ignored. "
                "Keep keys in a keypair file and point ledger.identity_path at it."
            )


def get_ledger_config(config: Config) -> LedgerConfig:
    """Get ledger configuration."""
    return config.ledger


def get_server_config(config: Config) -> ServerConfig:
    """Get HTTP service configuration."""
    return config.server
