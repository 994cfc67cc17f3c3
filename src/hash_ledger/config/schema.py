"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_COMMITMENTS = ["processed", "confirmed", "finalized"]


class LedgerConfig(BaseModel):
    """Configuration for the ledger connection and identities.

    Attributes:
        rpc_url: Solana RPC endpoint URL
        commitment: Commitment level for reads and confirmations
        program_keypair_path: Deployment keypair of the on-chain program
        program_id: Base58 program address (overrides program_keypair_path)
        identity_path: Keypair file of the service identity
        persist_identity: Write a generated identity to identity_path
        confirm_timeout_seconds: Default confirmation timeout
        poll_interval_seconds: Delay between confirmation polls
        rpc_timeout_seconds: HTTP timeout of a single RPC call
        slot_lamports: Lamports to fund each new slot with (None: rent-exempt minimum)
    """

    rpc_url: str = Field(
        default="https://api.devnet.solana.com",
        description="Solana RPC endpoint URL"
    )
    commitment: str = Field(
        default="confirmed",
        description="Commitment level: processed, confirmed, finalized"
    )
    program_keypair_path: Optional[Path] = Field(
        default=Path("program/hash-store-keypair.json"),
        description="Program deployment keypair file"
    )
    program_id: Optional[str] = Field(
        default=None,
        description="Base58 program id (takes precedence over program_keypair_path)"
    )
    identity_path: Optional[Path] = Field(
        default=None,
        description="Service identity keypair file"
    )
    persist_identity: bool = Field(
        default=False,
        description="Save a generated service identity to identity_path"
    )
    confirm_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Default confirmation timeout in seconds"
    )
    poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Confirmation polling interval in seconds"
    )
    rpc_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout of a single RPC request in seconds"
    )
    slot_lamports: Optional[int] = Field(
        default=None,
        ge=0,
        description="Lamports per new slot (default: rent-exempt minimum)"
    )

    @field_validator("rpc_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate RPC URL is HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v

    @field_validator("commitment")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        """Validate commitment level (case-insensitive)."""
        v_lower = v.lower()
        if v_lower not in VALID_COMMITMENTS:
            raise ValueError(
                f"Invalid commitment: {v}. Must be one of: {', '.join(VALID_COMMITMENTS)}"
            )
        return v_lower

    @model_validator(mode="after")
    def validate_identity_persistence(self) -> "LedgerConfig":
        """Require identity_path when persist_identity is set.

        Raises:
            ValueError: If persist_identity is true without identity_path
        """
        if self.persist_identity and self.identity_path is None:
            raise ValueError(
                "persist_identity requires identity_path. "
                "Fix: Set ledger.identity_path or disable ledger.persist_identity."
            )
        return self


class FundingConfig(BaseModel):
    """Configuration for funding the service identity at startup.

    Attributes:
        enabled: Request an airdrop when the balance is low
        airdrop_lamports: Amount to request
        min_balance_lamports: Fund only when the balance is below this
    """

    enabled: bool = True
    airdrop_lamports: int = Field(
        default=5_000_000_000,
        gt=0,
        description="Airdrop amount in lamports (5 SOL)"
    )
    min_balance_lamports: int = Field(
        default=1_000_000_000,
        ge=0,
        description="Balance threshold below which the identity is funded"
    )


class ServerConfig(BaseModel):
    """Configuration for the HTTP service.

    Attributes:
        host: Bind address
        port: Bind port
        strict_status_codes: Use 4xx/5xx statuses instead of always 200
    """

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=3000, description="Server port")
    strict_status_codes: bool = Field(
        default=False,
        description="Map error kinds to HTTP status codes"
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_secrets: Whether to mask secret key material in logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/hash-ledger.log"),
        description="Log file path"
    )
    redact_secrets: bool = Field(
        default=True,
        description="Mask secret keys in logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        ledger: Ledger connection and identities
        funding: Startup funding of the service identity
        server: HTTP service settings
        logging: Logging configuration

    Example:
        >>> config = Config(ledger=LedgerConfig(rpc_url="http://127.0.0.1:8899"))
        >>> config.server.port
        3000
    """

    ledger: LedgerConfig = LedgerConfig()
    funding: FundingConfig = FundingConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
