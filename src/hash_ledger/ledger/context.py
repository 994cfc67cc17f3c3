"""Process-wide ledger context.

The context bundles the service identity, the program id and the ledger
connection. It is built once from configuration, opened (funding the identity
when needed) before serving, and closed on shutdown.
"""

import logging
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from hash_ledger.config.schema import Config, FundingConfig, LedgerConfig
from hash_ledger.ledger.client import LedgerClient
from hash_ledger.ledger.keys import load_keypair, load_program_id, save_keypair
from hash_ledger.logging_audit import log_audit_event
from hash_ledger.records.codec import SLOT_CAPACITY
from hash_ledger.utils.exceptions import HashLedgerError, LedgerStartupError

logger = logging.getLogger(__name__)


def load_or_generate_identity(config: LedgerConfig) -> Keypair:
    """Load the service identity, generating one when no file exists.

    Args:
        config: Ledger configuration

    Returns:
        Service identity keypair

    Raises:
        ConfigurationError: If an existing identity file is malformed
    """
    path = config.identity_path
    if path is not None and path.exists():
        identity = load_keypair(path)
        logger.info(f"Loaded service identity {identity.pubkey()} from {path}")
        return identity

    identity = LedgerClient.generate_identity()
    logger.info(f"Generated service identity {identity.pubkey()}")
    if config.persist_identity and path is not None:
        save_keypair(identity, path)
    else:
        logger.warning(
            "Service identity is not persisted; slots created in this process "
            "cannot be written again after a restart"
        )
    return identity


class LedgerContext:
    """Service identity, program id and ledger connection.

    Attributes:
        client: Ledger client
        identity: Service identity that funds slots and signs writes
        program_id: Program owning the slot accounts
        slot_lamports: Lamports each new slot is funded with (set by open())
        slot_size: Bytes allocated per slot

    Example:
        >>> with LedgerContext.from_config(load_config()) as context:
        ...     store = RecordStore(context)
    """

    def __init__(
        self,
        client: LedgerClient,
        identity: Keypair,
        program_id: Pubkey,
        funding: Optional[FundingConfig] = None,
        slot_lamports: Optional[int] = None,
        slot_size: int = SLOT_CAPACITY,
    ) -> None:
        self.client = client
        self.identity = identity
        self.program_id = program_id
        self.funding = funding or FundingConfig(enabled=False)
        self.slot_lamports = slot_lamports
        self.slot_size = slot_size
        self._open = False

    @classmethod
    def from_config(cls, config: Config, client: Optional[LedgerClient] = None) -> "LedgerContext":
        """Build a context from configuration.

        Args:
            config: Root configuration
            client: Ledger client to use instead of one built from config

        Raises:
            ConfigurationError: If the program id or identity cannot be loaded
        """
        ledger = config.ledger
        program_id = load_program_id(ledger.program_keypair_path, ledger.program_id)
        logger.info(f"Program id = {program_id}")

        if client is None:
            client = LedgerClient(
                rpc_url=ledger.rpc_url,
                commitment=ledger.commitment,
                poll_interval=ledger.poll_interval_seconds,
                default_timeout=ledger.confirm_timeout_seconds,
                rpc_timeout=ledger.rpc_timeout_seconds,
            )

        return cls(
            client=client,
            identity=load_or_generate_identity(ledger),
            program_id=program_id,
            funding=config.funding,
            slot_lamports=ledger.slot_lamports,
        )

    @property
    def owner(self) -> Pubkey:
        return self.identity.pubkey()

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "LedgerContext":
        """Fund the identity if needed and resolve the per-slot cost.

        Raises:
            LedgerStartupError: If the ledger cannot be reached or funding fails
        """
        if self._open:
            return self

        try:
            self._fund_identity()
            if self.slot_lamports is None:
                self.slot_lamports = self.client.rent_exempt_minimum(self.slot_size)
        except HashLedgerError as e:
            raise LedgerStartupError(f"Could not open ledger context: {e}") from e

        logger.info(
            f"Ledger context open: identity={self.owner}, program={self.program_id}, "
            f"slot_lamports={self.slot_lamports}"
        )
        self._open = True
        return self

    def close(self) -> None:
        self.client.close()
        self._open = False

    def __enter__(self) -> "LedgerContext":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _fund_identity(self) -> None:
        if not self.funding.enabled:
            return

        balance = self.client.get_balance(self.owner)
        if balance >= self.funding.min_balance_lamports:
            logger.info(f"Identity balance {balance} lamports, no funding needed")
            return

        signature = self.client.request_funding(self.owner, self.funding.airdrop_lamports)
        self.client.confirm(signature)
        log_audit_event("IDENTITY_FUNDED", {
            "status": "success",
            "signature": signature,
            "lamports": self.funding.airdrop_lamports,
            "previous_balance": balance,
        })
