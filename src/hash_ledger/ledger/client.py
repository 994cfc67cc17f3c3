"""Ledger client for the Solana RPC API.

This module adapts ``solana.rpc.api.Client`` and ``solders`` to the handful of
ledger operations the record store needs: account creation with a seed,
instruction submission, account reads, airdrop funding and confirmation.

All build-sign-send sequences go through one submission lock because every
transaction is signed by the same service identity.
"""

import logging
import time
from threading import Lock
from typing import Optional, Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import CreateAccountWithSeedParams, create_account_with_seed
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from hash_ledger.utils.exceptions import ConfirmationTimeoutError, LedgerRpcError

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000

DEFAULT_RPC_URL = "https://api.devnet.solana.com"
DEFAULT_COMMITMENT = "confirmed"
DEFAULT_CONFIRM_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_RPC_TIMEOUT = 10.0

# Confirmation levels in increasing order of finality
COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}

LIBRARY_ERRORS = (SolanaRpcException, RPCException)


class LedgerClient:
    """Synchronous ledger client bound to one RPC endpoint.

    Attributes:
        rpc_url: RPC endpoint URL
        commitment: Commitment level used for reads and confirmation
        poll_interval: Seconds between confirmation polls
        default_timeout: Confirmation timeout used when a call passes none

    Example:
        >>> client = LedgerClient("http://127.0.0.1:8899")
        >>> client.get_balance(Keypair().pubkey())
        0
        >>> client.close()
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        commitment: str = DEFAULT_COMMITMENT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        default_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        rpc_timeout: float = DEFAULT_RPC_TIMEOUT,
        client: Optional[Client] = None,
    ) -> None:
        if commitment not in COMMITMENT_RANK:
            raise ValueError(
                f"Invalid commitment: {commitment}. Must be one of: {', '.join(COMMITMENT_RANK)}"
            )
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.poll_interval = poll_interval
        self.default_timeout = default_timeout
        self._commitment = Commitment(commitment)
        self._client = client or Client(rpc_url, commitment=self._commitment, timeout=rpc_timeout)
        self._submit_lock = Lock()
        self._last_blockhash: Optional[Hash] = None
        logger.debug("LedgerClient initialized for %s (commitment=%s)", rpc_url, commitment)

    # ------------------------------------------------------------------
    # Identity and addressing
    # ------------------------------------------------------------------

    @staticmethod
    def generate_identity() -> Keypair:
        """Generate a fresh service identity."""
        return Keypair()

    @staticmethod
    def derive_address(owner: Pubkey, seed: str, program_id: Pubkey) -> Pubkey:
        """Derive an account address from a base key, a seed and an owning program."""
        return Pubkey.create_with_seed(owner, seed, program_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Read the raw data of an account.

        Args:
            address: Account address

        Returns:
            Account data, or None if the account does not exist

        Raises:
            LedgerRpcError: If the RPC call fails
        """
        try:
            resp = self._client.get_account_info(address, commitment=self._commitment)
        except LIBRARY_ERRORS as e:
            raise LedgerRpcError(f"get_account_info failed for {address}: {_describe(e)}") from e
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    def account_exists(self, address: Pubkey) -> bool:
        return self.read_account_data(address) is not None

    def get_balance(self, address: Pubkey) -> int:
        """Return the balance of an account in lamports."""
        try:
            return self._client.get_balance(address, commitment=self._commitment).value
        except LIBRARY_ERRORS as e:
            raise LedgerRpcError(f"get_balance failed for {address}: {_describe(e)}") from e

    def rent_exempt_minimum(self, size: int) -> int:
        """Return the lamports an account of ``size`` bytes needs to be rent exempt."""
        try:
            return self._client.get_minimum_balance_for_rent_exemption(size).value
        except LIBRARY_ERRORS as e:
            raise LedgerRpcError(f"get_minimum_balance_for_rent_exemption failed: {_describe(e)}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(
        self,
        payer: Keypair,
        address: Pubkey,
        seed: str,
        size: int,
        lamports: int,
        program_id: Pubkey,
        timeout: Optional[float] = None,
    ) -> str:
        """Create a seeded account owned by ``program_id``.

        The payer is also the base key of the seed derivation.

        Args:
            timeout: Seconds to wait for a fresh blockhash (defaults to
                ``default_timeout``)

        Returns:
            Signature of the submitted (unconfirmed) transaction
        """
        instruction = create_account_with_seed(
            CreateAccountWithSeedParams(
                from_pubkey=payer.pubkey(),
                to_pubkey=address,
                base=payer.pubkey(),
                seed=seed,
                lamports=lamports,
                space=size,
                owner=program_id,
            )
        )
        logger.debug("Creating account %s (seed=%s, space=%d, lamports=%d)", address, seed, size, lamports)
        return self._send([instruction], payer, timeout)

    def submit_instruction(
        self,
        payer: Keypair,
        accounts: Sequence[AccountMeta],
        program_id: Pubkey,
        payload: bytes,
        timeout: Optional[float] = None,
    ) -> str:
        """Submit a single program instruction signed by ``payer``.

        Returns:
            Signature of the submitted (unconfirmed) transaction

        Raises:
            ConfirmationTimeoutError: If no fresh blockhash arrives within ``timeout``
            LedgerRpcError: If the transaction is rejected
        """
        instruction = Instruction(program_id, bytes(payload), list(accounts))
        logger.debug("Submitting %d byte instruction to program %s", len(payload), program_id)
        return self._send([instruction], payer, timeout)

    def request_funding(self, address: Pubkey, lamports: int) -> str:
        """Request an airdrop (devnet/testnet/local validators only).

        Returns:
            Signature of the airdrop transaction
        """
        try:
            resp = self._client.request_airdrop(address, lamports, commitment=self._commitment)
        except LIBRARY_ERRORS as e:
            raise LedgerRpcError(f"Airdrop of {lamports} lamports to {address} failed: {_describe(e)}") from e
        signature = str(resp.value)
        logger.info("Requested airdrop of %d lamports to %s (signature=%s)", lamports, address, signature)
        return signature

    def confirm(self, signature: str, timeout: Optional[float] = None) -> None:
        """Wait until a transaction reaches the client's commitment level.

        Args:
            signature: Transaction signature
            timeout: Seconds to wait (defaults to ``default_timeout``)

        Raises:
            ConfirmationTimeoutError: If the deadline passes first
            LedgerRpcError: If the transaction failed on chain or polling failed
        """
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        target = COMMITMENT_RANK[self.commitment]
        sig = Signature.from_string(signature)

        while True:
            try:
                statuses = self._client.get_signature_statuses([sig]).value
            except LIBRARY_ERRORS as e:
                raise LedgerRpcError(f"get_signature_statuses failed for {signature}: {_describe(e)}") from e

            status = statuses[0] if statuses else None
            if status is not None:
                if status.err is not None:
                    raise LedgerRpcError(f"Transaction {signature} failed: {status.err}")
                if status.confirmation_status is not None:
                    reached = _commitment_name(status.confirmation_status)
                    if COMMITMENT_RANK.get(reached, -1) >= target:
                        logger.debug("Transaction %s reached %s", signature, reached)
                        return

            if time.monotonic() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Transaction {signature} not {self.commitment} within {timeout:.1f}s",
                    signature=signature,
                )
            time.sleep(self.poll_interval)

    def close(self) -> None:
        """Release the client.

        The synchronous solana-py provider opens a connection per request, so
        there is no pooled session to close.
        """
        logger.debug("LedgerClient closed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _send(self, instructions: list[Instruction], payer: Keypair, timeout: Optional[float]) -> str:
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        if not self._submit_lock.acquire(timeout=max(timeout, 0)):
            raise ConfirmationTimeoutError(f"Timed out after {timeout:.1f}s waiting to submit a transaction")
        try:
            blockhash = self._fresh_blockhash(deadline, timeout)
            message = Message(instructions, payer.pubkey())
            transaction = Transaction([payer], message, blockhash)
            try:
                resp = self._client.send_raw_transaction(
                    bytes(transaction),
                    opts=TxOpts(skip_confirmation=True, preflight_commitment=self._commitment),
                )
            except LIBRARY_ERRORS as e:
                raise LedgerRpcError(f"Transaction rejected: {_describe(e)}") from e
            self._last_blockhash = blockhash
        finally:
            self._submit_lock.release()
        return str(resp.value)

    def _fresh_blockhash(self, deadline: float, timeout: float) -> Hash:
        # Two identical transactions under one blockhash share a signature and
        # the second is dropped as already processed.
        while True:
            try:
                blockhash = self._client.get_latest_blockhash(commitment=self._commitment).value.blockhash
            except LIBRARY_ERRORS as e:
                raise LedgerRpcError(f"get_latest_blockhash failed: {_describe(e)}") from e
            if blockhash != self._last_blockhash:
                return blockhash
            if time.monotonic() >= deadline:
                raise ConfirmationTimeoutError(f"Ledger did not produce a new blockhash within {timeout:.1f}s")
            time.sleep(self.poll_interval)


def _commitment_name(status: TransactionConfirmationStatus) -> str:
    for name, level in (
        ("processed", TransactionConfirmationStatus.Processed),
        ("confirmed", TransactionConfirmationStatus.Confirmed),
        ("finalized", TransactionConfirmationStatus.Finalized),
    ):
        if status == level:
            return name
    return "unknown"


def _describe(error: Exception) -> str:
    # SolanaRpcException keeps its detail in error_msg, not in args
    return str(getattr(error, "error_msg", error))
