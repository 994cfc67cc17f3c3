"""Record store: document hashes kept in seeded ledger accounts.

Each (hospitalId, reportId) pair owns one storage slot whose address is
derived from the service identity, the seed "{hospitalId}_{reportId}" and the
program id. Whether a key is stored is read from the ledger; nothing is kept
locally.

Repeated stores for a key reuse the slot and overwrite its record.
"""

import logging
import time
from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator, Optional

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey
from solders.sysvar import RENT

from hash_ledger.ledger.context import LedgerContext
from hash_ledger.logging_audit import log_audit_event
from hash_ledger.models.records import HashRecord, RecordKey, StoreReceipt
from hash_ledger.records.codec import decode, encode, pad
from hash_ledger.records.derivation import derive_slot_id, seed_for
from hash_ledger.utils.exceptions import (
    ConfirmationTimeoutError,
    DecodingError,
    FetchError,
    LedgerRpcError,
    NotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)


class KeyedLock:
    """One mutex per key, created on demand and dropped when idle.

    Example:
        >>> locks = KeyedLock()
        >>> with locks.hold(RecordKey(1, 2)):
        ...     pass
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the lock for ``key``.

        Raises:
            ConfirmationTimeoutError: If the lock is not acquired within ``timeout``
        """
        with self._guard:
            entry = self._entries.setdefault(key, [Lock(), 0])
            entry[1] += 1

        try:
            acquired = entry[0].acquire(timeout=-1 if timeout is None else max(timeout, 0))
            if not acquired:
                raise ConfirmationTimeoutError(
                    f"Timed out after {timeout:.1f}s waiting for another operation on {key}"
                )
            try:
                yield
            finally:
                entry[0].release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


class RecordStore:
    """Stores and fetches document hashes through a ledger context.

    Attributes:
        context: Ledger context providing the client, identity and program id

    Example:
        >>> store = RecordStore(context)
        >>> store.store(RecordKey(1, 2), sha256_hex(b"Hello"))
        >>> store.fetch(RecordKey(1, 2)).document_hash
        '185f8db32271fe25f561a6fc938b2e264306ec304eda518007d1764826381969'
    """

    def __init__(self, context: LedgerContext) -> None:
        self.context = context
        self._locks = KeyedLock()

    def slot_address(self, key: RecordKey) -> Pubkey:
        """Return the storage slot address of a key."""
        return derive_slot_id(self.context.owner, key.hospital_id, key.report_id, self.context.program_id)

    def store(self, key: RecordKey, document_hash: str, timeout: Optional[float] = None) -> StoreReceipt:
        """Store a document hash, creating the key's slot on first use.

        The record is encoded before anything is sent, so invalid input never
        costs funds. Same-key calls are serialized.

        Args:
            key: Record key
            document_hash: Document hash text
            timeout: Seconds to wait for the whole operation, including
                confirmations (defaults to the client's confirmation timeout)

        Returns:
            StoreReceipt of the confirmed write

        Raises:
            EncodingError: If the record does not fit the slot layout
            ConfirmationTimeoutError: If a confirmation does not arrive in time
            StoreError: If a ledger call fails (cause preserved)
        """
        started = time.monotonic()
        # Writes cover the whole slot, so no tail of a longer earlier hash survives
        payload = pad(
            encode(key.hospital_id, key.report_id, document_hash, self.context.slot_size),
            self.context.slot_size,
        )
        slot = self.slot_address(key)
        timeout = self.context.client.default_timeout if timeout is None else timeout
        deadline = started + timeout

        with self._locks.hold(key, timeout):
            try:
                created = self._ensure_slot(key, slot, deadline)
                signature = self.context.client.submit_instruction(
                    self.context.identity,
                    self._write_accounts(slot),
                    self.context.program_id,
                    payload,
                    _remaining(deadline),
                )
                self.context.client.confirm(signature, _remaining(deadline))
            except LedgerRpcError as e:
                self._audit_failure("RECORD_STORE_FAILED", key, slot, e, started)
                raise StoreError(f"Failed to store record {key} in slot {slot}: {e}") from e
            except ConfirmationTimeoutError as e:
                self._audit_failure("RECORD_STORE_FAILED", key, slot, e, started)
                raise

        log_audit_event("RECORD_STORED", {
            "status": "success",
            "key": str(key),
            "slot": str(slot),
            "created": created,
            "signature": signature,
            "duration": time.monotonic() - started,
        })
        return StoreReceipt(key=key, slot_address=str(slot), created=created, signature=signature)

    def fetch(self, key: RecordKey) -> HashRecord:
        """Fetch the record stored for a key.

        Args:
            key: Record key

        Returns:
            HashRecord read from the key's slot

        Raises:
            NotFoundError: If the slot does not exist or was never written
            DecodingError: If the slot holds malformed data or another key's record
            FetchError: If the ledger read fails (cause preserved)
        """
        started = time.monotonic()
        slot = self.slot_address(key)

        try:
            data = self.context.client.read_account_data(slot)
        except LedgerRpcError as e:
            self._audit_failure("RECORD_FETCH_FAILED", key, slot, e, started)
            raise FetchError(f"Failed to read slot {slot} for {key}: {e}") from e

        if data is None or not any(data):
            log_audit_event("RECORD_FETCHED", {
                "status": "not_found",
                "key": str(key),
                "slot": str(slot),
                "duration": time.monotonic() - started,
            })
            state = "does not exist" if data is None else "holds no record"
            raise NotFoundError(f"Slot {slot} for {key} {state}")

        record = decode(data)
        if record.key != key:
            raise DecodingError(f"Slot {slot} for {key} holds a record for {record.key}")

        log_audit_event("RECORD_FETCHED", {
            "status": "success",
            "key": str(key),
            "slot": str(slot),
            "duration": time.monotonic() - started,
        })
        return record

    def _ensure_slot(self, key: RecordKey, slot: Pubkey, deadline: float) -> bool:
        client = self.context.client
        if client.account_exists(slot):
            logger.debug(f"Slot {slot} for {key} exists, overwriting record")
            return False

        lamports = self.context.slot_lamports
        if lamports is None:
            lamports = client.rent_exempt_minimum(self.context.slot_size)

        try:
            signature = client.create_account(
                self.context.identity,
                slot,
                seed_for(key.hospital_id, key.report_id),
                self.context.slot_size,
                lamports,
                self.context.program_id,
                _remaining(deadline),
            )
            client.confirm(signature, _remaining(deadline))
        except LedgerRpcError:
            # Another process sharing this identity may have created it first
            if client.account_exists(slot):
                logger.info(f"Slot {slot} for {key} was created concurrently")
                return False
            raise

        log_audit_event("SLOT_CREATED", {
            "status": "success",
            "key": str(key),
            "slot": str(slot),
            "signature": signature,
            "lamports": lamports,
        })
        return True

    def _write_accounts(self, slot: Pubkey) -> list[AccountMeta]:
        return [
            AccountMeta(slot, is_signer=False, is_writable=True),
            AccountMeta(RENT, is_signer=False, is_writable=False),
            AccountMeta(self.context.owner, is_signer=True, is_writable=False),
        ]

    @staticmethod
    def _audit_failure(event: str, key: RecordKey, slot: Pubkey, error: Exception, started: float) -> None:
        log_audit_event(event, {
            "status": "failure",
            "key": str(key),
            "slot": str(slot),
            "duration": time.monotonic() - started,
            "error_type": type(error).__name__,
            "error_message": str(error),
        })


def _remaining(deadline: float) -> float:
    return max(deadline - time.monotonic(), 0.0)
