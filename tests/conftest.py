"""
Shared pytest configuration and fixtures.

This module provides fixtures used across the unit and integration suites,
most importantly an in-memory ledger that stands in for ``LedgerClient`` so
the record store, the HTTP service and the CLI run without a network.
"""

import os
from pathlib import Path
from threading import Lock
from typing import Optional, Sequence

import pytest
from solders.instruction import AccountMeta
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from hash_ledger.config.schema import Config, ServerConfig
from hash_ledger.ledger.client import LedgerClient
from hash_ledger.ledger.context import LedgerContext
from hash_ledger.ledger.keys import save_keypair
from hash_ledger.server.app import create_app
from hash_ledger.store.facade import RecordStore
from hash_ledger.utils.exceptions import ConfirmationTimeoutError, LedgerRpcError

RENT_EXEMPT_PER_BYTE = 6960
RENT_EXEMPT_BASE = 890880


class FakeAccount:
    """An account held by the in-memory ledger."""

    def __init__(self, owner: Pubkey, size: int, lamports: int) -> None:
        self.owner = owner
        self.data = bytearray(size)
        self.lamports = lamports


class FakeLedger:
    """In-memory ledger implementing the ``LedgerClient`` surface.

    Transactions apply immediately and ``confirm`` returns at once. Failures
    are injected per operation name through ``fail_on``; ``timeout_on_confirm``
    makes every confirmation time out.
    """

    def __init__(self, default_timeout: float = 5.0) -> None:
        self.rpc_url = "memory://ledger"
        self.commitment = "confirmed"
        self.poll_interval = 0.0
        self.default_timeout = default_timeout
        self.accounts: dict[Pubkey, FakeAccount] = {}
        self.balances: dict[Pubkey, int] = {}
        self.create_calls: list[Pubkey] = []
        self.submit_calls: list[tuple[Pubkey, bytes]] = []
        self.confirmed: list[str] = []
        self.fail_on: set[str] = set()
        self.timeout_on_confirm = False
        self.preempt_create = False
        self.closed = False
        self._lock = Lock()
        self._counter = 0

    generate_identity = staticmethod(LedgerClient.generate_identity)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise LedgerRpcError(f"{operation} failed (injected)")

    def _signature(self) -> str:
        with self._lock:
            self._counter += 1
            return f"sig-{self._counter}"

    def read_account_data(self, address: Pubkey) -> Optional[bytes]:
        self._check("read_account_data")
        account = self.accounts.get(address)
        return None if account is None else bytes(account.data)

    def account_exists(self, address: Pubkey) -> bool:
        return self.read_account_data(address) is not None

    def get_balance(self, address: Pubkey) -> int:
        self._check("get_balance")
        return self.balances.get(address, 0)

    def rent_exempt_minimum(self, size: int) -> int:
        self._check("rent_exempt_minimum")
        return RENT_EXEMPT_BASE + RENT_EXEMPT_PER_BYTE * size

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
        self._check("create_account")
        if address != Pubkey.create_with_seed(payer.pubkey(), seed, program_id):
            raise LedgerRpcError(f"Address {address} does not match seed {seed}")
        with self._lock:
            if self.preempt_create:
                # Another writer sharing the identity got there first
                self.accounts[address] = FakeAccount(program_id, size, lamports)
            if address in self.accounts:
                raise LedgerRpcError(f"Account {address} already in use")
            self.accounts[address] = FakeAccount(program_id, size, lamports)
            self.create_calls.append(address)
        return self._signature()

    def submit_instruction(
        self,
        payer: Keypair,
        accounts: Sequence[AccountMeta],
        program_id: Pubkey,
        payload: bytes,
        timeout: Optional[float] = None,
    ) -> str:
        self._check("submit_instruction")
        slot = accounts[0].pubkey
        with self._lock:
            account = self.accounts.get(slot)
            if account is None or account.owner != program_id:
                raise LedgerRpcError(f"Slot {slot} is not owned by {program_id}")
            if len(payload) > len(account.data):
                raise LedgerRpcError("Payload larger than account")
            # Like the program, only the bytes carried by the instruction change
            account.data[: len(payload)] = payload
            self.submit_calls.append((slot, bytes(payload)))
        return self._signature()

    def request_funding(self, address: Pubkey, lamports: int) -> str:
        self._check("request_funding")
        with self._lock:
            self.balances[address] = self.balances.get(address, 0) + lamports
        return self._signature()

    def confirm(self, signature: str, timeout: Optional[float] = None) -> None:
        self._check("confirm")
        if self.timeout_on_confirm:
            raise ConfirmationTimeoutError(f"Transaction {signature} not confirmed", signature=signature)
        self.confirmed.append(signature)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def fake_ledger() -> FakeLedger:
    """Return an empty in-memory ledger."""
    return FakeLedger()


@pytest.fixture
def identity() -> Keypair:
    return Keypair()


@pytest.fixture
def program_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def ledger_context(fake_ledger: FakeLedger, identity: Keypair, program_keypair: Keypair) -> LedgerContext:
    """Return an open ledger context backed by the in-memory ledger."""
    return LedgerContext(fake_ledger, identity, program_keypair.pubkey()).open()


@pytest.fixture
def record_store(ledger_context: LedgerContext) -> RecordStore:
    return RecordStore(ledger_context)


@pytest.fixture
def app(record_store: RecordStore):
    """Flask application with default (lenient) status codes."""
    application = create_app(record_store, ServerConfig())
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def strict_client(record_store: RecordStore):
    """Flask test client with strict status codes enabled."""
    application = create_app(record_store, ServerConfig(strict_status_codes=True))
    application.config["TESTING"] = True
    return application.test_client()


@pytest.fixture
def config_file(tmp_path: Path, program_keypair: Keypair) -> Path:
    """Write a config file pointing at a temporary program keypair."""
    program_path = tmp_path / "program" / "hash-store-keypair.json"
    save_keypair(program_keypair, program_path)
    config = Config.model_validate({
        "ledger": {"program_keypair_path": str(program_path)},
        "funding": {"enabled": False},
        "logging": {"log_file": str(tmp_path / "logs" / "hash-ledger.log")},
    })
    path = tmp_path / "config.json"
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep HASH_LEDGER_* variables from the outer environment out of tests."""
    for name in list(os.environ):
        if name.startswith("HASH_LEDGER_"):
            monkeypatch.delenv(name, raising=False)
