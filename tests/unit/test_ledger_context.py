"""Unit tests for the ledger context lifecycle."""

import logging

import pytest
from solders.keypair import Keypair

from hash_ledger.config.schema import Config, FundingConfig, LedgerConfig
from hash_ledger.ledger.context import LedgerContext, load_or_generate_identity
from hash_ledger.ledger.keys import load_keypair, save_keypair
from hash_ledger.records.codec import SLOT_CAPACITY
from hash_ledger.utils.exceptions import ConfigurationError, LedgerStartupError

FUNDING = FundingConfig(enabled=True, airdrop_lamports=5_000, min_balance_lamports=1_000)


class TestOpen:
    """Tests for LedgerContext.open()."""

    def test_funds_low_balance_identity(self, fake_ledger, identity, program_keypair, caplog):
        # Arrange
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey(), funding=FUNDING)

        # Act
        with caplog.at_level(logging.INFO, logger="hash_ledger"):
            context.open()

        # Assert
        assert context.is_open is True
        assert fake_ledger.get_balance(identity.pubkey()) == 5_000
        assert any("AUDIT [IDENTITY_FUNDED]" in r.getMessage() for r in caplog.records)

    def test_funded_identity_not_topped_up(self, fake_ledger, identity, program_keypair):
        fake_ledger.balances[identity.pubkey()] = 2_000
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey(), funding=FUNDING)

        context.open()

        assert fake_ledger.get_balance(identity.pubkey()) == 2_000

    def test_funding_disabled_by_default(self, fake_ledger, identity, program_keypair):
        LedgerContext(fake_ledger, identity, program_keypair.pubkey()).open()

        assert fake_ledger.get_balance(identity.pubkey()) == 0

    def test_resolves_rent_exempt_slot_cost(self, fake_ledger, identity, program_keypair):
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey()).open()

        assert context.slot_lamports == fake_ledger.rent_exempt_minimum(SLOT_CAPACITY)

    def test_configured_slot_cost_kept(self, fake_ledger, identity, program_keypair):
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey(), slot_lamports=7)

        context.open()

        assert context.slot_lamports == 7

    def test_funding_failure_aborts_startup(self, fake_ledger, identity, program_keypair):
        # Arrange
        fake_ledger.fail_on.add("request_funding")
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey(), funding=FUNDING)

        # Act & Assert
        with pytest.raises(LedgerStartupError, match="Could not open ledger context"):
            context.open()
        assert context.is_open is False

    def test_context_manager_closes_client(self, fake_ledger, identity, program_keypair):
        with LedgerContext(fake_ledger, identity, program_keypair.pubkey()) as context:
            assert context.is_open

        assert fake_ledger.closed is True
        assert context.is_open is False

    def test_owner_is_identity_pubkey(self, fake_ledger, identity, program_keypair):
        context = LedgerContext(fake_ledger, identity, program_keypair.pubkey())

        assert context.owner == identity.pubkey()


class TestIdentity:
    """Tests for load_or_generate_identity()."""

    def test_existing_identity_loaded(self, tmp_path):
        # Arrange
        keypair = Keypair()
        path = tmp_path / "identity.json"
        save_keypair(keypair, path)

        # Act
        identity = load_or_generate_identity(LedgerConfig(identity_path=path))

        # Assert
        assert identity.pubkey() == keypair.pubkey()

    def test_generated_identity_persisted(self, tmp_path):
        path = tmp_path / "keys" / "identity.json"

        identity = load_or_generate_identity(LedgerConfig(identity_path=path, persist_identity=True))

        assert load_keypair(path).pubkey() == identity.pubkey()

    def test_ephemeral_identity_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="hash_ledger"):
            load_or_generate_identity(LedgerConfig())

        assert "not persisted" in caplog.text


class TestFromConfig:
    """Tests for LedgerContext.from_config()."""

    def test_builds_from_config(self, tmp_path, fake_ledger, program_keypair):
        # Arrange
        program_path = tmp_path / "program.json"
        save_keypair(program_keypair, program_path)
        identity_path = tmp_path / "identity.json"
        config = Config(
            ledger=LedgerConfig(
                program_keypair_path=program_path,
                identity_path=identity_path,
                persist_identity=True,
                slot_lamports=10,
            ),
            funding=FundingConfig(enabled=False),
        )

        # Act
        first = LedgerContext.from_config(config, client=fake_ledger)
        second = LedgerContext.from_config(config, client=fake_ledger)

        # Assert
        assert first.program_id == program_keypair.pubkey()
        assert first.owner == second.owner
        assert first.slot_lamports == 10
        assert first.funding.enabled is False

    def test_missing_program_keypair(self, tmp_path, fake_ledger):
        config = Config(ledger=LedgerConfig(program_keypair_path=tmp_path / "missing.json"))

        with pytest.raises(ConfigurationError, match="Keypair file not found"):
            LedgerContext.from_config(config, client=fake_ledger)
