"""Unit tests for configuration loading and validation."""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from hash_ledger.config.manager import get_ledger_config, get_server_config, load_config
from hash_ledger.config.schema import (
    Config,
    FundingConfig,
    LedgerConfig,
    LoggingConfig,
    ServerConfig,
)
from hash_ledger.utils.exceptions import ConfigurationError


class TestConfigDefaults:
    """Tests for schema defaults."""

    def test_config_defaults(self):
        # Arrange & Act
        config = Config()

        # Assert
        assert config.ledger.rpc_url == "https://api.devnet.solana.com"
        assert config.ledger.commitment == "confirmed"
        assert config.ledger.program_keypair_path == Path("program/hash-store-keypair.json")
        assert config.ledger.identity_path is None
        assert config.ledger.slot_lamports is None
        assert config.funding.enabled is True
        assert config.funding.airdrop_lamports == 5_000_000_000
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 3000
        assert config.server.strict_status_codes is False
        assert config.logging.level == "INFO"
        assert config.logging.redact_secrets is True

    def test_missing_file_uses_defaults(self, tmp_path):
        # Act
        config = load_config(tmp_path / "missing.json")

        # Assert
        assert config == Config()


class TestSchemaValidation:
    """Tests for pydantic validators."""

    def test_rpc_url_must_be_http(self):
        with pytest.raises(ValidationError, match="Must start with http"):
            LedgerConfig(rpc_url="ws://localhost:8900")

    def test_commitment_is_lowercased(self):
        assert LedgerConfig(commitment="Finalized").commitment == "finalized"

    def test_invalid_commitment(self):
        with pytest.raises(ValidationError, match="Invalid commitment"):
            LedgerConfig(commitment="max")

    def test_persist_identity_requires_path(self):
        with pytest.raises(ValidationError, match="persist_identity requires identity_path"):
            LedgerConfig(persist_identity=True)

    def test_persist_identity_with_path(self, tmp_path):
        config = LedgerConfig(persist_identity=True, identity_path=tmp_path / "id.json")
        assert config.persist_identity is True

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_confirm_timeout_must_be_positive(self, timeout):
        with pytest.raises(ValidationError):
            LedgerConfig(confirm_timeout_seconds=timeout)

    @pytest.mark.parametrize("port", [0, 65536])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError, match="Invalid port"):
            ServerConfig(port=port)

    def test_log_level_is_uppercased(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            LoggingConfig(level="VERBOSE")

    def test_airdrop_must_be_positive(self):
        with pytest.raises(ValidationError):
            FundingConfig(airdrop_lamports=0)


class TestLoadConfigFile:
    """Tests for load_config() with JSON files."""

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        # Arrange
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"server": {"port": 8080}}))

        # Act
        config = load_config(path)

        # Assert
        assert config.server.port == 8080
        assert config.server.host == "127.0.0.1"
        assert config.ledger.commitment == "confirmed"

    def test_invalid_json(self, tmp_path):
        # Arrange
        path = tmp_path / "config.json"
        path.write_text("{not json")

        # Act & Assert
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(path)

    def test_validation_failure_is_configuration_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"ledger": {"commitment": "max"}}))

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            load_config(path)

    def test_secret_in_config_warns(self, tmp_path, caplog):
        # Arrange
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"ledger": {"secret_key": [1, 2, 3]}}))

        # Act
        with caplog.at_level(logging.WARNING):
            load_config(path)

        # Assert
        assert "'secret_key' found in configuration file" in caplog.text


class TestEnvironmentOverrides:
    """Tests for HASH_LEDGER_* environment overrides."""

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        # Arrange
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"server": {"port": 8080}}))
        monkeypatch.setenv("HASH_LEDGER_PORT", "9090")
        monkeypatch.setenv("HASH_LEDGER_RPC_URL", "http://127.0.0.1:8899")

        # Act
        config = load_config(path)

        # Assert
        assert config.server.port == 9090
        assert config.ledger.rpc_url == "http://127.0.0.1:8899"

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("off", False)])
    def test_boolean_overrides(self, tmp_path, monkeypatch, value, expected):
        monkeypatch.setenv("HASH_LEDGER_STRICT_STATUS_CODES", value)

        config = load_config(tmp_path / "missing.json")

        assert config.server.strict_status_codes is expected

    def test_float_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HASH_LEDGER_CONFIRM_TIMEOUT", "2.5")

        config = load_config(tmp_path / "missing.json")

        assert config.ledger.confirm_timeout_seconds == 2.5

    def test_invalid_number_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HASH_LEDGER_PORT", "eighty")

        with pytest.raises(ConfigurationError, match="HASH_LEDGER_PORT"):
            load_config(tmp_path / "missing.json")

    def test_empty_override_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HASH_LEDGER_HOST", "")

        config = load_config(tmp_path / "missing.json")

        assert config.server.host == "127.0.0.1"


class TestConfigHelpers:
    """Tests for section accessors."""

    def test_section_helpers(self):
        config = Config()
        assert get_ledger_config(config) is config.ledger
        assert get_server_config(config) is config.server
