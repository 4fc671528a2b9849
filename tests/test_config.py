"""
Tests for the configuration system.
"""
import os
from pathlib import Path

import pytest

from patrimonio_gateway.config import (
    IdentityConfig,
    LedgerConfig,
    LoggingConfig,
    ServerConfig,
    Settings,
    configure,
    get_settings,
    load_env,
)
from patrimonio_gateway.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("GATEWAY_"):
            monkeypatch.delenv(key)


class TestSections:
    """Test section defaults and validation."""

    def test_server_defaults(self):
        config = ServerConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.public_dir == Path.cwd() / "public"

    def test_server_port_range(self):
        with pytest.raises(ValueError, match="port must be between"):
            ServerConfig(port=0)

    def test_ledger_defaults(self):
        config = LedgerConfig()
        assert config.channel == "mychannel"
        assert config.chaincode == "patrimonio"
        assert config.discovery_enabled is False
        assert config.connection_profile.name == "connection-org1.json"

    def test_identity_defaults(self):
        config = IdentityConfig()
        assert config.label == "admin"
        assert config.msp_id == "Org1MSP"
        assert config.key_path.name == "priv_sk"

    def test_paths_converted(self):
        config = IdentityConfig(wallet_dir="/tmp/w", cert_path="/tmp/c.pem", key_path="/tmp/k")
        assert config.wallet_dir == Path("/tmp/w")
        assert isinstance(config.cert_path, Path)

    def test_empty_channel_rejected(self):
        with pytest.raises(ValueError, match="channel cannot be empty"):
            LedgerConfig(channel="")

    def test_logging_validation(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(level="LOUD")
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(format="xml")


class TestSettingsFromEnv:
    """Test environment loading."""

    def test_defaults_without_env(self):
        settings = Settings.from_env()
        assert settings.server.port == 8080
        assert settings.ledger.identity.label == "admin"
        assert settings.logging.level == "INFO"

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_PORT", "9090")
        monkeypatch.setenv("GATEWAY_CHANNEL", "canal")
        monkeypatch.setenv("GATEWAY_CHAINCODE", "ativos")
        monkeypatch.setenv("GATEWAY_WALLET_DIR", "/srv/wallet")
        monkeypatch.setenv("GATEWAY_MSP_ID", "Org2MSP")
        monkeypatch.setenv("GATEWAY_LOG_LEVEL", "debug")
        monkeypatch.setenv("GATEWAY_LOG_FORMAT", "JSON")
        monkeypatch.setenv("GATEWAY_DISCOVERY", "yes")
        monkeypatch.setenv("GATEWAY_ACCESS_LOG", "off")

        settings = Settings.from_env()

        assert settings.server.port == 9090
        assert settings.ledger.channel == "canal"
        assert settings.ledger.chaincode == "ativos"
        assert settings.ledger.discovery_enabled is True
        assert settings.ledger.identity.wallet_dir == Path("/srv/wallet")
        assert settings.ledger.identity.msp_id == "Org2MSP"
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"
        assert settings.logging.access_log is False

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_PORT", "http")
        with pytest.raises(ConfigError, match="GATEWAY_PORT must be an integer"):
            Settings.from_env()

    def test_out_of_range_port(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_PORT", "70000")
        with pytest.raises(ConfigError):
            Settings.from_env()

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("PATRIMONIO_CHANNEL", "outro")
        assert Settings.from_env(prefix="PATRIMONIO_").ledger.channel == "outro"


class TestSettingsFromFile:
    """Test file loading."""

    def test_toml(self, tmp_path):
        path = tmp_path / "gateway.toml"
        path.write_text(
            '[server]\nport = 3000\npublic_dir = "/srv/public"\n\n'
            '[ledger]\nchannel = "canal"\n\n'
            '[ledger.identity]\nlabel = "appUser"\n\n'
            '[logging]\nformat = "json"\n'
        )

        settings = Settings.from_file(path)

        assert settings.server.port == 3000
        assert settings.server.public_dir == Path("/srv/public")
        assert settings.ledger.channel == "canal"
        assert settings.ledger.identity.label == "appUser"
        assert settings.logging.format == "json"

    def test_yaml(self, tmp_path):
        pytest.importorskip("yaml")
        path = tmp_path / "gateway.yaml"
        path.write_text("ledger:\n  chaincode: ativos\n  discovery_enabled: true\n")

        settings = Settings.from_file(path)

        assert settings.ledger.chaincode == "ativos"
        assert settings.ledger.discovery_enabled is True

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "gateway.toml"
        path.write_text("[server]\nworkers = 4\n")
        with pytest.raises(ConfigError, match="Configuration validation failed"):
            Settings.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_file(tmp_path / "nope.toml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "gateway.ini"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported config file format"):
            Settings.from_file(path)


class TestGlobalSettings:
    """Test global helpers."""

    def test_configure_and_get(self):
        custom = Settings(server=ServerConfig(port=9999))
        configure(custom)
        assert get_settings() is custom

    def test_to_dict_stringifies_paths(self):
        data = Settings().to_dict()
        assert isinstance(data["server"]["public_dir"], str)
        assert data["ledger"]["identity"]["label"] == "admin"

    def test_load_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("GATEWAY_CHAINCODE=from-dotenv\n")

        assert load_env(str(env_file)) is True
        assert Settings.from_env().ledger.chaincode == "from-dotenv"
        monkeypatch.delenv("GATEWAY_CHAINCODE")
