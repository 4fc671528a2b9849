"""
Settings master configuration and global helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any

import jsonschema
from dotenv import find_dotenv, load_dotenv

from ..errors import ConfigError
from .ledger import IdentityConfig, LedgerConfig
from .logging import LoggingConfig
from .schema import CONFIG_SCHEMA
from .server import ServerConfig


def _env_bool(raw: str) -> bool | None:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


@dataclass
class Settings:
    """
    Master configuration for the gateway.

    Aggregates the server, ledger and logging sections into a single object
    that can be loaded from environment variables, files, or constructed
    programmatically.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, prefix: str = "GATEWAY_") -> Settings:
        """
        Load settings from environment variables.

        Example:
            GATEWAY_PORT=8080
            GATEWAY_CHANNEL=mychannel
            GATEWAY_CHAINCODE=patrimonio
            GATEWAY_CONNECTION_PROFILE=/etc/fabric/connection-org1.json
        """
        data: dict[str, dict[str, Any]] = {"server": {}, "ledger": {"identity": {}}, "logging": {}}
        server, ledger, identity, logging_ = data["server"], data["ledger"], data["ledger"]["identity"], data["logging"]

        # Server settings
        if host := os.getenv(f"{prefix}HOST"):
            server["host"] = host
        if port := os.getenv(f"{prefix}PORT"):
            try:
                server["port"] = int(port)
            except ValueError as exc:
                raise ConfigError(f"{prefix}PORT must be an integer, got {port!r}") from exc
        if public_dir := os.getenv(f"{prefix}PUBLIC_DIR"):
            server["public_dir"] = public_dir

        # Ledger settings
        if profile := os.getenv(f"{prefix}CONNECTION_PROFILE"):
            ledger["connection_profile"] = profile
        if channel := os.getenv(f"{prefix}CHANNEL"):
            ledger["channel"] = channel
        if chaincode := os.getenv(f"{prefix}CHAINCODE"):
            ledger["chaincode"] = chaincode
        if (discovery := os.getenv(f"{prefix}DISCOVERY")) is not None:
            if (flag := _env_bool(discovery)) is not None:
                ledger["discovery_enabled"] = flag

        # Identity settings
        if wallet_dir := os.getenv(f"{prefix}WALLET_DIR"):
            identity["wallet_dir"] = wallet_dir
        if label := os.getenv(f"{prefix}IDENTITY_LABEL"):
            identity["label"] = label
        if msp_id := os.getenv(f"{prefix}MSP_ID"):
            identity["msp_id"] = msp_id
        if cert_path := os.getenv(f"{prefix}CERT_PATH"):
            identity["cert_path"] = cert_path
        if key_path := os.getenv(f"{prefix}KEY_PATH"):
            identity["key_path"] = key_path

        # Logging settings
        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            logging_["level"] = level.upper()
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            logging_["format"] = log_format.lower()
        if (access_log := os.getenv(f"{prefix}ACCESS_LOG")) is not None:
            if (flag := _env_bool(access_log)) is not None:
                logging_["access_log"] = flag

        return cls._from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)

        Returns:
            Settings object with values from file
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            try:
                import yaml  # type: ignore[import-untyped]
            except ImportError as exc:
                raise ImportError("PyYAML is required for YAML config files: pip install pyyaml") from exc
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            import tomllib

            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}")

        return cls._from_dict(data)

    @classmethod
    def default(cls) -> Settings:
        """Create default configuration."""
        return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """
        Create Settings from a dictionary.

        The dictionary is validated against the configuration schema first;
        section constructors then run their own checks.
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e.message}", cause=e) from e

        try:
            ledger_data = dict(data.get("ledger", {}))
            identity = IdentityConfig(**ledger_data.pop("identity", {}))
            return cls(
                server=ServerConfig(**data.get("server", {})),
                ledger=LedgerConfig(identity=identity, **ledger_data),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except ValueError as e:
            raise ConfigError(f"Configuration validation failed: {e}", cause=e) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""

        def convert(obj):
            if is_dataclass(obj):
                return {f.name: convert(getattr(obj, f.name)) for f in fields(obj)}
            elif isinstance(obj, Path):
                return str(obj)
            return obj

        return convert(self)


# =============================================================================
# Global Settings & Helpers
# =============================================================================

_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it from the environment if needed."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def configure(settings: Settings | None = None, **kwargs) -> Settings:
    """
    Configure global settings.

    Args:
        settings: Settings object to use globally
        **kwargs: Override specific sections

    Returns:
        The configured Settings object
    """
    global _global_settings

    if settings is not None:
        _global_settings = settings
    elif _global_settings is None:
        _global_settings = Settings.from_env()

    for key, value in kwargs.items():
        if hasattr(_global_settings, key):
            setattr(_global_settings, key, value)

    return _global_settings


def load_env(path: str | None = None, *, override: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        path: Optional path to a .env file. If not provided, uses find_dotenv().
        override: Whether to override existing environment variables.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = ["Settings", "get_settings", "configure", "load_env"]
