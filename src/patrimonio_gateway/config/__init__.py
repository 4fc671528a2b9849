"""
Configuration system for the patrimonio gateway.

This package provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable and `.env` loading
- YAML/TOML file loading validated against a JSON schema
"""

from .base import LogFormat, LogLevel
from .ledger import IdentityConfig, LedgerConfig
from .logging import LoggingConfig
from .server import ServerConfig
from .settings import Settings, configure, get_settings, load_env

__all__ = [
    # Types
    "LogLevel",
    "LogFormat",
    # Sections
    "ServerConfig",
    "LedgerConfig",
    "IdentityConfig",
    "LoggingConfig",
    # Master config
    "Settings",
    # Global functions
    "get_settings",
    "configure",
    "load_env",
]
