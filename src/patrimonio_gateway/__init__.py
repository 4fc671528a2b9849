"""
HTTP gateway for the patrimonio asset registry.

The gateway exposes list / get / create / update / transfer / history over
HTTP, forwards each call to the ``patrimonio`` contract on a Hyperledger
Fabric channel and serves the bundled browser UI.
"""

__version__ = "0.1.0"

from .errors import (
    AssetNotFoundError,
    ConfigError,
    ContractFunctionNotFoundError,
    ErrorCode,
    GatewayError,
    InvocationError,
    LedgerConnectionError,
    ValidationError,
)
from .ledger import AssetLedger, ConnectionState
from .models import Asset, AssetPatch, Envelope

__all__ = [
    "__version__",
    "AssetLedger",
    "ConnectionState",
    "Asset",
    "AssetPatch",
    "Envelope",
    "ErrorCode",
    "GatewayError",
    "LedgerConnectionError",
    "ValidationError",
    "InvocationError",
    "ContractFunctionNotFoundError",
    "AssetNotFoundError",
    "ConfigError",
]
