"""
Error taxonomy for the patrimonio gateway.

This module provides a hierarchical exception system with:
- Error codes for programmatic handling
- HTTP status mapping used by the router's JSON envelope
- Structured context for debugging
- The original exception preserved as ``cause`` when an error is rewritten
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for the gateway."""

    # Connection errors (1xxx)
    CONNECTION_ERROR = "ERR_1000"
    IDENTITY_ERROR = "ERR_1001"
    CONNECTION_PROFILE_ERROR = "ERR_1002"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "ERR_2000"
    MISSING_FIELD = "ERR_2001"
    INVALID_BODY = "ERR_2002"

    # Remote invocation errors (3xxx)
    INVOCATION_ERROR = "ERR_3000"
    CONTRACT_FUNCTION_NOT_FOUND = "ERR_3001"
    ASSET_NOT_FOUND = "ERR_3002"

    # Configuration errors (6xxx)
    CONFIG_ERROR = "ERR_6000"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    channel: str | None = None
    chaincode: str | None = None
    transaction: str | None = None
    asset_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "chaincode": self.chaincode,
            "transaction": self.transaction,
            "asset_id": self.asset_id,
            **self.extra,
        }


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message, returned to HTTP clients as-is
        http_status: Status code the router answers with
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        http_status: int | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "http_status": self.http_status,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Connection Errors
# =============================================================================


class LedgerConnectionError(GatewayError):
    """Session establishment with the ledger network failed."""

    code = ErrorCode.CONNECTION_ERROR

    def __init__(
        self,
        message: str = "Falha ao conectar à rede blockchain",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


class IdentityError(LedgerConnectionError):
    """Certificate, private key or wallet record could not be loaded."""

    code = ErrorCode.IDENTITY_ERROR


class ConnectionProfileError(LedgerConnectionError):
    """Connection profile is missing or does not describe a usable network."""

    code = ErrorCode.CONNECTION_PROFILE_ERROR


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GatewayError):
    """Request input failed validation. Raised before any remote call."""

    code = ErrorCode.VALIDATION_ERROR
    http_status = 400


class MissingFieldError(ValidationError):
    """One or more required fields are absent or empty."""

    code = ErrorCode.MISSING_FIELD

    def __init__(
        self,
        message: str,
        *,
        fields: list[str] | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.fields = list(fields or [])


class InvalidBodyError(ValidationError):
    """Request body is not a JSON object."""

    code = ErrorCode.INVALID_BODY

    def __init__(
        self,
        message: str = "Corpo da requisição deve ser um objeto JSON",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


# =============================================================================
# Remote Invocation Errors
# =============================================================================


class InvocationError(GatewayError):
    """A contract transaction failed on the ledger network."""

    code = ErrorCode.INVOCATION_ERROR


class ContractFunctionNotFoundError(InvocationError):
    """The evaluated function appears to be missing from the deployed contract."""

    code = ErrorCode.CONTRACT_FUNCTION_NOT_FOUND

    def __init__(
        self,
        message: str | None = None,
        *,
        function: str,
        chaincode: str,
        **kwargs,
    ):
        if message is None:
            message = (
                f"Função {function} não encontrada no chaincode. "
                f'Verifique se o chaincode "{chaincode}" possui esta função ou se o nome está correto.'
            )
        super().__init__(message, **kwargs)
        self.function = function
        self.chaincode = chaincode

    @property
    def original_error(self) -> BaseException | None:
        return self.cause


class AssetNotFoundError(InvocationError):
    """The ledger returned an empty payload for a single-asset lookup."""

    code = ErrorCode.ASSET_NOT_FOUND

    def __init__(
        self,
        message: str = "Ativo não encontrado",
        *,
        asset_id: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.asset_id = asset_id


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(GatewayError):
    """Gateway settings are invalid."""

    code = ErrorCode.CONFIG_ERROR


__all__ = [
    # Base
    "ErrorCode",
    "ErrorContext",
    "GatewayError",
    # Connection errors
    "LedgerConnectionError",
    "IdentityError",
    "ConnectionProfileError",
    # Validation errors
    "ValidationError",
    "MissingFieldError",
    "InvalidBodyError",
    # Invocation errors
    "InvocationError",
    "ContractFunctionNotFoundError",
    "AssetNotFoundError",
    # Config errors
    "ConfigError",
]
