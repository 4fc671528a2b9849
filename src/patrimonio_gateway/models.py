"""
Asset records exchanged between the HTTP layer and the ledger contract.

`Asset` is the full record sent on creation. `AssetPatch` carries only the
fields a caller wants to change, so untouched fields are never overwritten.
The ``parse_*`` helpers validate raw request bodies at the boundary and raise
`MissingFieldError` / `ValidationError` before any remote call is made.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import MissingFieldError, ValidationError

ASSET_FIELDS = ("id", "nome", "descricao", "responsavel", "local", "valor", "status")

_ID_REQUIRED = "ID do ativo é obrigatório"


def _is_missing(value: Any) -> bool:
    # Numeric zero, NaN and false count as absent; the string "0" does not.
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)):
        return value == 0 or value != value
    return False


def _coerce_valor(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("valor deve ser numérico")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ValueError("valor deve ser numérico") from exc
    if isinstance(value, (int, float)):
        value = float(value)
        if not math.isfinite(value):
            raise ValueError("valor deve ser um número finito")
        return value
    raise ValueError("valor deve ser numérico")


class Asset(BaseModel):
    """A complete asset as registered on the ledger."""

    id: str = Field(..., description="Unique key on the ledger; immutable.", examples=["A1"])
    nome: str = Field(..., description="Display name.", examples=["Laptop"])
    descricao: str = Field(..., description="Free text description.", examples=["Dell"])
    responsavel: str = Field(..., description="Current custodian.", examples=["Alice"])
    local: str = Field(..., description="Physical or logical location.", examples=["HQ"])
    valor: float = Field(..., description="Monetary value.", examples=[1500.5])
    status: str = Field(..., description="Lifecycle tag.", examples=["active"])

    model_config = {"extra": "ignore", "coerce_numbers_to_str": True}

    @field_validator("valor", mode="before")
    @classmethod
    def _valor_is_number(cls, value: Any) -> Any:
        return _coerce_valor(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)


class AssetPatch(BaseModel):
    """A partial update: ``id`` plus whichever fields should change."""

    id: str = Field(..., description="Asset to update.", examples=["A1"])
    nome: Optional[str] = None
    descricao: Optional[str] = None
    responsavel: Optional[str] = None
    local: Optional[str] = None
    valor: Optional[float] = None
    status: Optional[str] = None

    model_config = {"extra": "ignore", "coerce_numbers_to_str": True}

    @field_validator("valor", mode="before")
    @classmethod
    def _valor_is_number(cls, value: Any) -> Any:
        return _coerce_valor(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)


class TransferRequest(BaseModel):
    """Custody change for one asset."""

    id: str = Field(..., examples=["A1"])
    novoresponsavel: str = Field(..., description="New custodian.", examples=["Bob"])

    model_config = {"extra": "ignore", "coerce_numbers_to_str": True}


class Envelope(BaseModel):
    """Uniform response body: ``{success, data?, error?}``."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> dict[str, Any]:
        return cls(success=True, data=data).model_dump(exclude_unset=True)

    @classmethod
    def fail(cls, error: str) -> dict[str, Any]:
        return cls(success=False, error=error).model_dump(exclude_unset=True)


# =============================================================================
# Boundary parsing
# =============================================================================


def _build(model: type[BaseModel], body: dict[str, Any]) -> Any:
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise ValidationError(f"Campo inválido: {where}: {first.get('msg')}", cause=exc) from exc


def parse_asset(body: dict[str, Any]) -> Asset:
    """Validate a create request; every asset field is required."""
    missing = [name for name in ASSET_FIELDS if _is_missing(body.get(name))]
    if missing:
        raise MissingFieldError(
            "Todos os campos são obrigatórios: " + ", ".join(ASSET_FIELDS),
            fields=missing,
        )
    return _build(Asset, body)


def parse_patch(body: dict[str, Any]) -> AssetPatch:
    """Validate an update request; only ``id`` is required, empty fields are dropped."""
    if _is_missing(body.get("id")):
        raise MissingFieldError(_ID_REQUIRED, fields=["id"])
    present = {name: body[name] for name in ASSET_FIELDS if not _is_missing(body.get(name))}
    return _build(AssetPatch, present)


def parse_transfer(body: dict[str, Any]) -> TransferRequest:
    """Validate a transfer request; both ``id`` and ``novoresponsavel`` are required."""
    missing = [name for name in ("id", "novoresponsavel") if _is_missing(body.get(name))]
    if missing:
        raise MissingFieldError(
            "ID do ativo e novo responsável são obrigatórios",
            fields=missing,
        )
    return _build(TransferRequest, body)


def require_id(asset_id: str | None) -> str:
    """Validate the ``id`` query parameter of the read routes."""
    if _is_missing(asset_id):
        raise MissingFieldError(_ID_REQUIRED, fields=["id"])
    return asset_id  # type: ignore[return-value]


__all__ = [
    "ASSET_FIELDS",
    "Asset",
    "AssetPatch",
    "TransferRequest",
    "Envelope",
    "parse_asset",
    "parse_patch",
    "parse_transfer",
    "require_id",
]
