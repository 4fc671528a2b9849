"""
Asset routes.

Each route maps one method + path to one ledger operation and answers with
the ``{success, data?, error?}`` envelope. Input is validated before the
ledger is touched; gateway errors carry their own HTTP status, anything else
becomes a 500 with the exception message.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response

from ..config.settings import Settings
from ..errors import GatewayError, InvalidBodyError, ValidationError
from ..ledger import AssetLedger
from ..logging import get_logger
from ..models import Envelope, parse_asset, parse_patch, parse_transfer, require_id
from .static import media_type_for, resolve_static

# Paths starting with any of these never fall through to static files.
API_PREFIXES = ("/asset", "/create", "/update", "/transfer", "/history")

router = APIRouter()


def get_ledger(request: Request) -> AssetLedger:
    return request.app.state.ledger


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _envelope_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(Envelope.fail(message), status_code=status_code)


async def _respond(call: Callable[[], Awaitable[Any]], *, status_code: int = 200) -> JSONResponse:
    logger = get_logger()
    try:
        data = await call()
    except ValidationError as exc:
        logger.warning("Rejected request", error=exc.message, code=exc.code.value)
        return _envelope_error(exc.http_status, exc.message)
    except GatewayError as exc:
        # Already logged with traceback by the ledger adapter.
        return _envelope_error(exc.http_status, exc.message)
    except Exception as exc:
        logger.log_error(exc, "Error processing request")
        return _envelope_error(500, str(exc) or "Erro interno do servidor")
    return JSONResponse(Envelope.ok(data), status_code=status_code)


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidBodyError(cause=exc) from exc
    if not isinstance(body, dict):
        raise InvalidBodyError()
    return body


@router.get("/healthz")
async def healthz(ledger: AssetLedger = Depends(get_ledger)) -> dict[str, Any]:
    return {"ok": True, "ledger": ledger.state.value}


@router.get("/assets")
async def list_assets(ledger: AssetLedger = Depends(get_ledger)) -> JSONResponse:
    return await _respond(ledger.get_all_assets)


@router.get("/asset")
async def get_asset(
    asset_id: str | None = Query(default=None, alias="id"),
    ledger: AssetLedger = Depends(get_ledger),
) -> JSONResponse:
    return await _respond(lambda: ledger.get_asset(require_id(asset_id)))


@router.get("/history")
async def get_history(
    asset_id: str | None = Query(default=None, alias="id"),
    ledger: AssetLedger = Depends(get_ledger),
) -> JSONResponse:
    return await _respond(lambda: ledger.get_asset_history(require_id(asset_id)))


@router.post("/create")
async def create_asset(request: Request, ledger: AssetLedger = Depends(get_ledger)) -> JSONResponse:
    async def run() -> Any:
        asset = parse_asset(await _read_body(request))
        return await ledger.create_asset(asset)

    return await _respond(run, status_code=201)


@router.post("/update")
async def update_asset(request: Request, ledger: AssetLedger = Depends(get_ledger)) -> JSONResponse:
    async def run() -> Any:
        patch = parse_patch(await _read_body(request))
        return await ledger.update_asset(patch)

    return await _respond(run)


@router.post("/transfer")
async def transfer_asset(request: Request, ledger: AssetLedger = Depends(get_ledger)) -> JSONResponse:
    async def run() -> Any:
        transfer = parse_transfer(await _read_body(request))
        return await ledger.transfer_asset(transfer.id, transfer.novoresponsavel)

    return await _respond(run)


@router.api_route("/{path:path}", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def fallback(path: str, request: Request, settings: Settings = Depends(get_app_settings)) -> Response:
    url_path = "/" + path
    if url_path.startswith(API_PREFIXES) or request.method not in ("GET", "HEAD"):
        return _envelope_error(404, "Rota não encontrada")

    target = resolve_static(settings.server.public_dir, url_path, settings.server.index_file)
    if target is None:
        return PlainTextResponse("Arquivo não encontrado", status_code=404)
    return FileResponse(target, media_type=media_type_for(target))


__all__ = ["router", "get_ledger", "get_app_settings", "API_PREFIXES"]
