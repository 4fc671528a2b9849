from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import Response

from .. import __version__
from ..config.settings import Settings, get_settings
from ..errors import GatewayError
from ..ledger import AssetLedger
from ..logging import AccessLog, generate_request_id, get_logger, timed
from .routes import router

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    ledger: AssetLedger = app.state.ledger
    logger = get_logger()
    try:
        await ledger.connect()
    except GatewayError as exc:
        # Requests retry the connection lazily.
        logger.warning("Ledger unavailable at startup", error=exc.message, code=exc.code.value)
    try:
        yield
    finally:
        await ledger.disconnect()


def create_app(settings: Settings | None = None, ledger: AssetLedger | None = None) -> FastAPI:
    """Build the gateway application around one ledger adapter."""
    settings = settings or get_settings()
    ledger = ledger or AssetLedger(settings.ledger)

    app = FastAPI(title="Patrimonio Gateway", version=__version__, lifespan=_lifespan)
    app.state.settings = settings
    app.state.ledger = ledger

    @app.middleware("http")
    async def cors_and_access_log(request: Request, call_next) -> Response:
        request_id = generate_request_id()
        with timed() as timer:
            if request.method == "OPTIONS":
                response = Response(status_code=200)
            else:
                response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        if settings.logging.access_log:
            get_logger().log_access(
                AccessLog(
                    request_id=request_id,
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=timer.elapsed_ms,
                )
            )
        return response

    app.include_router(router)
    return app


__all__ = ["create_app", "CORS_HEADERS"]
