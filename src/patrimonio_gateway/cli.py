"""
Command line entry point.

Usage:
    patrimonio-gateway --port 8080 --public-dir ./public
    python -m patrimonio_gateway --config gateway.toml
"""

from __future__ import annotations

import argparse
import signal
import sys
from dataclasses import replace
from typing import Sequence

import uvicorn

from . import __version__
from .api import create_app
from .config import Settings, configure, load_env
from .errors import ConfigError
from .ledger import AssetLedger
from .logging import configure_logging


class GatewayServer(uvicorn.Server):
    """uvicorn server that closes the ledger session before the listener."""

    def __init__(self, config: uvicorn.Config, ledger: AssetLedger) -> None:
        super().__init__(config)
        self.ledger = ledger

    async def shutdown(self, sockets=None) -> None:
        await self.ledger.disconnect()
        await super().shutdown(sockets=sockets)


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patrimonio-gateway",
        description="HTTP gateway for the patrimonio asset registry on Hyperledger Fabric.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="TOML or YAML settings file (default: environment)")
    parser.add_argument("--env-file", help=".env file to load before reading settings")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--public-dir", help="Directory with the browser UI")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-format", choices=["text", "json"])
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from file or environment, with command line overrides applied."""
    load_env(args.env_file)
    settings = Settings.from_file(args.config) if args.config else Settings.from_env()

    server_overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("public_dir", args.public_dir))
        if value is not None
    }
    logging_overrides = {
        key: value
        for key, value in (("level", args.log_level), ("format", args.log_format))
        if value is not None
    }
    try:
        if server_overrides:
            settings.server = replace(settings.server, **server_overrides)
        if logging_overrides:
            settings.logging = replace(settings.logging, **logging_overrides)
    except ValueError as exc:
        raise ConfigError(f"Invalid command line option: {exc}", cause=exc) from exc
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
    except (ConfigError, ValueError, OSError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure(settings)
    logger = configure_logging(level=settings.logging.level, json_output=settings.logging.format == "json")
    logger.set_context(channel=settings.ledger.channel, chaincode=settings.ledger.chaincode)

    ledger = AssetLedger(settings.ledger, logger=logger)
    app = create_app(settings, ledger)
    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        access_log=False,
    )

    # uvicorn re-raises the captured signal once it has shut down.
    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    logger.info(f"Server listening on http://{settings.server.host}:{settings.server.port}")
    try:
        GatewayServer(config, ledger).run()
    except KeyboardInterrupt:
        pass
    finally:
        signal.signal(signal.SIGTERM, previous)
    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
