"""
Ledger client adapter.

`AssetLedger` owns the single session to the ledger network and exposes the
six asset operations of the ``patrimonio`` contract. Queries are evaluated on
the peers; mutations are submitted for ordering and commit. Every call goes
through the same path:

1. ensure a connected session (connecting lazily if needed),
2. invoke the named transaction with string arguments,
3. decode the payload as JSON, with per-operation fallbacks,
4. log, translate and re-raise remote errors.

Connection setup is single-flight: concurrent callers that find the adapter
disconnected await one shared setup task instead of each opening a session.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any

from .config.ledger import LedgerConfig
from .errors import (
    AssetNotFoundError,
    ContractFunctionNotFoundError,
    ErrorContext,
    GatewayError,
    InvocationError,
    LedgerConnectionError,
)
from .identity import FileSystemWallet, ensure_identity
from .logging import InvocationLog, StructuredLogger, get_logger, timed, truncate_for_log
from .models import Asset, AssetPatch
from .profile import load_profile
from .session import Connector, ContractSession, Payload, SessionSpec

# Fabric peers report a missing or failing chaincode function with this text.
QUERY_FAILED_MARKER = "Query failed"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Transaction(str, Enum):
    GET_ALL_ASSETS = "GetAllAssets"
    GET_ASSET = "GetAsset"
    CREATE_ASSET = "CreateAsset"
    UPDATE_ASSET = "UpdateAsset"
    TRANSFER_ASSET = "TransferAsset"
    GET_ASSET_HISTORY = "GetAssetHistory"


def _to_text(payload: Payload) -> str:
    if payload is None:
        return ""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8", errors="replace")
    return str(payload)


class AssetLedger:
    """Session owner and operation-level access to one contract on one channel."""

    def __init__(
        self,
        config: LedgerConfig,
        *,
        connector: Connector | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.config = config
        self._connector = connector
        self._logger = logger or get_logger()
        self._session: ContractSession | None = None
        self._connecting: asyncio.Task[ContractSession] | None = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def _context(self, transaction: str | None = None, asset_id: str | None = None) -> ErrorContext:
        return ErrorContext(
            channel=self.config.channel,
            chaincode=self.config.chaincode,
            transaction=transaction,
            asset_id=asset_id,
        )

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> ContractSession:
        """
        Return the open session, establishing it if necessary.

        Racing callers share one in-flight setup. A failed setup is not
        remembered: the next call starts a fresh attempt.
        """
        if self._session is not None:
            return self._session

        task = self._connecting
        if task is None or task.done():
            task = asyncio.create_task(self._open_session())
            self._connecting = task
            self._state = ConnectionState.CONNECTING
        try:
            # Shielded so one cancelled request does not abort setup for the others.
            return await asyncio.shield(task)
        finally:
            if task.done() and self._connecting is task:
                self._connecting = None

    async def _open_session(self) -> ContractSession:
        cfg = self.config
        self._logger.info(
            "Connecting to ledger network",
            profile=str(cfg.connection_profile),
            wallet=str(cfg.identity.wallet_dir),
        )
        try:
            wallet = FileSystemWallet(cfg.identity.wallet_dir)
            identity = await ensure_identity(wallet, cfg.identity, self._logger)
            profile = await load_profile(cfg.connection_profile)
            connector = self._connector
            if connector is None:
                from .fabric import connect_fabric

                connector = connect_fabric
            session = await connector(SessionSpec(cfg, profile, wallet, identity))
        except GatewayError as exc:
            self._state = ConnectionState.DISCONNECTED
            self._logger.log_error(exc, "Error connecting to ledger network")
            raise
        except Exception as exc:
            self._state = ConnectionState.DISCONNECTED
            error = LedgerConnectionError(f"Erro ao conectar à rede: {exc}", cause=exc, context=self._context())
            self._logger.log_error(error, "Error connecting to ledger network")
            raise error from exc

        self._session = session
        self._state = ConnectionState.CONNECTED
        self._logger.info(f"Connected to channel {cfg.channel} and chaincode {cfg.chaincode}")
        return session

    async def disconnect(self) -> None:
        """Release the session. Safe to call repeatedly."""
        task = self._connecting
        if task is not None:
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                self._logger.warning("Pending connection attempt failed during disconnect")
            self._connecting = None

        session, self._session = self._session, None
        self._state = ConnectionState.DISCONNECTED
        if session is None:
            return
        await session.close()
        self._logger.info("Disconnected from ledger network")

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def _translate(self, transaction: str, exc: Exception, asset_id: str | None) -> GatewayError:
        if isinstance(exc, GatewayError):
            return exc
        context = self._context(transaction, asset_id)
        if QUERY_FAILED_MARKER in str(exc):
            return ContractFunctionNotFoundError(
                function=transaction,
                chaincode=self.config.chaincode,
                cause=exc,
                context=context,
            )
        return InvocationError(str(exc) or type(exc).__name__, cause=exc, context=context)

    async def _invoke(
        self,
        kind: str,
        transaction: Transaction,
        *args: str,
        asset_id: str | None = None,
    ) -> str:
        session = await self.connect()
        call = session.evaluate if kind == "evaluate" else session.submit
        name = transaction.value
        record = InvocationLog(transaction=name, kind=kind, args=[truncate_for_log(a, 120) for a in args])

        with timed() as timer:
            try:
                payload = await call(name, *args)
            except Exception as exc:
                error = self._translate(name, exc, asset_id)
                record.success = False
                record.error = str(exc)
                record.duration_ms = timer.elapsed_ms
                self._logger.log_invocation(record)
                self._logger.log_error(error, f"Error invoking {name}")
                if error is exc:
                    raise
                raise error from exc

        text = _to_text(payload)
        record.duration_ms = timer.elapsed_ms
        record.payload_bytes = len(text)
        self._logger.log_invocation(record)
        return text

    def _decode(self, transaction: Transaction, text: str, fallback: Any) -> Any:
        """JSON-decode ``text``, answering ``fallback`` when it is not JSON."""
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            self._logger.warning(
                f"{transaction.value} payload is not valid JSON",
                payload=truncate_for_log(text),
            )
            return fallback

    # ------------------------------------------------------------------
    # Asset operations
    # ------------------------------------------------------------------

    async def get_all_assets(self) -> Any:
        """All assets; an empty ledger yields ``[]``, a non-JSON payload ``[raw]``."""
        text = await self._invoke("evaluate", Transaction.GET_ALL_ASSETS)
        if not text.strip():
            return []
        return self._decode(Transaction.GET_ALL_ASSETS, text, [text])

    async def get_asset(self, asset_id: str) -> Any:
        """One asset; an empty payload means the asset does not exist."""
        text = await self._invoke("evaluate", Transaction.GET_ASSET, asset_id, asset_id=asset_id)
        if not text.strip():
            error = AssetNotFoundError(asset_id=asset_id, context=self._context(Transaction.GET_ASSET.value, asset_id))
            self._logger.log_error(error, f"Asset {asset_id} not found", with_traceback=False)
            raise error
        return self._decode(Transaction.GET_ASSET, text, {"id": asset_id, "data": text})

    async def _submit_asset(self, transaction: Transaction, asset_id: str, *args: str) -> Any:
        # Contracts commonly return nothing from a submit.
        text = await self._invoke("submit", transaction, *args, asset_id=asset_id)
        if not text.strip():
            return None
        return self._decode(transaction, text, {"id": asset_id, "data": text})

    async def create_asset(self, asset: Asset) -> Any:
        return await self._submit_asset(Transaction.CREATE_ASSET, asset.id, asset.to_json())

    async def update_asset(self, patch: AssetPatch) -> Any:
        return await self._submit_asset(Transaction.UPDATE_ASSET, patch.id, patch.to_json())

    async def transfer_asset(self, asset_id: str, new_custodian: str) -> Any:
        return await self._submit_asset(Transaction.TRANSFER_ASSET, asset_id, asset_id, new_custodian)

    async def get_asset_history(self, asset_id: str) -> Any:
        """Ordered past states of one asset, as returned by the contract."""
        text = await self._invoke("evaluate", Transaction.GET_ASSET_HISTORY, asset_id, asset_id=asset_id)
        if not text.strip():
            return []
        return self._decode(Transaction.GET_ASSET_HISTORY, text, [text])


__all__ = ["AssetLedger", "ConnectionState", "Transaction", "QUERY_FAILED_MARKER"]
