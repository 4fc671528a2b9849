"""
Hyperledger Fabric binding built on ``fabric-sdk-py`` (import name ``hfc``).

The SDK is an optional dependency: it is imported when the first session is
opened, so the HTTP layer and its tests run without it.
"""

from __future__ import annotations

from typing import Any

from .errors import LedgerConnectionError
from .logging import get_logger
from .session import Payload, SessionSpec

_INSTALL_HINT = "fabric-sdk-py é necessário para acessar a rede: pip install 'patrimonio-gateway[fabric]'"


class FabricSession:
    """A Fabric client bound to one channel, one chaincode and one signing user."""

    def __init__(
        self,
        client: Any,
        requestor: Any,
        *,
        channel: str,
        chaincode: str,
        peers: list[str],
    ) -> None:
        self._client = client
        self._requestor = requestor
        self.channel = channel
        self.chaincode = chaincode
        self.peers = peers

    def _require_client(self) -> Any:
        if self._client is None:
            raise LedgerConnectionError("Sessão com a rede blockchain encerrada")
        return self._client

    async def evaluate(self, name: str, *args: str) -> Payload:
        client = self._require_client()
        return await client.chaincode_query(
            requestor=self._requestor,
            channel_name=self.channel,
            peers=self.peers,
            args=list(args),
            cc_name=self.chaincode,
            fcn=name,
        )

    async def submit(self, name: str, *args: str) -> Payload:
        client = self._require_client()
        return await client.chaincode_invoke(
            requestor=self._requestor,
            channel_name=self.channel,
            peers=self.peers,
            args=list(args),
            cc_name=self.chaincode,
            fcn=name,
            wait_for_event=True,
        )

    async def close(self) -> None:
        self._client = None
        self._requestor = None


async def connect_fabric(spec: SessionSpec) -> FabricSession:
    """Open a Fabric session from a validated profile and a wallet identity."""
    try:
        from hfc.fabric import Client
        from hfc.fabric.user import create_user
        from hfc.util.keyvaluestore import FileKeyValueStore
    except ImportError as exc:
        raise LedgerConnectionError(_INSTALL_HINT, cause=exc) from exc

    logger = get_logger()
    organization = spec.profile.organization_for(spec.identity.msp_id)
    peers = spec.profile.peers_for(spec.channel, organization)

    try:
        client = Client(net_profile=str(spec.profile.path))
        client.new_channel(spec.channel)
        requestor = create_user(
            name=spec.label,
            org=organization,
            state_store=FileKeyValueStore(str(spec.wallet.directory / ".hfc-kvs")),
            msp_id=spec.identity.msp_id,
            key_path=str(spec.wallet.key_path(spec.label)),
            cert_path=str(spec.wallet.cert_path(spec.label)),
        )
        if spec.config.discovery_enabled:
            await client.init_with_discovery(requestor, peers[0], spec.channel)
    except LedgerConnectionError:
        raise
    except Exception as exc:
        raise LedgerConnectionError(f"Erro ao conectar à rede: {exc}", cause=exc) from exc

    logger.info(
        "Fabric client ready",
        profile=spec.profile.name,
        organization=organization,
        peers=",".join(peers),
        discovery=spec.config.discovery_enabled,
    )
    return FabricSession(
        client,
        requestor,
        channel=spec.channel,
        chaincode=spec.chaincode,
        peers=peers,
    )


__all__ = ["FabricSession", "connect_fabric"]
