"""
Connection profile loading.

A connection profile is the JSON topology document generated by the Fabric
test network (``connection-org1.json``): organizations with their MSP ids and
peers, peer endpoints with TLS material, and optionally channels, orderers
and certificate authorities. With discovery disabled the gateway talks only to
the peers listed here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiofiles
import jsonschema

from .errors import ConnectionProfileError

ENDPOINT_SCHEMA = {
    "type": "object",
    "properties": {
        "url": {"type": "string", "minLength": 1},
        "tlsCACerts": {"type": "object"},
        "grpcOptions": {"type": "object"},
    },
    "required": ["url"],
}

PROFILE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "client": {
            "type": "object",
            "properties": {"organization": {"type": "string"}},
        },
        "organizations": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "mspid": {"type": "string", "minLength": 1},
                    "peers": {"type": "array", "items": {"type": "string"}},
                    "certificateAuthorities": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["mspid"],
            },
        },
        "peers": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": ENDPOINT_SCHEMA,
        },
        "orderers": {"type": "object", "additionalProperties": ENDPOINT_SCHEMA},
        "channels": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "orderers": {"type": "array", "items": {"type": "string"}},
                    "peers": {"type": "object"},
                },
            },
        },
        "certificateAuthorities": {"type": "object"},
    },
    "required": ["organizations", "peers"],
}


@dataclass
class ConnectionProfile:
    """A validated network topology."""

    path: Path
    data: dict[str, Any] = field(repr=False)

    @property
    def name(self) -> str:
        return str(self.data.get("name", self.path.stem))

    @property
    def organizations(self) -> dict[str, dict[str, Any]]:
        return self.data["organizations"]

    def organization_for(self, msp_id: str) -> str:
        """Name of the organization owning ``msp_id``."""
        client_org = self.data.get("client", {}).get("organization")
        if client_org and self.organizations.get(client_org, {}).get("mspid") == msp_id:
            return client_org
        for name, org in self.organizations.items():
            if org.get("mspid") == msp_id:
                return name
        raise ConnectionProfileError(
            f"Perfil de conexão {self.path} não possui organização com mspid {msp_id}"
        )

    def peers_for(self, channel: str, organization: str) -> list[str]:
        """Endorsing/query peers for ``channel``; falls back to the organization's peers."""
        channel_peers = self.data.get("channels", {}).get(channel, {}).get("peers")
        if channel_peers:
            names = list(channel_peers)
        else:
            names = list(self.organizations.get(organization, {}).get("peers", []))
        unknown = [name for name in names if name not in self.data["peers"]]
        if unknown:
            raise ConnectionProfileError(f"Peers sem endpoint no perfil de conexão: {', '.join(unknown)}")
        if not names:
            raise ConnectionProfileError(
                f"Perfil de conexão {self.path} não lista peers para o canal {channel}"
            )
        return names


def parse_profile(data: Any, path: Path) -> ConnectionProfile:
    try:
        jsonschema.validate(instance=data, schema=PROFILE_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ConnectionProfileError(f"Perfil de conexão inválido ({path}): {exc.message}", cause=exc) from exc
    return ConnectionProfile(path=path, data=data)


async def load_profile(path: Path | str) -> ConnectionProfile:
    """Read and validate a JSON connection profile."""
    path = Path(path)
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            raw = await f.read()
    except OSError as exc:
        raise ConnectionProfileError(f"Perfil de conexão não encontrado: {path}", cause=exc) from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConnectionProfileError(f"Perfil de conexão não é JSON válido: {path}", cause=exc) from exc
    return parse_profile(data, path)


__all__ = ["PROFILE_SCHEMA", "ConnectionProfile", "parse_profile", "load_profile"]
