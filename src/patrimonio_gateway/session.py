"""
Session protocol between the ledger adapter and a ledger client SDK.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from .config.ledger import LedgerConfig
from .identity import FileSystemWallet, X509Identity
from .profile import ConnectionProfile

Payload = Union[bytes, str, None]


@runtime_checkable
class ContractSession(Protocol):
    """
    An open session bound to one channel and one contract.

    ``evaluate`` runs a read-only query on the peers; ``submit`` endorses,
    orders and commits a transaction. Both return the raw contract payload.
    """

    async def evaluate(self, name: str, *args: str) -> Payload:
        ...

    async def submit(self, name: str, *args: str) -> Payload:
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class SessionSpec:
    """Everything a connector needs to open a session."""

    config: LedgerConfig
    profile: ConnectionProfile
    wallet: FileSystemWallet
    identity: X509Identity

    @property
    def channel(self) -> str:
        return self.config.channel

    @property
    def chaincode(self) -> str:
        return self.config.chaincode

    @property
    def label(self) -> str:
        return self.config.identity.label


Connector = Callable[[SessionSpec], Awaitable[ContractSession]]


__all__ = ["Payload", "ContractSession", "SessionSpec", "Connector"]
