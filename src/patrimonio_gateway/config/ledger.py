"""
Ledger network configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

TEST_NETWORK_ORG1 = Path(
    "/root/hyperledger-fabric/fabric-samples/test-network/organizations/peerOrganizations/org1.example.com"
)
_ADMIN_MSP = TEST_NETWORK_ORG1 / "users" / "Admin@org1.example.com" / "msp"


@dataclass
class IdentityConfig:
    """Where the gateway identity lives and how to bootstrap it."""

    wallet_dir: Path = field(default_factory=lambda: Path.cwd() / "wallet")
    label: str = "admin"
    msp_id: str = "Org1MSP"

    # Read only the first time the label is missing from the wallet
    cert_path: Path = _ADMIN_MSP / "signcerts" / "Admin@org1.example.com-cert.pem"
    key_path: Path = _ADMIN_MSP / "keystore" / "priv_sk"

    def __post_init__(self):
        """Validate configuration after initialization."""
        for name in ("wallet_dir", "cert_path", "key_path"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, Path(value))
        if not self.label:
            raise ValueError("identity label cannot be empty")
        if not self.msp_id:
            raise ValueError("msp_id cannot be empty")


@dataclass
class LedgerConfig:
    """Which network, channel and contract the gateway binds to."""

    connection_profile: Path = TEST_NETWORK_ORG1 / "connection-org1.json"
    channel: str = "mychannel"
    chaincode: str = "patrimonio"

    # Static topology from the connection profile
    discovery_enabled: bool = False

    identity: IdentityConfig = field(default_factory=IdentityConfig)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.connection_profile, str):
            self.connection_profile = Path(self.connection_profile)
        if not self.channel:
            raise ValueError("channel cannot be empty")
        if not self.chaincode:
            raise ValueError("chaincode cannot be empty")


__all__ = ["IdentityConfig", "LedgerConfig", "TEST_NETWORK_ORG1"]
