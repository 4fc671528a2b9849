"""
Tests for the Hyperledger Fabric binding.

The SDK itself is not exercised; a recording client stands in for
``hfc.fabric.Client``.
"""
import sys
from pathlib import Path

import pytest

from patrimonio_gateway.config import LedgerConfig
from patrimonio_gateway.errors import LedgerConnectionError
from patrimonio_gateway.fabric import FabricSession, connect_fabric
from patrimonio_gateway.identity import FileSystemWallet, X509Identity
from patrimonio_gateway.profile import parse_profile
from patrimonio_gateway.session import ContractSession, SessionSpec
from tests._testkit import CERT_PEM, KEY_PEM, PROFILE


class RecordingClient:
    def __init__(self, reply=b"[]"):
        self.reply = reply
        self.queries = []
        self.invokes = []

    async def chaincode_query(self, **kwargs):
        self.queries.append(kwargs)
        return self.reply

    async def chaincode_invoke(self, **kwargs):
        self.invokes.append(kwargs)
        return self.reply


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def session(client):
    return FabricSession(
        client,
        "requestor",
        channel="mychannel",
        chaincode="patrimonio",
        peers=["peer0.org1.example.com"],
    )


class TestFabricSession:
    """Test how transactions map onto SDK calls."""

    def test_is_a_contract_session(self, session):
        assert isinstance(session, ContractSession)

    @pytest.mark.asyncio
    async def test_evaluate_queries_peers(self, session, client):
        assert await session.evaluate("GetAsset", "A1") == b"[]"
        assert client.queries == [
            {
                "requestor": "requestor",
                "channel_name": "mychannel",
                "peers": ["peer0.org1.example.com"],
                "args": ["A1"],
                "cc_name": "patrimonio",
                "fcn": "GetAsset",
            }
        ]

    @pytest.mark.asyncio
    async def test_submit_waits_for_commit(self, session, client):
        await session.submit("TransferAsset", "A1", "Bob")

        call = client.invokes[0]
        assert call["fcn"] == "TransferAsset"
        assert call["args"] == ["A1", "Bob"]
        assert call["wait_for_event"] is True

    @pytest.mark.asyncio
    async def test_closed_session_refuses_calls(self, session):
        await session.close()
        with pytest.raises(LedgerConnectionError, match="encerrada"):
            await session.evaluate("GetAllAssets")


class TestConnectFabric:
    """Test session setup."""

    @pytest.mark.asyncio
    async def test_missing_sdk(self, monkeypatch, tmp_path):
        monkeypatch.setitem(sys.modules, "hfc", None)
        spec = SessionSpec(
            config=LedgerConfig(),
            profile=parse_profile(PROFILE, Path("connection-org1.json")),
            wallet=FileSystemWallet(tmp_path / "wallet"),
            identity=X509Identity(msp_id="Org1MSP", certificate=CERT_PEM, private_key=KEY_PEM),
        )

        with pytest.raises(LedgerConnectionError, match="fabric-sdk-py"):
            await connect_fabric(spec)
