"""
Shared fixtures for the gateway tests.

This module provides:
- PEM certificate / key files and a connection profile on disk
- Ledger and server settings pointing at them
- A ledger adapter wired to a recording fake session
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from patrimonio_gateway.config import IdentityConfig, LedgerConfig, LoggingConfig, ServerConfig, Settings
from patrimonio_gateway.ledger import AssetLedger
from tests._testkit import CERT_PEM, KEY_PEM, PROFILE, FakeConnector

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cert_files(tmp_path: Path) -> tuple[Path, Path]:
    msp = tmp_path / "msp"
    msp.mkdir()
    cert = msp / "cert.pem"
    key = msp / "priv_sk"
    cert.write_text(CERT_PEM)
    key.write_text(KEY_PEM)
    return cert, key


@pytest.fixture
def profile_file(tmp_path: Path) -> Path:
    path = tmp_path / "connection-org1.json"
    path.write_text(json.dumps(PROFILE))
    return path


@pytest.fixture
def ledger_config(tmp_path: Path, cert_files, profile_file) -> LedgerConfig:
    cert, key = cert_files
    return LedgerConfig(
        connection_profile=profile_file,
        identity=IdentityConfig(wallet_dir=tmp_path / "wallet", cert_path=cert, key_path=key),
    )


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<html><body>patrimonio</body></html>")
    (root / "script.js").write_text("console.log('ok');")
    (root / "style.css").write_text("body {}")
    return root


@pytest.fixture
def settings(ledger_config: LedgerConfig, public_dir: Path) -> Settings:
    return Settings(
        server=ServerConfig(public_dir=public_dir),
        ledger=ledger_config,
        logging=LoggingConfig(access_log=False),
    )


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def ledger(ledger_config: LedgerConfig, connector: FakeConnector) -> AssetLedger:
    return AssetLedger(ledger_config, connector=connector)
