"""
File-system wallet holding the gateway's X.509 identity.

Each identity lives in its own directory under the wallet root:

    <wallet>/<label>/identity.json      {"type", "mspId", "version"}
    <wallet>/<label>/enrollmentCert.pem
    <wallet>/<label>/private_sk

The layout keeps certificate and key as plain PEM files so the Fabric SDK can
load them by path.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from .config.ledger import IdentityConfig
from .errors import IdentityError
from .logging import StructuredLogger, get_logger

IDENTITY_FILE = "identity.json"
CERT_FILE = "enrollmentCert.pem"
KEY_FILE = "private_sk"


@dataclass(frozen=True)
class X509Identity:
    msp_id: str
    certificate: str
    private_key: str
    type: str = "X.509"
    version: int = 1

    def metadata(self) -> dict[str, object]:
        return {"type": self.type, "mspId": self.msp_id, "version": self.version}


async def _read_text(path: Path) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


async def _write_text(path: Path, text: str) -> None:
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(text)


class FileSystemWallet:
    """Durable store of identities keyed by label."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _dir_for(self, label: str) -> Path:
        if not label or "/" in label or "\\" in label or label in (".", ".."):
            raise IdentityError(f"Invalid identity label: {label!r}")
        return self.directory / label

    def cert_path(self, label: str) -> Path:
        return self._dir_for(label) / CERT_FILE

    def key_path(self, label: str) -> Path:
        return self._dir_for(label) / KEY_FILE

    def exists(self, label: str) -> bool:
        return (self._dir_for(label) / IDENTITY_FILE).is_file()

    async def get(self, label: str) -> X509Identity | None:
        """Return the stored identity, or ``None`` when the label is absent."""
        if not self.exists(label):
            return None
        base = self._dir_for(label)
        try:
            meta = json.loads(await _read_text(base / IDENTITY_FILE))
            certificate = await _read_text(base / CERT_FILE)
            private_key = await _read_text(base / KEY_FILE)
        except (OSError, json.JSONDecodeError) as exc:
            raise IdentityError(f"Identidade '{label}' corrompida na wallet {self.directory}", cause=exc) from exc
        if meta.get("type") != "X.509" or not meta.get("mspId"):
            raise IdentityError(f"Identidade '{label}' não é uma identidade X.509 válida")
        return X509Identity(
            msp_id=meta["mspId"],
            certificate=certificate,
            private_key=private_key,
            type=meta["type"],
            version=int(meta.get("version", 1)),
        )

    async def put(self, label: str, identity: X509Identity) -> None:
        base = self._dir_for(label)
        try:
            base.mkdir(parents=True, exist_ok=True)
            await _write_text(base / CERT_FILE, identity.certificate)
            await _write_text(base / KEY_FILE, identity.private_key)
            os.chmod(base / KEY_FILE, 0o600)
            # Metadata last: its presence marks the record complete.
            await _write_text(base / IDENTITY_FILE, json.dumps(identity.metadata()))
        except OSError as exc:
            raise IdentityError(f"Não foi possível gravar a identidade '{label}' na wallet", cause=exc) from exc


async def load_identity_files(cert_path: Path, key_path: Path, msp_id: str) -> X509Identity:
    """Read a certificate / private key pair issued by the network's CA."""
    try:
        certificate = await _read_text(cert_path)
        private_key = await _read_text(key_path)
    except OSError as exc:
        raise IdentityError(
            f"Não foi possível ler o certificado ou a chave privada ({cert_path}, {key_path})",
            cause=exc,
        ) from exc
    if "BEGIN CERTIFICATE" not in certificate:
        raise IdentityError(f"Arquivo {cert_path} não contém um certificado PEM")
    if "PRIVATE KEY" not in private_key:
        raise IdentityError(f"Arquivo {key_path} não contém uma chave privada PEM")
    return X509Identity(msp_id=msp_id, certificate=certificate, private_key=private_key)


async def ensure_identity(
    wallet: FileSystemWallet,
    config: IdentityConfig,
    logger: StructuredLogger | None = None,
) -> X509Identity:
    """
    Return the configured identity, importing it into the wallet on first use.

    Later calls reuse the stored record and never touch the source files.
    """
    logger = logger or get_logger()
    identity = await wallet.get(config.label)
    if identity is not None:
        return identity

    logger.info("Importing identity into wallet", label=config.label, wallet=str(wallet.directory))
    identity = await load_identity_files(config.cert_path, config.key_path, config.msp_id)
    await wallet.put(config.label, identity)
    logger.info("Identity stored in wallet", label=config.label, msp_id=identity.msp_id)
    return identity


__all__ = [
    "X509Identity",
    "FileSystemWallet",
    "load_identity_files",
    "ensure_identity",
]
