"""
HTTP server configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ServerConfig:
    """Configuration for the HTTP listener and static file root."""

    host: str = "0.0.0.0"
    port: int = 8080
    public_dir: Path = field(default_factory=lambda: Path.cwd() / "public")
    index_file: str = "index.html"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.public_dir, str):
            self.public_dir = Path(self.public_dir)
        if self.port < 1 or self.port > 65535:
            raise ValueError("port must be between 1 and 65535")
        if not self.index_file:
            raise ValueError("index_file cannot be empty")


__all__ = ["ServerConfig"]
