"""
Static file serving for the browser UI.

Non-API paths resolve against the public root. Anything that is not a regular
file inside the root (directories, missing files, paths escaping the root)
falls back to the index page, single-page-app style.
"""

from __future__ import annotations

from pathlib import Path

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def media_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_static(public_dir: Path, url_path: str, index_file: str = "index.html") -> Path | None:
    """
    Map a URL path to a file under ``public_dir``.

    Returns the index page when the path does not name a file in the root,
    and ``None`` when the index page is missing too.
    """
    root = public_dir.resolve()
    relative = url_path.lstrip("/") or index_file
    candidate = (root / relative).resolve()
    if candidate.is_relative_to(root) and candidate.is_file():
        return candidate
    index = root / index_file
    if index.is_file():
        return index
    return None


__all__ = ["MIME_TYPES", "DEFAULT_MIME_TYPE", "media_type_for", "resolve_static"]
