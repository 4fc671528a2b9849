"""HTTP surface of the gateway: asset routes, static files and the app factory."""

from .app import CORS_HEADERS, create_app
from .routes import API_PREFIXES, router
from .static import MIME_TYPES, media_type_for, resolve_static

__all__ = [
    "create_app",
    "router",
    "API_PREFIXES",
    "CORS_HEADERS",
    "MIME_TYPES",
    "media_type_for",
    "resolve_static",
]
