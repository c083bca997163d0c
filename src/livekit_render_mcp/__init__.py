"""Top-level LiveKit Render MCP package API."""

from livekit_render_mcp.application.server import (
    INSTRUCTIONS,
    _resolve_tls_verification,
    create_server,
)

__all__ = [
    "create_server",
    "_resolve_tls_verification",
    "INSTRUCTIONS",
]
