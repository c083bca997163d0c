"""Render REST API integration helpers."""

from livekit_render_mcp.config.constants import DEFAULT_RENDER_API_BASE_URL

from .client import RenderClient
from .models import Deploy, LogEntry, Service, ServiceDetails, unwrap_collection

__all__ = [
    "DEFAULT_RENDER_API_BASE_URL",
    "RenderClient",
    "Deploy",
    "LogEntry",
    "Service",
    "ServiceDetails",
    "unwrap_collection",
]
