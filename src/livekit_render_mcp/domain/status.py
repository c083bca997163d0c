"""Aggregate LiveKit deployment status across Render services."""

from __future__ import annotations

from livekit_render_mcp.config.constants import DEFAULT_SERVICE_KEYWORD
from livekit_render_mcp.domain.diagnosis import select_services
from livekit_render_mcp.domain.documents import DocumentKind, DocumentReader
from livekit_render_mcp.domain.formatting import NOT_AVAILABLE
from livekit_render_mcp.integrations.render.client import RenderClient

STATUS_LOG_WINDOW = 10


async def collect_status(
    client: RenderClient,
    reader: DocumentReader,
    *,
    service_keyword: str = DEFAULT_SERVICE_KEYWORD,
) -> str:
    """Summarise matching services, their latest log line and local documents.

    A failure to list services is terminal; a failure to fetch one service's
    logs is reported inline and the remaining services are still covered.
    """

    services = select_services(await client.list_services(), service_keyword)

    lines = ["LiveKit Deployment Status:", ""]
    if not services:
        lines.append(f"No services matching '{service_keyword}' found in your Render account.")

    for service in services:
        lines.append(f"Service: {service.name}")
        lines.append(f"  Type: {service.type}")
        lines.append(f"  Status: {service.status or NOT_AVAILABLE}")
        lines.append(f"  URL: {service.service_details.url or NOT_AVAILABLE}")
        try:
            entries = await client.get_logs(service.id, STATUS_LOG_WINDOW)
        except Exception as exc:
            lines.append(f"  Log retrieval failed: {exc}")
        else:
            if entries:
                lines.append(f"  Latest log: {entries[0].message}")
        lines.append("")

    for kind, label in (
        (DocumentKind.TOPOLOGY, "Render configuration"),
        (DocumentKind.RUNTIME_CONFIG, "LiveKit configuration"),
    ):
        if reader.exists(kind):
            lines.append(f"Local {label} {reader.filename(kind)} found.")

    return "\n".join(lines).rstrip() + "\n"


__all__ = ["STATUS_LOG_WINDOW", "collect_status"]
