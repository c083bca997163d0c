from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from livekit_render_mcp.domain.documents import DocumentKind, DocumentReader
from livekit_render_mcp.infrastructure.errors import LiveKitRenderError
from livekit_render_mcp.infrastructure.logging import BoundLogger
from livekit_render_mcp.integrations.render.client import RenderClient


def _check_document(reader: DocumentReader, kind: DocumentKind, logger: BoundLogger) -> bool:
    filename = reader.filename(kind)
    if not reader.exists(kind):
        logger.warning(
            "offline.documents.missing",
            document=filename,
            path=str(reader.path_for(kind)),
        )
        return False

    try:
        if kind is DocumentKind.TOPOLOGY:
            reader.read_topology()
        else:
            reader.read_runtime_config()
    except LiveKitRenderError as exc:
        logger.warning("offline.documents.unparseable", document=filename, **exc.log_fields())
        return False

    logger.debug("offline.documents.parsed", document=filename)
    return True


def run_offline_startup_checks(
    *,
    has_api_key: bool,
    reader: DocumentReader,
    logger: BoundLogger,
) -> bool:
    """Report on local prerequisites; returns ``True`` when all of them are met.

    Nothing here stops the server from starting: the document tools report
    their own errors per call, and a missing API key surfaces on the first
    Render request.
    """

    healthy = True
    if has_api_key:
        logger.debug("offline.config.api_key", status="provided")
    else:
        logger.warning("offline.config.api_key", status="missing", env_var="RENDER_API_KEY")
        healthy = False

    for kind in DocumentKind:
        healthy = _check_document(reader, kind, logger) and healthy
    return healthy


async def run_online_startup_checks(
    *,
    client: Optional[RenderClient],
    logger: BoundLogger,
    skip_startup_checks: bool = False,
) -> bool:
    if skip_startup_checks:
        logger.warning("online.startup_checks_skipped", reason="skipped on request")
        return True

    if client is None:
        logger.critical("online.api_connectivity", error="Render client unavailable")
        return False

    try:
        services = await client.list_services()
    except LiveKitRenderError as exc:
        logger.critical("online.api_connectivity", **exc.log_fields())
        return False
    except ValidationError as exc:
        logger.critical(
            "online.api_connectivity",
            error="Unexpected Render response shape",
            detail=str(exc),
        )
        return False

    logger.info("online.api_connectivity", status="ok", services=len(services))
    return True


__all__ = ["run_offline_startup_checks", "run_online_startup_checks"]
