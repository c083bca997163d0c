from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

import structlog
from structlog.typing import Processor

from livekit_render_mcp.config.settings import LOG_FORMAT_JSON, LoggingSettings

BoundLogger = structlog.stdlib.BoundLogger


def _build_processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _configure_structlog(settings: LoggingSettings) -> None:
    json_logs = settings.format == LOG_FORMAT_JSON
    structlog.configure(
        processors=_build_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _build_handler(level: int, handler: logging.Handler) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(settings: LoggingSettings) -> None:
    """Install stderr (and optional rotating file) handlers plus structlog.

    stdout is reserved for the MCP stdio transport, so nothing is ever
    written there.
    """

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.level)

    console_handler = _build_handler(settings.level, logging.StreamHandler(sys.stderr))
    root_logger.addHandler(console_handler)

    if settings.file_path:
        file_handler = _build_handler(
            settings.level,
            RotatingFileHandler(
                settings.file_path,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
            ),
        )
        root_logger.addHandler(file_handler)

    _configure_structlog(settings)


def get_logger(name: str) -> BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def request_context(request_id: Optional[str] = None, **fields: Any) -> Iterator[str]:
    """Bind a request id (and extra fields) to every event logged inside the block.

    The binding lives in structlog's context variables, so events emitted by
    the Render client during a tool call carry the dispatcher's request id.
    """

    resolved_request_id = request_id or str(uuid.uuid4())
    extras = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(request_id=resolved_request_id, **extras):
        yield resolved_request_id


def log_event(
    logger: BoundLogger,
    event: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    event_fields = {key: value for key, value in fields.items() if value is not None}
    logger.log(level, event, **event_fields)


def log_tool_event(
    logger: BoundLogger,
    action: str,
    *,
    tool: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    log_event(logger, f"tool.{action}", level=level, tool=tool, **fields)


def log_remote_event(
    logger: BoundLogger,
    action: str,
    *,
    method: str,
    endpoint: str,
    level: int = logging.DEBUG,
    **fields: Any,
) -> None:
    log_event(
        logger,
        f"render_api.{action}",
        level=level,
        method=method,
        endpoint=endpoint,
        **fields,
    )


__all__ = [
    "BoundLogger",
    "configure_logging",
    "get_logger",
    "request_context",
    "log_event",
    "log_tool_event",
    "log_remote_event",
]
