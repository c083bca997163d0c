"""Plain-text renderings of Render entities for tool responses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from livekit_render_mcp.integrations.render.models import Deploy, LogEntry, Service

NOT_AVAILABLE = "N/A"
PREVIEW_LENGTH = 20
MASK_VISIBLE_CHARS = 4


def truncate_value(value: str | None, limit: int = PREVIEW_LENGTH) -> str:
    if value is None:
        return "(no value)"
    if len(value) <= limit:
        return value
    return f"{value[:limit]}..."


def mask_value(value: str) -> str:
    if len(value) <= MASK_VISIBLE_CHARS:
        return "*" * len(value)
    return f"{value[:MASK_VISIBLE_CHARS]}{'*' * 8}"


def format_service_list(services: Iterable[Service]) -> str:
    services = list(services)
    blocks = [
        f"• {service.name} ({service.type})\n"
        f"  ID: {service.id}\n"
        f"  Status: {service.status or NOT_AVAILABLE}\n"
        f"  Environment: {service.environment or NOT_AVAILABLE}\n"
        f"  URL: {service.service_details.url or NOT_AVAILABLE}\n"
        for service in services
    ]
    return f"Found {len(services)} services:\n\n" + "\n".join(blocks)


def format_service_detail(service: Service) -> str:
    details = service.service_details
    return (
        "Service Details:\n\n"
        f"Name: {service.name}\n"
        f"Type: {service.type}\n"
        f"Status: {service.status or NOT_AVAILABLE}\n"
        f"Environment: {service.environment or NOT_AVAILABLE}\n"
        f"Slug: {service.slug or NOT_AVAILABLE}\n"
        f"URL: {details.url or NOT_AVAILABLE}\n"
        f"Build Command: {details.build_command or NOT_AVAILABLE}\n"
        f"Start Command: {details.start_command or NOT_AVAILABLE}\n"
        f"Suspended: {service.suspended if service.is_suspended else 'No'}\n"
    )


def format_logs(entries: Iterable[LogEntry]) -> str:
    entries = list(entries)
    lines = [f"[{entry.timestamp or '-'}] {entry.message}" for entry in entries]
    return f"Recent logs ({len(entries)} entries):\n\n" + "\n".join(lines)


def format_deploys(deploys: Iterable[Deploy]) -> str:
    deploys = list(deploys)
    blocks = [
        f"• Deploy {deploy.id}\n"
        f"  Status: {deploy.status or NOT_AVAILABLE}\n"
        f"  Created: {deploy.created_at or NOT_AVAILABLE}\n"
        f"  Finished: {deploy.finished_at or 'In progress'}\n"
        f"  Commit: {deploy.commit_id or NOT_AVAILABLE}\n"
        f"  Message: {deploy.commit_message or NOT_AVAILABLE}\n"
        for deploy in deploys
    ]
    return f"Deploy History ({len(deploys)} deploys):\n\n" + "\n".join(blocks)


def format_env_var_update(service_id: str, env_vars: Mapping[str, str]) -> str:
    lines = [f"• {key}: {mask_value(value)}" for key, value in env_vars.items()]
    return (
        f"Environment variables updated successfully for service {service_id}\n\n"
        "Updated variables:\n" + "\n".join(lines)
    )


def format_restart(deploy: Deploy) -> str:
    return (
        "Service restart initiated successfully!\n\n"
        f"Deploy ID: {deploy.id}\n"
        f"Status: {deploy.status or NOT_AVAILABLE}\n"
        f"Created: {deploy.created_at or NOT_AVAILABLE}\n\n"
        "You can monitor the restart progress using the list_deploys tool."
    )


__all__ = [
    "NOT_AVAILABLE",
    "PREVIEW_LENGTH",
    "format_deploys",
    "format_env_var_update",
    "format_logs",
    "format_restart",
    "format_service_detail",
    "format_service_list",
    "mask_value",
    "truncate_value",
]
