"""Typer option declarations and normalization helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Final

import typer

LOG_FORMAT_CHOICES: Final[set[str]] = {"text", "json"}
LOG_LEVEL_CHOICES: Final[list[str]] = sorted(
    name
    for name, value in logging.getLevelNamesMapping().items()
    if isinstance(name, str) and not name.isdigit()
)
LOG_LEVEL_SET: Final[set[str]] = {choice.upper() for choice in LOG_LEVEL_CHOICES}
TRANSPORT_CHOICES: Final[set[str]] = {"stdio", "http"}

ConfigPathOption = Annotated[
    Path,
    typer.Option(
        "--config",
        help="Path to a server configuration TOML file to load",
        envvar="LIVEKIT_RENDER_CONFIG",
        show_envvar=True,
        rich_help_panel="Configuration",
    ),
]

RenderApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--render-api-key",
        help="Render API key (overrides RENDER_API_KEY env var)",
        envvar="RENDER_API_KEY",
        show_envvar=True,
        rich_help_panel="Authentication",
    ),
]

ApiBaseUrlOption = Annotated[
    str | None,
    typer.Option(
        "--api-base-url",
        help="Render REST API base URL",
        envvar="LIVEKIT_RENDER_API_BASE_URL",
        show_envvar=True,
        rich_help_panel="Runtime",
    ),
]

DocumentsDirOption = Annotated[
    str | None,
    typer.Option(
        "--documents-dir",
        help="Directory holding render.yaml and config.yaml",
        envvar="LIVEKIT_RENDER_DOCUMENTS_DIR",
        show_envvar=True,
        rich_help_panel="Documents",
    ),
]

TopologyFileOption = Annotated[
    str | None,
    typer.Option(
        "--topology-file",
        help="File name of the deployment descriptor (default render.yaml)",
        envvar="LIVEKIT_RENDER_TOPOLOGY_FILE",
        show_envvar=True,
        rich_help_panel="Documents",
    ),
]

RuntimeConfigFileOption = Annotated[
    str | None,
    typer.Option(
        "--runtime-config-file",
        help="File name of the LiveKit server configuration (default config.yaml)",
        envvar="LIVEKIT_RENDER_RUNTIME_CONFIG_FILE",
        show_envvar=True,
        rich_help_panel="Documents",
    ),
]

ServiceKeywordOption = Annotated[
    str | None,
    typer.Option(
        "--service-keyword",
        help="Case-insensitive keyword identifying LiveKit services by name",
        envvar="LIVEKIT_RENDER_SERVICE_KEYWORD",
        show_envvar=True,
        rich_help_panel="Runtime",
    ),
]

DebugOption = Annotated[
    bool | None,
    typer.Option(
        "--debug/--no-debug",
        help="Enable verbose diagnostics",
        envvar="LIVEKIT_RENDER_DEBUG",
        show_envvar=True,
        rich_help_panel="Diagnostics",
    ),
]

AllowInsecureTlsOption = Annotated[
    bool | None,
    typer.Option(
        "--allow-insecure-tls/--enforce-tls",
        help="Disable TLS verification for API calls (not recommended)",
        envvar="LIVEKIT_RENDER_ALLOW_INSECURE_TLS",
        show_envvar=True,
        rich_help_panel="TLS",
    ),
]

CaBundleOption = Annotated[
    str | None,
    typer.Option(
        "--ca-bundle",
        help="Path to a custom certificate authority bundle",
        envvar="LIVEKIT_RENDER_CA_BUNDLE",
        show_envvar=True,
        rich_help_panel="TLS",
    ),
]

LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Logging level (e.g. INFO, DEBUG)",
        envvar="LIVEKIT_RENDER_LOG_LEVEL",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

LogFormatOption = Annotated[
    str | None,
    typer.Option(
        "--log-format",
        help="Logging format (text or json)",
        envvar="LIVEKIT_RENDER_LOG_FORMAT",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

LogFileOption = Annotated[
    str | None,
    typer.Option(
        "--log-file",
        help="Path to a rotating log file",
        envvar="LIVEKIT_RENDER_LOG_FILE",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

LogMaxBytesOption = Annotated[
    int | None,
    typer.Option(
        "--log-max-bytes",
        min=1,
        help="Maximum size in bytes for rotating log files",
        envvar="LIVEKIT_RENDER_LOG_MAX_BYTES",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

LogBackupCountOption = Annotated[
    int | None,
    typer.Option(
        "--log-backup-count",
        min=1,
        help="Number of rotating log file backups to retain",
        envvar="LIVEKIT_RENDER_LOG_BACKUP_COUNT",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

TransportOption = Annotated[
    str,
    typer.Option(
        "--transport",
        help="MCP transport to serve (stdio or http)",
        rich_help_panel="Server",
    ),
]

HostOption = Annotated[
    str,
    typer.Option(
        "--host",
        help="Bind address for the http transport",
        rich_help_panel="Server",
    ),
]

PortOption = Annotated[
    int,
    typer.Option(
        "--port",
        min=1,
        max=65535,
        help="Listen port for the http transport",
        rich_help_panel="Server",
    ),
]

OfflineFlagOption = Annotated[
    bool,
    typer.Option(
        "--offline/--online",
        help="Skip the Render connectivity check and run offline validation only",
        rich_help_panel="Diagnostics",
    ),
]


def clean_string(value: str | None) -> str | None:
    """Normalize optional string input."""

    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def normalize_log_format(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip().lower()
    if not candidate:
        return None
    if candidate not in LOG_FORMAT_CHOICES:
        raise typer.BadParameter(
            "Log format must be either 'text' or 'json'",
            param_hint="--log-format",
        )
    return candidate


def normalize_log_level(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip().upper()
    if not candidate:
        return None
    if candidate not in LOG_LEVEL_SET:
        raise typer.BadParameter(
            f"Log level must be one of: {', '.join(LOG_LEVEL_CHOICES)}",
            param_hint="--log-level",
        )
    return candidate


def normalize_transport(value: str) -> str:
    candidate = value.strip().lower()
    if candidate not in TRANSPORT_CHOICES:
        raise typer.BadParameter(
            f"Transport must be one of: {', '.join(sorted(TRANSPORT_CHOICES))}",
            param_hint="--transport",
        )
    return candidate


__all__ = [
    "AllowInsecureTlsOption",
    "ApiBaseUrlOption",
    "CaBundleOption",
    "ConfigPathOption",
    "DebugOption",
    "DocumentsDirOption",
    "HostOption",
    "LOG_FORMAT_CHOICES",
    "LOG_LEVEL_CHOICES",
    "LogBackupCountOption",
    "LogFileOption",
    "LogFormatOption",
    "LogLevelOption",
    "LogMaxBytesOption",
    "OfflineFlagOption",
    "PortOption",
    "RenderApiKeyOption",
    "RuntimeConfigFileOption",
    "ServiceKeywordOption",
    "TRANSPORT_CHOICES",
    "TopologyFileOption",
    "TransportOption",
    "clean_string",
    "normalize_log_format",
    "normalize_log_level",
    "normalize_transport",
]
