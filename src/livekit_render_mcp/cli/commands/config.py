"""Config inspection commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from livekit_render_mcp.cli import options as cli_options
from livekit_render_mcp.cli.helpers import build_invocation, resolve_runtime_and_logging
from livekit_render_mcp.config.constants import DEFAULT_CONFIG_FILENAME
from livekit_render_mcp.config.settings import (
    LoggingSettings,
    RuntimeSettings,
    resolve_config_file_candidates,
)
from livekit_render_mcp.domain.formatting import mask_value

NOT_SET = "<not set>"


def _format_value(value: Any) -> str:
    if value is None or value == "":
        return NOT_SET
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _effective_rows(
    runtime_settings: RuntimeSettings, logging_settings: LoggingSettings
) -> list[tuple[str, str]]:
    api_key: Optional[str] = runtime_settings.api_key
    values: list[tuple[str, Any]] = [
        ("render.api_key", mask_value(api_key) if api_key else None),
        ("render.base_url", runtime_settings.base_url),
        ("documents.root", runtime_settings.documents_root),
        ("documents.topology_file", runtime_settings.topology_file),
        ("documents.runtime_config_file", runtime_settings.runtime_config_file),
        ("diagnostics.service_keyword", runtime_settings.service_keyword),
        ("runtime.debug", runtime_settings.debug),
        ("runtime.allow_insecure_tls", runtime_settings.allow_insecure_tls),
        ("runtime.ca_bundle_path", runtime_settings.ca_bundle_path),
        ("logging.level", logging_settings.level_name),
        ("logging.format", logging_settings.format),
        ("logging.file", logging_settings.file_path),
        ("logging.max_bytes", logging_settings.max_bytes),
        ("logging.backup_count", logging_settings.backup_count),
    ]
    return [(key, _format_value(value)) for key, value in values]


def register(app: typer.Typer, *, stdout_console: Console) -> None:
    config_app = typer.Typer(help="Inspect server configuration.")
    app.add_typer(config_app, name="config")

    @config_app.command("show", help="Show configuration files and the effective settings.")
    def config_show(  # NOSONAR python:S107
        config: cli_options.ConfigPathOption = Path(DEFAULT_CONFIG_FILENAME),
        render_api_key: cli_options.RenderApiKeyOption = None,
        api_base_url: cli_options.ApiBaseUrlOption = None,
        documents_dir: cli_options.DocumentsDirOption = None,
        topology_file: cli_options.TopologyFileOption = None,
        runtime_config_file: cli_options.RuntimeConfigFileOption = None,
        service_keyword: cli_options.ServiceKeywordOption = None,
        debug: cli_options.DebugOption = None,
        allow_insecure_tls: cli_options.AllowInsecureTlsOption = None,
        ca_bundle: cli_options.CaBundleOption = None,
        log_level: cli_options.LogLevelOption = None,
        log_format: cli_options.LogFormatOption = None,
        log_file: cli_options.LogFileOption = None,
    ) -> None:
        """Display configuration files and effective values with secrets masked."""
        invocation = build_invocation(
            config_path=str(config) if config is not None else None,
            api_key=render_api_key,
            base_url=api_base_url,
            documents_dir=documents_dir,
            topology_file=topology_file,
            runtime_config_file=runtime_config_file,
            service_keyword=service_keyword,
            debug=debug,
            allow_insecure_tls=allow_insecure_tls,
            ca_bundle=ca_bundle,
            log_level=log_level,
            log_format=log_format,
            log_file=log_file,
        )
        runtime_settings, logging_settings = resolve_runtime_and_logging(invocation)

        files_table = Table(title="Configuration files", box=box.SIMPLE_HEAVY)
        files_table.add_column("File", style="cyan")
        files_table.add_column("Status")
        for file in resolve_config_file_candidates(invocation.config_path):
            files_table.add_row(str(file), "exists" if file.exists() else "missing")
        stdout_console.print(files_table)

        effective = Table(title="Effective configuration", box=box.SIMPLE_HEAVY)
        effective.add_column("Key", style="cyan")
        effective.add_column("Value")
        for key, value in _effective_rows(runtime_settings, logging_settings):
            effective.add_row(key, value)
        stdout_console.print()
        stdout_console.print(effective)

        for message in runtime_settings.warnings:
            stdout_console.print(f"[yellow]Warning:[/yellow] {message}")


__all__ = ["register"]
