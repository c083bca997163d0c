"""The ``run`` command: start the MCP server."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from livekit_render_mcp.application.server import create_server
from livekit_render_mcp.application.startup import run_offline_startup_checks
from livekit_render_mcp.cli import options as cli_options
from livekit_render_mcp.cli.helpers import (
    build_document_reader,
    build_invocation,
    initialize_logging,
    resolve_runtime_and_logging,
)
from livekit_render_mcp.config.constants import DEFAULT_CONFIG_FILENAME

DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 8000


def register(
    app: typer.Typer,
    *,
    stderr_console: Console,
    banner_factory: Callable[[], Text],
    keyboard_interrupt_banner: Callable[[], Text],
) -> None:
    @app.command(help="Start the MCP server (default when no command is given).")
    def run(  # NOSONAR python:S107
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
        log_max_bytes: cli_options.LogMaxBytesOption = None,
        log_backup_count: cli_options.LogBackupCountOption = None,
        transport: cli_options.TransportOption = "stdio",
        host: cli_options.HostOption = DEFAULT_HTTP_HOST,
        port: cli_options.PortOption = DEFAULT_HTTP_PORT,
    ) -> None:
        """Resolve settings, report on prerequisites and serve until interrupted."""
        selected_transport = cli_options.normalize_transport(transport)
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
            log_max_bytes=log_max_bytes,
            log_backup_count=log_backup_count,
        )
        runtime_settings, logging_settings = resolve_runtime_and_logging(invocation)
        logger = initialize_logging(runtime_settings, logging_settings)

        reader = build_document_reader(runtime_settings)
        run_offline_startup_checks(
            has_api_key=bool(runtime_settings.api_key),
            reader=reader,
            logger=logger,
        )

        server = create_server(runtime_settings, logger, reader=reader)
        stderr_console.print(banner_factory())
        logger.info("server.starting", transport=selected_transport)
        try:
            if selected_transport == "http":
                server.run(transport="http", host=host, port=port)
            else:
                server.run(transport="stdio")
        except KeyboardInterrupt:
            stderr_console.print(keyboard_interrupt_banner())
            logger.info("server.stopped", reason="keyboard_interrupt")


__all__ = ["DEFAULT_HTTP_HOST", "DEFAULT_HTTP_PORT", "register"]
