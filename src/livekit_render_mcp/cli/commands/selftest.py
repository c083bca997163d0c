"""The ``selftest`` command: offline prerequisites plus a Render connectivity probe."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import typer
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from livekit_render_mcp.application.server import create_server
from livekit_render_mcp.application.startup import (
    run_offline_startup_checks,
    run_online_startup_checks,
)
from livekit_render_mcp.application.tools import EXPECTED_TOOLS
from livekit_render_mcp.cli import options as cli_options
from livekit_render_mcp.cli.helpers import (
    build_document_reader,
    build_invocation,
    initialize_logging,
    resolve_runtime_and_logging,
)
from livekit_render_mcp.cli.sync_bridge import await_sync
from livekit_render_mcp.config.constants import DEFAULT_CONFIG_FILENAME
from livekit_render_mcp.infrastructure.logging import BoundLogger
from livekit_render_mcp.integrations.render.client import RenderClient

STATUS_PASS = "pass"
STATUS_FAIL = "fail"
STATUS_SKIPPED = "skipped"


async def _probe_render(client: RenderClient, logger: BoundLogger) -> bool:
    try:
        return await run_online_startup_checks(client=client, logger=logger)
    finally:
        await client.aclose()


def _status(ok: bool) -> str:
    return STATUS_PASS if ok else STATUS_FAIL


def register(
    app: typer.Typer,
    *,
    stderr_console: Console,
    stdout_console: Console,
    banner_factory: Callable[[], Text],
) -> None:
    @app.command(
        help=(
            "Check configuration, local documents, the tool catalogue and "
            "Render connectivity without starting the server."
        )
    )
    def selftest(  # NOSONAR python:S107
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
        offline: cli_options.OfflineFlagOption = False,
    ) -> None:
        """Exit with status 1 when any executed check fails."""
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
        logger = initialize_logging(runtime_settings, logging_settings)
        stderr_console.print(banner_factory())

        reader = build_document_reader(runtime_settings)
        offline_ok = run_offline_startup_checks(
            has_api_key=bool(runtime_settings.api_key),
            reader=reader,
            logger=logger,
        )

        server = create_server(runtime_settings, logger, reader=reader)
        registered = set(server.dispatcher.registry.names())
        missing_tools = sorted(EXPECTED_TOOLS - registered)
        tools_ok = not missing_tools
        if not tools_ok:
            logger.critical("selftest.tools.missing", missing=missing_tools)

        if offline:
            online_status = STATUS_SKIPPED
            online_ok = True
            await_sync(server.render_client.aclose())
        else:
            online_ok = await_sync(_probe_render(server.render_client, logger))
            online_status = _status(online_ok)

        table = Table(title="Self test", box=box.SIMPLE_HEAVY)
        table.add_column("Check", style="cyan")
        table.add_column("Result")
        table.add_row("Offline prerequisites", _status(offline_ok))
        table.add_row("Tool catalogue", _status(tools_ok))
        table.add_row("Render connectivity", online_status)
        stdout_console.print(table)

        if not (offline_ok and tools_ok and online_ok):
            raise typer.Exit(code=1)


__all__ = ["register"]
