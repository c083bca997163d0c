"""Typer CLI for the LiveKit Render MCP server."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from livekit_render_mcp.cli.commands import config as config_command
from livekit_render_mcp.cli.commands import run as run_command
from livekit_render_mcp.cli.commands import selftest as selftest_command

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DISTRIBUTION_NAME = "livekit-render-mcp"

stderr_console = Console(stderr=True)
stdout_console = Console(stderr=False)

app = typer.Typer(
    help="Model Context Protocol server for managing LiveKit deployments on Render",
    rich_markup_mode="rich",
)


def _banner() -> Text:
    return Text.from_markup(
        "\n"
        "╭──────────────────────────────────────────────╮\n"
        "│[yellow]            LiveKit on Render · MCP           [/yellow]│\n"
        "│[dim]    services · logs · deploys · diagnostics   [/dim]│\n"
        "╰──────────────────────────────────────────────╯\n"
    )


def _keyboard_interrupt_banner() -> Text:
    return Text.from_markup(
        "\n"
        "╭───────────────────────────────╮\n"
        "│[red]  Keyboard interrupt received  [/red]│\n"
        "│[red]        Server stopping        [/red]│\n"
        "╰───────────────────────────────╯\n"
    )


config_command.register(app, stdout_console=stdout_console)
run_command.register(
    app,
    stderr_console=stderr_console,
    banner_factory=_banner,
    keyboard_interrupt_banner=_keyboard_interrupt_banner,
)
selftest_command.register(
    app,
    stderr_console=stderr_console,
    stdout_console=stdout_console,
    banner_factory=_banner,
)


@app.command(help="Show the installed package version.")
def version() -> None:
    """Print the version discovered from the package metadata."""
    from importlib import metadata

    try:
        resolved_version = metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pyproject = PROJECT_ROOT / "pyproject.toml"
        if not pyproject.exists():
            stdout_console.print("Version information unavailable")
            return
        import tomllib

        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        resolved_version = data.get("project", {}).get("version", "unknown")
    stdout_console.print(resolved_version)


__all__ = ["app", "stderr_console", "stdout_console"]
