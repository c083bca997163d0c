"""Console script entry point; ``run`` is implied when no command is given."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from typer.main import get_command

from livekit_render_mcp.cli.app import app

_CLI_PROG_NAME = "livekit-render-mcp"


def main(argv: Sequence[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    command = get_command(app)
    if not args:
        command.main(args=["run"], prog_name=_CLI_PROG_NAME)
        return

    if args[0] in {"-h", "--help"}:
        command.main(args=args, prog_name=_CLI_PROG_NAME)
        return

    if args[0].startswith("-"):
        command.main(args=["run", *args], prog_name=_CLI_PROG_NAME)
    else:
        command.main(args=args, prog_name=_CLI_PROG_NAME)


__all__ = ["main"]
