"""Typer command modules registered by :mod:`livekit_render_mcp.cli.app`."""
