"""Command line interface for the LiveKit Render MCP server."""
