"""Configuration helpers for the LiveKit Render MCP server."""
