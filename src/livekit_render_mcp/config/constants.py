"""Defaults shared by settings resolution, the Render client and the CLI."""

from __future__ import annotations

TRUTHY_STRINGS = {"1", "true", "yes", "on"}
FALSY_STRINGS = {"0", "false", "no", "off"}

CONFIG_BASENAME = "server"
DEFAULT_CONFIG_FILENAME = f"{CONFIG_BASENAME}.toml"
LOCAL_CONFIG_FILENAME = f"{CONFIG_BASENAME}.local.toml"

DEFAULT_RENDER_API_BASE_URL = "https://api.render.com/v1"

# Local documents, resolved relative to the configured documents root.
DEFAULT_TOPOLOGY_FILENAME = "render.yaml"
DEFAULT_RUNTIME_CONFIG_FILENAME = "config.yaml"

# Case-insensitive substring identifying LiveKit services by name.
DEFAULT_SERVICE_KEYWORD = "livekit"


__all__ = [
    "TRUTHY_STRINGS",
    "FALSY_STRINGS",
    "CONFIG_BASENAME",
    "DEFAULT_CONFIG_FILENAME",
    "LOCAL_CONFIG_FILENAME",
    "DEFAULT_RENDER_API_BASE_URL",
    "DEFAULT_TOPOLOGY_FILENAME",
    "DEFAULT_RUNTIME_CONFIG_FILENAME",
    "DEFAULT_SERVICE_KEYWORD",
]
