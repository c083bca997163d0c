"""Rewrite a service's LiveKit key configuration from the local config.yaml."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from livekit_render_mcp.domain.documents import DocumentKind, DocumentReader
from livekit_render_mcp.infrastructure.errors import ConfigMissingError, NoKeysConfiguredError
from livekit_render_mcp.infrastructure.logging import BoundLogger, get_logger, log_event
from livekit_render_mcp.integrations.render.client import RenderClient

LIVEKIT_KEYS_ENV_VAR = "LIVEKIT_KEYS"
PORT_ENV_VAR = "PORT"
PINNED_PORT = "7880"


def compose_keys_value(keys: Mapping[str, str]) -> str:
    """Encode key/secret pairs the way ``LIVEKIT_KEYS`` expects them."""

    return ", ".join(f"{key}: {secret}" for key, secret in keys.items())


def build_env_vars(keys: Mapping[str, str]) -> dict[str, str]:
    return {
        LIVEKIT_KEYS_ENV_VAR: compose_keys_value(keys),
        PORT_ENV_VAR: PINNED_PORT,
    }


@dataclass(frozen=True)
class RepairResult:
    service_id: str
    key_count: int
    env_vars: dict[str, str]
    source: str = "config.yaml"

    def render(self) -> str:
        return (
            "🔧 Fixing LiveKit Keys Configuration\n\n"
            f"✅ Found {self.key_count} key pairs in {self.source}\n"
            f"🔑 Formatted keys for {LIVEKIT_KEYS_ENV_VAR} environment variable\n"
            "📝 Updating environment variables...\n"
            f"✅ Environment variables updated successfully for service {self.service_id}!\n\n"
            "🚀 **Next Steps:**\n"
            "1. The service should automatically redeploy with the new environment variables\n"
            "2. Monitor the deployment logs to ensure LiveKit starts successfully\n"
            "3. Use 'get_service_logs' to check for any remaining errors\n\n"
            "💡 **What was fixed:**\n"
            f"• Set {LIVEKIT_KEYS_ENV_VAR} environment variable with proper format\n"
            f"• Ensured {PORT_ENV_VAR} is correctly set to {PINNED_PORT}\n"
            f"• LiveKit will now use these keys instead of requiring {self.source}\n\n"
            "⚠️  The update replaces the service's environment; variables other than "
            f"{LIVEKIT_KEYS_ENV_VAR} and {PORT_ENV_VAR} are no longer set.\n"
        )


class RepairWorkflow:
    def __init__(
        self,
        client: RenderClient,
        reader: DocumentReader,
        *,
        logger: Optional[BoundLogger] = None,
    ) -> None:
        self._client = client
        self._reader = reader
        self._logger = logger or get_logger("livekit_render_mcp.repair")

    def load_keys(self) -> dict[str, str]:
        name = self._reader.filename(DocumentKind.RUNTIME_CONFIG)
        config = self._reader.read_runtime_config()
        if config is None:
            raise ConfigMissingError(name)
        if not config.keys:
            raise NoKeysConfiguredError(name)
        return dict(config.keys)

    async def repair(self, service_id: str) -> RepairResult:
        keys = self.load_keys()
        env_vars = build_env_vars(keys)
        log_event(
            self._logger,
            "repair.submit",
            service_id=service_id,
            key_count=len(keys),
            variables=sorted(env_vars),
        )
        await self._client.update_env_vars(service_id, env_vars)
        return RepairResult(
            service_id=service_id,
            key_count=len(keys),
            env_vars=env_vars,
            source=self._reader.filename(DocumentKind.RUNTIME_CONFIG),
        )


__all__ = [
    "LIVEKIT_KEYS_ENV_VAR",
    "PINNED_PORT",
    "PORT_ENV_VAR",
    "RepairResult",
    "RepairWorkflow",
    "build_env_vars",
    "compose_keys_value",
]
