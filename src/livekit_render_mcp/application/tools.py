"""The fixed catalogue of tools exposed to agents."""

from __future__ import annotations

from typing import Any, Dict, Optional

from livekit_render_mcp.config.constants import DEFAULT_SERVICE_KEYWORD
from livekit_render_mcp.domain.diagnosis import DiagnosticEngine
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.domain.formatting import (
    format_deploys,
    format_env_var_update,
    format_logs,
    format_restart,
    format_service_detail,
    format_service_list,
)
from livekit_render_mcp.domain.repair import RepairWorkflow
from livekit_render_mcp.domain.status import collect_status
from livekit_render_mcp.infrastructure.logging import BoundLogger, get_logger
from livekit_render_mcp.integrations.render.client import RenderClient

from .registry import FieldSpec, ToolRegistry, ToolSpec

DEFAULT_LOG_LIMIT = 100
DEFAULT_DEPLOY_LIMIT = 10

EXPECTED_TOOLS: frozenset[str] = frozenset(
    {
        "list_services",
        "get_service",
        "get_service_logs",
        "list_deploys",
        "update_env_vars",
        "get_livekit_status",
        "restart_service",
        "diagnose_livekit_config",
        "fix_livekit_keys_config",
    }
)


SERVICE_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


def _service_id_field(description: str) -> FieldSpec:
    return FieldSpec(
        "serviceId",
        "string",
        description,
        required=True,
        pattern=SERVICE_ID_PATTERN,
    )


def build_tool_registry(
    client: RenderClient,
    reader: DocumentReader,
    *,
    service_keyword: str = DEFAULT_SERVICE_KEYWORD,
    logger: Optional[BoundLogger] = None,
) -> ToolRegistry:
    """Register every tool against ``client`` and ``reader``."""

    logger = logger or get_logger("livekit_render_mcp.tools")
    registry = ToolRegistry()
    engine = DiagnosticEngine(client, reader, service_keyword=service_keyword, logger=logger)
    workflow = RepairWorkflow(client, reader, logger=logger)

    async def list_services(_args: Dict[str, Any]) -> str:
        return format_service_list(await client.list_services())

    async def get_service(args: Dict[str, Any]) -> str:
        return format_service_detail(await client.get_service(args["serviceId"]))

    async def get_service_logs(args: Dict[str, Any]) -> str:
        return format_logs(await client.get_logs(args["serviceId"], args["limit"]))

    async def list_deploys(args: Dict[str, Any]) -> str:
        return format_deploys(await client.list_deploys(args["serviceId"], args["limit"]))

    async def update_env_vars(args: Dict[str, Any]) -> str:
        await client.update_env_vars(args["serviceId"], args["envVars"])
        return format_env_var_update(args["serviceId"], args["envVars"])

    async def get_livekit_status(_args: Dict[str, Any]) -> str:
        return await collect_status(client, reader, service_keyword=service_keyword)

    async def restart_service(args: Dict[str, Any]) -> str:
        return format_restart(await client.create_deploy(args["serviceId"]))

    async def diagnose_livekit_config(_args: Dict[str, Any]) -> str:
        report = await engine.diagnose()
        return report.render()

    async def fix_livekit_keys_config(args: Dict[str, Any]) -> str:
        result = await workflow.repair(args["serviceId"])
        return result.render()

    registry.register(
        ToolSpec(
            "list_services",
            "List all Render services in your account",
            list_services,
        )
    )
    registry.register(
        ToolSpec(
            "get_service",
            "Get details of a specific Render service",
            get_service,
            (_service_id_field("The ID of the service to get details for"),),
        )
    )
    registry.register(
        ToolSpec(
            "get_service_logs",
            "Get recent logs for a specific service",
            get_service_logs,
            (
                _service_id_field("The ID of the service to get logs for"),
                FieldSpec(
                    "limit",
                    "integer",
                    f"Number of log entries to retrieve (default: {DEFAULT_LOG_LIMIT})",
                    default=DEFAULT_LOG_LIMIT,
                    minimum=1,
                ),
            ),
        )
    )
    registry.register(
        ToolSpec(
            "list_deploys",
            "List deploy history for a service",
            list_deploys,
            (
                _service_id_field("The ID of the service to get deploy history for"),
                FieldSpec(
                    "limit",
                    "integer",
                    f"Number of deploys to retrieve (default: {DEFAULT_DEPLOY_LIMIT})",
                    default=DEFAULT_DEPLOY_LIMIT,
                    minimum=1,
                ),
            ),
        )
    )
    registry.register(
        ToolSpec(
            "update_env_vars",
            "Update environment variables for a service. The supplied set replaces "
            "the service's existing variables.",
            update_env_vars,
            (
                _service_id_field("The ID of the service to update"),
                FieldSpec(
                    "envVars",
                    "object",
                    "Object containing environment variable key-value pairs",
                    required=True,
                    value_type="string",
                ),
            ),
        )
    )
    registry.register(
        ToolSpec(
            "get_livekit_status",
            "Get comprehensive status of LiveKit deployment including service health "
            "and configuration",
            get_livekit_status,
        )
    )
    registry.register(
        ToolSpec(
            "restart_service",
            "Restart a Render service by triggering a new deploy",
            restart_service,
            (_service_id_field("The ID of the service to restart"),),
        )
    )
    registry.register(
        ToolSpec(
            "diagnose_livekit_config",
            "Diagnose LiveKit configuration issues and suggest fixes",
            diagnose_livekit_config,
        )
    )
    registry.register(
        ToolSpec(
            "fix_livekit_keys_config",
            "Fix LiveKit keys configuration by updating environment variables",
            fix_livekit_keys_config,
            (_service_id_field("The ID of the LiveKit service to fix"),),
        )
    )
    return registry


__all__ = [
    "DEFAULT_DEPLOY_LIMIT",
    "DEFAULT_LOG_LIMIT",
    "EXPECTED_TOOLS",
    "SERVICE_ID_PATTERN",
    "build_tool_registry",
]
