"""Assemble the FastMCP server from the tool registry and resource provider."""

from __future__ import annotations

from typing import Any, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import PrivateAttr

from livekit_render_mcp.config.settings import RuntimeSettings
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.infrastructure.errors import ResourceNotFoundError
from livekit_render_mcp.infrastructure.logging import BoundLogger
from livekit_render_mcp.integrations.render.client import RenderClient

from .registry import ToolDispatcher, ToolSpec
from .resources import ResourceDescriptor, ResourceProvider
from .tools import build_tool_registry

SERVER_NAME = "livekit-render-mcp-server"

INSTRUCTIONS = (
    "Render deployment manager for LiveKit. Use `list_services` or "
    "`get_livekit_status` to locate the LiveKit service, "
    "`diagnose_livekit_config` to explain key configuration failures, and "
    "`fix_livekit_keys_config` with the service ID to apply the fix."
)


class DispatchedTool(Tool):
    """FastMCP tool whose schema and execution come from a :class:`ToolSpec`."""

    _dispatcher: ToolDispatcher = PrivateAttr()

    @classmethod
    def from_spec(cls, spec: ToolSpec, dispatcher: ToolDispatcher) -> "DispatchedTool":
        tool = cls(
            name=spec.name,
            description=spec.description,
            parameters=spec.input_schema(),
        )
        tool._dispatcher = dispatcher
        return tool

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        response = await self._dispatcher.dispatch(self.name, arguments)
        if response.is_error:
            raise ToolError(response.text)
        return ToolResult(content=[TextContent(type="text", text=response.text)])


def _resolve_tls_verification(settings: RuntimeSettings, logger: BoundLogger) -> bool | str:
    if settings.allow_insecure_tls:
        logger.warning(
            "tls.verify.disabled",
            reason="allow_insecure_tls flag set",
        )
        return False
    if settings.ca_bundle_path:
        logger.info(
            "tls.verify.custom_ca_bundle",
            ca_bundle=settings.ca_bundle_path,
        )
        return str(settings.ca_bundle_path)
    return True


def _register_resource(
    server: FastMCP, provider: ResourceProvider, descriptor: ResourceDescriptor
) -> None:
    @server.resource(
        descriptor.uri,
        name=descriptor.name,
        description=descriptor.description,
        mime_type=descriptor.mime_type,
    )
    def read_document() -> str:
        try:
            return provider.read(descriptor.uri).text
        except ResourceNotFoundError as exc:
            raise ResourceError(exc.user_message) from exc


def create_server(
    settings: RuntimeSettings,
    logger: BoundLogger,
    *,
    client: Optional[RenderClient] = None,
    reader: Optional[DocumentReader] = None,
) -> FastMCP:
    """Create the FastMCP server using resolved settings.

    The Render client and document reader are attached to the returned server
    as ``render_client`` and ``document_reader`` so callers can close the
    client once the server stops.
    """

    if client is None:
        client = RenderClient(
            settings.api_key,
            base_url=settings.base_url,
            verify=_resolve_tls_verification(settings, logger),
            logger=logger,
        )
    if reader is None:
        reader = DocumentReader(
            settings.documents_root,
            topology_filename=settings.topology_file,
            runtime_config_filename=settings.runtime_config_file,
        )

    registry = build_tool_registry(
        client,
        reader,
        service_keyword=settings.service_keyword,
        logger=logger,
    )
    dispatcher = ToolDispatcher(registry, logger=logger)
    provider = ResourceProvider(reader)

    server = FastMCP(name=SERVER_NAME, instructions=INSTRUCTIONS)
    for spec in registry:
        server.add_tool(DispatchedTool.from_spec(spec, dispatcher))
    for descriptor in provider.list_resources():
        _register_resource(server, provider, descriptor)

    setattr(server, "render_client", client)
    setattr(server, "document_reader", reader)
    setattr(server, "dispatcher", dispatcher)
    logger.info(
        "server.prepared",
        tools=len(registry),
        resources=len(provider.list_resources()),
        documents_root=str(reader.root),
    )
    return server


__all__ = [
    "INSTRUCTIONS",
    "SERVER_NAME",
    "DispatchedTool",
    "_resolve_tls_verification",
    "create_server",
]
