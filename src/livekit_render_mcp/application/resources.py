"""Read-only MCP resources backed by the local YAML documents."""

from __future__ import annotations

from dataclasses import dataclass

from livekit_render_mcp.domain.documents import DocumentKind, DocumentReader
from livekit_render_mcp.infrastructure.errors import ResourceNotFoundError

YAML_MIME_TYPE = "application/x-yaml"


@dataclass(frozen=True)
class ResourceDescriptor:
    uri: str
    name: str
    description: str
    kind: DocumentKind
    mime_type: str = YAML_MIME_TYPE


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    text: str
    mime_type: str


RESOURCES: tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        uri="file://render.yaml",
        name="Render Configuration",
        description="Current Render deployment configuration",
        kind=DocumentKind.TOPOLOGY,
    ),
    ResourceDescriptor(
        uri="file://config.yaml",
        name="LiveKit Configuration",
        description="Current LiveKit server configuration",
        kind=DocumentKind.RUNTIME_CONFIG,
    ),
)


class ResourceProvider:
    """Serve the two fixed documents by URI; the URIs never change even when
    the reader points at differently named files."""

    def __init__(self, reader: DocumentReader) -> None:
        self._reader = reader
        self._by_uri = {descriptor.uri: descriptor for descriptor in RESOURCES}

    def list_resources(self) -> list[ResourceDescriptor]:
        return list(RESOURCES)

    def read(self, uri: str) -> ResourceContent:
        descriptor = self._by_uri.get(uri)
        if descriptor is None:
            raise ResourceNotFoundError(uri)
        text = self._reader.read_text(descriptor.kind)
        if text is None:
            raise ResourceNotFoundError(uri)
        return ResourceContent(uri=uri, text=text, mime_type=descriptor.mime_type)


__all__ = [
    "RESOURCES",
    "YAML_MIME_TYPE",
    "ResourceContent",
    "ResourceDescriptor",
    "ResourceProvider",
]
