"""Readers for the local ``render.yaml`` and LiveKit ``config.yaml`` documents."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from livekit_render_mcp.config.constants import (
    DEFAULT_RUNTIME_CONFIG_FILENAME,
    DEFAULT_TOPOLOGY_FILENAME,
)
from livekit_render_mcp.infrastructure.errors import DocumentParseError


class DocumentKind(str, Enum):
    TOPOLOGY = "topology"
    RUNTIME_CONFIG = "runtime_config"


class EnvVarDeclaration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    value: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class ServiceDeclaration(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    type: Optional[str] = None
    env_vars: list[EnvVarDeclaration] = Field(default_factory=list, alias="envVars")

    @field_validator("env_vars", mode="before")
    @classmethod
    def _drop_non_mappings(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict) and "key" in item]


class TopologyDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    services: list[ServiceDeclaration] = Field(default_factory=list)

    @field_validator("services", mode="before")
    @classmethod
    def _default_services(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class RuntimeConfig(BaseModel):
    """The subset of the LiveKit server configuration this server cares about.

    ``keys`` is ``None`` when the section is absent and an empty dict when it
    is present but empty; both block the repair workflow.
    """

    model_config = ConfigDict(extra="allow")

    port: Optional[int] = None
    keys: Optional[dict[str, str]] = None

    @field_validator("port", mode="before")
    @classmethod
    def _lenient_port(cls, value: Any) -> Optional[int]:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("keys", mode="before")
    @classmethod
    def _stringify_keys(cls, value: Any) -> Optional[dict[str, str]]:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValueError("keys must be a mapping of key id to secret")
        return {str(key): "" if secret is None else str(secret) for key, secret in value.items()}

    @property
    def key_count(self) -> int:
        return len(self.keys or {})


class DocumentReader:
    """Load the two local YAML documents on demand.

    Absent files yield ``None``; present but malformed files raise
    :class:`DocumentParseError`. Nothing is cached between calls.
    """

    def __init__(
        self,
        root: str | Path = ".",
        *,
        topology_filename: str = DEFAULT_TOPOLOGY_FILENAME,
        runtime_config_filename: str = DEFAULT_RUNTIME_CONFIG_FILENAME,
    ) -> None:
        self.root = Path(root)
        self._filenames = {
            DocumentKind.TOPOLOGY: topology_filename,
            DocumentKind.RUNTIME_CONFIG: runtime_config_filename,
        }

    def filename(self, kind: DocumentKind) -> str:
        return self._filenames[kind]

    def path_for(self, kind: DocumentKind) -> Path:
        return self.root / self._filenames[kind]

    def exists(self, kind: DocumentKind) -> bool:
        return self.path_for(kind).is_file()

    def read_text(self, kind: DocumentKind) -> Optional[str]:
        path = self.path_for(kind)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _load_mapping(self, kind: DocumentKind) -> Optional[dict[str, Any]]:
        text = self.read_text(kind)
        if text is None:
            return None
        name = self.filename(kind)
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DocumentParseError(name, exc) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DocumentParseError(name, "top-level YAML value must be a mapping")
        return data

    def read_topology(self) -> Optional[TopologyDocument]:
        data = self._load_mapping(DocumentKind.TOPOLOGY)
        if data is None:
            return None
        try:
            return TopologyDocument.model_validate(data)
        except ValidationError as exc:
            raise DocumentParseError(self.filename(DocumentKind.TOPOLOGY), exc) from exc

    def read_runtime_config(self) -> Optional[RuntimeConfig]:
        data = self._load_mapping(DocumentKind.RUNTIME_CONFIG)
        if data is None:
            return None
        try:
            return RuntimeConfig.model_validate(data)
        except ValidationError as exc:
            raise DocumentParseError(self.filename(DocumentKind.RUNTIME_CONFIG), exc) from exc


__all__ = [
    "DocumentKind",
    "DocumentReader",
    "EnvVarDeclaration",
    "RuntimeConfig",
    "ServiceDeclaration",
    "TopologyDocument",
]
