"""Declarative tool registry and the dispatcher that fronts it.

Each tool declares its inputs once as :class:`FieldSpec` entries. The
dispatcher validates incoming arguments against those declarations with a
single generic validator, fills in defaults, invokes the handler and turns
every failure into an error :class:`ToolResponse`. Nothing raised by a
handler escapes :meth:`ToolDispatcher.dispatch`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from livekit_render_mcp.infrastructure.errors import (
    ErrorCode,
    InvalidInputError,
    LiveKitRenderError,
    UnknownOperationError,
)
from livekit_render_mcp.infrastructure.logging import (
    BoundLogger,
    get_logger,
    log_tool_event,
    request_context,
)

FIELD_TYPES = frozenset({"string", "integer", "object"})

ToolHandler = Callable[[Dict[str, Any]], Awaitable[str]]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str
    description: str
    required: bool = False
    default: Any = None
    minimum: Optional[int] = None
    value_type: Optional[str] = None
    pattern: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type '{self.type}' for '{self.name}'")

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.value_type is not None:
            schema["additionalProperties"] = {"type": self.value_type}
        if self.pattern is not None:
            schema["pattern"] = self.pattern
        return schema


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    handler: ToolHandler
    fields: tuple[FieldSpec, ...] = ()

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {spec.name: spec.json_schema() for spec in self.fields},
            "required": [spec.name for spec in self.fields if spec.required],
        }


@dataclass(frozen=True)
class ToolResponse:
    text: str
    is_error: bool = False
    error_code: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


@dataclass
class ToolRegistry:
    _tools: Dict[str, ToolSpec] = field(default_factory=dict)

    def register(self, spec: ToolSpec) -> ToolSpec:
        if spec.name in self._tools:
            raise ValueError(f"Tool '{spec.name}' is already registered")
        self._tools[spec.name] = spec
        return spec

    def get(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def _coerce_field(spec: FieldSpec, value: Any) -> Any:
    if spec.type == "string":
        if not isinstance(value, str):
            raise InvalidInputError(spec.name, "expected a string")
        if spec.required and not value.strip():
            raise InvalidInputError(spec.name, "must be a non-empty string")
        if spec.pattern is not None and re.fullmatch(spec.pattern, value) is None:
            raise InvalidInputError(spec.name, f"must match {spec.pattern}")
        return value

    if spec.type == "integer":
        if isinstance(value, bool):
            raise InvalidInputError(spec.name, "expected an integer")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise InvalidInputError(spec.name, "expected an integer")
        if spec.minimum is not None and value < spec.minimum:
            raise InvalidInputError(spec.name, f"must be >= {spec.minimum}")
        return value

    if not isinstance(value, Mapping):
        raise InvalidInputError(spec.name, "expected an object")
    if spec.value_type == "string":
        for key, item in value.items():
            if not isinstance(key, str) or not isinstance(item, str):
                raise InvalidInputError(spec.name, f"value for '{key}' must be a string")
    return dict(value)


def validate_arguments(spec: ToolSpec, arguments: Any) -> Dict[str, Any]:
    """Return validated arguments with defaults applied; unknown keys are dropped."""

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise InvalidInputError("arguments", "expected an object")

    validated: Dict[str, Any] = {}
    for field_spec in spec.fields:
        if field_spec.name not in arguments or arguments[field_spec.name] is None:
            if field_spec.required:
                raise InvalidInputError(field_spec.name, "field is required")
            if field_spec.default is not None:
                validated[field_spec.name] = field_spec.default
            continue
        validated[field_spec.name] = _coerce_field(field_spec, arguments[field_spec.name])
    return validated


class ToolDispatcher:
    def __init__(self, registry: ToolRegistry, *, logger: Optional[BoundLogger] = None) -> None:
        self.registry = registry
        self._logger = logger or get_logger("livekit_render_mcp.dispatch")

    async def dispatch(
        self,
        name: str,
        arguments: Any = None,
        *,
        request_id: Optional[str] = None,
    ) -> ToolResponse:
        """Run one tool call with its request id bound to every log event."""

        with request_context(request_id, tool=name):
            return await self._dispatch(name, arguments)

    async def _dispatch(self, name: str, arguments: Any) -> ToolResponse:
        try:
            spec = self.registry.get(name)
            validated = validate_arguments(spec, arguments)
        except LiveKitRenderError as exc:
            log_tool_event(
                self._logger,
                "rejected",
                tool=name,
                level=logging.WARNING,
                **exc.log_fields(),
            )
            return ToolResponse(f"Error: {exc.user_message}", is_error=True, error_code=exc.context.code)

        log_tool_event(self._logger, "start", tool=name)
        try:
            text = await spec.handler(validated)
        except LiveKitRenderError as exc:
            log_tool_event(
                self._logger,
                "failure",
                tool=name,
                level=logging.WARNING,
                **exc.log_fields(),
            )
            return ToolResponse(f"Error: {exc.user_message}", is_error=True, error_code=exc.context.code)
        except Exception as exc:
            self._logger.error(
                "tool.unhandled_error",
                tool=name,
                error=str(exc),
                exc_info=True,
            )
            return ToolResponse(
                f"Error: {exc}",
                is_error=True,
                error_code=ErrorCode.INTERNAL_ERROR.value,
            )

        log_tool_event(self._logger, "success", tool=name)
        return ToolResponse(text)


__all__ = [
    "FIELD_TYPES",
    "FieldSpec",
    "ToolDispatcher",
    "ToolHandler",
    "ToolRegistry",
    "ToolResponse",
    "ToolSpec",
    "validate_arguments",
]
