from __future__ import annotations

from typing import Any

import pytest

from livekit_render_mcp.application.registry import (
    FieldSpec,
    ToolDispatcher,
    ToolRegistry,
    ToolResponse,
    ToolSpec,
    validate_arguments,
)
from livekit_render_mcp.infrastructure.errors import (
    ErrorCode,
    InvalidInputError,
    RemoteApiError,
    UnknownOperationError,
)


class RecordingHandler:
    def __init__(self, result: Any = "ok") -> None:
        self.result = result
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, args: dict[str, Any]) -> str:
        self.calls.append(args)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _spec(handler: RecordingHandler) -> ToolSpec:
    return ToolSpec(
        "get_service_logs",
        "Get recent logs for a specific service",
        handler,
        (
            FieldSpec("serviceId", "string", "Service", required=True),
            FieldSpec("limit", "integer", "Entries", default=100, minimum=1),
        ),
    )


def _dispatcher(*specs: ToolSpec) -> ToolDispatcher:
    registry = ToolRegistry()
    for spec in specs:
        registry.register(spec)
    return ToolDispatcher(registry)


def test_input_schema_lists_required_fields_and_defaults() -> None:
    schema = _spec(RecordingHandler()).input_schema()

    assert schema["type"] == "object"
    assert schema["required"] == ["serviceId"]
    assert schema["properties"]["limit"] == {
        "type": "integer",
        "description": "Entries",
        "default": 100,
        "minimum": 1,
    }


def test_object_field_schema_constrains_values() -> None:
    spec = FieldSpec("envVars", "object", "Vars", required=True, value_type="string")

    assert spec.json_schema()["additionalProperties"] == {"type": "string"}


def test_unsupported_field_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        FieldSpec("flag", "boolean", "A flag")


def test_registry_rejects_duplicates_and_unknown_names() -> None:
    registry = ToolRegistry()
    spec = _spec(RecordingHandler())
    registry.register(spec)

    with pytest.raises(ValueError):
        registry.register(spec)
    with pytest.raises(UnknownOperationError):
        registry.get("nope")
    assert "get_service_logs" in registry
    assert registry.names() == ["get_service_logs"]
    assert len(registry) == 1


def test_validate_arguments_applies_defaults_and_drops_unknown_keys() -> None:
    validated = validate_arguments(
        _spec(RecordingHandler()), {"serviceId": "srv-1", "extra": True}
    )

    assert validated == {"serviceId": "srv-1", "limit": 100}


def test_validate_arguments_converts_integral_floats() -> None:
    validated = validate_arguments(_spec(RecordingHandler()), {"serviceId": "s", "limit": 5.0})

    assert validated["limit"] == 5
    assert isinstance(validated["limit"], int)


@pytest.mark.parametrize(
    ("arguments", "field"),
    [
        ({}, "serviceId"),
        ({"serviceId": None}, "serviceId"),
        ({"serviceId": "   "}, "serviceId"),
        ({"serviceId": 42}, "serviceId"),
        ({"serviceId": "s", "limit": "10"}, "limit"),
        ({"serviceId": "s", "limit": True}, "limit"),
        ({"serviceId": "s", "limit": 0}, "limit"),
        ({"serviceId": "s", "limit": 2.5}, "limit"),
        (["serviceId"], "arguments"),
    ],
)
def test_validate_arguments_rejects_bad_input(arguments: Any, field: str) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        validate_arguments(_spec(RecordingHandler()), arguments)

    assert excinfo.value.field == field


def test_object_values_must_be_strings() -> None:
    spec = ToolSpec(
        "update_env_vars",
        "Update",
        RecordingHandler(),
        (FieldSpec("envVars", "object", "Vars", required=True, value_type="string"),),
    )

    with pytest.raises(InvalidInputError):
        validate_arguments(spec, {"envVars": {"PORT": 7880}})
    with pytest.raises(InvalidInputError):
        validate_arguments(spec, {"envVars": "PORT=7880"})
    assert validate_arguments(spec, {"envVars": {}}) == {"envVars": {}}


@pytest.mark.asyncio
async def test_dispatch_success_returns_handler_text() -> None:
    handler = RecordingHandler("Recent logs (0 entries):")
    dispatcher = _dispatcher(_spec(handler))

    response = await dispatcher.dispatch("get_service_logs", {"serviceId": "srv-1"})

    assert response == ToolResponse("Recent logs (0 entries):")
    assert handler.calls == [{"serviceId": "srv-1", "limit": 100}]
    assert response.to_payload() == {
        "content": [{"type": "text", "text": "Recent logs (0 entries):"}],
        "isError": False,
    }


@pytest.mark.asyncio
async def test_dispatch_missing_required_field_never_invokes_handler() -> None:
    handler = RecordingHandler()
    dispatcher = _dispatcher(_spec(handler))

    response = await dispatcher.dispatch("get_service_logs", {})

    assert response.is_error is True
    assert response.error_code == ErrorCode.INVALID_INPUT.value
    assert response.text == "Error: Invalid input for 'serviceId': field is required"
    assert handler.calls == []


@pytest.mark.asyncio
async def test_dispatch_unknown_tool() -> None:
    response = await _dispatcher().dispatch("list_everything")

    assert response.is_error
    assert response.error_code == ErrorCode.UNKNOWN_OPERATION.value
    assert response.text == "Error: Unknown tool: list_everything"


@pytest.mark.asyncio
async def test_dispatch_domain_error_keeps_remote_status() -> None:
    handler = RecordingHandler(RemoteApiError(503, "Service Unavailable", "maintenance"))
    dispatcher = _dispatcher(_spec(handler))

    response = await dispatcher.dispatch("get_service_logs", {"serviceId": "srv-1"})

    assert response.is_error
    assert response.error_code == ErrorCode.REMOTE_API_ERROR.value
    assert "503" in response.text
    assert response.to_payload()["isError"] is True


@pytest.mark.asyncio
async def test_dispatch_unexpected_exception_is_contained() -> None:
    handler = RecordingHandler(KeyError("boom"))
    dispatcher = _dispatcher(_spec(handler))

    response = await dispatcher.dispatch("get_service_logs", {"serviceId": "srv-1"})

    assert response.is_error
    assert response.error_code == ErrorCode.INTERNAL_ERROR.value
    assert response.text.startswith("Error: ")


def test_string_pattern_is_enforced_and_published() -> None:
    field_spec = FieldSpec("serviceId", "string", "Service", required=True, pattern=r"^[a-z0-9-]+$")
    spec = ToolSpec("get_service", "Get service", RecordingHandler(), (field_spec,))

    assert spec.input_schema()["properties"]["serviceId"]["pattern"] == r"^[a-z0-9-]+$"
    assert validate_arguments(spec, {"serviceId": "srv-1"}) == {"serviceId": "srv-1"}
    with pytest.raises(InvalidInputError) as excinfo:
        validate_arguments(spec, {"serviceId": "../owners"})
    assert excinfo.value.field == "serviceId"
