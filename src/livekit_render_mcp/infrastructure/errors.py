"""Domain error types shared by the Render client, documents and tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    AUTH_MISSING = "AUTH_MISSING"
    REMOTE_API_ERROR = "REMOTE_API_ERROR"
    DOCUMENT_PARSE_ERROR = "DOCUMENT_PARSE_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
    INVALID_INPUT = "INVALID_INPUT"
    CONFIG_MISSING = "CONFIG_MISSING"
    NO_KEYS_CONFIGURED = "NO_KEYS_CONFIGURED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ErrorContext:
    code: str
    summary: str
    details: Dict[str, Any] = field(default_factory=dict)


class LiveKitRenderError(Exception):
    """Base class for errors surfaced to agents as tool-level failures."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        summary: str,
        *,
        user_message: Optional[str] = None,
        **details: Any,
    ) -> None:
        super().__init__(summary)
        self.context = ErrorContext(
            code=self.code.value,
            summary=summary,
            details={key: value for key, value in details.items() if value is not None},
        )
        self.user_message = user_message or summary

    def log_fields(self) -> Dict[str, Any]:
        return {"code": self.context.code, "error": self.context.summary, **self.context.details}


class AuthenticationMissingError(LiveKitRenderError):
    code = ErrorCode.AUTH_MISSING

    def __init__(self) -> None:
        super().__init__(
            "RENDER_API_KEY environment variable is required",
            user_message=(
                "RENDER_API_KEY environment variable is required. "
                "Set it (or pass --render-api-key) and restart the server."
            ),
        )


class RemoteApiError(LiveKitRenderError):
    code = ErrorCode.REMOTE_API_ERROR

    def __init__(self, status_code: int, status_text: str, body_text: str, *, endpoint: Optional[str] = None) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body_text = body_text
        super().__init__(
            f"Render API error: {status_code} {status_text} - {body_text}",
            status_code=status_code,
            endpoint=endpoint,
        )


class DocumentParseError(LiveKitRenderError):
    code = ErrorCode.DOCUMENT_PARSE_ERROR

    def __init__(self, path: str, cause: Exception | str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error parsing {path}: {cause}", path=path)


class ResourceNotFoundError(LiveKitRenderError):
    code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Resource not found: {uri}", uri=uri)


class UnknownOperationError(LiveKitRenderError):
    code = ErrorCode.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}", operation=name)


class InvalidInputError(LiveKitRenderError):
    code = ErrorCode.INVALID_INPUT

    def __init__(self, field_name: str, reason: str) -> None:
        self.field = field_name
        self.reason = reason
        super().__init__(f"Invalid input for '{field_name}': {reason}", field=field_name)


class ConfigMissingError(LiveKitRenderError):
    code = ErrorCode.CONFIG_MISSING

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"{path} file not found. Make sure you are running this from the correct directory.",
            path=path,
        )


class NoKeysConfiguredError(LiveKitRenderError):
    code = ErrorCode.NO_KEYS_CONFIGURED

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"No keys found in {path}. Please add API keys to your {path} file.",
            path=path,
        )


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "LiveKitRenderError",
    "AuthenticationMissingError",
    "RemoteApiError",
    "DocumentParseError",
    "ResourceNotFoundError",
    "UnknownOperationError",
    "InvalidInputError",
    "ConfigMissingError",
    "NoKeysConfiguredError",
]
