"""Dynaconf-backed configuration helpers for the LiveKit Render MCP server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from dynaconf import Dynaconf

from .constants import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_RENDER_API_BASE_URL,
    DEFAULT_RUNTIME_CONFIG_FILENAME,
    DEFAULT_SERVICE_KEYWORD,
    DEFAULT_TOPOLOGY_FILENAME,
    FALSY_STRINGS,
    TRUTHY_STRINGS,
)

LOG_FORMAT_TEXT = "text"
LOG_FORMAT_JSON = "json"
DEFAULT_LOG_FORMAT = LOG_FORMAT_TEXT
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 10_000_000
DEFAULT_BACKUP_COUNT = 5

ENVVAR_PREFIX = "LIVEKIT_RENDER"

# Dynaconf keys used throughout the module. Using constants keeps environment
# and configuration lookups consistent.
RENDER_API_KEY_KEY = "render.api_key"
RENDER_BASE_URL_KEY = "render.base_url"

DOCUMENTS_ROOT_KEY = "documents.root"
DOCUMENTS_TOPOLOGY_FILE_KEY = "documents.topology_file"
DOCUMENTS_RUNTIME_CONFIG_FILE_KEY = "documents.runtime_config_file"

DIAGNOSTICS_SERVICE_KEYWORD_KEY = "diagnostics.service_keyword"

RUNTIME_DEBUG_KEY = "runtime.debug"
RUNTIME_ALLOW_INSECURE_TLS_KEY = "runtime.allow_insecure_tls"
RUNTIME_CA_BUNDLE_PATH_KEY = "runtime.ca_bundle_path"

LOGGING_LEVEL_KEY = "logging.level"
LOGGING_FORMAT_KEY = "logging.format"
LOGGING_FILE_KEY = "logging.file"
LOGGING_MAX_BYTES_KEY = "logging.max_bytes"
LOGGING_BACKUP_COUNT_KEY = "logging.backup_count"

_ENVIRONMENT_MAP = {
    "RENDER_API_KEY": RENDER_API_KEY_KEY,
    f"{ENVVAR_PREFIX}_API_BASE_URL": RENDER_BASE_URL_KEY,
    f"{ENVVAR_PREFIX}_DOCUMENTS_DIR": DOCUMENTS_ROOT_KEY,
    f"{ENVVAR_PREFIX}_TOPOLOGY_FILE": DOCUMENTS_TOPOLOGY_FILE_KEY,
    f"{ENVVAR_PREFIX}_RUNTIME_CONFIG_FILE": DOCUMENTS_RUNTIME_CONFIG_FILE_KEY,
    f"{ENVVAR_PREFIX}_SERVICE_KEYWORD": DIAGNOSTICS_SERVICE_KEYWORD_KEY,
    f"{ENVVAR_PREFIX}_DEBUG": RUNTIME_DEBUG_KEY,
    f"{ENVVAR_PREFIX}_ALLOW_INSECURE_TLS": RUNTIME_ALLOW_INSECURE_TLS_KEY,
    f"{ENVVAR_PREFIX}_CA_BUNDLE": RUNTIME_CA_BUNDLE_PATH_KEY,
    f"{ENVVAR_PREFIX}_LOG_LEVEL": LOGGING_LEVEL_KEY,
    f"{ENVVAR_PREFIX}_LOG_FORMAT": LOGGING_FORMAT_KEY,
    f"{ENVVAR_PREFIX}_LOG_FILE": LOGGING_FILE_KEY,
    f"{ENVVAR_PREFIX}_LOG_MAX_BYTES": LOGGING_MAX_BYTES_KEY,
    f"{ENVVAR_PREFIX}_LOG_BACKUP_COUNT": LOGGING_BACKUP_COUNT_KEY,
}


@dataclass(frozen=True)
class DocumentInputs:
    root: Optional[str] = None
    topology_file: Optional[str] = None
    runtime_config_file: Optional[str] = None


@dataclass(frozen=True)
class RuntimeInputs:
    base_url: Optional[str] = None
    service_keyword: Optional[str] = None
    debug: Optional[bool] = None


@dataclass(frozen=True)
class TlsInputs:
    allow_insecure: Optional[bool] = None
    ca_bundle_path: Optional[str] = None


@dataclass(frozen=True)
class LoggingInputs:
    level: Optional[str] = None
    format: Optional[str] = None
    file_path: Optional[str] = None
    max_bytes: Optional[int] = None
    backup_count: Optional[int] = None

    def as_kwargs(self) -> Dict[str, Optional[Any]]:
        return {
            "level_override": self.level,
            "format_override": self.format,
            "file_override": self.file_path,
            "max_bytes_override": self.max_bytes,
            "backup_count_override": self.backup_count,
        }


@dataclass(frozen=True)
class LoggingSettings:
    level: int
    format: str
    file_path: Optional[str]
    max_bytes: int
    backup_count: int

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class RuntimeSettings:
    """Resolved, immutable runtime configuration.

    ``api_key`` may be ``None``: a missing credential is reported lazily by
    the Render client on the first remote call rather than at startup.
    """

    api_key: Optional[str]
    base_url: str = DEFAULT_RENDER_API_BASE_URL
    documents_root: str = "."
    topology_file: str = DEFAULT_TOPOLOGY_FILENAME
    runtime_config_file: str = DEFAULT_RUNTIME_CONFIG_FILENAME
    service_keyword: str = DEFAULT_SERVICE_KEYWORD
    debug: bool = False
    allow_insecure_tls: bool = False
    ca_bundle_path: Optional[str] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def topology_path(self) -> Path:
        return Path(self.documents_root) / self.topology_file

    @property
    def runtime_config_path(self) -> Path:
        return Path(self.documents_root) / self.runtime_config_file


def resolve_config_file_candidates(config_path: Optional[str]) -> list[Path]:
    """Return the base config file and its ``.local`` sibling, in load order."""

    config_file = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILENAME)
    local_file = config_file.with_name(f"{config_file.stem}.local{config_file.suffix}")
    return [config_file, local_file]


def _default_settings_files(config_path: Optional[str]) -> Tuple[Sequence[str], Optional[str]]:
    candidates = resolve_config_file_candidates(config_path)
    files = [str(path) for path in candidates if path.exists()]
    return files or [str(candidates[0])], None


def _coerce_str(value: Optional[Any]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        candidate = value.strip()
        return candidate or None
    return str(value)


def _coerce_bool(value: Optional[Any]) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return None
        if normalized in TRUTHY_STRINGS:
            return True
        if normalized in FALSY_STRINGS:
            return False
        return None
    if isinstance(value, (int, float)):
        return bool(value)
    return None


def _coerce_int(value: Optional[Any]) -> Optional[int]:
    if value is None:
        return None
    try:
        coerced = int(value)
    except (TypeError, ValueError):
        return None
    return coerced


def _apply_environment_overrides(settings: Dynaconf) -> None:
    for env_var, key in _ENVIRONMENT_MAP.items():
        raw = os.getenv(env_var)
        if raw is None:
            continue
        if isinstance(raw, str) and not raw.strip():
            continue
        settings.set(key, raw)


def _apply_api_key(settings: Dynaconf, api_key_input: Optional[str]) -> None:
    if api_key_input:
        settings.set(RENDER_API_KEY_KEY, api_key_input)


def _apply_document_inputs(
    settings: Dynaconf, document_inputs: Optional[DocumentInputs]
) -> None:
    if document_inputs is None:
        return

    if document_inputs.root is not None:
        settings.set(DOCUMENTS_ROOT_KEY, document_inputs.root.strip())
    if document_inputs.topology_file is not None:
        settings.set(DOCUMENTS_TOPOLOGY_FILE_KEY, document_inputs.topology_file.strip())
    if document_inputs.runtime_config_file is not None:
        settings.set(
            DOCUMENTS_RUNTIME_CONFIG_FILE_KEY,
            document_inputs.runtime_config_file.strip(),
        )


def _apply_runtime_inputs(
    settings: Dynaconf, runtime_inputs: Optional[RuntimeInputs]
) -> None:
    if runtime_inputs is None:
        return

    if runtime_inputs.base_url is not None:
        settings.set(RENDER_BASE_URL_KEY, runtime_inputs.base_url.strip())
    if runtime_inputs.service_keyword is not None:
        settings.set(DIAGNOSTICS_SERVICE_KEYWORD_KEY, runtime_inputs.service_keyword.strip())
    if runtime_inputs.debug is not None:
        settings.set(RUNTIME_DEBUG_KEY, runtime_inputs.debug)


def _apply_tls_inputs(settings: Dynaconf, tls_inputs: Optional[TlsInputs]) -> None:
    if tls_inputs is None:
        return

    if tls_inputs.allow_insecure is not None:
        settings.set(RUNTIME_ALLOW_INSECURE_TLS_KEY, tls_inputs.allow_insecure)
    if tls_inputs.ca_bundle_path is not None:
        settings.set(RUNTIME_CA_BUNDLE_PATH_KEY, tls_inputs.ca_bundle_path.strip())


def _apply_logging_inputs(
    settings: Dynaconf, logging_inputs: Optional[LoggingInputs]
) -> None:
    if logging_inputs is None:
        return

    kwargs = logging_inputs.as_kwargs()
    level_override = kwargs["level_override"]
    if level_override is not None:
        settings.set(LOGGING_LEVEL_KEY, level_override.strip())

    format_override = kwargs["format_override"]
    if format_override is not None:
        settings.set(LOGGING_FORMAT_KEY, format_override.strip())

    file_override = kwargs["file_override"]
    if file_override is not None:
        settings.set(LOGGING_FILE_KEY, file_override.strip())

    max_bytes_override = kwargs["max_bytes_override"]
    if max_bytes_override is not None:
        settings.set(LOGGING_MAX_BYTES_KEY, max_bytes_override)

    backup_count_override = kwargs["backup_count_override"]
    if backup_count_override is not None:
        settings.set(LOGGING_BACKUP_COUNT_KEY, backup_count_override)


def _build_dynaconf(config_path: Optional[str]) -> Dynaconf:
    files, root_path = _default_settings_files(config_path)
    settings = Dynaconf(
        settings_files=list(files),
        envvar_prefix=ENVVAR_PREFIX,
        environments=False,
        load_dotenv=True,
        merge_enabled=True,
        root_path=root_path,
    )
    _apply_environment_overrides(settings)
    return settings


def load_settings(config_path: Optional[str] = None) -> Dynaconf:
    """Create a Dynaconf instance configured for the supplied path."""

    return _build_dynaconf(config_path)


def apply_cli_overrides(
    settings: Dynaconf,
    *,
    api_key_input: Optional[str] = None,
    document_inputs: Optional[DocumentInputs] = None,
    runtime_inputs: Optional[RuntimeInputs] = None,
    tls_inputs: Optional[TlsInputs] = None,
    logging_inputs: Optional[LoggingInputs] = None,
) -> None:
    """Apply CLI overrides to the provided settings instance."""

    _apply_api_key(settings, api_key_input)
    _apply_document_inputs(settings, document_inputs)
    _apply_runtime_inputs(settings, runtime_inputs)
    _apply_tls_inputs(settings, tls_inputs)
    _apply_logging_inputs(settings, logging_inputs)


def _resolve_bool(settings: Dynaconf, key: str, *, default: bool = False) -> bool:
    coerced = _coerce_bool(settings.get(key))
    if coerced is None:
        return default
    return coerced


def _resolve_service_keyword(settings: Dynaconf, warnings: list[str]) -> str:
    raw = settings.get(DIAGNOSTICS_SERVICE_KEYWORD_KEY)
    if raw is None:
        return DEFAULT_SERVICE_KEYWORD
    keyword = _coerce_str(raw)
    if not keyword:
        warnings.append(
            "Empty service_keyword override; falling back to "
            f"'{DEFAULT_SERVICE_KEYWORD}'"
        )
        return DEFAULT_SERVICE_KEYWORD
    return keyword


def runtime_from_settings(settings: Dynaconf) -> RuntimeSettings:
    """Extract runtime settings and validation messages from Dynaconf."""

    warnings: list[str] = []

    api_key = _coerce_str(settings.get(RENDER_API_KEY_KEY))
    base_url = (
        _coerce_str(settings.get(RENDER_BASE_URL_KEY)) or DEFAULT_RENDER_API_BASE_URL
    ).rstrip("/")

    documents_root = _coerce_str(settings.get(DOCUMENTS_ROOT_KEY)) or "."
    topology_file = (
        _coerce_str(settings.get(DOCUMENTS_TOPOLOGY_FILE_KEY)) or DEFAULT_TOPOLOGY_FILENAME
    )
    runtime_config_file = (
        _coerce_str(settings.get(DOCUMENTS_RUNTIME_CONFIG_FILE_KEY))
        or DEFAULT_RUNTIME_CONFIG_FILENAME
    )

    service_keyword = _resolve_service_keyword(settings, warnings)

    debug_enabled = _resolve_bool(settings, RUNTIME_DEBUG_KEY, default=False)
    allow_insecure_tls = _resolve_bool(
        settings, RUNTIME_ALLOW_INSECURE_TLS_KEY, default=False
    )
    ca_bundle_path = _coerce_str(settings.get(RUNTIME_CA_BUNDLE_PATH_KEY))

    if allow_insecure_tls and ca_bundle_path:
        warnings.append(
            "allow_insecure_tls takes precedence over ca_bundle_path; "
            "HTTPS verification will be disabled"
        )
        ca_bundle_path = None

    if not api_key:
        warnings.append(
            "RENDER_API_KEY is not set; Render API tools will fail until it is provided"
        )

    return RuntimeSettings(
        api_key=api_key,
        base_url=base_url,
        documents_root=documents_root,
        topology_file=topology_file,
        runtime_config_file=runtime_config_file,
        service_keyword=service_keyword,
        debug=debug_enabled,
        allow_insecure_tls=allow_insecure_tls,
        ca_bundle_path=ca_bundle_path,
        warnings=tuple(warnings),
    )


def logging_from_settings(settings: Dynaconf) -> LoggingSettings:
    """Extract logging configuration from Dynaconf."""

    level_value = _coerce_str(settings.get(LOGGING_LEVEL_KEY)) or DEFAULT_LOG_LEVEL
    format_value = (
        _coerce_str(settings.get(LOGGING_FORMAT_KEY)) or DEFAULT_LOG_FORMAT
    ).lower()
    if format_value not in {LOG_FORMAT_TEXT, LOG_FORMAT_JSON}:
        raise ValueError(f"Unsupported log format: {format_value}")

    file_path = _coerce_str(settings.get(LOGGING_FILE_KEY))

    max_bytes_value = _coerce_int(settings.get(LOGGING_MAX_BYTES_KEY))
    if max_bytes_value is None or max_bytes_value <= 0:
        max_bytes_value = DEFAULT_MAX_BYTES

    backup_count_value = _coerce_int(settings.get(LOGGING_BACKUP_COUNT_KEY))
    if backup_count_value is None or backup_count_value <= 0:
        backup_count_value = DEFAULT_BACKUP_COUNT

    mapping = logging.getLevelNamesMapping()
    level_upper = level_value.upper()
    if level_upper.isdigit():
        resolved_level = int(level_upper)
    else:
        resolved_level = mapping.get(level_upper, logging.INFO)

    return LoggingSettings(
        level=resolved_level,
        format=format_value,
        file_path=file_path,
        max_bytes=max_bytes_value,
        backup_count=backup_count_value,
    )


def resolve_application_settings(
    *,
    api_key_input: Optional[str] = None,
    config_path: Optional[str] = DEFAULT_CONFIG_FILENAME,
    document_inputs: Optional[DocumentInputs] = None,
    runtime_inputs: Optional[RuntimeInputs] = None,
    logging_inputs: Optional[LoggingInputs] = None,
    tls_inputs: Optional[TlsInputs] = None,
) -> Tuple[RuntimeSettings, LoggingSettings]:
    settings = load_settings(config_path)
    apply_cli_overrides(
        settings,
        api_key_input=api_key_input,
        document_inputs=document_inputs,
        runtime_inputs=runtime_inputs,
        tls_inputs=tls_inputs,
        logging_inputs=logging_inputs,
    )
    runtime_settings = runtime_from_settings(settings)
    logging_settings = logging_from_settings(settings)

    if runtime_settings.debug and logging_settings.level > logging.DEBUG:
        logging_settings = LoggingSettings(
            level=logging.DEBUG,
            format=logging_settings.format,
            file_path=logging_settings.file_path,
            max_bytes=logging_settings.max_bytes,
            backup_count=logging_settings.backup_count,
        )

    return runtime_settings, logging_settings


__all__ = [
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_BACKUP_COUNT",
    "ENVVAR_PREFIX",
    "LOG_FORMAT_TEXT",
    "LOG_FORMAT_JSON",
    "RENDER_API_KEY_KEY",
    "RENDER_BASE_URL_KEY",
    "DOCUMENTS_ROOT_KEY",
    "DOCUMENTS_TOPOLOGY_FILE_KEY",
    "DOCUMENTS_RUNTIME_CONFIG_FILE_KEY",
    "DIAGNOSTICS_SERVICE_KEYWORD_KEY",
    "RUNTIME_DEBUG_KEY",
    "RUNTIME_ALLOW_INSECURE_TLS_KEY",
    "RUNTIME_CA_BUNDLE_PATH_KEY",
    "LOGGING_LEVEL_KEY",
    "LOGGING_FORMAT_KEY",
    "LOGGING_FILE_KEY",
    "LOGGING_MAX_BYTES_KEY",
    "LOGGING_BACKUP_COUNT_KEY",
    "load_settings",
    "apply_cli_overrides",
    "runtime_from_settings",
    "logging_from_settings",
    "DocumentInputs",
    "RuntimeInputs",
    "TlsInputs",
    "LoggingInputs",
    "LoggingSettings",
    "RuntimeSettings",
    "resolve_application_settings",
    "resolve_config_file_candidates",
]
