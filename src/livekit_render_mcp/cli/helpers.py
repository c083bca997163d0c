"""Reusable helper utilities for the CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from livekit_render_mcp.cli import options as cli_options
from livekit_render_mcp.config.settings import (
    DocumentInputs,
    LoggingInputs,
    LoggingSettings,
    RuntimeInputs,
    RuntimeSettings,
    TlsInputs,
    resolve_application_settings,
)
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.infrastructure.logging import BoundLogger, configure_logging, get_logger


@dataclass(frozen=True)
class CliInvocation:
    config_path: Optional[str]
    api_key: Optional[str]
    documents: DocumentInputs
    runtime: RuntimeInputs
    tls: TlsInputs
    logging: LoggingInputs


def build_invocation(
    *,
    config_path: Optional[str],
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    documents_dir: Optional[str] = None,
    topology_file: Optional[str] = None,
    runtime_config_file: Optional[str] = None,
    service_keyword: Optional[str] = None,
    debug: Optional[bool] = None,
    allow_insecure_tls: Optional[bool] = None,
    ca_bundle: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    log_max_bytes: Optional[int] = None,
    log_backup_count: Optional[int] = None,
) -> CliInvocation:
    """Normalize raw Typer option values into settings inputs."""

    return CliInvocation(
        config_path=config_path,
        api_key=cli_options.clean_string(api_key),
        documents=DocumentInputs(
            root=cli_options.clean_string(documents_dir),
            topology_file=cli_options.clean_string(topology_file),
            runtime_config_file=cli_options.clean_string(runtime_config_file),
        ),
        runtime=RuntimeInputs(
            base_url=cli_options.clean_string(base_url),
            service_keyword=service_keyword,
            debug=debug,
        ),
        tls=TlsInputs(
            allow_insecure=allow_insecure_tls,
            ca_bundle_path=cli_options.clean_string(ca_bundle),
        ),
        logging=LoggingInputs(
            level=cli_options.normalize_log_level(log_level),
            format=cli_options.normalize_log_format(log_format),
            file_path=cli_options.clean_string(log_file),
            max_bytes=log_max_bytes,
            backup_count=log_backup_count,
        ),
    )


def resolve_runtime_and_logging(
    invocation: CliInvocation,
) -> tuple[RuntimeSettings, LoggingSettings]:
    return resolve_application_settings(
        api_key_input=invocation.api_key,
        config_path=invocation.config_path,
        document_inputs=invocation.documents,
        runtime_inputs=invocation.runtime,
        tls_inputs=invocation.tls,
        logging_inputs=invocation.logging,
    )


def initialize_logging(
    runtime_settings: RuntimeSettings,
    logging_settings: LoggingSettings,
) -> BoundLogger:
    """Configure logging and replay configuration warnings through it."""

    configure_logging(logging_settings)
    logger = get_logger("livekit_render_mcp")
    for message in runtime_settings.warnings:
        logger.warning("config.warning", message=message)
    logger.debug(
        "config.resolved",
        base_url=runtime_settings.base_url,
        documents_root=runtime_settings.documents_root,
        service_keyword=runtime_settings.service_keyword,
        log_level=logging_settings.level_name,
    )
    return logger


def build_document_reader(runtime_settings: RuntimeSettings) -> DocumentReader:
    return DocumentReader(
        runtime_settings.documents_root,
        topology_filename=runtime_settings.topology_file,
        runtime_config_filename=runtime_settings.runtime_config_file,
    )


__all__ = [
    "CliInvocation",
    "build_document_reader",
    "build_invocation",
    "initialize_logging",
    "resolve_runtime_and_logging",
]
