"""Rule-based diagnosis of LiveKit key configuration problems.

The engine runs a fixed sequence of independent steps. Each step produces a
:class:`StepOutcome`; a failing step is recorded in the report and the
remaining steps still run, so the agent always receives a narrative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from livekit_render_mcp.config.constants import DEFAULT_SERVICE_KEYWORD
from livekit_render_mcp.domain.documents import DocumentKind, DocumentReader
from livekit_render_mcp.domain.formatting import truncate_value
from livekit_render_mcp.domain.repair import PINNED_PORT
from livekit_render_mcp.infrastructure.logging import BoundLogger, get_logger, log_event
from livekit_render_mcp.integrations.render.client import RenderClient
from livekit_render_mcp.integrations.render.models import LogEntry, Service

# Substrings that correlate with LiveKit failing to find its API keys.
AUTH_ERROR_MARKERS: tuple[str, ...] = (
    "key-file or keys must be provided",
    "LIVEKIT_KEYS",
    "config",
)
LOG_WINDOW = 20
MAX_SURFACED_LINES = 5

PROBABLE_CAUSE = (
    "💡 **Probable Issue:**\n"
    'The error "one of key-file or keys must be provided" suggests that:\n'
    "1. LiveKit can't find API keys in the expected format\n"
    "2. There might be a conflict between LIVEKIT_KEYS env var and config.yaml\n"
    "3. The config.yaml file might not be properly mounted or accessible\n"
)
RECOMMENDATION = (
    "🔧 **Recommended Fix:**\n"
    "Use the 'fix_livekit_keys_config' tool with your service ID to:\n"
    "• Set LIVEKIT_KEYS from the keys section of config.yaml\n"
    "• Ensure config.yaml keys are properly configured\n"
    f"• Pin PORT to {PINNED_PORT}\n"
)


class StepStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepOutcome:
    name: str
    status: StepStatus
    lines: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class DiagnosisReport:
    steps: list[StepOutcome] = field(default_factory=list)
    matched_services: list[Service] = field(default_factory=list)

    def step(self, name: str) -> Optional[StepOutcome]:
        return next((outcome for outcome in self.steps if outcome.name == name), None)

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [outcome for outcome in self.steps if outcome.status is StepStatus.FAILED]

    def render(self) -> str:
        parts = ["🔍 LiveKit Configuration Diagnosis\n"]
        for outcome in self.steps:
            if outcome.lines:
                parts.append("\n".join(outcome.lines))

        summary = ["📊 Steps:"]
        for outcome in self.steps:
            entry = f"   • {outcome.name}: {outcome.status.value}"
            if outcome.error:
                entry += f" ({outcome.error})"
            summary.append(entry)
        parts.append("\n".join(summary))

        parts.append(PROBABLE_CAUSE)
        parts.append(RECOMMENDATION)
        return "\n\n".join(part.rstrip("\n") for part in parts) + "\n"


def select_services(services: Sequence[Service], keyword: str) -> list[Service]:
    return [service for service in services if service.matches(keyword)]


def filter_auth_errors(
    entries: Sequence[LogEntry], *, limit: int = MAX_SURFACED_LINES
) -> list[str]:
    matches = [
        entry.message.strip()
        for entry in entries
        if any(marker in entry.message for marker in AUTH_ERROR_MARKERS)
    ]
    return matches[:limit]


class DiagnosticEngine:
    def __init__(
        self,
        client: RenderClient,
        reader: DocumentReader,
        *,
        service_keyword: str = DEFAULT_SERVICE_KEYWORD,
        logger: Optional[BoundLogger] = None,
    ) -> None:
        self._client = client
        self._reader = reader
        self._keyword = service_keyword
        self._logger = logger or get_logger("livekit_render_mcp.diagnosis")

    def _record(self, report: DiagnosisReport, outcome: StepOutcome) -> None:
        report.steps.append(outcome)
        log_event(
            self._logger,
            "diagnosis.step",
            level=logging.WARNING if outcome.status is StepStatus.FAILED else logging.INFO,
            step=outcome.name,
            status=outcome.status.value,
            error=outcome.error,
        )

    def check_topology(self) -> StepOutcome:
        name = self._reader.filename(DocumentKind.TOPOLOGY)
        try:
            document = self._reader.read_topology()
        except Exception as exc:
            return StepOutcome(
                "topology",
                StepStatus.FAILED,
                [f"❌ Error parsing {name}: {exc}"],
                error=str(exc),
            )
        if document is None:
            return StepOutcome("topology", StepStatus.WARNING, [f"❌ Local {name} not found"])

        lines = [f"✅ Local {name} found"]
        declared = [service for service in document.services if service.env_vars]
        if not declared:
            lines.append(f"   No environment variables declared in {name}")
        for service in declared:
            lines.append(
                f"📋 Environment variables in {name} ({service.name or 'unnamed service'}):"
            )
            lines.extend(
                f"   • {env_var.key}: {truncate_value(env_var.value)}"
                for env_var in service.env_vars
            )
        return StepOutcome("topology", StepStatus.OK, lines)

    def check_runtime_config(self) -> StepOutcome:
        name = self._reader.filename(DocumentKind.RUNTIME_CONFIG)
        try:
            config = self._reader.read_runtime_config()
        except Exception as exc:
            return StepOutcome(
                "runtime_config",
                StepStatus.FAILED,
                [f"❌ Error parsing {name}: {exc}"],
                error=str(exc),
            )
        if config is None:
            return StepOutcome(
                "runtime_config", StepStatus.WARNING, [f"❌ Local {name} not found"]
            )

        lines = [f"✅ Local {name} found"]
        status = StepStatus.OK
        if config.keys is None:
            lines.append(f"❌ No keys section found in {name}")
            status = StepStatus.WARNING
        elif not config.keys:
            lines.append(f"❌ keys section in {name} is empty")
            status = StepStatus.WARNING
        else:
            lines.append(f"🔑 LiveKit keys in {name}: {config.key_count} pairs found")

        if config.port is not None and str(config.port) != PINNED_PORT:
            lines.append(
                f"⚠️  {name} declares port {config.port}; the repair tool pins PORT={PINNED_PORT}"
            )
        return StepOutcome("runtime_config", status, lines)

    async def check_services(self) -> tuple[StepOutcome, list[Service]]:
        try:
            services = await self._client.list_services()
        except Exception as exc:
            return (
                StepOutcome(
                    "services",
                    StepStatus.FAILED,
                    [f"❌ Could not list Render services: {exc}"],
                    error=str(exc),
                ),
                [],
            )

        matched = select_services(services, self._keyword)
        if not matched:
            return (
                StepOutcome(
                    "services",
                    StepStatus.OK,
                    [f"ℹ️  No services matching '{self._keyword}' found in your Render account"],
                ),
                [],
            )
        lines = [f"🚀 Found {len(matched)} service(s) matching '{self._keyword}'"]
        return StepOutcome("services", StepStatus.OK, lines), matched

    async def check_logs(self, services: Sequence[Service]) -> StepOutcome:
        lines: list[str] = []
        failures: list[str] = []
        for service in services:
            lines.append(f"🚀 Service: {service.name} ({service.id})")
            lines.append(f"   Status: {service.status or 'unknown'}")
            try:
                entries = await self._client.get_logs(service.id, LOG_WINDOW)
            except Exception as exc:
                lines.append(f"❌ Could not retrieve logs: {exc}")
                failures.append(f"{service.id}: {exc}")
                continue

            matches = filter_auth_errors(entries)
            if matches:
                lines.append("🔍 Recent error logs:")
                lines.extend(f"   • {message}" for message in matches)
            else:
                lines.append("   No configuration errors in recent logs")

        if not failures:
            return StepOutcome("logs", StepStatus.OK, lines)
        status = StepStatus.FAILED if len(failures) == len(services) else StepStatus.WARNING
        return StepOutcome("logs", status, lines, error="; ".join(failures))

    async def diagnose(self) -> DiagnosisReport:
        report = DiagnosisReport()
        self._record(report, self.check_topology())
        self._record(report, self.check_runtime_config())

        services_outcome, matched = await self.check_services()
        self._record(report, services_outcome)
        report.matched_services = matched

        if services_outcome.status is StepStatus.FAILED:
            self._record(
                report,
                StepOutcome("logs", StepStatus.SKIPPED, error="service listing failed"),
            )
        elif matched:
            self._record(report, await self.check_logs(matched))
        else:
            self._record(report, StepOutcome("logs", StepStatus.SKIPPED))

        return report


__all__ = [
    "AUTH_ERROR_MARKERS",
    "LOG_WINDOW",
    "MAX_SURFACED_LINES",
    "DiagnosisReport",
    "DiagnosticEngine",
    "StepOutcome",
    "StepStatus",
    "filter_auth_errors",
    "select_services",
]
