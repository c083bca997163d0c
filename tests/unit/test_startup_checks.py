from __future__ import annotations

import logging
from pathlib import Path

import pytest
from support import RenderStub, service_payload

from livekit_render_mcp.application.startup import (
    run_offline_startup_checks,
    run_online_startup_checks,
)
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.infrastructure.logging import get_logger
from livekit_render_mcp.integrations.render.client import RenderClient


def _messages(caplog: pytest.LogCaptureFixture, level: int) -> list[str]:
    return [record.getMessage() for record in caplog.records if record.levelno == level]


def test_offline_checks_pass_with_key_and_documents(
    reader: DocumentReader, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG)

    result = run_offline_startup_checks(
        has_api_key=True,
        reader=reader,
        logger=get_logger("livekit_render_mcp.startup.test"),
    )

    assert result is True
    assert _messages(caplog, logging.WARNING) == []
    assert any("offline.documents.parsed" in message for message in _messages(caplog, logging.DEBUG))


def test_offline_checks_report_missing_key_and_documents(
    empty_reader: DocumentReader, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING)

    result = run_offline_startup_checks(
        has_api_key=False,
        reader=empty_reader,
        logger=get_logger("livekit_render_mcp.startup.test"),
    )

    warnings = _messages(caplog, logging.WARNING)
    assert result is False
    assert any("offline.config.api_key" in message for message in warnings)
    assert sum("offline.documents.missing" in message for message in warnings) == 2


def test_offline_checks_report_unparseable_document(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "render.yaml").write_text("services: [\n", encoding="utf-8")
    (tmp_path / "config.yaml").write_text("keys:\n  k: v\n", encoding="utf-8")
    caplog.set_level(logging.WARNING)

    result = run_offline_startup_checks(
        has_api_key=True,
        reader=DocumentReader(tmp_path),
        logger=get_logger("livekit_render_mcp.startup.test"),
    )

    assert result is False
    assert any("offline.documents.unparseable" in m for m in _messages(caplog, logging.WARNING))


@pytest.mark.asyncio
async def test_online_checks_list_services(
    render_stub: RenderStub, render_client: RenderClient, caplog: pytest.LogCaptureFixture
) -> None:
    render_stub.add("GET", "/services", json=[service_payload("srv-1", "livekit")])
    caplog.set_level(logging.INFO)

    result = await run_online_startup_checks(
        client=render_client, logger=get_logger("livekit_render_mcp.startup.test")
    )

    assert result is True
    assert any("online.api_connectivity" in m for m in _messages(caplog, logging.INFO))


@pytest.mark.asyncio
async def test_online_checks_fail_on_remote_error(
    render_stub: RenderStub, render_client: RenderClient, caplog: pytest.LogCaptureFixture
) -> None:
    render_stub.add("GET", "/services", status_code=401, text="unauthorized")
    caplog.set_level(logging.CRITICAL)

    result = await run_online_startup_checks(
        client=render_client, logger=get_logger("livekit_render_mcp.startup.test")
    )

    assert result is False
    assert any("401" in m for m in _messages(caplog, logging.CRITICAL))


@pytest.mark.asyncio
async def test_online_checks_fail_on_unexpected_payload(
    render_stub: RenderStub, render_client: RenderClient, caplog: pytest.LogCaptureFixture
) -> None:
    render_stub.add("GET", "/services", json=[{"name": "no id"}])
    caplog.set_level(logging.CRITICAL)

    result = await run_online_startup_checks(
        client=render_client, logger=get_logger("livekit_render_mcp.startup.test")
    )

    assert result is False
    assert any("Unexpected Render response shape" in m for m in _messages(caplog, logging.CRITICAL))


@pytest.mark.asyncio
async def test_online_checks_without_client_or_when_skipped() -> None:
    logger = get_logger("livekit_render_mcp.startup.test")

    assert await run_online_startup_checks(client=None, logger=logger) is False
    assert (
        await run_online_startup_checks(client=None, logger=logger, skip_startup_checks=True)
        is True
    )
