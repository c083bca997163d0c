from __future__ import annotations

import logging
from pathlib import Path

import pytest
from support import (
    SAMPLE_RUNTIME_CONFIG,
    SAMPLE_TOPOLOGY,
    TEST_API_KEY,
    TEST_BASE_URL,
    RenderStub,
)

from livekit_render_mcp.config.settings import LOG_FORMAT_TEXT, LoggingSettings
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.infrastructure.logging import configure_logging
from livekit_render_mcp.integrations.render.client import RenderClient


@pytest.fixture(autouse=True)
def _structured_logging() -> None:
    configure_logging(
        LoggingSettings(
            level=logging.DEBUG,
            format=LOG_FORMAT_TEXT,
            file_path=None,
            max_bytes=1024,
            backup_count=1,
        )
    )


@pytest.fixture
def render_stub() -> RenderStub:
    return RenderStub()


@pytest.fixture
def render_client(render_stub: RenderStub) -> RenderClient:
    return RenderClient(TEST_API_KEY, base_url=TEST_BASE_URL, transport=render_stub.transport)


@pytest.fixture
def documents_dir(tmp_path: Path) -> Path:
    (tmp_path / "render.yaml").write_text(SAMPLE_TOPOLOGY, encoding="utf-8")
    (tmp_path / "config.yaml").write_text(SAMPLE_RUNTIME_CONFIG, encoding="utf-8")
    return tmp_path


@pytest.fixture
def reader(documents_dir: Path) -> DocumentReader:
    return DocumentReader(documents_dir)


@pytest.fixture
def empty_reader(tmp_path: Path) -> DocumentReader:
    return DocumentReader(tmp_path)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("livekit_render_mcp")
    group.addoption(
        "--offline",
        action="store_true",
        dest="lrm_offline",
        help="Run offline tests only (deselect tests marked 'online').",
    )
    group.addoption(
        "--online-only",
        action="store_true",
        dest="lrm_online_only",
        help="Run only tests marked 'online' (deselect offline).",
    )


def _is_integration_path(node_path: str) -> bool:
    node_path = node_path.replace("\\", "/")
    return node_path.startswith("tests/integration/") or "/tests/integration/" in node_path


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    for item in items:
        online = _is_integration_path(str(getattr(item, "path", item.nodeid)))
        item.add_marker(pytest.mark.online if online else pytest.mark.offline)

    offline_only = bool(config.getoption("lrm_offline"))
    online_only = bool(config.getoption("lrm_online_only"))
    if offline_only and online_only:
        raise pytest.UsageError("--offline and --online-only are mutually exclusive")

    if online_only:
        deselect = [item for item in items if "online" not in item.keywords]
    elif offline_only:
        deselect = [item for item in items if "online" in item.keywords]
    else:
        return

    if deselect:
        config.hook.pytest_deselected(items=deselect)
        items[:] = [item for item in items if item not in deselect]
