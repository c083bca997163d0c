"""Run coroutines from the synchronous Typer commands on one shared loop."""

from __future__ import annotations

import asyncio
import atexit
import logging
import threading
from collections.abc import Awaitable
from contextlib import suppress
from typing import TypeVar

T = TypeVar("T")

_LOOP: asyncio.AbstractEventLoop | None = None
_LOCK = threading.Lock()
_loop_logger = logging.getLogger("livekit_render_mcp.loop")


def _cancel_pending(loop: asyncio.AbstractEventLoop) -> None:
    pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
    if not pending:
        return
    for task in pending:
        task.cancel()
    with suppress(Exception):
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))


def close_sync_bridge_loop() -> None:
    """Dispose of the shared event loop used by :func:`await_sync`."""

    global _LOOP
    loop, _LOOP = _LOOP, None
    if loop is None or loop.is_closed():
        return
    _loop_logger.debug("sync_bridge.loop_close")
    _cancel_pending(loop)
    loop.close()


atexit.register(close_sync_bridge_loop)


def _current_loop() -> asyncio.AbstractEventLoop:
    global _LOOP
    if _LOOP is None or _LOOP.is_closed():
        _LOOP = asyncio.new_event_loop()
        _loop_logger.debug("sync_bridge.loop_created")
    return _LOOP


def await_sync(coro: Awaitable[T]) -> T:
    """Execute ``coro`` to completion and return its result.

    Raises ``RuntimeError`` when called from inside a running event loop.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("await_sync cannot be used inside a running event loop")

    with _LOCK:
        loop = _current_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(coro)
        finally:
            _cancel_pending(loop)
            asyncio.set_event_loop(None)


__all__ = ["await_sync", "close_sync_bridge_loop"]
