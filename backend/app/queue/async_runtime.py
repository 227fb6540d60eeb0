"""Event loop shared by the notification worker tasks.

asyncpg connections pooled by the async engine belong to the loop that opened
them, so every task in a worker process runs on one long-lived loop instead of
a fresh ``asyncio.run`` loop.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Awaitable, TypeVar

T = TypeVar("T")

_loop_lock = threading.Lock()
_worker_loop: asyncio.AbstractEventLoop | None = None


def _get_loop() -> asyncio.AbstractEventLoop:
    global _worker_loop
    with _loop_lock:
        if _worker_loop is None or _worker_loop.is_closed():
            _worker_loop = asyncio.new_event_loop()
            asyncio.set_event_loop(_worker_loop)
        return _worker_loop


def run_async(awaitable: Awaitable[T]) -> T:
    return _get_loop().run_until_complete(awaitable)


def close_worker_loop(**_: Any) -> None:
    """Dispose pooled connections and close the loop when the worker process exits."""
    global _worker_loop
    with _loop_lock:
        loop, _worker_loop = _worker_loop, None
    if loop is None or loop.is_closed():
        return
    from app.core.database import engine

    loop.run_until_complete(engine.dispose())
    loop.close()
