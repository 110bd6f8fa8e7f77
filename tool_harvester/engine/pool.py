"""Bounded fan-out over a shared work queue."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Event, Lock
from typing import Callable, Sequence, TypeVar

import structlog

T = TypeVar("T")

Worker = Callable[[T, int], None]
ErrorHandler = Callable[[T, int, Exception], None]

logger = structlog.get_logger("tool_harvester.pool")


class _Cursor:
    """Hand out item indexes to competing workers."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.dispatched = 0
        self._lock = Lock()

    def next(self) -> int | None:
        with self._lock:
            if self.dispatched >= self.total:
                return None
            index = self.dispatched
            self.dispatched += 1
            return index


def run_bounded(
    items: Sequence[T],
    worker: Worker,
    max_concurrency: int,
    *,
    on_error: ErrorHandler | None = None,
    cancel: Event | None = None,
    thread_name_prefix: str = "harvest",
) -> int:
    """Run ``worker(item, index)`` for every item with at most N in flight.

    A fixed set of ``min(max_concurrency, len(items))`` threads pull from one
    cursor. Worker exceptions go to ``on_error`` and never stop the other
    workers. Setting ``cancel`` stops further dispatch; in-flight items finish
    before this returns. Returns how many items were dispatched.
    """

    if max_concurrency < 1:
        raise ValueError("max_concurrency must be >= 1")
    items = list(items)
    if not items:
        return 0
    cursor = _Cursor(len(items))

    def _drain() -> None:
        while cancel is None or not cancel.is_set():
            index = cursor.next()
            if index is None:
                return
            item = items[index]
            try:
                worker(item, index)
            except Exception as exc:  # noqa: BLE001
                if on_error is None:
                    logger.warning("pool_worker_failed", index=index, error=str(exc))
                else:
                    on_error(item, index, exc)

    workers = min(max_concurrency, len(items))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=thread_name_prefix) as executor:
        futures = [executor.submit(_drain) for _ in range(workers)]
        for future in futures:
            future.result()
    return cursor.dispatched


__all__ = ["run_bounded"]
