from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import BoundedSemaphore
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ReplyDispatcher:
    """Bounded worker pool for the blocking completion-and-reply jobs.

    At most ``max_workers`` jobs run at once and at most ``max_pending`` more
    wait for a worker. Once that capacity is used up :meth:`submit` refuses
    new work instead of queueing it without limit.
    """

    def __init__(self, max_workers: int, max_pending: int) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_pending < 0:
            raise ValueError("max_pending must not be negative")
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="reply"
        )
        self._slots = BoundedSemaphore(max_workers + max_pending)

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """Schedule ``fn(*args)``; return ``False`` when the pool is saturated."""
        if not self._slots.acquire(blocking=False):
            return False
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down.
            self._slots.release()
            return False
        future.add_done_callback(self._release)
        return True

    def _release(self, future: Future) -> None:
        self._slots.release()
        exc = future.exception() if not future.cancelled() else None
        if exc is not None:
            logger.error("Reply job crashed", exc_info=exc)

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work.

        With ``wait`` the queued jobs are drained before returning. Without it
        queued jobs are dropped and running ones are left to finish on their
        own.
        """
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
