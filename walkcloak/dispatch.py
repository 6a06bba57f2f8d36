from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)


def _log_outcome(future: concurrent.futures.Future) -> None:
    if future.cancelled():
        logger.warning("Activity processing was cancelled before it ran.")
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Activity processing failed.", exc_info=(type(exc), exc, exc.__traceback__))
        return
    logger.debug("Activity processing result: %s", future.result())


class EventDispatcher:
    """Runs processing units on a thread pool; callers never wait on them."""

    def __init__(self, max_workers: int = 4):
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="activity-worker",
        )

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> concurrent.futures.Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(_log_outcome)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

