"""Background delivery of outbound fleet and commodity notifications."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_for
from typing import Any, Callable

logger = logging.getLogger(__name__)


class NotificationQueue:
    """Runs notifications one at a time, in submission order, off the caller's thread.

    A listener that hangs or fails only delays later notifications; the
    caller never waits on it. Failures are logged and dropped.
    """

    def __init__(self, name: str = "notifications") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, description: str, fn: Callable[..., Any], *args: Any) -> Future | None:
        with self._lock:
            if self._closed:
                logger.warning(f"Dropping notification after shutdown: {description}")
                return None
            return self._executor.submit(self._deliver, description, fn, *args)

    @staticmethod
    def _deliver(description: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception as exc:
            logger.warning(f"{description} failed: {exc}")

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until everything submitted so far has been delivered."""
        with self._lock:
            if self._closed:
                return True
            marker = self._executor.submit(lambda: None)
        done, _ = wait_for([marker], timeout=timeout)
        return bool(done)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
