"""Periodic tick source driving a simulated transport."""

from __future__ import annotations

import logging
import threading

from .transport import SimulatedTransport

logger = logging.getLogger(__name__)


class Ticker:
    """Calls ``transport.tick()`` every ``interval_seconds`` on one daemon thread."""

    def __init__(self, transport: SimulatedTransport, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self.transport = transport
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="simulator-ticker", daemon=True)
        self._thread.start()
        logger.info(f"Ticker started ({self.interval_seconds}s interval)")

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Ticker stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.transport.tick()
            except Exception:
                logger.exception("Simulation tick failed")
