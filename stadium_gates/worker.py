from __future__ import annotations

# Admission worker.
#
# A background thread that paces the gates: every simulated minute it lets
# the person at the head of each queue in (so N gates admit at most N people
# per minute). It stops by itself once everybody is inside, or when asked to.
# The stop request is only looked at between ticks, never in the middle of one.

import logging
import threading

from .manager import GateManager

logger = logging.getLogger(__name__)


class AdmissionWorker:
    """Drains the gate queues of a `GateManager` in the background."""

    def __init__(self, manager: GateManager, *, tick_seconds: float | None = None) -> None:
        self.manager = manager
        self.tick_seconds = tick_seconds if tick_seconds is not None else manager.config.tick_seconds
        self.admitted = 0

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="admission-worker", daemon=True)
        self._thread.start()
        logger.info("admission worker started (tick=%ss)", self.tick_seconds)

    def stop(self, *, timeout: float | None = None) -> None:
        """Ask the worker to stop and wait for its current tick to finish."""
        self._stop_event.set()
        t = self._thread
        if t and t.is_alive():
            t.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.is_set() and not self.manager.all_entered():
            # One simulated minute; wakes early only to notice a stop request.
            if self._stop_event.wait(self.tick_seconds):
                break
            self.admitted += len(self.manager.admit_tick())
        logger.info("admission worker stopped after admitting %d people", self.admitted)
