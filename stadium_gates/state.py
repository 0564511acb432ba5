from __future__ import annotations

# Shared simulation state.
#
# People and gates are created once per run and live in plain lists indexed
# by serial / gate number. A gate's queue is only touched while holding that
# gate's lock.

import enum
import threading
from collections import deque
from dataclasses import dataclass, field

UNSET = -1


class PersonStatus(enum.Enum):
    NOT_ARRIVED = "not_arrived"
    QUEUED = "queued"
    ENTERED = "entered"


@dataclass
class Person:
    """One ticket holder."""

    serial: int
    status: PersonStatus = PersonStatus.NOT_ARRIVED
    gate: int | None = None  # only meaningful while QUEUED
    arrival_time: int = UNSET  # simulated minutes
    entry_time: int = UNSET

    @property
    def wait(self) -> int | None:
        if self.arrival_time < 0 or self.entry_time < 0:
            return None
        return self.entry_time - self.arrival_time


@dataclass
class Gate:
    """One entry gate: a FIFO of serials plus the lock that guards it."""

    index: int
    queue: deque[int] = field(default_factory=deque)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def length(self) -> int:
        with self.lock:
            return len(self.queue)


class CompletionCounter:
    """Counts admissions and knows when the crowd is fully inside.

    VIPs are counted separately at start-up; the worker then counts every
    non-VIP it admits. The crowd is "empty" (nobody left outside) once
    entered >= population - vip.
    """

    def __init__(self, population: int) -> None:
        self.population = population
        self._entered = 0
        self._vip = 0
        self._cond = threading.Condition()

    @property
    def entered(self) -> int:
        with self._cond:
            return self._entered

    @property
    def vip(self) -> int:
        with self._cond:
            return self._vip

    def add_vip(self) -> None:
        with self._cond:
            self._vip += 1
            self._cond.notify_all()

    def increase(self) -> None:
        with self._cond:
            self._entered += 1
            self._cond.notify_all()

    def is_empty(self) -> bool:
        with self._cond:
            return self._is_empty()

    def wait_until_empty(self, timeout: float | None = None) -> bool:
        """Block until everybody is in. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(self._is_empty, timeout=timeout)

    def _is_empty(self) -> bool:
        return self._entered >= self.population - self._vip
