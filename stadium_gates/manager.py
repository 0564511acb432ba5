from __future__ import annotations

# The Gate Manager is the *authoritative brain* of the simulation.
#
# It owns the crowd (one `Person` per serial) and the gates (one FIFO + lock
# per gate) and implements every decision: who is VIP, how the initial crowd
# is laid out and balanced, which gate a newcomer gets, and who walks in on
# each tick. It has no threads of its own, so it is easy to unit test; the
# admission worker and the kiosk drive it concurrently.
#
# Locking rules:
# - a gate's queue is only read or changed while holding that gate's lock
# - never hold two gate locks at once (every scan goes gate by gate)
# - arrivals (kiosk, MQTT requests, drain sweep) are serialized by
#   `_arrivals_lock`; the worker only ever touches QUEUED people, and it pops
#   the serial and marks it ENTERED without releasing the gate lock

import dataclasses
import logging
import random
import threading
from dataclasses import dataclass
from typing import Any

from .clock import SimClock
from .config import SimulationConfig
from .errors import ALREADY_ENTERED, ALREADY_QUEUED, INVALID_SERIAL, ErrorResponse, InvariantError
from .state import CompletionCounter, Gate, Person, PersonStatus
from .vip import is_vip

logger = logging.getLogger(__name__)

INVALID = "invalid"
ENTERED = "already_entered"
QUEUED = "already_queued"
VIP = "vip"
ASSIGNED = "queued"


@dataclass(frozen=True)
class AdmissionResult:
    """What happened to one arrival at the kiosk."""

    outcome: str
    serial: int
    gate: int | None = None  # 0-based
    estimated_wait: int | None = None  # simulated minutes
    recommended: tuple[int, ...] = ()  # 0-based gate indexes
    minute: int | None = None
    error: ErrorResponse | None = None

    def to_message(self, *, serial_offset: int) -> dict[str, Any]:
        """Wire form used by the MQTT service (gates are numbered from 1)."""
        if self.error is not None:
            msg = self.error.to_message()
            msg["serial"] = self.serial + serial_offset
            if self.gate is not None:
                msg["gate"] = self.gate + 1
            return msg
        msg = {"type": "admitted" if self.outcome == VIP else "assigned", "serial": self.serial + serial_offset}
        msg["minute"] = self.minute
        if self.outcome == ASSIGNED:
            msg["gate"] = self.gate + 1
            msg["estimated_wait"] = self.estimated_wait
            msg["recommended"] = [g + 1 for g in self.recommended]
        return msg


class GateManager:
    """Core simulation logic (testable without threads or MQTT)."""

    def __init__(self, config: SimulationConfig | None = None, *, clock: SimClock | None = None) -> None:
        self.config = (config or SimulationConfig()).validate()
        self.clock = clock or SimClock(tick_seconds=self.config.tick_seconds)

        self.people: list[Person] = [Person(serial=i) for i in range(self.config.population)]
        self.gates: list[Gate] = [Gate(index=i) for i in range(self.config.gates)]
        self.counter = CompletionCounter(self.config.population)

        self._arrivals_lock = threading.Lock()

    # -------------------- start-up --------------------

    def prepare(self) -> None:
        """Open the doors: VIPs in, half the crowd queued, queues balanced."""
        self.init_population()
        self.seed_queues()
        self.distribute()

    def init_population(self) -> int:
        """Reset every person; VIPs enter at minute 0. Returns the VIP count."""
        vips = 0
        for person in self.people:
            person.status = PersonStatus.NOT_ARRIVED
            person.gate = None
            person.arrival_time = -1
            person.entry_time = -1
            if is_vip(person.serial, population=self.config.population):
                self.counter.add_vip()
                person.status = PersonStatus.ENTERED
                person.arrival_time = 0
                person.entry_time = 0
                vips += 1
        logger.info("population ready: %d people, %d VIP", len(self.people), vips)
        return vips

    def seed_queues(self, rng: random.Random | None = None) -> int:
        """Queue half of the crowd at random gates.

        Uses a fixed seed so the initial layout is the same every run. Seeded
        people count as having arrived at the current minute (0 at start-up).
        """
        r = rng or random.Random(self.config.seed)
        waiting = sum(1 for p in self.people if p.status is PersonStatus.NOT_ARRIVED)
        target = min(self.config.population // 2, waiting)

        assigned = 0
        while assigned < target:
            serial = r.randrange(self.config.population)
            person = self.people[serial]
            if person.status is not PersonStatus.NOT_ARRIVED:
                continue
            g = r.randrange(self.config.gates)
            person.arrival_time = self.clock.current_minute()
            person.status = PersonStatus.QUEUED
            person.gate = g
            with self.gates[g].lock:
                self.gates[g].queue.append(serial)
            assigned += 1

        logger.info("seeded %d people: queue lengths %s", assigned, self.snapshot_lengths())
        return assigned

    def distribute(self) -> int:
        """Even out queue lengths. Returns how many people changed gate.

        Pass 1 moves everyone beyond the target length (front of the queue
        first) into an overflow buffer; pass 2 tops each gate up to the target
        from the buffer; the remainder (fewer than one per gate) goes one per
        gate in gate order. Gates are locked one at a time.
        """
        total = sum(self.snapshot_lengths())
        limit = total // self.config.gates
        buffer: list[int] = []

        for gate in self.gates:
            with gate.lock:
                while len(gate.queue) > limit:
                    buffer.append(gate.queue.popleft())

        moved = len(buffer)
        for extra in (0, 1):
            for gate in self.gates:
                if not buffer:
                    break
                with gate.lock:
                    while len(gate.queue) < limit + extra and buffer:
                        serial = buffer.pop()
                        gate.queue.append(serial)
                        self.people[serial].gate = gate.index

        if buffer:
            raise InvariantError(f"{len(buffer)} people lost while balancing")
        logger.info("balanced queues (target %d, %d moved): %s", limit, moved, self.snapshot_lengths())
        return moved

    # -------------------- queue inspection --------------------

    def snapshot_lengths(self) -> list[int]:
        """Queue length of every gate, each read under its own lock."""
        return [gate.length() for gate in self.gates]

    def find_best_gate(self) -> int:
        """Index of the shortest queue right now; ties go to the lowest index.

        Gates are read one at a time, so under concurrent admissions this is a
        best-effort answer rather than an exact one.
        """
        best = 0
        min_size: int | None = None
        for gate in self.gates:
            with gate.lock:
                size = len(gate.queue)
            if min_size is None or size < min_size:
                min_size = size
                best = gate.index
        return best

    # -------------------- admission worker step --------------------

    def admit_tick(self) -> list[int]:
        """Let the person at the head of every non-empty queue in.

        At most one person per gate per call. Returns the admitted serials.
        """
        admitted: list[int] = []
        for gate in self.gates:
            with gate.lock:
                if not gate.queue:
                    continue
                serial = gate.queue.popleft()
                person = self.people[serial]
                if person.status is not PersonStatus.QUEUED or person.gate != gate.index:
                    raise InvariantError(
                        f"serial {serial} popped from gate {gate.index} but recorded as "
                        f"{person.status.value} at gate {person.gate}"
                    )
                person.entry_time = self.clock.current_minute()
                if person.entry_time < person.arrival_time:
                    raise InvariantError(f"serial {serial} entered before it arrived")
                person.status = PersonStatus.ENTERED
                self.counter.increase()
            admitted.append(serial)
            logger.debug("gate %d admitted serial %d at minute %d", gate.index, serial, person.entry_time)
        return admitted

    # -------------------- arrivals --------------------

    def admit(self, serial: int) -> AdmissionResult:
        """Handle one visitor presenting internal serial `serial` at the kiosk."""
        with self._arrivals_lock:
            if not 0 <= serial < self.config.population:
                low, high = self.config.serial_range()
                return AdmissionResult(
                    INVALID,
                    serial,
                    error=ErrorResponse(INVALID_SERIAL, f"Serial must be between {low} and {high}"),
                )

            person = self.people[serial]
            status, gate = self._read_status(person)

            if status is PersonStatus.ENTERED:
                return AdmissionResult(
                    ENTERED,
                    serial,
                    error=ErrorResponse(ALREADY_ENTERED, "Already entered the stadium; re-entry not allowed"),
                )

            if status is PersonStatus.QUEUED:
                return AdmissionResult(
                    QUEUED,
                    serial,
                    gate=gate,
                    error=ErrorResponse(ALREADY_QUEUED, f"Already queued at gate {gate + 1}; switching is disabled"),
                )

            now = self.clock.current_minute()

            if is_vip(serial, population=self.config.population):
                person.arrival_time = now
                person.entry_time = now
                person.status = PersonStatus.ENTERED
                logger.debug("VIP serial %d entered at minute %d", serial, now)
                return AdmissionResult(VIP, serial, minute=now)

            person.arrival_time = now
            snapshot = self.snapshot_lengths()
            min_q = min(snapshot)
            estimated = max(1, min_q) * self.config.minutes_per_slot
            recommended = tuple(i for i, size in enumerate(snapshot) if size == min_q)

            # Second, independent read: the gate actually assigned can differ
            # from the recommendation if the worker ran in between.
            g = self._enqueue(person)
            return AdmissionResult(
                ASSIGNED,
                serial,
                gate=g,
                estimated_wait=estimated,
                recommended=recommended,
                minute=now,
            )

    def assign_remaining(self) -> list[int]:
        """Drain sweep: queue everybody who never showed up at the kiosk."""
        swept: list[int] = []
        with self._arrivals_lock:
            for person in self.people:
                if person.status is not PersonStatus.NOT_ARRIVED:
                    continue
                person.arrival_time = self.clock.current_minute()
                self._enqueue(person)
                swept.append(person.serial)
        logger.info("drain sweep queued %d late people", len(swept))
        return swept

    def _enqueue(self, person: Person) -> int:
        g = self.find_best_gate()
        person.gate = g
        person.status = PersonStatus.QUEUED
        with self.gates[g].lock:
            self.gates[g].queue.append(person.serial)
        logger.debug("serial %d queued at gate %d", person.serial, g)
        return g

    def _read_status(self, person: Person) -> tuple[PersonStatus, int | None]:
        # A QUEUED person may be admitted by the worker at any moment; re-read
        # under the gate lock so we never report a queue the person just left.
        if person.status is PersonStatus.QUEUED and person.gate is not None:
            with self.gates[person.gate].lock:
                return person.status, person.gate
        return person.status, person.gate

    # -------------------- progress --------------------

    def all_entered(self) -> bool:
        return self.counter.is_empty()

    def wait_until_drained(self, timeout: float | None = None) -> bool:
        return self.counter.wait_until_empty(timeout=timeout)

    def census(self) -> dict[str, int]:
        """People per state; queued is counted from the gate queues themselves."""
        return {
            "not_arrived": sum(1 for p in self.people if p.status is PersonStatus.NOT_ARRIVED),
            "queued": sum(self.snapshot_lengths()),
            "entered": sum(1 for p in self.people if p.status is PersonStatus.ENTERED),
        }

    def people_snapshot(self) -> list[Person]:
        return [dataclasses.replace(p) for p in self.people]

    def status(self) -> dict[str, Any]:
        """Current state of all gates (for observers)."""
        census = self.census()
        return {
            "type": "status_response",
            "minute": self.clock.current_minute(),
            "entered": self.counter.entered,
            "vip": self.counter.vip,
            "not_arrived": census["not_arrived"],
            "gates": {str(gate.index + 1): {"queue_len": gate.length()} for gate in self.gates},
        }
