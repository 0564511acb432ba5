from __future__ import annotations

# End-of-run metrics.
#
# Wait time of a person = entry minute - arrival minute, counted for everybody
# who has both timestamps (VIPs count with a wait of 0).

from dataclasses import dataclass
from typing import Iterable

from .state import Person


@dataclass(frozen=True)
class SimulationMetrics:
    average_wait: int  # simulated minutes, floored
    max_wait: int
    admitted: int
    total_seconds: int  # real seconds

    def render(self) -> str:
        return "\n".join(
            [
                "===== METRICS =====",
                f"Average wait: {self.average_wait} minutes",
                f"Max wait: {self.max_wait} minutes",
                f"Total time: {self.total_seconds} seconds",
                "===================",
            ]
        )


def compute_metrics(people: Iterable[Person], *, total_seconds: int) -> SimulationMetrics:
    waits = [p.wait for p in people if p.wait is not None]
    return SimulationMetrics(
        average_wait=sum(waits) // len(waits) if waits else 0,
        max_wait=max(waits, default=0),
        admitted=len(waits),
        total_seconds=total_seconds,
    )
