from __future__ import annotations

# Simulation parameters.
#
# The simulation is deliberately small: a fixed crowd (M), a fixed number of
# gates (N) and a fixed pace (p simulated minutes per queue position).
# Everything has a default so `SimulationConfig()` reproduces the classic run.

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    """Fixed parameters of one run."""

    population: int = 10  # M: total ticket holders
    gates: int = 2  # N: entry gates
    minutes_per_slot: int = 1  # p: simulated minutes per queue position
    seed: int = 42  # initial random layout is the same every run
    serial_offset: int = 1_000_000  # printed serial = internal serial + offset
    tick_seconds: float = 1.0  # real seconds per simulated minute

    def validate(self) -> "SimulationConfig":
        if self.population <= 0:
            raise ValueError("population must be > 0")
        if self.gates <= 0:
            raise ValueError("gates must be > 0")
        if self.minutes_per_slot <= 0:
            raise ValueError("minutes_per_slot must be > 0")
        if self.serial_offset < 0:
            raise ValueError("serial_offset must be >= 0")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        return self

    def serial_range(self) -> tuple[int, int]:
        """Inclusive range of serials a visitor may type."""
        return self.serial_offset, self.serial_offset + self.population - 1
