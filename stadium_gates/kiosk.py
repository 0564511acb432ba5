from __future__ import annotations

# Entry kiosk.
#
# The interactive side of the simulation: visitors type their 7-digit serial
# and the kiosk tells them whether they can walk in, which gate to join and
# how long the wait should be. Input is a plain text stream (stdin in
# practice); the first non-numeric token or end of stream closes the kiosk.

import sys
from typing import Iterator, TextIO

from .manager import ASSIGNED, VIP, AdmissionResult, GateManager

RULE = "----------------------------------"


def parse_serial(token: str, *, offset: int) -> int | None:
    """Turn a typed serial into an internal one.

    Returns None when the token is not a number at all (the kiosk treats that
    as "no more visitors"). Out-of-range numbers are returned as-is; the
    manager rejects them.
    """
    try:
        return int(token.strip()) - offset
    except ValueError:
        return None


def render_result(result: AdmissionResult) -> list[str]:
    """Human-readable answer for one visitor. Gates are numbered from 1."""
    if result.error is not None:
        return [result.error.message + "."]

    if result.outcome == VIP:
        return ["VIP detected! You may enter immediately."]

    if result.outcome == ASSIGNED:
        gates = " ".join(str(g + 1) for g in result.recommended)
        return [
            f"Estimated waiting time: {result.estimated_wait} minutes",
            f"Recommended gate(s): {gates}",
            f"You have been assigned to Gate {result.gate + 1}.",
        ]

    raise ValueError(f"unknown outcome {result.outcome!r}")


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


class Kiosk:
    """Reads serials from a stream and routes each visitor."""

    def __init__(self, manager: GateManager, *, out: TextIO | None = None) -> None:
        self.manager = manager
        self.out = out
        self.results: list[AdmissionResult] = []

    def say(self, *lines: str, end: str = "\n") -> None:
        for line in lines:
            print(line, end=end, file=self.out or sys.stdout, flush=True)

    def banner(self) -> None:
        low, high = self.manager.config.serial_range()
        self.say(
            "===== ENTRY QUEUE MANAGEMENT SYSTEM =====",
            f"Simulation started ({self.manager.config.tick_seconds:g} second(s) = 1 minute)",
            f"Enter serials between {low} and {high}",
            "Close the input (Ctrl+D, or Ctrl+Z on Windows) to stop manual input",
            "",
        )

    def handle(self, token: str) -> AdmissionResult | None:
        """Process one typed token; None means the kiosk should close."""
        serial = parse_serial(token, offset=self.manager.config.serial_offset)
        if serial is None:
            return None
        result = self.manager.admit(serial)
        self.results.append(result)
        self.say(*render_result(result))
        return result

    def run(self, stream: TextIO) -> int:
        """Serve visitors until the stream ends. Returns how many were handled."""
        tokens = _tokens(stream)
        handled = 0
        while True:
            self.say("", RULE, "Welcome to the Entry Queue Management System!")
            self.say("Please enter your 7-digit serial number: ", end="")
            token = next(tokens, None)
            if token is None:
                break
            if self.handle(token) is None:
                break
            handled += 1
        self.say("")
        return handled
