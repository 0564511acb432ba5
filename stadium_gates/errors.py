"""Shared error envelope.

We keep error messages consistent across the kiosk and the MQTT service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

INVALID_SERIAL = "invalid_serial"
ALREADY_ENTERED = "already_entered"
ALREADY_QUEUED = "already_queued"
BAD_REQUEST = "bad_request"


@dataclass(frozen=True)
class ErrorResponse:
    code: str
    message: str

    def to_message(self, *, corr_id: str | None = None) -> dict[str, Any]:
        msg: dict[str, Any] = {"type": "error", "code": self.code, "message": self.message}
        if corr_id is not None:
            msg["corr_id"] = corr_id
        return msg


class InvariantError(RuntimeError):
    """Shared state broke one of its own rules (a bug, never a user mistake)."""
