"""MQTT topic helpers.

We keep topic construction in one place so the simulation and its remote
clients agree on naming.

Topic layout under a configurable namespace (default: `stadium/v0`):

Request/response:
- `<ns>/arrivals/requests`
    Remote visitors present a serial here (same rules as the kiosk).
- `<ns>/arrivals/responses/<client_id>`

Streaming/broadcast:
- `<ns>/status/updates`
    The simulation broadcasts periodic gate snapshots.
"""

from __future__ import annotations

DEFAULT_NAMESPACE = "stadium/v0"


def arrival_requests(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/arrivals/requests"


def arrival_responses(client_id: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/arrivals/responses/{client_id}"


def status_updates(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/status/updates"
