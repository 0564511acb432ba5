from __future__ import annotations

# MQTT adapter around the GateManager.
#
# Optional: only started when the CLI gets `--mqtt-host`. It does two things:
# 1) answers remote arrival requests with exactly the same rules as the kiosk
# 2) broadcasts periodic gate snapshots for observers/dashboards

import logging
import threading
from typing import Any, TYPE_CHECKING

from .errors import BAD_REQUEST, ErrorResponse
from .manager import GateManager
from .mqtt_topics import DEFAULT_NAMESPACE, arrival_requests, status_updates

if TYPE_CHECKING:
    from .mqtt_client import MqttClient

logger = logging.getLogger(__name__)


class MqttGateService:
    """Bridges MQTT requests and status broadcasts to a `GateManager`."""

    def __init__(self, *, mqtt: MqttClient, manager: GateManager, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.mqtt = mqtt
        self.manager = manager
        self.namespace = namespace

        self._stop_event = threading.Event()
        self._status_thread: threading.Thread | None = None

    def start(self, *, publish_status_every: float = 2.0) -> None:
        self.mqtt.subscribe(arrival_requests(self.namespace))
        self.mqtt.add_handler(self._handle_message)

        self._status_thread = threading.Thread(
            target=self._status_publisher_loop,
            args=(publish_status_every,),
            name="status-publisher",
            daemon=True,
        )
        self._status_thread.start()

    def stop(self) -> None:
        """Stop background threads. Call before disconnecting MQTT."""
        self._stop_event.set()
        t = self._status_thread
        if t and t.is_alive():
            t.join(timeout=1.0)
        # Final snapshot so observers see the drained gates.
        self.publish_status()

    def publish_status(self) -> None:
        self.mqtt.publish(status_updates(self.namespace), self.manager.status())

    def _status_publisher_loop(self, interval: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.publish_status()
            except (OSError, ValueError):
                logger.exception("status publish failed")
            self._stop_event.wait(interval)

    def _reply(self, reply_to: str, corr_id: str | None, message: dict[str, Any]) -> None:
        msg = dict(message)
        if corr_id is not None:
            msg["corr_id"] = corr_id
        self.mqtt.publish(reply_to, msg)

    def _handle_message(self, topic: str, msg: dict[str, Any]) -> None:
        if topic != arrival_requests(self.namespace) or msg.get("type") != "arrive":
            return

        corr_id = msg.get("corr_id") if isinstance(msg.get("corr_id"), str) else None
        reply_to = msg.get("reply_to") if isinstance(msg.get("reply_to"), str) else None
        if not reply_to:
            return

        serial = msg.get("serial")
        if isinstance(serial, bool) or not isinstance(serial, int):
            self._reply(reply_to, corr_id, ErrorResponse(BAD_REQUEST, "integer serial required").to_message())
            return

        offset = self.manager.config.serial_offset
        result = self.manager.admit(serial - offset)
        logger.debug("remote arrival %d -> %s", serial, result.outcome)
        self._reply(reply_to, corr_id, result.to_message(serial_offset=offset))
