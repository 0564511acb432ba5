from __future__ import annotations

# One complete simulation run.
#
# Order of events:
# 1) VIPs enter, half of the crowd is queued at random gates, queues balanced
# 2) the admission worker starts admitting one person per gate per minute
# 3) the kiosk serves visitors until its input stream closes
# 4) everybody who never showed up is queued at the best gate
# 5) wait until every gate has drained, stop the worker, report metrics

import logging
from dataclasses import dataclass
from typing import TextIO

from .config import SimulationConfig
from .kiosk import Kiosk
from .manager import GateManager
from .metrics import SimulationMetrics, compute_metrics
from .mqtt_topics import DEFAULT_NAMESPACE
from .worker import AdmissionWorker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MqttSettings:
    host: str
    port: int = 1883
    namespace: str = DEFAULT_NAMESPACE
    publish_status_every: float = 2.0


def run_simulation(
    config: SimulationConfig,
    *,
    stream: TextIO,
    out: TextIO | None = None,
    mqtt: MqttSettings | None = None,
    manager: GateManager | None = None,
) -> SimulationMetrics:
    """Run the whole scenario and return the final metrics."""
    manager = manager or GateManager(config)
    manager.prepare()

    kiosk = Kiosk(manager, out=out)
    kiosk.banner()

    mqtt_client = None
    service = None
    if mqtt is not None:
        # Import MQTT dependencies only when the bus is requested.
        from .mqtt_client import MqttClient
        from .service import MqttGateService

        mqtt_client = MqttClient(client_id=f"stadium-{id(manager)}", host=mqtt.host, port=mqtt.port)
        mqtt_client.start()
        service = MqttGateService(mqtt=mqtt_client, manager=manager, namespace=mqtt.namespace)
        service.start(publish_status_every=mqtt.publish_status_every)

    worker = AdmissionWorker(manager)
    worker.start()
    try:
        handled = kiosk.run(stream)
        logger.info("kiosk closed after %d visitors", handled)

        swept = manager.assign_remaining()
        if swept:
            kiosk.say(f"[gates] {len(swept)} late visitor(s) auto-assigned to the shortest queues")

        # Block on the completion counter; wake once per tick to make sure the
        # worker is still there to drain the gates.
        while not manager.wait_until_drained(timeout=manager.config.tick_seconds):
            if not worker.is_alive():
                raise RuntimeError("admission worker stopped before the gates drained")
    finally:
        worker.stop()
        if service is not None:
            service.stop()
        if mqtt_client is not None:
            mqtt_client.stop()

    metrics = compute_metrics(manager.people, total_seconds=manager.clock.elapsed_seconds())
    kiosk.say("", metrics.render())
    return metrics
