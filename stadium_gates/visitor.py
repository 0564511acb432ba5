from __future__ import annotations

# Remote visitor client.
#
# A visitor is a short-lived process:
# - connect to the broker
# - present a serial on the arrivals topic
# - wait for the simulation's answer
# - print it and exit

import argparse
import time
from typing import Any

from .mqtt_client import MqttClient
from .mqtt_topics import DEFAULT_NAMESPACE, arrival_requests, arrival_responses


def request_entry(*, mqtt_host: str, mqtt_port: int, namespace: str, serial: int, timeout: float = 5.0) -> dict[str, Any]:
    # Unique client id so several visitors can queue at once.
    client_id = f"visitor-{serial}-{int(time.time() * 1000)}"
    mqtt = MqttClient(client_id=client_id, host=mqtt_host, port=mqtt_port)
    mqtt.start()

    reply_topic = arrival_responses(client_id, namespace)
    mqtt.subscribe(reply_topic)

    try:
        return mqtt.request(
            request_topic=arrival_requests(namespace),
            response_topic=reply_topic,
            message={"type": "arrive", "serial": int(serial)},
            timeout=timeout,
        )
    finally:
        mqtt.stop()


def describe_response(resp: dict[str, Any]) -> str:
    rtype = resp.get("type")
    serial = resp.get("serial")
    if rtype == "assigned":
        recommended = " ".join(str(g) for g in resp.get("recommended", []))
        return (
            f"[visitor {serial}] assigned to Gate {resp['gate']} "
            f"(estimated wait {resp['estimated_wait']} min, recommended: {recommended})"
        )
    if rtype == "admitted":
        return f"[visitor {serial}] VIP, entered at minute {resp.get('minute')}"
    return f"[visitor {serial}] {resp.get('code', 'error')}: {resp.get('message', resp)}"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Present one serial to a running simulation (MQTT)")
    parser.add_argument("--serial", type=int, required=True, help="7-digit serial, e.g. 1000005")
    parser.add_argument("--mqtt-host", default="127.0.0.1")
    parser.add_argument("--mqtt-port", type=int, default=1883)
    parser.add_argument("--namespace", default=DEFAULT_NAMESPACE)
    parser.add_argument("--timeout", type=float, default=5.0)
    args = parser.parse_args(argv)

    resp = request_entry(
        mqtt_host=args.mqtt_host,
        mqtt_port=args.mqtt_port,
        namespace=args.namespace,
        serial=args.serial,
        timeout=args.timeout,
    )
    print(describe_response(resp))


if __name__ == "__main__":
    main()
