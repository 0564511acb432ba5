from __future__ import annotations

# Single-entrypoint CLI.
#
#     python -m stadium_gates.app run [--population M] [--gates N] ...
#     python -m stadium_gates.app arrive --serial 1000005 --mqtt-host HOST
#
# `run` is the interactive simulation on stdin/stdout. With `--mqtt-host` it
# also accepts arrivals over MQTT and broadcasts gate snapshots; `arrive` is
# the matching remote visitor.

import argparse
import sys

from .config import SimulationConfig
from .logging_config import configure_from_env, enable_console_logging
from .mqtt_topics import DEFAULT_NAMESPACE


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="Stadium entry gates simulation - main entrypoint")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_mqtt_args(p: argparse.ArgumentParser, *, host_default: str | None) -> None:
        p.add_argument("--mqtt-host", default=host_default)
        p.add_argument("--mqtt-port", type=int, default=1883)
        p.add_argument("--namespace", default=DEFAULT_NAMESPACE)

    # ---- Normal operation ----
    p_run = sub.add_parser("run", help="Run the interactive gate simulation (serials on stdin)")
    p_run.add_argument("--population", type=int, default=defaults.population, help="M: number of ticket holders")
    p_run.add_argument("--gates", type=int, default=defaults.gates, help="N: number of entry gates")
    p_run.add_argument(
        "--minutes-per-slot",
        type=int,
        default=defaults.minutes_per_slot,
        help="p: simulated minutes per queue position",
    )
    p_run.add_argument("--seed", type=int, default=defaults.seed, help="seed for the initial queue layout")
    p_run.add_argument(
        "--tick-seconds",
        type=float,
        default=defaults.tick_seconds,
        help="real seconds per simulated minute",
    )
    p_run.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (logs go to stderr)")
    add_mqtt_args(p_run, host_default=None)
    p_run.add_argument(
        "--publish-status-every",
        type=float,
        default=2.0,
        help="seconds between MQTT gate status broadcasts",
    )

    # ---- Remote visitor ----
    p_arrive = sub.add_parser("arrive", help="Present one serial to a running simulation over MQTT")
    add_mqtt_args(p_arrive, host_default="127.0.0.1")
    p_arrive.add_argument("--serial", type=int, required=True)
    p_arrive.add_argument("--timeout", type=float, default=5.0)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.cmd == "run":
        from .simulation import MqttSettings, run_simulation

        if args.log_level:
            enable_console_logging(args.log_level)
        else:
            configure_from_env()

        try:
            config = SimulationConfig(
                population=args.population,
                gates=args.gates,
                minutes_per_slot=args.minutes_per_slot,
                seed=args.seed,
                tick_seconds=args.tick_seconds,
            ).validate()
        except ValueError as e:
            raise SystemExit(f"error: {e}")

        mqtt = None
        if args.mqtt_host:
            mqtt = MqttSettings(
                host=args.mqtt_host,
                port=args.mqtt_port,
                namespace=args.namespace,
                publish_status_every=args.publish_status_every,
            )

        try:
            run_simulation(config, stream=sys.stdin, mqtt=mqtt)
        except KeyboardInterrupt:
            print("\n[gates] interrupted")
        return

    if args.cmd == "arrive":
        from .visitor import main as run

        run(
            [
                "--serial",
                str(args.serial),
                "--mqtt-host",
                args.mqtt_host,
                "--mqtt-port",
                str(args.mqtt_port),
                "--namespace",
                args.namespace,
                "--timeout",
                str(args.timeout),
            ]
        )
        return


if __name__ == "__main__":
    main()
