"""CLI entry point for mqttui."""

import argparse
import logging
import os
import queue
from collections.abc import Mapping
from typing import Optional

import mqttui
import mqttui.config
import mqttui.io.logging_setup
from mqttui.core.session import CoreSession
from mqttui.errors import ConfigError
from mqttui.pipeline.gateway import BrokerGateway
from mqttui.tui.app import MqttuiApp

logger = logging.getLogger(__name__)


def build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mqttui",
        description="Browse MQTT topics and tail live messages in the terminal",
    )
    parser.add_argument(
        "--broker",
        type=str,
        default=environ.get("MQTT_BROKER", ""),
        help=f"Broker URL (default: {mqttui.config.DEFAULT_BROKER}). Env: MQTT_BROKER",
    )
    parser.add_argument(
        "--username",
        type=str,
        default=environ.get("MQTT_USERNAME", ""),
        help="Broker username. Env: MQTT_USERNAME",
    )
    parser.add_argument(
        "--password",
        type=str,
        default=environ.get("MQTT_PASSWORD", ""),
        help="Broker password. Env: MQTT_PASSWORD",
    )
    parser.add_argument(
        "--client-id",
        type=str,
        default=environ.get("MQTT_CLIENT_ID", ""),
        help=f"MQTT client id (default: {mqttui.config.DEFAULT_CLIENT_ID}). Env: MQTT_CLIENT_ID",
    )
    parser.add_argument(
        "--follow-margin",
        type=str,
        default=environ.get("MQTTUI_FOLLOW_MARGIN", ""),
        help=(
            "Rows from the tail within which new messages keep the log following "
            f"(default: {mqttui.config.DEFAULT_FOLLOW_MARGIN}). Env: MQTTUI_FOLLOW_MARGIN"
        ),
    )
    parser.add_argument(
        "--discovery-window",
        type=str,
        default=environ.get("MQTTUI_DISCOVERY_WINDOW", ""),
        help=(
            "Seconds to collect topics on # before listing them "
            f"(default: {mqttui.config.DEFAULT_DISCOVERY_WINDOW}). Env: MQTTUI_DISCOVERY_WINDOW"
        ),
    )
    parser.add_argument(
        "--log-console",
        action="store_const",
        const="1",
        default=environ.get("MQTTUI_LOG_CONSOLE", ""),
        help="Also send log records to `textual console`. Env: MQTTUI_LOG_CONSOLE",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {mqttui.__version__}")
    return parser


def load_config(
    argv: Optional[list[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> mqttui.config.AppConfig:
    """Resolve configuration: command line over environment over defaults."""
    environ = os.environ if environ is None else environ
    parser = build_parser(environ)
    args = parser.parse_args(argv)

    # [LAW:single-enforcer] Validation lives in mqttui.config; flags are fed
    # through the same environment-shaped mapping.
    merged = dict(environ)
    merged.update({
        "MQTT_BROKER": args.broker,
        "MQTT_USERNAME": args.username,
        "MQTT_PASSWORD": args.password,
        "MQTT_CLIENT_ID": args.client_id,
        "MQTTUI_FOLLOW_MARGIN": args.follow_margin,
        "MQTTUI_DISCOVERY_WINDOW": args.discovery_window,
        "MQTTUI_LOG_CONSOLE": args.log_console,
    })
    try:
        return mqttui.config.from_env(merged)
    except ConfigError as e:
        parser.error(str(e))


def main(argv: Optional[list[str]] = None) -> None:
    config = load_config(argv)

    log_runtime = mqttui.io.logging_setup.configure(
        config.broker.client_id, console=config.log_console
    )
    logger.info(
        "mqttui %s logging level=%s file=%s console=%s",
        mqttui.__version__,
        log_runtime.level_name,
        log_runtime.file_path,
        log_runtime.console,
    )
    logger.info(
        "broker=%s client_id=%s follow_margin=%d discovery_window=%.1fs",
        config.broker.url,
        config.broker.client_id,
        config.follow_margin,
        config.discovery_window,
    )

    events: queue.Queue = queue.Queue()
    try:
        gateway = BrokerGateway(
            config.broker, events, discovery_window=config.discovery_window
        )
    except (ValueError, OSError) as e:
        # Offline mode: the UI still runs, the status line shows why.
        logger.error("failed to create MQTT client: %s", e)
        gateway = None
        offline_reason = f"offline: failed to create MQTT client: {e}"
    else:
        offline_reason = ""

    session = CoreSession(follow_margin=config.follow_margin, broker=config.broker.url)
    if offline_reason:
        session.note_error(offline_reason)
    app = MqttuiApp(session, events, gateway=gateway)
    app.run()

    print(f"Disconnected from {config.broker.url}. Goodbye!")

