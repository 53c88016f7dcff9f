"""Broker and tuning configuration for mqttui.

Values come from the environment (MQTT_BROKER, MQTT_USERNAME, MQTT_PASSWORD,
MQTT_CLIENT_ID, MQTTUI_FOLLOW_MARGIN, MQTTUI_DISCOVERY_WINDOW,
MQTTUI_LOG_CONSOLE). An empty value means "use the default"; anything else is
validated here and nowhere else.

// [LAW:single-enforcer] parse_broker_url is the sole broker address validator.

This module is STABLE. Import as: import mqttui.config
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlsplit

from mqttui.errors import ConfigError


DEFAULT_BROKER = "tcp://localhost:1883"
DEFAULT_CLIENT_ID = "mqttui"
DEFAULT_FOLLOW_MARGIN = 5
DEFAULT_DISCOVERY_WINDOW = 2.0

# scheme -> (transport, tls, default port)
_SCHEMES: dict[str, tuple[str, bool, int]] = {
    "tcp": ("tcp", False, 1883),
    "mqtt": ("tcp", False, 1883),
    "ssl": ("tcp", True, 8883),
    "tls": ("tcp", True, 8883),
    "mqtts": ("tcp", True, 8883),
    "ws": ("websockets", False, 80),
    "wss": ("websockets", True, 443),
}


@dataclass(frozen=True)
class BrokerConfig:
    """Resolved broker connection parameters."""

    url: str
    host: str
    port: int
    transport: str = "tcp"
    tls: bool = False
    ws_path: str = "/mqtt"
    username: str = ""
    password: str = ""
    client_id: str = DEFAULT_CLIENT_ID


@dataclass(frozen=True)
class AppConfig:
    broker: BrokerConfig
    follow_margin: int = DEFAULT_FOLLOW_MARGIN
    discovery_window: float = DEFAULT_DISCOVERY_WINDOW
    log_console: bool = False


def parse_broker_url(raw: str) -> BrokerConfig:
    """Parse `scheme://host[:port][/path]` (or bare `host[:port]`) into a BrokerConfig."""
    url = (raw or "").strip() or DEFAULT_BROKER
    if "://" not in url:
        url = f"tcp://{url}"

    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _SCHEMES:
        raise ConfigError(f"unsupported broker scheme {parts.scheme!r} in {raw!r}")
    transport, tls, default_port = _SCHEMES[scheme]

    try:
        port = parts.port
    except ValueError as e:
        raise ConfigError(f"invalid broker port in {raw!r}") from e
    if not parts.hostname:
        raise ConfigError(f"missing broker host in {raw!r}")

    return BrokerConfig(
        url=url,
        host=parts.hostname,
        port=port if port is not None else default_port,
        transport=transport,
        tls=tls,
        ws_path=parts.path or "/mqtt",
    )


def _env(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key, "")
    return value if value.strip() else default


def parse_follow_margin(raw) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError as e:
        raise ConfigError(f"follow margin must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"follow margin must be >= 0, got {value}")
    return value


def parse_discovery_window(raw) -> float:
    try:
        value = float(str(raw).strip())
    except ValueError as e:
        raise ConfigError(f"discovery window must be a number of seconds, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"discovery window must be >= 0, got {value}")
    return value


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_flag(raw) -> bool:
    value = str(raw).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"expected a yes/no value, got {raw!r}")


def from_env(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the AppConfig from environment variables."""
    environ = os.environ if environ is None else environ
    broker = replace(
        parse_broker_url(_env(environ, "MQTT_BROKER", DEFAULT_BROKER)),
        username=_env(environ, "MQTT_USERNAME", ""),
        password=_env(environ, "MQTT_PASSWORD", ""),
        client_id=_env(environ, "MQTT_CLIENT_ID", DEFAULT_CLIENT_ID),
    )
    return AppConfig(
        broker=broker,
        follow_margin=parse_follow_margin(
            _env(environ, "MQTTUI_FOLLOW_MARGIN", str(DEFAULT_FOLLOW_MARGIN))
        ),
        discovery_window=parse_discovery_window(
            _env(environ, "MQTTUI_DISCOVERY_WINDOW", str(DEFAULT_DISCOVERY_WINDOW))
        ),
        log_console=parse_flag(_env(environ, "MQTTUI_LOG_CONSOLE", "0")),
    )
