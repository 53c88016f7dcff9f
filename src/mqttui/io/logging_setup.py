"""Logging for a full-screen MQTT browser.

The TUI owns the terminal, so every record goes to a rotating file; nothing is
written to stdout/stderr while the app runs. Three sources end up in that file:

    mqttui.*        our modules (core, gateway, tui)
    mqttui.paho     paho-mqtt's client log (CONNACK, SUBACK, PINGREQ ...)
    py.warnings     captured warnings

With console=True a TextualHandler is added as well, which forwards records to
`textual console` while an app is running.

// [LAW:single-enforcer] Handler wiring happens in this module only.
// [LAW:one-source-of-truth] configure() returns the resolved LoggingRuntime;
//   callers log its file path instead of recomputing it.

Environment:
    MQTTUI_LOG_LEVEL   DEBUG/INFO/WARNING/ERROR (default INFO)
    MQTTUI_LOG_FILE    exact log file path
    MQTTUI_LOG_DIR     directory for per-run files (default $XDG_STATE_HOME/mqttui)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from textual.logging import TextualHandler

from mqttui.pipeline.gateway import PAHO_LOGGER

ROOT_LOGGER = "mqttui"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)-12s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str
    console: bool


_RUNTIME: LoggingRuntime | None = None


def resolve_level(raw: str | None) -> tuple[str, int]:
    """Map a level name to (canonical name, level). Unknown names mean INFO."""
    level = _LEVELS.get((raw or "").strip().upper(), logging.INFO)
    return logging.getLevelName(level), level


def log_file_for(client_id: str, environ: Mapping[str, str]) -> Path:
    """One file per run, named after the MQTT client id."""
    explicit = environ.get("MQTTUI_LOG_FILE", "").strip()
    if explicit:
        return Path(explicit).expanduser()

    log_dir = environ.get("MQTTUI_LOG_DIR", "").strip()
    if not log_dir:
        state_home = environ.get("XDG_STATE_HOME", "").strip() or "~/.local/state"
        log_dir = os.path.join(state_home, "mqttui")

    # Client ids may contain anything the broker accepts; keep the file name tame.
    safe_id = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in client_id) or "mqttui"
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return Path(log_dir).expanduser() / f"{safe_id}-{stamp}.log"


def configure(
    client_id: str = "mqttui",
    *,
    console: bool = False,
    environ: Mapping[str, str] | None = None,
) -> LoggingRuntime:
    """Wire the mqttui logger hierarchy. Repeated calls return the first runtime."""
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    environ = os.environ if environ is None else environ
    level_name, level = resolve_level(environ.get("MQTTUI_LOG_LEVEL"))
    path = log_file_for(client_id, environ)
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(level)
    root.propagate = False
    root.addHandler(file_handler)
    if console:
        console_handler = TextualHandler()
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        root.addHandler(console_handler)

    # paho logs every keepalive ping at DEBUG; only show it when asked for DEBUG.
    logging.getLogger(PAHO_LOGGER).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    logging.captureWarnings(True)
    warnings_logger = logging.getLogger("py.warnings")
    warnings_logger.handlers = [file_handler]
    warnings_logger.propagate = False

    _RUNTIME = LoggingRuntime(
        level_name=level_name, level=level, file_path=str(path), console=console
    )
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME
