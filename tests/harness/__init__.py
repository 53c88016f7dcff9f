"""Textual in-process test harness for mqttui.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, deliver, ...
"""

from tests.harness.app_runner import RecordingGateway, run_app
from tests.harness.interactions import (
    deliver,
    deliver_all,
    press_and_settle,
    press_sequence,
    resize_and_settle,
)
from tests.harness.content import widget_text
from tests.harness.builders import (
    make_applied,
    make_message_event,
    make_session,
)

__all__ = [
    "RecordingGateway",
    "run_app",
    "deliver",
    "deliver_all",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "make_applied",
    "make_message_event",
    "make_session",
    "widget_text",
]
