"""Tests for mqttui.io.logging_setup."""

import logging

from textual.logging import TextualHandler

import mqttui.io.logging_setup as logging_setup
from mqttui.pipeline.gateway import PAHO_LOGGER


def _handlers():
    return logging.getLogger(logging_setup.ROOT_LOGGER).handlers


def _flush():
    for handler in _handlers():
        handler.flush()


class TestConfigure:
    def test_records_from_modules_and_paho_reach_the_file(self, tmp_path):
        log_file = tmp_path / "nested" / "run.log"
        runtime = logging_setup.configure(environ={"MQTTUI_LOG_FILE": str(log_file)})

        logging.getLogger("mqttui.pipeline.gateway").info("connected to tcp://b:1883")
        logging.getLogger(PAHO_LOGGER).warning("Connection lost")
        _flush()

        text = log_file.read_text(encoding="utf-8")
        assert runtime.file_path == str(log_file)
        assert "mqttui.pipeline.gateway: connected to tcp://b:1883" in text
        assert "mqttui.paho: Connection lost" in text

    def test_paho_debug_chatter_hidden_at_info(self, tmp_path):
        log_file = tmp_path / "run.log"
        logging_setup.configure(environ={"MQTTUI_LOG_FILE": str(log_file)})
        logging.getLogger(PAHO_LOGGER).debug("Sending PINGREQ")
        logging.getLogger(PAHO_LOGGER).info("Received SUBACK")
        _flush()
        text = log_file.read_text(encoding="utf-8")
        assert "PINGREQ" not in text
        assert "SUBACK" not in text

    def test_paho_debug_shown_at_debug(self, tmp_path):
        log_file = tmp_path / "run.log"
        runtime = logging_setup.configure(
            environ={"MQTTUI_LOG_FILE": str(log_file), "MQTTUI_LOG_LEVEL": "debug"}
        )
        logging.getLogger(PAHO_LOGGER).debug("Sending PINGREQ")
        _flush()
        assert runtime.level_name == "DEBUG"
        assert "PINGREQ" in log_file.read_text(encoding="utf-8")

    def test_is_idempotent(self, tmp_path):
        first = logging_setup.configure(environ={"MQTTUI_LOG_FILE": str(tmp_path / "a.log")})
        again = logging_setup.configure(environ={"MQTTUI_LOG_FILE": str(tmp_path / "b.log")})
        assert again is first
        assert logging_setup.get_runtime() is first

    def test_console_switch_adds_textual_handler(self, tmp_path):
        runtime = logging_setup.configure(
            console=True, environ={"MQTTUI_LOG_FILE": str(tmp_path / "a.log")}
        )
        assert runtime.console
        assert any(isinstance(h, TextualHandler) for h in _handlers())

    def test_no_console_handler_by_default(self, tmp_path):
        logging_setup.configure(environ={"MQTTUI_LOG_FILE": str(tmp_path / "a.log")})
        assert not any(isinstance(h, TextualHandler) for h in _handlers())


class TestLogFile:
    def test_named_after_client_id(self, tmp_path):
        path = logging_setup.log_file_for("plant/viewer 1", {"MQTTUI_LOG_DIR": str(tmp_path)})
        assert path.parent == tmp_path
        assert path.name.startswith("plant_viewer_1-")
        assert path.suffix == ".log"

    def test_defaults_to_xdg_state_dir(self, tmp_path):
        path = logging_setup.log_file_for("mqttui", {"XDG_STATE_HOME": str(tmp_path)})
        assert path.parent == tmp_path / "mqttui"

    def test_explicit_file_wins(self, tmp_path):
        env = {"MQTTUI_LOG_FILE": str(tmp_path / "x.log"), "MQTTUI_LOG_DIR": "/elsewhere"}
        assert logging_setup.log_file_for("mqttui", env) == tmp_path / "x.log"


def test_unknown_level_falls_back_to_info():
    assert logging_setup.resolve_level("chatty") == ("INFO", logging.INFO)
    assert logging_setup.resolve_level("warn") == ("WARNING", logging.WARNING)
