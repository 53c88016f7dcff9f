"""Pytest configuration and shared fixtures for mqttui tests."""

import queue

import pytest

import mqttui.io.logging_setup
from mqttui.core.message_buffer import MessageStreamBuffer
from mqttui.core.navigation import PaneNavigation
from tests.harness.builders import make_session


@pytest.fixture(autouse=True)
def _isolated_logging(monkeypatch, tmp_path):
    """Never let a test write logs under the real home directory."""
    monkeypatch.setattr(mqttui.io.logging_setup, "_RUNTIME", None)
    monkeypatch.setenv("MQTTUI_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("MQTTUI_LOG_FILE", raising=False)
    monkeypatch.delenv("MQTTUI_LOG_LEVEL", raising=False)


@pytest.fixture
def buffer():
    return MessageStreamBuffer(capacity=5, follow_margin=5)


@pytest.fixture
def nav(buffer):
    navigation = PaneNavigation(buffer, capacity=3)
    navigation.set_topics(("a/1", "a/2", "b/1", "b/2", "c/1", "c/2"))
    return navigation


@pytest.fixture
def session():
    return make_session(("a/1", "b/2"))


@pytest.fixture
def events():
    return queue.Queue()
