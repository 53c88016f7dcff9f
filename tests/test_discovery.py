"""Tests for mqttui.pipeline.discovery."""

from mqttui.pipeline.discovery import DiscoveredTopics


def test_add_reports_new_topics_only():
    found = DiscoveredTopics()
    assert found.add("x/1") is True
    assert found.add("x/1") is False
    assert len(found) == 1


def test_snapshot_sorted():
    found = DiscoveredTopics()
    for topic in ("b", "c", "a"):
        found.add(topic)
    assert found.snapshot() == ("a", "b", "c")


def test_clear():
    found = DiscoveredTopics()
    found.add("a")
    found.clear()
    assert found.snapshot() == ()
