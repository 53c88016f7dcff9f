"""Tests for mqttui.core.message_buffer: ordering, auto-follow, windows."""

from datetime import datetime

import pytest

from mqttui.core.message_buffer import Message, MessageStreamBuffer


def _msg(i: int, topic: str = "t") -> Message:
    return Message(topic=topic, payload=f"m{i}".encode(), received_at=datetime(2024, 1, 1))


def _fill(buffer: MessageStreamBuffer, n: int, **kwargs) -> None:
    for i in range(n):
        buffer.append(_msg(i), **kwargs)


class TestMessage:
    def test_frozen(self):
        m = _msg(0)
        with pytest.raises(AttributeError):
            m.topic = "other"

    def test_text_replaces_invalid_utf8(self):
        m = Message(topic="t", payload=b"\xff\xfeok", received_at=datetime(2024, 1, 1))
        assert m.text.endswith("ok")
        assert "�" in m.text


class TestAppend:
    def test_arrival_order_preserved(self, buffer):
        _fill(buffer, 3)
        assert [m.payload for m in buffer.visible_window()] == [b"m0", b"m1", b"m2"]

    def test_follows_tail_when_already_there(self, buffer):
        _fill(buffer, 20)
        assert buffer.cursor == 15
        assert [m.payload for m in buffer.visible_window()][-1] == b"m19"

    def test_follows_within_margin(self):
        buffer = MessageStreamBuffer(capacity=2, follow_margin=5)
        _fill(buffer, 20)
        buffer.scroll_to(buffer.viewport.max_cursor - 5)
        buffer.append(_msg(99))
        assert buffer.cursor == buffer.viewport.max_cursor

    def test_stays_put_when_scrolled_back(self):
        buffer = MessageStreamBuffer(capacity=2, follow_margin=5)
        _fill(buffer, 20)
        buffer.scroll_to(3)
        buffer.append(_msg(99))
        assert buffer.cursor == 3

    def test_focused_pane_always_follows(self):
        buffer = MessageStreamBuffer(capacity=2, follow_margin=0)
        _fill(buffer, 20)
        buffer.scroll_to(0)
        buffer.append(_msg(99), focused=True)
        assert buffer.cursor == buffer.viewport.max_cursor

    def test_zero_margin_follows_only_at_tail(self):
        buffer = MessageStreamBuffer(capacity=2, follow_margin=0)
        _fill(buffer, 10)
        buffer.scroll_by(-1)
        buffer.append(_msg(99))
        assert buffer.cursor == 7


class TestScrolling:
    def test_scroll_clamped(self, buffer):
        _fill(buffer, 12)
        buffer.scroll_by(-100)
        assert buffer.cursor == 0
        buffer.scroll_by(100)
        assert buffer.cursor == 7

    def test_reset_empties_and_rewinds(self, buffer):
        _fill(buffer, 10)
        buffer.reset()
        assert len(buffer) == 0
        assert buffer.cursor == 0
        assert buffer.visible_window() == ()

    def test_resize_keeps_tail_pinned(self, buffer):
        _fill(buffer, 12)
        buffer.resize(3)
        assert buffer.cursor == 9

    def test_resize_keeps_history_position(self, buffer):
        _fill(buffer, 12)
        buffer.scroll_to(2)
        buffer.resize(3)
        assert buffer.cursor == 2


class TestVisibleWindow:
    def test_window_is_consecutive_from_cursor(self, buffer):
        _fill(buffer, 12)
        buffer.scroll_to(4)
        assert [m.payload for m in buffer.visible_window()] == [b"m4", b"m5", b"m6", b"m7", b"m8"]

    def test_short_buffer_returns_everything(self, buffer):
        _fill(buffer, 2)
        assert len(buffer.visible_window()) == 2

    def test_explicit_capacity_never_reads_past_end(self, buffer):
        _fill(buffer, 12)
        window = buffer.visible_window(capacity=10)
        assert len(window) == 10
        assert window[-1].payload == b"m11"
