"""Message stream: append-only log of received messages plus its scroll window.

// [LAW:one-source-of-truth] Arrival order is the only order; timestamps are
//   display data and are never used to sort.
// [LAW:single-enforcer] append() is the sole owner of the auto-follow rule.

Growth is unbounded: nothing is ever dropped until reset().
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mqttui.config import DEFAULT_FOLLOW_MARGIN
from mqttui.core.viewport import PaneViewport


@dataclass(frozen=True)
class Message:
    """One delivered message. Payload is opaque bytes; never validated."""

    topic: str
    payload: bytes
    received_at: datetime

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


class MessageStreamBuffer:
    """Ordered message log with a clamped, optionally tail-following viewport."""

    def __init__(self, capacity: int = 1, follow_margin: int = DEFAULT_FOLLOW_MARGIN):
        self._messages: list[Message] = []
        self.viewport = PaneViewport(capacity=capacity)
        self.follow_margin = follow_margin

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def cursor(self) -> int:
        return self.viewport.cursor

    def append(self, message: Message, *, focused: bool = False) -> None:
        """Add a message at the tail.

        The window follows the new tail when the message pane is focused or
        the cursor was within `follow_margin` rows of the previous tail
        position; otherwise a reader scrolled back into history stays put.
        """
        previous_tail = self.viewport.max_cursor
        follow = focused or self.viewport.cursor >= previous_tail - self.follow_margin

        self._messages.append(message)
        self.viewport.set_length(len(self._messages))
        if follow:
            self.viewport.scroll_to(self.viewport.max_cursor)

    def reset(self) -> None:
        self._messages.clear()
        self.viewport.set_length(0)
        self.viewport.scroll_to(0)

    def scroll_by(self, delta: int) -> None:
        self.viewport.scroll_to(self.viewport.cursor + delta)

    def scroll_to(self, cursor: int) -> None:
        self.viewport.scroll_to(cursor)

    def resize(self, capacity: int) -> None:
        pinned = self.viewport.at_tail
        self.viewport.resize(capacity)
        if pinned:
            self.viewport.scroll_to(self.viewport.max_cursor)

    def visible_window(self, capacity: Optional[int] = None) -> tuple[Message, ...]:
        """Up to `capacity` consecutive messages from the cursor, never past the end."""
        size = self.viewport.capacity if capacity is None else max(0, capacity)
        start = min(self.viewport.cursor, max(0, len(self._messages) - size))
        return tuple(self._messages[start:start + size])
