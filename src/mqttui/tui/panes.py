"""The two scrolling panes. Both are dumb views over a CoreSnapshot.

Scrolling is owned by the core, not by Textual: each pane only ever shows the
rows the snapshot says are visible, so there is nothing to scroll here.
"""

from textual.widgets import Static

from mqttui.core.navigation import Focus
from mqttui.core.session import CoreSnapshot
from mqttui.tui import rendering


class Pane(Static):
    DEFAULT_CSS = """
    Pane {
        height: 100%;
        border: round #585858;
        border-title-color: #ff5faf;
        border-title-style: bold;
        padding: 0 1;
    }

    Pane.-active {
        border: round #ff5faf;
    }
    """

    FOCUS: Focus = Focus.TOPICS

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)

    def update_snapshot(self, snapshot: CoreSnapshot) -> None:
        self.set_class(snapshot.focus is self.FOCUS, "-active")
        self.border_title = self._title(snapshot)
        self.update(self._body(snapshot))

    def _title(self, snapshot: CoreSnapshot) -> str:
        raise NotImplementedError

    def _body(self, snapshot: CoreSnapshot):
        raise NotImplementedError


class TopicsPane(Pane):
    """Catalog of discovered topics with subscription marks."""

    DEFAULT_CSS = """
    TopicsPane {
        width: 1fr;
    }
    """

    FOCUS = Focus.TOPICS

    def _title(self, snapshot: CoreSnapshot) -> str:
        return rendering.topics_title(snapshot)

    def _body(self, snapshot: CoreSnapshot):
        return rendering.render_topics(snapshot)


class MessagesPane(Pane):
    """Window onto the message stream."""

    DEFAULT_CSS = """
    MessagesPane {
        width: 2fr;
    }
    """

    FOCUS = Focus.MESSAGES

    def _title(self, snapshot: CoreSnapshot) -> str:
        return rendering.messages_title(snapshot)

    def _body(self, snapshot: CoreSnapshot):
        return rendering.render_messages(snapshot)
