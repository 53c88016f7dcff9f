"""Pane navigation state machine: focus, topic selection, message scrolling.

State is Focus x (topic viewport with selection) x (message viewport). Every
transition is synchronous and total: applying any action in any state is
valid, and actions that make no sense for the focused pane are no-ops.

// [LAW:dataflow-not-control-flow] apply() dispatches through _TRANSITIONS;
//   unknown actions fall through to a no-op.
// [LAW:one-source-of-truth] `desired` is the user's subscription intent. Only
//   toggle_subscription writes it, and entries are never removed.
"""

from enum import Enum

from mqttui.core.message_buffer import MessageStreamBuffer
from mqttui.core.viewport import PaneViewport


class Focus(Enum):
    TOPICS = "topics"
    MESSAGES = "messages"


class NavAction(Enum):
    """User intents understood by the core."""

    TOGGLE_FOCUS = "toggle_focus"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    MOVE_TOP = "move_top"
    MOVE_BOTTOM = "move_bottom"
    TOGGLE_SUBSCRIPTION = "toggle_subscription"
    RESET_MESSAGES = "reset_messages"
    REDISCOVER = "rediscover"


class PaneNavigation:
    """Owns focus, the topic viewport and the subscription intent."""

    def __init__(self, buffer: MessageStreamBuffer, capacity: int = 1):
        self.focus: Focus = Focus.TOPICS
        self.topics: tuple[str, ...] = ()
        self.desired: dict[str, bool] = {}
        self.topic_view = PaneViewport(capacity=capacity, selecting=True)
        self.buffer = buffer

    @property
    def selection(self) -> int:
        return self.topic_view.selection

    @property
    def selected_topic(self) -> str | None:
        if not self.topics:
            return None
        return self.topics[self.topic_view.selection]

    def subscribed_topics(self) -> list[str]:
        return sorted(topic for topic, on in self.desired.items() if on)

    # ─── Transitions ───────────────────────────────────────────────────

    def apply(self, action: NavAction) -> None:
        transition = _TRANSITIONS.get(action, _noop)
        transition(self)

    def toggle_focus(self) -> None:
        self.focus = Focus.MESSAGES if self.focus is Focus.TOPICS else Focus.TOPICS

    def move(self, delta: int) -> None:
        if self.focus is Focus.TOPICS:
            self.topic_view.clamp_and_follow(self.topic_view.selection + delta)
        else:
            self.buffer.scroll_by(delta)

    def page(self, direction: int) -> None:
        view = self.topic_view if self.focus is Focus.TOPICS else self.buffer.viewport
        self.move(direction * view.capacity)

    def move_to_edge(self, bottom: bool) -> None:
        if self.focus is Focus.TOPICS:
            target = len(self.topics) - 1 if bottom else 0
            self.topic_view.clamp_and_follow(target)
        else:
            target = self.buffer.viewport.max_cursor if bottom else 0
            self.buffer.scroll_to(target)

    def toggle_subscription(self) -> None:
        if self.focus is not Focus.TOPICS or not self.topics:
            return
        topic = self.topics[self.topic_view.selection]
        self.desired[topic] = not self.desired.get(topic, False)

    def reset_messages(self) -> None:
        self.buffer.reset()

    # ─── External updates ──────────────────────────────────────────────

    def set_topics(self, topics: tuple[str, ...]) -> None:
        """Replace the catalog: re-clamp the selection, restart scrolling at the top."""
        self.topics = tuple(topics)
        self.topic_view.length = len(self.topics)
        self.topic_view.cursor = 0
        self.topic_view.clamp_and_follow(self.topic_view.selection)

    def resize(self, capacity: int) -> None:
        self.topic_view.resize(capacity)


def _noop(nav: PaneNavigation) -> None:
    pass


_TRANSITIONS = {
    NavAction.TOGGLE_FOCUS: PaneNavigation.toggle_focus,
    NavAction.MOVE_UP: lambda nav: nav.move(-1),
    NavAction.MOVE_DOWN: lambda nav: nav.move(1),
    NavAction.PAGE_UP: lambda nav: nav.page(-1),
    NavAction.PAGE_DOWN: lambda nav: nav.page(1),
    NavAction.MOVE_TOP: lambda nav: nav.move_to_edge(bottom=False),
    NavAction.MOVE_BOTTOM: lambda nav: nav.move_to_edge(bottom=True),
    NavAction.TOGGLE_SUBSCRIPTION: PaneNavigation.toggle_subscription,
    NavAction.RESET_MESSAGES: PaneNavigation.reset_messages,
}
