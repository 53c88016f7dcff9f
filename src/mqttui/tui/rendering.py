"""Pure rendering: CoreSnapshot -> Rich Text.

No widgets and no live state here; every function takes a snapshot (or part
of one) and returns a renderable, so it can be tested without an app.
"""

from rich.text import Text

from mqttui.core.message_buffer import Message
from mqttui.core.navigation import Focus
from mqttui.core.session import ConnectionStatus, CoreSnapshot
from mqttui.tui.input_modes import FOOTER_KEYS


# Terminal colors (256-color palette numbers).
TITLE_STYLE = "bold color(205)"
SELECTED_STYLE = "bold color(170) on color(57)"
UNSELECTED_STYLE = "color(241)"
TOPIC_STYLE = "bold color(205)"
TIME_STYLE = "color(241)"
ERROR_STYLE = "bold color(196)"
HELP_STYLE = "italic color(241)"
OK_STYLE = "color(42)"

# Rows reserved outside the panes: title, status line, help footer.
CHROME_ROWS = 3
# Pane border (top + bottom).
BORDER_ROWS = 2
# Each message renders as a header row plus a payload row.
ROWS_PER_MESSAGE = 2

MARK_SUBSCRIBED = "✓ "
MARK_PENDING_SUBSCRIBE = "… "
MARK_PENDING_UNSUBSCRIBE = "× "
MARK_NONE = "  "

EMPTY_TOPICS = "No topics discovered yet..."
EMPTY_MESSAGES = "No messages yet..."


def pane_capacities(width: int, height: int) -> tuple[int, int]:
    """Visible (topic rows, messages) for a terminal of the given size."""
    inner = max(1, height - CHROME_ROWS - BORDER_ROWS)
    return inner, max(1, inner // ROWS_PER_MESSAGE)


def subscription_mark(snapshot: CoreSnapshot, topic: str) -> str:
    wanted = topic in snapshot.desired
    applied = topic in snapshot.applied
    if wanted and applied:
        return MARK_SUBSCRIBED
    if wanted:
        return MARK_PENDING_SUBSCRIBE
    if applied:
        return MARK_PENDING_UNSUBSCRIBE
    return MARK_NONE


def topics_title(snapshot: CoreSnapshot) -> str:
    if snapshot.topics:
        return f"Topics ({len(snapshot.topics)})"
    return "Topics"


def messages_title(snapshot: CoreSnapshot) -> str:
    if snapshot.message_count:
        return f"Messages ({snapshot.message_count})"
    return "Messages"


def render_topics(snapshot: CoreSnapshot) -> Text:
    if not snapshot.topics:
        return Text(EMPTY_TOPICS, style=UNSELECTED_STYLE)

    text = Text(no_wrap=True, overflow="ellipsis")
    highlight = snapshot.focus is Focus.TOPICS
    for row, (index, topic) in enumerate(snapshot.visible_topics()):
        if row:
            text.append("\n")
        selected = highlight and index == snapshot.selection
        text.append(
            subscription_mark(snapshot, topic) + topic,
            style=SELECTED_STYLE if selected else UNSELECTED_STYLE,
        )
    return text


def format_payload(message: Message) -> str:
    """Single display line for an opaque payload."""
    return " ".join(message.text.splitlines()) or "(empty)"


def render_message(message: Message) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(message.topic, style=TOPIC_STYLE)
    text.append(" ")
    text.append(message.received_at.strftime("%H:%M:%S"), style=TIME_STYLE)
    text.append("\n")
    text.append(format_payload(message))
    return text


def render_messages(snapshot: CoreSnapshot) -> Text:
    if not snapshot.messages:
        return Text(EMPTY_MESSAGES, style=UNSELECTED_STYLE)
    return Text("\n", no_wrap=True, overflow="ellipsis").join(
        render_message(message) for message in snapshot.messages
    )


_STATUS_TEXT = {
    ConnectionStatus.CONNECTING: ("Connecting to {broker}...", TIME_STYLE),
    ConnectionStatus.CONNECTED: ("Connected to {broker}", OK_STYLE),
    ConnectionStatus.DISCONNECTED: ("Disconnected from {broker}", ERROR_STYLE),
}


def render_status(snapshot: CoreSnapshot) -> Text:
    template, style = _STATUS_TEXT[snapshot.status]
    text = Text(template.format(broker=snapshot.broker or "broker"), style=style)
    if snapshot.last_error:
        text.append("  ")
        text.append(f"Error: {snapshot.last_error}", style=ERROR_STYLE)
    return text


def render_help(focus: Focus) -> Text:
    return Text(
        " • ".join(f"{key} {label}" for key, label in FOOTER_KEYS[focus]),
        style=HELP_STYLE,
    )
