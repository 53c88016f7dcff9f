"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin coordinator: CoreSession decides, the gateway
//   acts, rendering draws. This module only moves values between them.
// [LAW:one-source-of-truth] CoreSession owns all UI state; widgets are redrawn
//   from a fresh snapshot after every event and every key.
"""

import logging
import queue
from typing import Optional

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Static

# Module-level imports (never function-level for mqttui modules)
import mqttui.tui.input_modes
import mqttui.tui.rendering
from mqttui.core.navigation import NavAction
from mqttui.core.session import CoreSession
from mqttui.event_types import GatewayEvent, GatewayRequest
from mqttui.tui.custom_footer import StatusFooter
from mqttui.tui.panes import MessagesPane, TopicsPane

logger = logging.getLogger(__name__)

TITLE = "MQTT TUI Browser"


class BrokerEvent(Message, bubble=False):
    """Thread-safe bridge: drain thread → app message pump."""

    def __init__(self, event: GatewayEvent) -> None:
        self.event = event
        super().__init__()


class MqttuiApp(App):
    """Dual-pane MQTT topic browser."""

    DEFAULT_CSS = """
    #title {
        height: 1;
        padding: 0 1;
        color: #ff5faf;
        text-style: bold;
    }

    #panes {
        height: 1fr;
    }
    """

    def __init__(
        self,
        session: CoreSession,
        event_queue: queue.Queue,
        gateway=None,
    ):
        super().__init__()
        self._session = session
        self._event_queue = event_queue
        self._gateway = gateway
        self._stopping = False

    @property
    def session(self) -> CoreSession:
        return self._session

    # ─── Layout ────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Static(TITLE, id="title")
        with Horizontal(id="panes"):
            yield TopicsPane(id="topics-pane")
            yield MessagesPane(id="messages-pane")
        yield StatusFooter()

    def on_mount(self) -> None:
        self._apply_size(self.size.width, self.size.height)
        self.run_worker(self._drain_events, thread=True, exclusive=False)
        if self._gateway is None:
            logger.warning("running without a broker gateway")
            if not self._session.last_error:
                self._session.note_error("offline: no broker client available")
        else:
            self._execute(self._session.start())
        self.call_after_refresh(self._refresh_view)

    def on_resize(self, event) -> None:
        self._apply_size(event.size.width, event.size.height)
        self._refresh_view()

    def on_unmount(self) -> None:
        self._stop_core()

    def _apply_size(self, width: int, height: int) -> None:
        topic_capacity, message_capacity = mqttui.tui.rendering.pane_capacities(width, height)
        self._session.resize(topic_capacity, message_capacity)

    # ─── Gateway bridge ────────────────────────────────────────────────

    def _drain_events(self) -> None:
        """Bridge thread: queue.get → post_message into Textual's message pump."""
        while not self._stopping:
            try:
                event = self._event_queue.get(timeout=0.25)
            except queue.Empty:
                continue
            self.post_message(BrokerEvent(event))

    def on_broker_event(self, message: BrokerEvent) -> None:
        self._handle_event(message.event)

    def _handle_event(self, event: GatewayEvent) -> None:
        try:
            self._execute(self._session.handle_event(event))
        except Exception as e:
            logger.exception("uncaught exception handling %r", event)
            self._session.note_error(f"internal error: {e}")
        self._refresh_view()

    def _execute(self, requests: list[GatewayRequest]) -> None:
        if self._gateway is None:
            return
        for request in requests:
            self._gateway.execute(request)

    def _stop_core(self) -> None:
        if self._stopping:
            return
        self._stopping = True
        self._execute(self._session.quit())

    # ─── Rendering ─────────────────────────────────────────────────────

    def _query_safe(self, widget_type):
        try:
            return self.query_one(widget_type)
        except NoMatches:
            return None

    def _refresh_view(self) -> None:
        snapshot = self._session.snapshot()
        for pane in (self._query_safe(TopicsPane), self._query_safe(MessagesPane)):
            if pane is not None:
                pane.update_snapshot(snapshot)
        footer = self._query_safe(StatusFooter)
        if footer is not None:
            footer.update_display(snapshot)

    # ─── Actions ───────────────────────────────────────────────────────

    def action_nav(self, name: str) -> None:
        self._execute(self._session.handle_input(NavAction(name)))
        self._refresh_view()

    def action_quit(self) -> None:
        self._stop_core()
        self.exit()

    # ─── Key dispatch ──────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher."""
        keymap = mqttui.tui.input_modes.FOCUS_KEYMAP[self._session.navigation.focus]
        action_name: Optional[str] = keymap.get(event.key)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)
