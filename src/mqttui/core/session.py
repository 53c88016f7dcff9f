"""Coordination core: one owned state, mutated only from the event loop.

Gateway events and user inputs go in; gateway requests and a read-only
snapshot come out. Nothing here blocks, locks or touches the network.

// [LAW:single-enforcer] CoreSession is the only writer of registry, buffer,
//   navigation and reconciler state.
// [LAW:dataflow-not-control-flow] Events dispatch through _EVENT_HANDLERS; an
//   unknown event type runs the no-op handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from mqttui.config import DEFAULT_FOLLOW_MARGIN
from mqttui.core.message_buffer import Message, MessageStreamBuffer
from mqttui.core.navigation import Focus, NavAction, PaneNavigation
from mqttui.core.reconciler import SubscriptionReconciler
from mqttui.core.topic_registry import TopicRegistry
from mqttui.event_types import (
    Connect,
    Connected,
    ConnectionFailed,
    ConnectionLost,
    Disconnect,
    DiscoverTopics,
    DiscoveryFailed,
    GatewayEvent,
    GatewayRequest,
    MessageReceived,
    SubscriptionApplied,
    SubscriptionFailed,
    TopicsDiscovered,
)

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class CoreSnapshot:
    """Everything the presentation layer may read, copied out of the core."""

    topics: tuple[str, ...]
    desired: frozenset[str]
    applied: frozenset[str]
    selection: int
    topic_scroll: int
    topic_capacity: int
    messages: tuple[Message, ...]
    message_scroll: int
    message_count: int
    focus: Focus
    last_error: str
    status: ConnectionStatus
    broker: str

    def visible_topics(self) -> list[tuple[int, str]]:
        end = min(self.topic_scroll + self.topic_capacity, len(self.topics))
        return [(i, self.topics[i]) for i in range(self.topic_scroll, end)]


class CoreSession:
    """Owns the topic catalog, subscription intent, message stream and cursors."""

    def __init__(
        self,
        *,
        follow_margin: int = DEFAULT_FOLLOW_MARGIN,
        topic_capacity: int = 1,
        message_capacity: int = 1,
        broker: str = "",
    ):
        self.registry = TopicRegistry()
        self.reconciler = SubscriptionReconciler()
        self.buffer = MessageStreamBuffer(capacity=message_capacity, follow_margin=follow_margin)
        self.navigation = PaneNavigation(self.buffer, capacity=topic_capacity)
        self.broker = broker
        self.status = ConnectionStatus.DISCONNECTED
        self.last_error = ""
        self.stopped = False

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def start(self) -> list[GatewayRequest]:
        self.status = ConnectionStatus.CONNECTING
        return [Connect()]

    def quit(self) -> list[GatewayRequest]:
        """Stop processing. Anything arriving afterwards is discarded."""
        if self.stopped:
            return []
        self.stopped = True
        return [Disconnect()]

    # ─── Inputs ────────────────────────────────────────────────────────

    def handle_event(self, event: GatewayEvent) -> list[GatewayRequest]:
        if self.stopped:
            return []
        handler = _EVENT_HANDLERS.get(type(event), _noop)
        requests = handler(self, event)
        # Broker traffic never re-requests a failed topic; user input and
        # reconnects do.
        requests.extend(
            self.reconciler.reconcile(self.navigation.desired, retry_failed=False)
        )
        return requests

    def handle_input(self, action: NavAction) -> list[GatewayRequest]:
        if self.stopped:
            return []
        requests: list[GatewayRequest] = []
        if action is NavAction.REDISCOVER:
            if self.status is ConnectionStatus.CONNECTED:
                requests.append(DiscoverTopics())
        else:
            self.navigation.apply(action)
        requests.extend(self.reconciler.reconcile(self.navigation.desired))
        return requests

    def resize(self, topic_capacity: int, message_capacity: int) -> None:
        self.navigation.resize(topic_capacity)
        self.buffer.resize(message_capacity)

    def note_error(self, text: str) -> None:
        self.last_error = text

    # ─── Event handlers ────────────────────────────────────────────────

    def _on_connected(self, event: Connected) -> list[GatewayRequest]:
        logger.info("connected to %s", event.broker or self.broker)
        self.status = ConnectionStatus.CONNECTED
        self.last_error = ""
        self.reconciler.connection_established()
        return [DiscoverTopics()]

    def _on_connection_failed(self, event: ConnectionFailed) -> list[GatewayRequest]:
        logger.warning("connection failed: %s", event.error)
        self.status = ConnectionStatus.DISCONNECTED
        self.last_error = f"Connection failed: {event.error}"
        self.reconciler.connection_dropped()
        return []

    def _on_connection_lost(self, event: ConnectionLost) -> list[GatewayRequest]:
        logger.warning("connection lost: %s", event.error)
        self.status = ConnectionStatus.DISCONNECTED
        self.last_error = f"Connection lost: {event.error}"
        self.reconciler.connection_dropped()
        return []

    def _on_topics_discovered(self, event: TopicsDiscovered) -> list[GatewayRequest]:
        if self.registry.observe_many(event.topics):
            self.navigation.set_topics(self.registry.snapshot())
        logger.info("discovery summary: %d topics, catalog %d", len(event.topics), len(self.registry))
        return []

    def _on_discovery_failed(self, event: DiscoveryFailed) -> list[GatewayRequest]:
        logger.warning("topic discovery failed: %s", event.error)
        self.last_error = f"Discovery failed: {event.error}"
        return []

    def _on_message(self, event: MessageReceived) -> list[GatewayRequest]:
        if self.registry.observe(event.topic):
            self.navigation.set_topics(self.registry.snapshot())
        self.buffer.append(
            Message(topic=event.topic, payload=event.payload, received_at=event.timestamp),
            focused=self.navigation.focus is Focus.MESSAGES,
        )
        return []

    def _on_subscription_applied(self, event: SubscriptionApplied) -> list[GatewayRequest]:
        if self.reconciler.record_result(event.action, event.topic, event.generation, ok=True):
            logger.info("%s %s acknowledged", event.action.value, event.topic)
            self.last_error = ""
        return []

    def _on_subscription_failed(self, event: SubscriptionFailed) -> list[GatewayRequest]:
        if self.reconciler.record_result(event.action, event.topic, event.generation, ok=False):
            logger.warning("%s", event.error)
            self.last_error = str(event.error)
        return []

    # ─── Presentation ──────────────────────────────────────────────────

    def snapshot(self) -> CoreSnapshot:
        nav = self.navigation
        return CoreSnapshot(
            topics=nav.topics,
            desired=frozenset(nav.subscribed_topics()),
            applied=frozenset(self.reconciler.applied),
            selection=nav.topic_view.selection,
            topic_scroll=nav.topic_view.cursor,
            topic_capacity=nav.topic_view.capacity,
            messages=self.buffer.visible_window(),
            message_scroll=self.buffer.cursor,
            message_count=len(self.buffer),
            focus=nav.focus,
            last_error=self.last_error,
            status=self.status,
            broker=self.broker,
        )


def _noop(session: CoreSession, event: GatewayEvent) -> list[GatewayRequest]:
    return []


_EVENT_HANDLERS = {
    Connected: CoreSession._on_connected,
    ConnectionFailed: CoreSession._on_connection_failed,
    ConnectionLost: CoreSession._on_connection_lost,
    TopicsDiscovered: CoreSession._on_topics_discovered,
    DiscoveryFailed: CoreSession._on_discovery_failed,
    MessageReceived: CoreSession._on_message,
    SubscriptionApplied: CoreSession._on_subscription_applied,
    SubscriptionFailed: CoreSession._on_subscription_failed,
}
