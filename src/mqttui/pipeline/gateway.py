"""Broker gateway: paho-mqtt client that reports everything as posted events.

paho runs the network loop (and automatic reconnects) on its own thread and
calls back from there. The gateway never touches core state: each callback is
reduced to an immutable event and put on the inbound queue, which the TUI
drains into its message pump.

// [LAW:single-enforcer] _post is the only way out of this module.
// [LAW:locality-or-seam] paho is reached only through the client built by
//   client_factory; tests substitute a mock there.

Discovery subscribes to `#` for a fixed window, then posts one
TopicsDiscovered summary and drops the wildcard again. The wait happens on a
timer thread, never on the caller's. A window belongs to one connection:
connect and disconnect callbacks cancel it, so the DiscoverTopics that follows
every Connected always opens a fresh one.
"""

import logging
import queue
import threading
from collections.abc import Callable
from datetime import datetime
from typing import NamedTuple, Optional

import paho.mqtt.client as mqtt

from mqttui.config import DEFAULT_DISCOVERY_WINDOW, BrokerConfig
from mqttui.errors import (
    BrokerConnectionError,
    DiscoveryError,
    SubscriptionActionError,
)
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
    Subscribe,
    SubscriptionAction,
    SubscriptionApplied,
    SubscriptionFailed,
    TopicsDiscovered,
    Unsubscribe,
)
from mqttui.pipeline.discovery import DiscoveredTopics

logger = logging.getLogger(__name__)

DISCOVERY_FILTER = "#"
KEEPALIVE_SECONDS = 60
# paho's own client log, routed into the mqttui log file.
PAHO_LOGGER = "mqttui.paho"


class _Pending(NamedTuple):
    """An unacknowledged SUBSCRIBE/UNSUBSCRIBE. action=None marks discovery."""

    action: Optional[SubscriptionAction]
    topic: str
    generation: int


def make_client(config: BrokerConfig) -> mqtt.Client:
    """Build a paho client (callback API v2) for the configured broker."""
    client = mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=config.client_id,
        transport=config.transport,
    )
    if config.username:
        client.username_pw_set(config.username, config.password or None)
    if config.tls:
        client.tls_set()
    if config.transport == "websockets":
        client.ws_set_options(path=config.ws_path)
    client.reconnect_delay_set(min_delay=1, max_delay=30)
    client.enable_logger(logging.getLogger(PAHO_LOGGER))
    return client


class BrokerGateway:
    """connect / discover / subscribe / unsubscribe / disconnect, all fire-and-forget."""

    def __init__(
        self,
        config: BrokerConfig,
        events: queue.Queue,
        *,
        discovery_window: float = DEFAULT_DISCOVERY_WINDOW,
        qos: int = 0,
        client_factory: Callable[[BrokerConfig], mqtt.Client] = make_client,
    ):
        self._config = config
        self._events = events
        self._discovery_window = discovery_window
        self._qos = qos
        self._lock = threading.Lock()
        self._pending: dict[int, _Pending] = {}
        self._active: set[str] = set()
        self._discovered = DiscoveredTopics()
        self._discovery_timer: Optional[threading.Timer] = None
        self._discovery_token = 0
        self._closing = False

        self._client = client_factory(config)
        self._client.on_connect = self._on_connect
        self._client.on_connect_fail = self._on_connect_fail
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message
        self._client.on_subscribe = self._on_subscribe
        self._client.on_unsubscribe = self._on_unsubscribe

        # [LAW:dataflow-not-control-flow] Request type -> handler table.
        self._handlers: dict[type, Callable[[GatewayRequest], None]] = {
            Connect: lambda _req: self.connect(),
            DiscoverTopics: lambda _req: self.discover_topics(),
            Subscribe: lambda req: self.subscribe(req.topic, req.generation),
            Unsubscribe: lambda req: self.unsubscribe(req.topic, req.generation),
            Disconnect: lambda _req: self.disconnect(),
        }

    @property
    def broker(self) -> str:
        return self._config.url

    @property
    def discovering(self) -> bool:
        return self._discovery_timer is not None

    def active_topics(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._active)

    def _post(self, event: GatewayEvent) -> None:
        self._events.put(event)

    # ─── Requests (called from the UI thread) ──────────────────────────

    def execute(self, request: GatewayRequest) -> None:
        handler = self._handlers.get(type(request))
        if handler is None:
            logger.warning("ignoring unknown gateway request %r", request)
            return
        handler(request)

    def connect(self) -> None:
        self._closing = False
        logger.info("connecting to %s as %s", self._config.url, self._config.client_id)
        try:
            self._client.connect_async(
                self._config.host, self._config.port, keepalive=KEEPALIVE_SECONDS
            )
            self._client.loop_start()
        except (OSError, ValueError) as e:
            logger.warning("connect to %s failed: %s", self._config.url, e)
            self._post(ConnectionFailed(
                BrokerConnectionError(f"could not connect to {self._config.url}: {e}")
            ))

    def discover_topics(self) -> None:
        with self._lock:
            if self._discovery_timer is not None:
                logger.debug("discovery already running, ignoring request")
                return
            rc, mid = self._client.subscribe(DISCOVERY_FILTER, qos=self._qos)
            if rc == mqtt.MQTT_ERR_SUCCESS:
                self._pending[mid] = _Pending(None, DISCOVERY_FILTER, 0)
                self._discovered.clear()
                self._discovery_token += 1
                timer = threading.Timer(
                    self._discovery_window,
                    self._finish_discovery,
                    args=(self._discovery_token,),
                )
                timer.daemon = True
                self._discovery_timer = timer
                timer.start()
        if rc != mqtt.MQTT_ERR_SUCCESS:
            self._post(DiscoveryFailed(DiscoveryError(
                f"could not subscribe {DISCOVERY_FILTER}: {mqtt.error_string(rc)}"
            )))
            return
        logger.info("discovering topics for %.1fs", self._discovery_window)

    def subscribe(self, topic: str, generation: int) -> None:
        self._request(SubscriptionAction.SUBSCRIBE, topic, generation)

    def unsubscribe(self, topic: str, generation: int) -> None:
        self._request(SubscriptionAction.UNSUBSCRIBE, topic, generation)

    def _request(self, action: SubscriptionAction, topic: str, generation: int) -> None:
        try:
            with self._lock:
                if action is SubscriptionAction.SUBSCRIBE:
                    rc, mid = self._client.subscribe(topic, qos=self._qos)
                else:
                    rc, mid = self._client.unsubscribe(topic)
                if rc == mqtt.MQTT_ERR_SUCCESS:
                    self._pending[mid] = _Pending(action, topic, generation)
                    return
            reason = mqtt.error_string(rc)
        except ValueError as e:
            reason = str(e)
        self._post(SubscriptionFailed(
            action=action,
            topic=topic,
            generation=generation,
            error=SubscriptionActionError(action, topic, reason),
        ))

    def disconnect(self) -> None:
        with self._lock:
            self._closing = True
            self._cancel_discovery()
        logger.info("disconnecting from %s", self._config.url)
        try:
            self._client.disconnect()
        finally:
            self._client.loop_stop()

    # ─── Timer thread ──────────────────────────────────────────────────

    def _finish_discovery(self, token: int) -> None:
        with self._lock:
            if token != self._discovery_token or self._discovery_timer is None:
                # Superseded by a reconnect or cancelled.
                return
            self._discovery_timer = None
            if self._closing:
                return
            rc, mid = self._client.unsubscribe(DISCOVERY_FILTER)
            if rc == mqtt.MQTT_ERR_SUCCESS:
                self._pending[mid] = _Pending(None, DISCOVERY_FILTER, 0)
        topics = self._discovered.snapshot()
        logger.info("discovery window closed with %d topics", len(topics))
        self._post(TopicsDiscovered(topics=topics))

    # ─── paho callbacks (network thread) ───────────────────────────────

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            logger.warning("broker %s refused connection: %s", self._config.url, reason_code)
            self._post(ConnectionFailed(
                BrokerConnectionError(f"{self._config.url} refused connection: {reason_code}")
            ))
            return
        # A clean session starts with no subscriptions on the broker side.
        with self._lock:
            self._active.clear()
            self._pending.clear()
            self._cancel_discovery()
        logger.info("connected to %s", self._config.url)
        self._post(Connected(broker=self._config.url))

    def _on_connect_fail(self, client, userdata) -> None:
        logger.warning("could not reach %s", self._config.url)
        self._post(ConnectionFailed(
            BrokerConnectionError(f"could not connect to {self._config.url}")
        ))

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None) -> None:
        with self._lock:
            self._active.clear()
            self._pending.clear()
            self._cancel_discovery()
            closing = self._closing
        if closing:
            return
        logger.warning("connection to %s lost: %s", self._config.url, reason_code)
        self._post(ConnectionLost(
            BrokerConnectionError(f"connection to {self._config.url} lost: {reason_code}")
        ))

    def _on_message(self, client, userdata, message) -> None:
        topic = message.topic
        if self._discovery_timer is not None:
            self._discovered.add(topic)
        with self._lock:
            deliver = topic in self._active and not self._closing
        if deliver:
            self._post(MessageReceived(
                topic=topic,
                payload=bytes(message.payload),
                timestamp=datetime.now(),
            ))

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties=None) -> None:
        self._on_ack(mid, reason_code_list)

    def _on_unsubscribe(self, client, userdata, mid, reason_code_list, properties=None) -> None:
        self._on_ack(mid, reason_code_list)

    def _on_ack(self, mid: int, reason_code_list) -> None:
        failure = next((rc for rc in reason_code_list if rc.is_failure), None)
        with self._lock:
            pending = self._pending.pop(mid, None)
            if pending is None or self._closing:
                return
            if pending.action is None:
                self._discovery_ack(failure)
                return
            if failure is None:
                if pending.action is SubscriptionAction.SUBSCRIBE:
                    self._active.add(pending.topic)
                else:
                    self._active.discard(pending.topic)

        if failure is None:
            self._post(SubscriptionApplied(
                action=pending.action, topic=pending.topic, generation=pending.generation
            ))
            return
        self._post(SubscriptionFailed(
            action=pending.action,
            topic=pending.topic,
            generation=pending.generation,
            error=SubscriptionActionError(pending.action, pending.topic, str(failure)),
        ))

    def _cancel_discovery(self) -> None:
        """Called with the lock held. A window never outlives its connection."""
        timer, self._discovery_timer = self._discovery_timer, None
        if timer is not None:
            timer.cancel()
            self._discovery_token += 1

    def _discovery_ack(self, failure) -> None:
        """Called with the lock held for the wildcard SUBACK/UNSUBACK."""
        if failure is None or self._discovery_timer is None:
            return
        self._cancel_discovery()
        self._post(DiscoveryFailed(DiscoveryError(
            f"broker rejected {DISCOVERY_FILTER} subscription: {failure}"
        )))
