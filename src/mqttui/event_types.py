"""Type-safe events and requests exchanged between the gateway and the core.

// [LAW:one-source-of-truth] The class IS the type: no event_type string field.
// [LAW:single-enforcer] The gateway only ever talks to the core through these
//   values, posted on one ordered queue.

This module is STABLE: safe for `from` imports everywhere.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mqttui.errors import (
    BrokerConnectionError,
    DiscoveryError,
    SubscriptionActionError,
)


# ─── Enums ────────────────────────────────────────────────────────────────────


class SubscriptionAction(Enum):
    """Direction of a per-topic subscription change."""

    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


# ─── Gateway → core events ────────────────────────────────────────────────────


@dataclass(frozen=True)
class GatewayEvent:
    """Base class for everything the gateway posts to the core."""


@dataclass(frozen=True)
class Connected(GatewayEvent):
    """The broker accepted the connection (first connect or reconnect)."""

    broker: str = ""


@dataclass(frozen=True)
class ConnectionFailed(GatewayEvent):
    """A connect attempt failed before the session was established."""

    error: BrokerConnectionError


@dataclass(frozen=True)
class ConnectionLost(GatewayEvent):
    """An established connection dropped without being asked to."""

    error: BrokerConnectionError


@dataclass(frozen=True)
class TopicsDiscovered(GatewayEvent):
    """Summary of the topics seen during one discovery window."""

    topics: tuple[str, ...] = ()


@dataclass(frozen=True)
class DiscoveryFailed(GatewayEvent):
    error: DiscoveryError


@dataclass(frozen=True)
class MessageReceived(GatewayEvent):
    """A message arrived on a topic the gateway has an active subscription for."""

    topic: str
    payload: bytes
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SubscriptionApplied(GatewayEvent):
    """The broker acknowledged a subscribe/unsubscribe."""

    action: SubscriptionAction
    topic: str
    generation: int


@dataclass(frozen=True)
class SubscriptionFailed(GatewayEvent):
    action: SubscriptionAction
    topic: str
    generation: int
    error: SubscriptionActionError


# ─── Core → gateway requests ──────────────────────────────────────────────────
# Fire-and-forget: results come back later as GatewayEvents.


@dataclass(frozen=True)
class GatewayRequest:
    """Base class for actions the core asks the gateway to perform."""


@dataclass(frozen=True)
class Connect(GatewayRequest):
    pass


@dataclass(frozen=True)
class DiscoverTopics(GatewayRequest):
    pass


@dataclass(frozen=True)
class Subscribe(GatewayRequest):
    topic: str
    generation: int


@dataclass(frozen=True)
class Unsubscribe(GatewayRequest):
    topic: str
    generation: int


@dataclass(frozen=True)
class Disconnect(GatewayRequest):
    pass
