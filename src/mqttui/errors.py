"""Error taxonomy for mqttui.

Gateway failures never cross the event loop as raised exceptions: the gateway
wraps them in one of the GatewayError subclasses and posts them inside an event.
The core reduces whatever arrives to a single "last error" string.

This module is STABLE. Safe for `from` imports everywhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mqttui.event_types import SubscriptionAction


class MqttuiError(Exception):
    """Base class for all mqttui errors."""


class ConfigError(MqttuiError, ValueError):
    """Invalid broker address or tuning value."""


class GatewayError(MqttuiError):
    """Base for failures reported asynchronously by the broker gateway."""


class BrokerConnectionError(GatewayError):
    """Connect, reconnect or connection-loss failure."""


class DiscoveryError(GatewayError):
    """The wildcard discovery subscription could not be placed."""


class SubscriptionActionError(GatewayError):
    """A subscribe or unsubscribe for one topic failed."""

    def __init__(self, action: SubscriptionAction, topic: str, reason: str) -> None:
        self.action = action
        self.topic = topic
        self.reason = reason
        super().__init__(f"failed to {action.value} {topic}: {reason}")
