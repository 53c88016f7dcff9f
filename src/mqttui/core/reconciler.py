"""Subscription reconciliation: desired (user intent) vs applied (broker-confirmed).

// [LAW:single-enforcer] diff() is the only place the subscribe/unsubscribe
//   sets are computed.
// [LAW:one-source-of-truth] `applied` changes only on acknowledged results
//   of the current connection generation.

No transactional semantics. Every topic succeeds or fails on its own; a failed
topic stays out of `applied`, so a later pass with the same intent asks again.
Broker-driven passes (retry_failed=False) leave failed topics alone until the
user acts or the connection is re-established, so a topic the broker keeps
rejecting is not re-requested on every incoming message.
"""

import logging
from collections.abc import Mapping, Set

from mqttui.event_types import (
    GatewayRequest,
    Subscribe,
    SubscriptionAction,
    Unsubscribe,
)

logger = logging.getLogger(__name__)


def diff(desired: Mapping[str, bool], applied: Set[str]) -> tuple[list[str], list[str]]:
    """Return (to_subscribe, to_unsubscribe), each sorted.

    Only entries of `desired` whose flag is true count as wanted.
    """
    wanted = {topic for topic, on in desired.items() if on}
    return sorted(wanted - applied), sorted(applied - wanted)


class SubscriptionReconciler:
    """Tracks what the gateway has applied and turns intent into requests."""

    def __init__(self) -> None:
        self.applied: set[str] = set()
        self.connected: bool = False
        self.generation: int = 0
        self._in_flight: dict[str, SubscriptionAction] = {}
        self._failed: set[str] = set()

    def _new_generation(self, connected: bool) -> None:
        self.generation += 1
        self.connected = connected
        self.applied.clear()
        self._in_flight.clear()
        self._failed.clear()

    def connection_established(self) -> None:
        """A fresh broker session has no subscriptions: diff against empty."""
        self._new_generation(connected=True)

    def connection_dropped(self) -> None:
        self._new_generation(connected=False)

    def _held(self, topic: str, retry_failed: bool) -> bool:
        if topic in self._in_flight:
            return True
        return topic in self._failed and not retry_failed

    def reconcile(
        self, desired: Mapping[str, bool], *, retry_failed: bool = True
    ) -> list[GatewayRequest]:
        """Compute the requests that bring `applied` in line with `desired`.

        Returns nothing while disconnected; intent keeps accumulating in
        `desired` and is replayed in full after the next connect. With
        retry_failed=False, topics whose last action failed are skipped.
        """
        if not self.connected:
            return []

        to_subscribe, to_unsubscribe = diff(desired, self.applied)
        requests: list[GatewayRequest] = []
        for topic in to_subscribe:
            if self._held(topic, retry_failed):
                continue
            self._in_flight[topic] = SubscriptionAction.SUBSCRIBE
            requests.append(Subscribe(topic=topic, generation=self.generation))
        for topic in to_unsubscribe:
            if self._held(topic, retry_failed):
                continue
            self._in_flight[topic] = SubscriptionAction.UNSUBSCRIBE
            requests.append(Unsubscribe(topic=topic, generation=self.generation))
        return requests

    def record_result(
        self, action: SubscriptionAction, topic: str, generation: int, ok: bool
    ) -> bool:
        """Apply one gateway result. Returns False when the result is stale."""
        if generation != self.generation:
            logger.debug(
                "dropping stale %s result for %s (generation %d, current %d)",
                action.value, topic, generation, self.generation,
            )
            return False

        if self._in_flight.get(topic) is action:
            del self._in_flight[topic]
        if not ok:
            self._failed.add(topic)
            return True
        self._failed.discard(topic)
        if action is SubscriptionAction.SUBSCRIBE:
            self.applied.add(topic)
        else:
            self.applied.discard(topic)
        return True
