"""Topic catalog: every topic seen this session, deduplicated and sorted.

// [LAW:one-source-of-truth] snapshot() is the catalog; callers never hold the set.

Writes replace the published tuple under a lock; readers take the current
tuple without locking (it is immutable), so a render can read while a
notification is being observed.
"""

import threading


class TopicRegistry:
    """Grow-only catalog of topic names."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._topics: set[str] = set()
        self._sorted: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self._sorted)

    def __contains__(self, topic: object) -> bool:
        return topic in self._topics

    def observe(self, topic: str) -> bool:
        """Add a topic if it is new. Returns True when the catalog changed."""
        if topic in self._topics:
            return False
        with self._lock:
            if topic in self._topics:
                return False
            self._topics.add(topic)
            self._sorted = tuple(sorted(self._topics))
        return True

    def observe_many(self, topics) -> bool:
        """Add a batch of topics, re-sorting at most once."""
        with self._lock:
            fresh = set(topics) - self._topics
            if not fresh:
                return False
            self._topics |= fresh
            self._sorted = tuple(sorted(self._topics))
        return True

    def snapshot(self) -> tuple[str, ...]:
        return self._sorted
