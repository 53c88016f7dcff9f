"""Thread-safe accumulator for topic names seen during discovery.

Written from paho's network thread, read from the discovery timer thread.
snapshot() always returns a sorted copy; the live set never leaves the lock.
"""

import threading


class DiscoveredTopics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._topics: set[str] = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._topics)

    def add(self, topic: str) -> bool:
        """Record a topic. Returns True if it was not seen before."""
        with self._lock:
            if topic in self._topics:
                return False
            self._topics.add(topic)
            return True

    def snapshot(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._topics))

    def clear(self) -> None:
        with self._lock:
            self._topics.clear()
