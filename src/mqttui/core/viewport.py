"""Pane viewport: scroll cursor and selection kept consistent in one value.

// [LAW:single-enforcer] clamp_and_follow is the only place the
//   selection-inside-window invariant is enforced; scroll_to is the only
//   place the cursor range is enforced.

Invariants after every method:
    0 <= cursor <= max(0, length - capacity)
    0 <= selection <= max(0, length - 1)       (selecting viewports only)
"""


class PaneViewport:
    """Scroll cursor (first visible row) plus optional selection for one pane.

    A selecting viewport (topic list) scrolls to follow its selection. A plain
    viewport (message log) is a pure window and ignores `selection`.
    """

    __slots__ = ("capacity", "length", "cursor", "selection", "selecting")

    def __init__(self, capacity: int = 1, length: int = 0, *, selecting: bool = False):
        self.capacity: int = max(1, capacity)
        self.length: int = max(0, length)
        self.cursor: int = 0
        self.selection: int = 0
        self.selecting: bool = selecting

    def __repr__(self) -> str:
        return (
            f"PaneViewport(capacity={self.capacity}, length={self.length}, "
            f"cursor={self.cursor}, selection={self.selection})"
        )

    @property
    def max_cursor(self) -> int:
        return max(0, self.length - self.capacity)

    @property
    def at_tail(self) -> bool:
        return self.cursor >= self.max_cursor

    def scroll_to(self, cursor: int) -> None:
        self.cursor = min(max(cursor, 0), self.max_cursor)

    def clamp_and_follow(self, selection: int) -> None:
        """Move the selection, then scroll just enough to keep it visible."""
        self.selection = min(max(selection, 0), max(0, self.length - 1))
        if self.selection < self.cursor:
            self.cursor = self.selection
        elif self.selection >= self.cursor + self.capacity:
            self.cursor = self.selection - self.capacity + 1
        self.scroll_to(self.cursor)

    def _reclamp(self) -> None:
        if self.selecting:
            self.clamp_and_follow(self.selection)
        else:
            self.scroll_to(self.cursor)

    def set_length(self, length: int) -> None:
        self.length = max(0, length)
        self._reclamp()

    def resize(self, capacity: int) -> None:
        self.capacity = max(1, capacity)
        self._reclamp()

    def visible_range(self) -> range:
        return range(self.cursor, min(self.cursor + self.capacity, self.length))
