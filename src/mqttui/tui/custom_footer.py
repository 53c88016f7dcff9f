"""Footer: connection status / last error line above the key help line."""

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from mqttui.core.session import CoreSnapshot
from mqttui.tui import rendering


class StatusFooter(Widget):
    """Data-driven footer.

    // [LAW:single-enforcer] update_display() is the sole render entry.
    """

    ALLOW_SELECT = False

    DEFAULT_CSS = """
    StatusFooter {
        dock: bottom;
        height: 2;
        padding: 0 1;
        layout: vertical;
    }

    StatusFooter Static {
        width: 100%;
        height: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="footer-status")
        yield Static("", id="footer-help")

    def update_display(self, snapshot: CoreSnapshot) -> None:
        self.query_one("#footer-status", Static).update(rendering.render_status(snapshot))
        self.query_one("#footer-help", Static).update(rendering.render_help(snapshot.focus))
