"""Main Textual dashboard for bandwidth monitor."""

import logging
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Header, Footer, Static
from textual.timer import Timer
from typing import Optional

from ..collection.collector import CollectorStats
from ..network.public_ip import PublicIpResolver
from ..session.session import Command, MonitoringSession
from .widgets.interface_panel import InterfacePanel
from .widgets.traffic_panel import TrafficPanel
from .widgets.chart import TimeSeriesChart

logger = logging.getLogger(__name__)


class StatusBar(Static):
    """Status bar showing collection status."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.stats: Optional[CollectorStats] = None
        self.interval = 1.0

    def update_stats(self, stats: CollectorStats, interval: float) -> None:
        self.stats = stats
        self.interval = interval
        self.refresh()

    def render(self) -> str:
        if self.stats is None:
            return "  Starting...  "
        s = self.stats
        text = (
            f"  Interval: {self.interval:.1f}s  |  Collections: {s.collections:,}"
            f"  |  Last read: {s.last_duration * 1000:.1f} ms"
        )
        if s.failed_reads:
            text += f"  |  Failed reads: {s.failed_reads:,}"
        if s.fallbacks:
            text += f"  |  Sequential fallbacks: {s.fallbacks:,}"
        return text + "  "


class BandwidthDashboard(App):
    """Full-screen bandwidth dashboard for one interface at a time."""

    TITLE = "Bandwidth Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #status-bar {
        height: 1;
        background: $primary;
        color: $text;
        text-align: center;
    }

    InterfacePanel {
        height: auto;
        margin: 0 1;
        border: solid $primary;
    }

    #traffic {
        height: 1fr;
    }

    #download {
        margin: 0 1;
        border: solid $success;
    }

    #upload {
        margin: 0 1;
        border: solid $error;
    }

    TimeSeriesChart {
        height: 1fr;
        margin: 0 1;
        border: solid $secondary;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("left", "select_previous", "Prev"),
        ("right", "select_next", "Next"),
        Binding("h", "select_previous", "Prev", show=False),
        Binding("l", "select_next", "Next", show=False),
        ("space", "force_update", "Update"),
        ("r", "clear_history", "Reset"),
    ]

    def __init__(
        self,
        session: MonitoringSession,
        resolver: Optional[PublicIpResolver] = None,
        poll_interval: float = 0.1,
        show_chart: bool = True,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.session = session
        self.resolver = resolver
        self.poll_interval = poll_interval
        self.show_chart = show_chart
        self._update_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        """Compose the dashboard layout."""
        yield Header()
        yield StatusBar(id="status-bar")
        yield InterfacePanel(id="interface")

        with Vertical(id="traffic"):
            yield TrafficPanel("Incoming", color="green", id="download")
            yield TrafficPanel("Outgoing", color="red", id="upload")

        if self.show_chart:
            yield TimeSeriesChart(id="chart")

        yield Footer()

    def on_mount(self) -> None:
        """Take the first sample and start the update timer."""
        self.session.tick()
        self.call_after_refresh(self.update_dashboard)
        self._update_timer = self.set_interval(self.poll_interval, self.poll_session)

    def poll_session(self) -> None:
        """Tick when due, then redraw."""
        if self.session.tick_if_due():
            self.update_dashboard()

    def update_dashboard(self) -> None:
        """Update all dashboard components from the session view."""
        view = self.session.view()

        public_ip = self.resolver.lookup() if self.resolver is not None else None
        self.query_one("#interface", InterfacePanel).update_view(
            view, public_ip=public_ip, show_public_ip=self.resolver is not None
        )

        download_total = view.snapshot.bytes_received if view.snapshot else 0
        upload_total = view.snapshot.bytes_sent if view.snapshot else 0
        self.query_one("#download", TrafficPanel).update_traffic(
            view.download_history, view.max_download_rate, download_total
        )
        self.query_one("#upload", TrafficPanel).update_traffic(
            view.upload_history, view.max_upload_rate, upload_total
        )

        if self.show_chart:
            self.query_one("#chart", TimeSeriesChart).update_history(
                view.download_history,
                view.upload_history,
                max(view.max_download_rate, view.max_upload_rate),
            )

        self.query_one("#status-bar", StatusBar).update_stats(
            self.session.collector.get_stats(), self.session.update_interval
        )

    def _command(self, command: Command) -> None:
        logger.debug("Key command: %s", command.value)
        if not self.session.handle(command):
            self.exit()
            return
        self.update_dashboard()

    def action_select_previous(self) -> None:
        """Show the previous interface."""
        self._command(Command.SELECT_PREVIOUS)

    def action_select_next(self) -> None:
        """Show the next interface."""
        self._command(Command.SELECT_NEXT)

    def action_force_update(self) -> None:
        """Sample immediately."""
        self._command(Command.FORCE_UPDATE)

    def action_clear_history(self) -> None:
        """Reset graphs of the selected interface."""
        self._command(Command.CLEAR_HISTORY)
        self.notify("History cleared")

    async def action_quit(self) -> None:
        """Stop the session and exit."""
        self.session.handle(Command.QUIT)
        self.exit()
