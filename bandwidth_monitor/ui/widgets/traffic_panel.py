"""Per-direction traffic panel: gauge, sparkline and legend."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static
from typing import Sequence

from ...utils.format import format_bytes, format_bytes_per_sec
from .chart import SparklineChart

GAUGE_WIDTH = 30


def gauge_bar(rate: float, ceiling: float, width: int = GAUGE_WIDTH) -> str:
    """Horizontal bar filled in proportion to rate/ceiling."""
    if ceiling <= 0:
        return "░" * width
    filled = int(round(min(max(rate / ceiling, 0.0), 1.0) * width))
    return "█" * filled + "░" * (width - filled)


class TrafficPanel(Vertical):
    """Download or upload traffic for the selected interface."""

    DEFAULT_CSS = """
    TrafficPanel {
        height: 1fr;
        padding: 0 1;
        background: $surface;
    }

    TrafficPanel .gauge {
        height: 2;
    }

    TrafficPanel .legend {
        height: 1;
        color: $text-muted;
    }
    """

    def __init__(self, title: str, color: str = "green", **kwargs):
        super().__init__(**kwargs)
        self.title = title
        self.color = color

    def compose(self) -> ComposeResult:
        yield Static(f"[bold]{self.title}[/bold]", classes="gauge")
        yield SparklineChart(color=self.color, classes="spark")
        yield Static("", classes="legend")

    def update_traffic(self, rates: Sequence[float], ceiling: float, total: int) -> None:
        """Redraw from the rate history, its scale ceiling and the byte total."""
        current = rates[-1] if rates else 0.0
        average = sum(rates) / len(rates) if rates else 0.0

        gauge = self.query_one(".gauge", Static)
        gauge.update(
            f"[bold]{self.title}[/bold]  [{self.color}]{format_bytes_per_sec(current)}[/{self.color}]\n"
            f"[{self.color}]{gauge_bar(current, ceiling)}[/{self.color}]"
        )

        self.query_one(SparklineChart).update_values(rates, ceiling)

        legend = self.query_one(".legend", Static)
        legend.update(
            f"Cur: {format_bytes_per_sec(current)}  "
            f"Avg: {format_bytes_per_sec(average)}  "
            f"Max: {format_bytes_per_sec(ceiling)}  "
            f"Total: {format_bytes(total)}"
        )
