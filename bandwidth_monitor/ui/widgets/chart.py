"""Bandwidth history chart widgets."""

from textual.widgets import Static
from typing import List, Sequence
from rich.text import Text

import plotext as plt

from ...utils.format import format_bytes_per_sec, sparkline


class TimeSeriesChart(Static):
    """Download/upload history drawn with Plotext."""

    DEFAULT_CSS = """
    TimeSeriesChart {
        height: 100%;
        padding: 0;
        background: $surface;
    }
    """

    def __init__(self, title: str = "Bandwidth History", **kwargs):
        super().__init__(**kwargs)
        self.title = title
        self._download: List[float] = []
        self._upload: List[float] = []
        self._ceiling = 1024.0

    def update_history(
        self, download: Sequence[float], upload: Sequence[float], ceiling: float
    ) -> None:
        """Replace the plotted series."""
        self._download = list(download)
        self._upload = list(upload)
        self._ceiling = ceiling
        self.refresh()

    def clear(self) -> None:
        """Clear all data."""
        self._download = []
        self._upload = []
        self.refresh()

    def render(self):
        """Render the chart."""
        if not self._download:
            return f"[bold]{self.title}[/bold]\n[dim]No data yet...[/dim]"

        plt.clear_figure()
        plt.title(f"{self.title} (max {format_bytes_per_sec(self._ceiling)})")
        plt.xlabel("Time (seconds ago)")

        x = list(range(-len(self._download) + 1, 1))
        plt.plot(x, self._download, label="Download", color="green")
        plt.plot(x, self._upload, label="Upload", color="red")
        plt.ylim(0, self._ceiling)

        width = max(self.size.width, 20)
        height = max(self.size.height, 5)
        plt.plotsize(width, height)
        plt.theme("dark")

        return Text.from_ansi(plt.build())


class SparklineChart(Static):
    """Single-line sparkline scaled against a fixed ceiling."""

    DEFAULT_CSS = """
    SparklineChart {
        height: 1fr;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, color: str = "cyan", **kwargs):
        super().__init__(**kwargs)
        self._values: List[float] = []
        self._ceiling = 1.0
        self._color = color

    def update_values(self, values: Sequence[float], ceiling: float) -> None:
        """Update sparkline values."""
        self._values = list(values)
        self._ceiling = ceiling
        self.refresh()

    def render(self) -> str:
        """Render the sparkline, one row per widget line."""
        if not self._values:
            return "[dim]--[/dim]"

        width = max(self.size.width, 1)
        line = sparkline(self._values, self._ceiling, width)
        return f"[{self._color}]{line}[/{self._color}]"
