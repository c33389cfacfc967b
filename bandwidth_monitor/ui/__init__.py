"""Terminal UI components for bandwidth monitor."""

from .dashboard import BandwidthDashboard
from .widgets.interface_panel import InterfacePanel
from .widgets.traffic_panel import TrafficPanel
from .widgets.chart import TimeSeriesChart

__all__ = [
    "BandwidthDashboard",
    "InterfacePanel",
    "TrafficPanel",
    "TimeSeriesChart",
]
