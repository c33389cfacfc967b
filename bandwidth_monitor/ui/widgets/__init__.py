"""Dashboard widgets for bandwidth monitor TUI."""

from .interface_panel import InterfacePanel
from .traffic_panel import TrafficPanel
from .chart import TimeSeriesChart, SparklineChart

__all__ = [
    "InterfacePanel",
    "TrafficPanel",
    "TimeSeriesChart",
    "SparklineChart",
]
