"""Data models for bandwidth monitor."""

from .interface import InterfaceIdentity, looks_virtual
from .counters import CounterSnapshot, BandwidthSample

__all__ = [
    "InterfaceIdentity",
    "looks_virtual",
    "CounterSnapshot",
    "BandwidthSample",
]
