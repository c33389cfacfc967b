"""Counter collection layer."""

from .platform_source import (
    get_counter_source,
    CounterSource,
    PsutilCounterSource,
    LinuxSysfsCounterSource,
)
from .collector import ParallelCollector, CollectorStats

__all__ = [
    "get_counter_source",
    "CounterSource",
    "PsutilCounterSource",
    "LinuxSysfsCounterSource",
    "ParallelCollector",
    "CollectorStats",
]
