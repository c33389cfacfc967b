"""
Bandwidth Monitor Test Fixtures
===============================
Shared pytest fixtures: a scripted counter source and a manual clock.
"""

import pytest
from typing import Dict, List, Optional

from bandwidth_monitor.collection.platform_source import CounterSource
from bandwidth_monitor.config import MonitorConfig
from bandwidth_monitor.errors import CounterSourceError, InterfaceReadError
from bandwidth_monitor.models.counters import CounterSnapshot
from bandwidth_monitor.models.interface import InterfaceIdentity


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCounterSource(CounterSource):
    """
    Counter source with fixed interfaces and settable counters.

    Each read stamps the snapshot with the shared clock. Interfaces named
    in ``failing`` raise InterfaceReadError.
    """

    def __init__(self, interfaces: List[InterfaceIdentity], clock: ManualClock):
        super().__init__(clock=clock)
        self._interfaces = list(interfaces)
        self.counters: Dict[int, Dict[str, int]] = {
            iface.index: {"bytes_received": 0, "bytes_sent": 0} for iface in interfaces
        }
        self.failing = set()
        self.list_error: Optional[Exception] = None
        self.reads = 0

    def list_interfaces(self) -> List[InterfaceIdentity]:
        if self.list_error is not None:
            raise self.list_error
        return list(self._interfaces)

    def set_counters(self, index: int, received: int, sent: int) -> None:
        self.counters[index] = {"bytes_received": received, "bytes_sent": sent}

    def add_traffic(self, index: int, received: int = 0, sent: int = 0) -> None:
        self.counters[index]["bytes_received"] += received
        self.counters[index]["bytes_sent"] += sent

    def read_counters(self, interface_id: int) -> CounterSnapshot:
        self.reads += 1
        if interface_id in self.failing or interface_id not in self.counters:
            raise InterfaceReadError(f"interface {interface_id} unavailable", interface_id)
        values = self.counters[interface_id]
        return CounterSnapshot(
            interface_id=interface_id,
            bytes_received=values["bytes_received"],
            bytes_sent=values["bytes_sent"],
            captured_at=self._clock(),
        )


def make_interface(index: int, name: str, is_up: bool = True, is_loopback: bool = False,
                   **kwargs) -> InterfaceIdentity:
    return InterfaceIdentity(
        index=index,
        name=name,
        is_up=is_up,
        is_loopback=is_loopback,
        **kwargs,
    )


def make_snapshot(interface_id: int = 1, received: int = 0, sent: int = 0,
                  at: float = 0.0) -> CounterSnapshot:
    return CounterSnapshot(
        interface_id=interface_id,
        bytes_received=received,
        bytes_sent=sent,
        captured_at=at,
    )


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock():
    """Manual monotonic clock."""
    return ManualClock()


@pytest.fixture
def interfaces():
    """Loopback, two active interfaces and one that is down."""
    return [
        make_interface(1, "lo", is_loopback=True, ip_addresses=("127.0.0.1",)),
        make_interface(2, "eth0", mac_address="AA:BB:CC:DD:EE:FF",
                       ip_addresses=("192.168.1.10",), speed_bps=1_000_000_000),
        make_interface(3, "wlan0", ip_addresses=("10.0.0.5",)),
        make_interface(4, "eth1", is_up=False),
    ]


@pytest.fixture
def source(interfaces, clock):
    """Fake counter source over the standard interfaces."""
    return FakeCounterSource(interfaces, clock)


@pytest.fixture
def config():
    """Config with small history and sequential collection."""
    cfg = MonitorConfig()
    cfg.history.capacity = 5
    cfg.collector.parallel = False
    return cfg


@pytest.fixture
def broken_source(clock):
    """Source whose interface registry cannot be read."""
    src = FakeCounterSource([], clock)
    src.list_error = CounterSourceError("registry unavailable")
    return src
