"""
Counter Source Tests
====================
Tests for the sysfs and psutil backends using fake system data.
"""

import socket
import pytest
from types import SimpleNamespace

import psutil

from bandwidth_monitor.collection import platform_source
from bandwidth_monitor.collection.platform_source import (
    LinuxSysfsCounterSource,
    PsutilCounterSource,
    get_counter_source,
)
from bandwidth_monitor.errors import CounterSourceError, InterfaceReadError


def make_sysfs_interface(root, name, rx=0, tx=0, operstate="up", if_type="1",
                         address="aa:bb:cc:dd:ee:ff", speed="1000", physical=True):
    path = root / name
    stats = path / "statistics"
    stats.mkdir(parents=True)
    (path / "operstate").write_text(operstate + "\n")
    (path / "type").write_text(if_type + "\n")
    (path / "address").write_text(address + "\n")
    if speed is not None:
        (path / "speed").write_text(speed + "\n")
    if physical:
        (path / "device").mkdir()
    values = {
        "rx_bytes": rx, "tx_bytes": tx,
        "rx_packets": rx // 100, "tx_packets": tx // 100,
        "rx_errors": 0, "tx_errors": 0,
    }
    for file_name, value in values.items():
        (stats / file_name).write_text(f"{value}\n")
    return path


@pytest.fixture
def sysfs_root(tmp_path, monkeypatch):
    monkeypatch.setattr(platform_source.psutil, "net_if_addrs", lambda: {})
    root = tmp_path / "net"
    make_sysfs_interface(root, "lo", rx=500, tx=500, operstate="unknown", if_type="772",
                         address="00:00:00:00:00:00", speed=None, physical=False)
    make_sysfs_interface(root, "eth0", rx=123456, tx=654321)
    make_sysfs_interface(root, "docker0", operstate="down", physical=False, speed=None)
    return root


class TestSysfsSource:
    """Linux /sys/class/net backend."""

    def test_list_interfaces(self, sysfs_root, clock):
        source = LinuxSysfsCounterSource(root=str(sysfs_root), clock=clock)
        by_name = {iface.name: iface for iface in source.list_interfaces()}

        assert set(by_name) == {"lo", "eth0", "docker0"}
        assert by_name["lo"].is_loopback
        assert by_name["lo"].mac_address == ""
        assert by_name["eth0"].is_active
        assert by_name["eth0"].speed_bps == 1_000_000_000
        assert by_name["eth0"].mac_address == "AA:BB:CC:DD:EE:FF"
        assert not by_name["eth0"].is_virtual
        assert by_name["docker0"].is_virtual
        assert not by_name["docker0"].is_up

    def test_indices_stable(self, sysfs_root, clock):
        """Listing twice hands out the same 1-based indices."""
        source = LinuxSysfsCounterSource(root=str(sysfs_root), clock=clock)
        first = {iface.name: iface.index for iface in source.list_interfaces()}
        second = {iface.name: iface.index for iface in source.list_interfaces()}

        assert first == second
        assert sorted(first.values()) == [1, 2, 3]

    def test_read_counters(self, sysfs_root, clock):
        source = LinuxSysfsCounterSource(root=str(sysfs_root), clock=clock)
        eth0 = next(i for i in source.list_interfaces() if i.name == "eth0")

        snapshot = source.read_counters(eth0.index)

        assert snapshot.interface_id == eth0.index
        assert snapshot.bytes_received == 123456
        assert snapshot.bytes_sent == 654321
        assert snapshot.captured_at == clock.now

    def test_vanished_interface(self, sysfs_root, clock):
        """Removing the directory turns reads into InterfaceReadError."""
        source = LinuxSysfsCounterSource(root=str(sysfs_root), clock=clock)
        eth0 = next(i for i in source.list_interfaces() if i.name == "eth0")
        (sysfs_root / "eth0" / "statistics" / "rx_bytes").unlink()

        with pytest.raises(InterfaceReadError) as exc:
            source.read_counters(eth0.index)
        assert exc.value.interface_id == eth0.index

    def test_unknown_index(self, sysfs_root, clock):
        source = LinuxSysfsCounterSource(root=str(sysfs_root), clock=clock)
        source.list_interfaces()

        with pytest.raises(InterfaceReadError):
            source.read_counters(99)

    def test_missing_root(self, tmp_path):
        source = LinuxSysfsCounterSource(root=str(tmp_path / "missing"))

        with pytest.raises(CounterSourceError):
            source.list_interfaces()


@pytest.fixture
def fake_psutil(monkeypatch):
    stats = {
        "lo": SimpleNamespace(isup=True, speed=0, flags="up,loopback,running"),
        "en0": SimpleNamespace(isup=True, speed=100, flags="up,broadcast,running"),
        "utun0": SimpleNamespace(isup=False, speed=0, flags=""),
    }
    addrs = {
        "lo": [SimpleNamespace(family=socket.AF_INET, address="127.0.0.1")],
        "en0": [
            SimpleNamespace(family=psutil.AF_LINK, address="aa-bb-cc-00-11-22"),
            SimpleNamespace(family=socket.AF_INET6, address="fe80::1"),
            SimpleNamespace(family=socket.AF_INET, address="192.168.0.7"),
        ],
    }
    io = {
        "lo": SimpleNamespace(bytes_sent=1, bytes_recv=1, packets_sent=1, packets_recv=1,
                              errin=0, errout=0),
        "en0": SimpleNamespace(bytes_sent=2000, bytes_recv=9000, packets_sent=20,
                               packets_recv=90, errin=1, errout=2),
    }
    monkeypatch.setattr(platform_source.psutil, "net_if_stats", lambda: stats)
    monkeypatch.setattr(platform_source.psutil, "net_if_addrs", lambda: addrs)
    monkeypatch.setattr(platform_source.psutil, "net_io_counters", lambda pernic=False: io)
    return io


class TestPsutilSource:
    """Cross-platform backend."""

    def test_list_interfaces(self, fake_psutil, clock):
        source = PsutilCounterSource(clock=clock)
        by_name = {iface.name: iface for iface in source.list_interfaces()}

        assert by_name["lo"].is_loopback
        en0 = by_name["en0"]
        assert en0.is_active
        assert en0.mac_address == "AA:BB:CC:00:11:22"
        assert en0.ip_addresses == ("192.168.0.7", "fe80::1")
        assert en0.speed_bps == 100_000_000
        assert by_name["utun0"].is_virtual

    def test_read_counters(self, fake_psutil, clock):
        source = PsutilCounterSource(clock=clock)
        en0 = next(i for i in source.list_interfaces() if i.name == "en0")

        snapshot = source.read_counters(en0.index)

        assert snapshot.bytes_received == 9000
        assert snapshot.bytes_sent == 2000
        assert snapshot.total_errors == 3

    def test_interface_removed(self, fake_psutil, clock):
        source = PsutilCounterSource(clock=clock)
        en0 = next(i for i in source.list_interfaces() if i.name == "en0")
        del fake_psutil["en0"]

        with pytest.raises(InterfaceReadError):
            source.read_counters(en0.index)

    def test_enumeration_failure(self, monkeypatch):
        def broken():
            raise OSError("permission denied")

        monkeypatch.setattr(platform_source.psutil, "net_if_stats", broken)

        with pytest.raises(CounterSourceError):
            PsutilCounterSource().list_interfaces()


class TestBackendSelection:

    def test_forced_backends(self):
        assert isinstance(get_counter_source("psutil"), PsutilCounterSource)
        assert isinstance(get_counter_source("sysfs"), LinuxSysfsCounterSource)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            get_counter_source("snmp")
