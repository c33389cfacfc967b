"""Platform-specific interface discovery and counter reads."""

import logging
import os
import platform
import socket
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import psutil

from ..errors import CounterSourceError, InterfaceReadError
from ..models.counters import CounterSnapshot
from ..models.interface import InterfaceIdentity, looks_virtual

logger = logging.getLogger(__name__)

SYSFS_NET_ROOT = "/sys/class/net"
ARPHRD_LOOPBACK = "772"
LINUX_VIRTUAL_PREFIXES = ("veth", "docker", "br-", "virbr")


class CounterSource(ABC):
    """
    Contract between the monitoring engine and the operating system.

    Interface indices are handed out the first time a name is seen and
    are never reassigned, so they stay valid for the source's lifetime.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._indices: Dict[str, int] = {}
        self._names: Dict[int, str] = {}

    @abstractmethod
    def list_interfaces(self) -> List[InterfaceIdentity]:
        """Enumerate all interfaces. Raises CounterSourceError on failure."""
        pass

    @abstractmethod
    def read_counters(self, interface_id: int) -> CounterSnapshot:
        """Read one interface's counters. Raises InterfaceReadError on failure."""
        pass

    def _index_for(self, name: str) -> int:
        if name not in self._indices:
            index = len(self._indices) + 1
            self._indices[name] = index
            self._names[index] = name
        return self._indices[name]

    def name_for(self, interface_id: int) -> str:
        """Resolve an index handed out by list_interfaces()."""
        try:
            return self._names[interface_id]
        except KeyError:
            raise InterfaceReadError(
                f"Unknown interface index {interface_id}", interface_id
            ) from None

    def get_platform_info(self) -> Dict[str, str]:
        """Get platform information."""
        return {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
            "python_version": platform.python_version(),
            "backend": type(self).__name__,
        }


def _split_addresses(addrs) -> Tuple[str, Tuple[str, ...]]:
    """Pick the MAC and the IPv4-then-IPv6 addresses out of psutil's list."""
    mac = ""
    ipv4: List[str] = []
    ipv6: List[str] = []
    for addr in addrs:
        if addr.family == socket.AF_INET:
            ipv4.append(addr.address)
        elif addr.family == socket.AF_INET6:
            ipv6.append(addr.address)
        elif addr.family == psutil.AF_LINK:
            mac = (addr.address or "").upper().replace("-", ":")
    return mac, tuple(ipv4 + ipv6)


class PsutilCounterSource(CounterSource):
    """Cross-platform source backed by psutil."""

    def list_interfaces(self) -> List[InterfaceIdentity]:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except OSError as e:
            raise CounterSourceError(f"Failed to enumerate network interfaces: {e}") from e

        interfaces = []
        for name in sorted(stats):
            stat = stats[name]
            mac, ips = _split_addresses(addrs.get(name, []))

            flags = getattr(stat, "flags", "")
            is_loopback = (
                "loopback" in flags
                or name.lower().startswith("lo")
                or any(ip.startswith("127.") or ip == "::1" for ip in ips)
            )

            interfaces.append(InterfaceIdentity(
                index=self._index_for(name),
                name=name,
                description=name,
                mac_address=mac,
                ip_addresses=ips,
                is_up=stat.isup,
                is_loopback=is_loopback,
                is_virtual=looks_virtual(name),
                speed_bps=stat.speed * 1_000_000 if stat.speed > 0 else 0,
            ))

        return interfaces

    def read_counters(self, interface_id: int) -> CounterSnapshot:
        name = self.name_for(interface_id)
        try:
            counters = psutil.net_io_counters(pernic=True)
        except OSError as e:
            raise InterfaceReadError(
                f"Failed to read counters for {name}: {e}", interface_id
            ) from e

        io = counters.get(name)
        if io is None:
            raise InterfaceReadError(
                f"Interface '{name}' not found; it may have been removed or renamed",
                interface_id,
            )

        return CounterSnapshot(
            interface_id=interface_id,
            bytes_sent=io.bytes_sent,
            bytes_received=io.bytes_recv,
            packets_sent=io.packets_sent,
            packets_received=io.packets_recv,
            errors_in=io.errin,
            errors_out=io.errout,
            captured_at=self._clock(),
        )


class LinuxSysfsCounterSource(CounterSource):
    """Linux source reading /sys/class/net directly."""

    STAT_FILES = {
        "bytes_sent": "tx_bytes",
        "bytes_received": "rx_bytes",
        "packets_sent": "tx_packets",
        "packets_received": "rx_packets",
        "errors_in": "rx_errors",
        "errors_out": "tx_errors",
    }

    def __init__(self, root: str = SYSFS_NET_ROOT, clock: Callable[[], float] = time.monotonic):
        super().__init__(clock=clock)
        self.root = Path(root)

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text().strip()
        except OSError:
            return ""

    def _addresses(self) -> Dict[str, list]:
        try:
            return psutil.net_if_addrs()
        except OSError as e:
            logger.debug("Address lookup failed: %s", e)
            return {}

    def list_interfaces(self) -> List[InterfaceIdentity]:
        if not self.root.is_dir():
            raise CounterSourceError(
                f"{self.root} not found; this may not be Linux or sysfs is not mounted"
            )

        try:
            names = sorted(entry.name for entry in self.root.iterdir())
        except OSError as e:
            raise CounterSourceError(f"Failed to read {self.root}: {e}") from e

        addrs = self._addresses()
        interfaces = []

        for name in names:
            path = self.root / name
            is_loopback = self._read_text(path / "type") == ARPHRD_LOOPBACK

            mac = self._read_text(path / "address").upper()
            if mac == "00:00:00:00:00:00":
                mac = ""

            # Reading speed fails with EINVAL on links that are down
            speed = self._read_text(path / "speed")
            speed_bps = int(speed) * 1_000_000 if speed.isdigit() else 0

            is_virtual = (
                looks_virtual(name)
                or name.startswith(LINUX_VIRTUAL_PREFIXES)
                or (not is_loopback and not (path / "device").exists())
            )

            _, ips = _split_addresses(addrs.get(name, []))

            interfaces.append(InterfaceIdentity(
                index=self._index_for(name),
                name=name,
                description=name,
                mac_address=mac,
                ip_addresses=ips,
                is_up=self._read_text(path / "operstate") == "up",
                is_loopback=is_loopback,
                is_virtual=is_virtual,
                speed_bps=speed_bps,
            ))

        return interfaces

    def read_counters(self, interface_id: int) -> CounterSnapshot:
        name = self.name_for(interface_id)
        base_path = self.root / name / "statistics"

        values = {}
        for field_name, file_name in self.STAT_FILES.items():
            try:
                values[field_name] = int((base_path / file_name).read_text().strip())
            except (OSError, ValueError) as e:
                raise InterfaceReadError(
                    f"Failed to read {file_name} for {name}: {e}", interface_id
                ) from e

        return CounterSnapshot(interface_id=interface_id, captured_at=self._clock(), **values)


def get_counter_source(backend: str = "auto") -> CounterSource:
    """Factory function to get the counter source for this platform."""
    if backend == "psutil":
        return PsutilCounterSource()
    if backend == "sysfs":
        return LinuxSysfsCounterSource()
    if backend != "auto":
        raise ValueError(f"Unknown counter backend: {backend}")

    if platform.system().lower() == "linux" and os.path.isdir(SYSFS_NET_ROOT):
        return LinuxSysfsCounterSource()
    return PsutilCounterSource()
