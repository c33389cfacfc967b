"""Network interface identity."""

from dataclasses import dataclass
from typing import Tuple


VIRTUAL_KEYWORDS = (
    "virtual",
    "vmware",
    "virtualbox",
    "hyper-v",
    "vpn",
    "tap",
    "tun",
)


def looks_virtual(name: str, description: str = "") -> bool:
    """Guess whether an adapter is virtual from its name or description."""
    text = f"{description} {name}".lower()
    return any(keyword in text for keyword in VIRTUAL_KEYWORDS)


@dataclass(frozen=True)
class InterfaceIdentity:
    """A network interface as discovered at session start.

    ``index`` is assigned by the counter source and stays the same for
    the lifetime of that source, so it can be used as a dictionary key
    for snapshots and history.
    """
    index: int
    name: str
    description: str = ""
    mac_address: str = ""
    ip_addresses: Tuple[str, ...] = ()
    is_up: bool = False
    is_loopback: bool = False
    is_virtual: bool = False
    speed_bps: int = 0  # 0 = unknown

    @property
    def display_name(self) -> str:
        """Description if available, otherwise the interface name."""
        return self.description or self.name

    @property
    def is_active(self) -> bool:
        """Administratively up and not a loopback device."""
        return self.is_up and not self.is_loopback

    @property
    def kind(self) -> str:
        """Single-letter type marker: L(oopback), V(irtual) or P(hysical)."""
        if self.is_loopback:
            return "L"
        if self.is_virtual:
            return "V"
        return "P"

    @property
    def primary_address(self) -> str:
        return self.ip_addresses[0] if self.ip_addresses else ""

    def __str__(self) -> str:
        status = "UP" if self.is_up else "DOWN"
        addr = self.primary_address or "no address"
        return f"{self.name} ({addr}) [{status}]"
