"""Exception types for the bandwidth monitor."""

from typing import Optional


class MonitorError(Exception):
    """Base class for all bandwidth monitor errors."""


class CounterSourceError(MonitorError):
    """The platform's interface registry could not be read."""


class InterfaceReadError(CounterSourceError):
    """Counters for a single interface could not be read."""

    def __init__(self, message: str, interface_id: Optional[int] = None):
        super().__init__(message)
        self.interface_id = interface_id


class NoActiveInterfacesError(MonitorError):
    """No interface is up and non-loopback, so there is nothing to monitor."""


class ConfigError(MonitorError):
    """Configuration file could not be loaded or failed validation."""
