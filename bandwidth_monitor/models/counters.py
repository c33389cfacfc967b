"""Counter snapshot and bandwidth sample data structures."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CounterSnapshot:
    """One timestamped read of an interface's cumulative traffic counters.

    ``captured_at`` comes from ``time.monotonic()``, so two snapshots are
    only comparable when taken by the same process.
    """
    interface_id: int
    bytes_sent: int = 0
    bytes_received: int = 0
    packets_sent: int = 0
    packets_received: int = 0
    errors_in: int = 0
    errors_out: int = 0
    captured_at: float = 0.0

    @classmethod
    def zero(cls, interface_id: int, captured_at: float) -> "CounterSnapshot":
        """Zero-valued baseline used when the first read fails."""
        return cls(interface_id=interface_id, captured_at=captured_at)

    @property
    def total_errors(self) -> int:
        return self.errors_in + self.errors_out


@dataclass(frozen=True)
class BandwidthSample:
    """Download/upload rates derived from two consecutive snapshots."""
    download_rate: float  # bytes per second
    upload_rate: float  # bytes per second
    cumulative_downloaded: int
    cumulative_uploaded: int

    @property
    def download_mbps(self) -> float:
        """Download rate in megabits per second."""
        return (self.download_rate * 8) / 1_000_000

    @property
    def upload_mbps(self) -> float:
        """Upload rate in megabits per second."""
        return (self.upload_rate * 8) / 1_000_000
