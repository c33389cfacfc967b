"""Rolling bandwidth history with running maxima for graph scaling."""

from collections import deque
from typing import Deque, List, Optional, Tuple

from ..models.counters import BandwidthSample


DEFAULT_CAPACITY = 60  # one sample per second for a minute
DEFAULT_RATE_FLOOR = 1024.0  # 1 KiB/s
DEFAULT_HEADROOM = 1.1


class HistoryWindow:
    """
    Fixed-capacity FIFO of download and upload rates for one interface.

    Also tracks the peak rate per direction since the last clear. Peaks
    never decay; they only reset on ``clear()``.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        rate_floor: float = DEFAULT_RATE_FLOOR,
        headroom: float = DEFAULT_HEADROOM,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if rate_floor < 0:
            raise ValueError("rate_floor must not be negative")
        if headroom < 1.0:
            raise ValueError("headroom must be at least 1.0")

        self.capacity = capacity
        self.rate_floor = rate_floor
        self.headroom = headroom

        self._download: Deque[float] = deque(maxlen=capacity)
        self._upload: Deque[float] = deque(maxlen=capacity)
        self._peak_download = 0.0
        self._peak_upload = 0.0

    def append(self, sample: BandwidthSample) -> None:
        """Add a sample, evicting the oldest one when full."""
        self._download.append(sample.download_rate)
        self._upload.append(sample.upload_rate)

        if sample.download_rate > self._peak_download:
            self._peak_download = sample.download_rate
        if sample.upload_rate > self._peak_upload:
            self._peak_upload = sample.upload_rate

    def clear(self) -> None:
        """Drop all samples and reset the running maxima to the floor."""
        self._download.clear()
        self._upload.clear()
        self._peak_download = 0.0
        self._peak_upload = 0.0

    def _scaled(self, peak: float) -> float:
        return max(self.rate_floor, peak * self.headroom)

    @property
    def max_download_rate(self) -> float:
        """Download scale ceiling: peak with headroom, never below the floor."""
        return self._scaled(self._peak_download)

    @property
    def max_upload_rate(self) -> float:
        """Upload scale ceiling: peak with headroom, never below the floor."""
        return self._scaled(self._peak_upload)

    def running_max(self) -> float:
        """Largest rate in either direction since the last clear, with headroom."""
        return self._scaled(max(self._peak_download, self._peak_upload))

    @property
    def download_rates(self) -> List[float]:
        """Download rates, oldest first."""
        return list(self._download)

    @property
    def upload_rates(self) -> List[float]:
        """Upload rates, oldest first."""
        return list(self._upload)

    @property
    def latest(self) -> Optional[Tuple[float, float]]:
        """Most recent (download, upload) pair, or None if empty."""
        if not self._download:
            return None
        return self._download[-1], self._upload[-1]

    def average(self) -> Tuple[float, float]:
        """Mean (download, upload) over the window."""
        if not self._download:
            return 0.0, 0.0
        count = len(self._download)
        return sum(self._download) / count, sum(self._upload) / count

    @property
    def is_full(self) -> bool:
        return len(self._download) == self.capacity

    def __len__(self) -> int:
        return len(self._download)
