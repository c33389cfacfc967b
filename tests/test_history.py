"""
History Window Tests
====================
Tests for the rolling rate history and graph scaling.
"""

import pytest

from bandwidth_monitor.models.counters import BandwidthSample
from bandwidth_monitor.storage.history import HistoryWindow


def sample(download: float, upload: float = 0.0) -> BandwidthSample:
    return BandwidthSample(
        download_rate=download,
        upload_rate=upload,
        cumulative_downloaded=0,
        cumulative_uploaded=0,
    )


class TestHistoryCapacity:
    """FIFO eviction."""

    def test_oldest_sample_evicted(self):
        """Appending past capacity drops the oldest entries."""
        history = HistoryWindow(capacity=3)
        for rate in (10, 20, 30, 40):
            history.append(sample(rate))

        assert history.download_rates == [20, 30, 40]
        assert len(history) == 3
        assert history.is_full

    def test_many_appends_keep_newest(self):
        """Capacity plus k appends keeps the last capacity samples in order."""
        history = HistoryWindow(capacity=5)
        for rate in range(12):
            history.append(sample(rate, rate * 2))

        assert history.download_rates == [7, 8, 9, 10, 11]
        assert history.upload_rates == [14, 16, 18, 20, 22]

    def test_latest_and_average(self):
        history = HistoryWindow(capacity=4)
        assert history.latest is None
        assert history.average() == (0.0, 0.0)

        history.append(sample(100, 10))
        history.append(sample(300, 30))

        assert history.latest == (300, 30)
        assert history.average() == (200, 20)


class TestRunningMax:
    """Graph ceiling tracking."""

    def test_floor_when_idle(self):
        """An idle interface scales to the floor."""
        history = HistoryWindow(rate_floor=1024.0)
        history.append(sample(0, 0))

        assert history.max_download_rate == 1024.0
        assert history.max_upload_rate == 1024.0

    def test_headroom_applied_to_peak(self):
        """Ceiling is the peak times headroom."""
        history = HistoryWindow(rate_floor=1024.0, headroom=1.1)
        history.append(sample(10000, 2000))

        assert history.max_download_rate == pytest.approx(11000.0)
        assert history.max_upload_rate == pytest.approx(2200.0)
        assert history.running_max() == pytest.approx(11000.0)

    def test_peak_survives_eviction(self):
        """The maximum does not decay when the peak sample leaves the window."""
        history = HistoryWindow(capacity=2, headroom=1.0)
        history.append(sample(50000))
        history.append(sample(10))
        history.append(sample(10))

        assert 50000 not in history.download_rates
        assert history.max_download_rate == 50000

    def test_clear_resets_to_floor(self):
        """clear() empties the window and resets the ceiling."""
        history = HistoryWindow(rate_floor=1024.0)
        history.append(sample(99999, 99999))
        history.clear()

        assert len(history) == 0
        assert history.max_download_rate == 1024.0
        assert history.max_upload_rate == 1024.0

    def test_first_append_after_clear(self):
        """After clear the next sample is both oldest and newest."""
        history = HistoryWindow(capacity=3)
        for rate in (1, 2, 3):
            history.append(sample(rate))
        history.clear()
        history.append(sample(42))

        assert history.download_rates == [42]
        assert history.latest == (42, 0.0)


class TestHistoryValidation:
    """Constructor checks."""

    def test_reject_zero_capacity(self):
        with pytest.raises(ValueError):
            HistoryWindow(capacity=0)

    def test_reject_negative_floor(self):
        with pytest.raises(ValueError):
            HistoryWindow(rate_floor=-1.0)

    def test_reject_headroom_below_one(self):
        with pytest.raises(ValueError):
            HistoryWindow(headroom=0.9)
