"""Bandwidth derivation from consecutive counter snapshots."""

import logging
from typing import Optional

from ..models.counters import BandwidthSample, CounterSnapshot

logger = logging.getLogger(__name__)


def saturating_delta(current: int, previous: int) -> int:
    """Difference floored at zero, so a counter reset never goes negative."""
    return max(0, current - previous)


def counter_reset_detected(current: CounterSnapshot, previous: CounterSnapshot) -> bool:
    """True if either byte counter went backwards between the two snapshots."""
    return (
        current.bytes_received < previous.bytes_received
        or current.bytes_sent < previous.bytes_sent
    )


def derive_bandwidth(
    current: CounterSnapshot, previous: CounterSnapshot
) -> Optional[BandwidthSample]:
    """
    Compute download/upload rates between two snapshots of one interface.

    Returns None when the elapsed time is zero or negative: the pair is
    not computable yet, and no rate is fabricated for it. Byte deltas are
    clamped at zero, which under-reports the single interval in which a
    counter reset or wrapped, but never yields a negative or huge rate.

    Args:
        current: The newer snapshot
        previous: The older snapshot of the same interface

    Raises:
        ValueError: If the snapshots belong to different interfaces
    """
    if current.interface_id != previous.interface_id:
        raise ValueError(
            f"Cannot pair snapshots of interfaces {current.interface_id} "
            f"and {previous.interface_id}"
        )

    elapsed = float(current.captured_at - previous.captured_at)
    if elapsed <= 0:
        return None

    if counter_reset_detected(current, previous):
        logger.debug("Counter reset on interface %d", current.interface_id)

    received = saturating_delta(current.bytes_received, previous.bytes_received)
    sent = saturating_delta(current.bytes_sent, previous.bytes_sent)

    return BandwidthSample(
        download_rate=received / elapsed,
        upload_rate=sent / elapsed,
        cumulative_downloaded=current.bytes_received,
        cumulative_uploaded=current.bytes_sent,
    )
