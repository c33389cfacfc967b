"""Rate derivation."""

from .rate import derive_bandwidth, counter_reset_detected

__all__ = ["derive_bandwidth", "counter_reset_detected"]
