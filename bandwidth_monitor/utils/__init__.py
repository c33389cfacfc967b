"""Shared helpers."""

from .format import format_bytes, format_bytes_per_sec, format_bits_per_sec, sparkline

__all__ = ["format_bytes", "format_bytes_per_sec", "format_bits_per_sec", "sparkline"]
