"""Storage layer for bandwidth history."""

from .history import HistoryWindow

__all__ = ["HistoryWindow"]
