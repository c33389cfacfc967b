"""Monitoring session and its driver loop."""

from .session import MonitoringSession, SessionState, SessionView, Command
from .driver import SessionDriver, InputSource, QueueInputSource

__all__ = [
    "MonitoringSession",
    "SessionState",
    "SessionView",
    "Command",
    "SessionDriver",
    "InputSource",
    "QueueInputSource",
]
