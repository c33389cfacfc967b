"""Single-threaded driver loop for a monitoring session."""

import logging
import queue
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .session import Command, MonitoringSession

logger = logging.getLogger(__name__)


class InputSource(ABC):
    """Source of logical commands for the driver loop."""

    @abstractmethod
    def poll(self, timeout: float) -> Optional[Command]:
        """Wait up to ``timeout`` seconds for a command; None if none arrived."""
        pass


class QueueInputSource(InputSource):
    """Commands pushed from other threads, e.g. signal handlers."""

    def __init__(self):
        self._queue: "queue.Queue[Command]" = queue.Queue()

    def push(self, command: Command) -> None:
        self._queue.put(command)

    def poll(self, timeout: float) -> Optional[Command]:
        try:
            if timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class SessionDriver:
    """
    Cooperative loop: render, wait for input or the next tick, repeat.

    Each iteration does one render, at most one command and at most one
    tick, in that order. The wait for input is bounded by both the poll
    interval and the time left until the next tick, so neither the update
    cadence nor responsiveness suffers and the loop never spins.
    """

    def __init__(
        self,
        session: MonitoringSession,
        input_source: InputSource,
        render: Optional[Callable[[MonitoringSession], None]] = None,
        poll_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self.session = session
        self.input_source = input_source
        self.render = render
        self.poll_interval = poll_interval
        self._clock = clock
        self.iterations = 0

    def run_once(self) -> bool:
        """
        One loop iteration.

        Returns:
            True if the loop should continue.
        """
        self.iterations += 1

        if self.render is not None:
            self.render(self.session)

        timeout = min(self.poll_interval, self.session.seconds_until_due(self._clock()))
        command = self.input_source.poll(timeout)
        if command is not None:
            logger.debug("Command: %s", command.value)
            if not self.session.handle(command):
                return False

        self.session.tick_if_due(self._clock())
        return not self.session.should_quit

    def run(self, max_iterations: Optional[int] = None) -> None:
        """Run until a quit command (or the iteration limit) is reached."""
        self.session.tick()
        try:
            while self.run_once():
                if max_iterations is not None and self.iterations >= max_iterations:
                    break
        finally:
            self.session.stop()
