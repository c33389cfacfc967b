"""Monitoring session: interface selection, update cadence and history."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Set, Tuple

from ..collection.collector import ParallelCollector
from ..collection.platform_source import CounterSource
from ..config import MonitorConfig
from ..errors import NoActiveInterfacesError
from ..models.counters import BandwidthSample, CounterSnapshot
from ..models.interface import InterfaceIdentity
from ..processing.rate import derive_bandwidth
from ..storage.history import HistoryWindow

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a monitoring session."""
    INITIALIZING = "initializing"
    READY = "ready"
    TICKING = "ticking"
    SWITCHING = "switching"
    QUITTING = "quitting"
    STOPPED = "stopped"


class Command(Enum):
    """Logical user commands, independent of any key binding."""
    SELECT_PREVIOUS = "select_previous"
    SELECT_NEXT = "select_next"
    FORCE_UPDATE = "force_update"
    CLEAR_HISTORY = "clear_history"
    QUIT = "quit"


@dataclass(frozen=True)
class SessionView:
    """Read-only picture of the selected interface for rendering."""
    interface: InterfaceIdentity
    snapshot: Optional[CounterSnapshot]
    sample: Optional[BandwidthSample]
    download_history: Tuple[float, ...]
    upload_history: Tuple[float, ...]
    max_download_rate: float
    max_upload_rate: float
    position: int  # 1-based
    active_count: int
    last_update: Optional[datetime]

    @property
    def download_rate(self) -> float:
        return self.download_history[-1] if self.download_history else 0.0

    @property
    def upload_rate(self) -> float:
        return self.upload_history[-1] if self.upload_history else 0.0


class MonitoringSession:
    """
    Owns all monitoring state and drives one tick at a time.

    The session is not thread-safe: it expects a single control thread
    (the driver loop or the dashboard's event loop). Concurrency only
    happens inside the collector, which is joined before a tick goes on.
    """

    def __init__(
        self,
        source: CounterSource,
        config: Optional[MonitorConfig] = None,
        collector: Optional[ParallelCollector] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ):
        self._state = SessionState.INITIALIZING
        self.config = config or MonitorConfig()
        self.source = source
        self.collector = collector or ParallelCollector(
            source,
            parallel=self.config.collector.parallel,
            max_workers=self.config.collector.max_workers or None,
        )
        self.update_interval = self.config.sampling.update_interval
        self._clock = clock
        self._wall_clock = wall_clock

        self._interfaces: Tuple[InterfaceIdentity, ...] = tuple(source.list_interfaces())
        self._active: Tuple[InterfaceIdentity, ...] = tuple(
            iface for iface in self._interfaces if iface.is_active
        )
        if not self._active:
            raise NoActiveInterfacesError("No active network interfaces found")

        self._cursor = 0

        history = self.config.history
        self._histories: Dict[int, HistoryWindow] = {
            iface.index: HistoryWindow(
                capacity=history.capacity,
                rate_floor=history.rate_floor,
                headroom=history.headroom,
            )
            for iface in self._interfaces
        }
        self._snapshots: Dict[int, CounterSnapshot] = {}
        self._samples: Dict[int, BandwidthSample] = {}
        # Zero baselines stored for interfaces whose first read failed
        self._placeholders: Set[int] = set()

        self._take_baseline()

        self._last_tick_at = self._clock()
        self._last_collection_time: Optional[datetime] = None
        self._state = SessionState.READY

        logger.info(
            "Monitoring %d active of %d interfaces",
            len(self._active), len(self._interfaces),
        )

    def _take_baseline(self) -> None:
        """
        Initial snapshot for every active interface.

        An interface whose first read fails gets a zero-valued placeholder.
        The first successful read later replaces it without producing a
        sample, so no lifetime-sized spike is reported against zero.
        """
        snapshots = self.collector.collect(self._active)
        for iface in self._active:
            snapshot = snapshots.get(iface.index)
            if snapshot is None:
                logger.debug("No baseline for %s; starting from zero", iface.name)
                snapshot = CounterSnapshot.zero(iface.index, self._clock())
                self._placeholders.add(iface.index)
            self._snapshots[iface.index] = snapshot

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self) -> Dict[int, BandwidthSample]:
        """
        Collect, derive and append to history for every interface.

        Returns:
            The samples produced by this tick, keyed by interface index.
            Interfaces without a sample this time are absent.
        """
        if self._state is SessionState.STOPPED:
            return {}

        resume_state = self._state if self._state is SessionState.QUITTING else SessionState.READY
        self._state = SessionState.TICKING
        samples = {}

        try:
            snapshots = self.collector.collect(self._interfaces)
            for index, snapshot in snapshots.items():
                sample = self._apply(index, snapshot)
                if sample is not None:
                    samples[index] = sample
        finally:
            self._last_tick_at = self._clock()
            self._state = resume_state

        if snapshots:
            self._last_collection_time = self._wall_clock()

        logger.debug(
            "Tick: %d snapshots, %d samples", len(snapshots), len(samples)
        )
        return samples

    def _apply(self, index: int, snapshot: CounterSnapshot) -> Optional[BandwidthSample]:
        previous = self._snapshots.get(index)

        if previous is None or index in self._placeholders:
            self._snapshots[index] = snapshot
            self._placeholders.discard(index)
            return None

        sample = derive_bandwidth(snapshot, previous)
        if sample is None:
            return None

        self._histories[index].append(sample)
        self._samples[index] = sample
        self._snapshots[index] = snapshot
        return sample

    def seconds_until_due(self, now: Optional[float] = None) -> float:
        """Time left before the next periodic tick, never negative."""
        if now is None:
            now = self._clock()
        return max(0.0, self._last_tick_at + self.update_interval - now)

    def is_due(self, now: Optional[float] = None) -> bool:
        return self.seconds_until_due(now) == 0.0

    def tick_if_due(self, now: Optional[float] = None) -> bool:
        """Run a tick if the update interval has elapsed."""
        if self.should_quit or not self.is_due(now):
            return False
        self.tick()
        return True

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_next(self) -> bool:
        """Move to the next active interface. Returns False at the end."""
        if self._cursor >= len(self._active) - 1:
            return False
        self._move_cursor(self._cursor + 1)
        return True

    def select_previous(self) -> bool:
        """Move to the previous active interface. Returns False at the start."""
        if self._cursor <= 0:
            return False
        self._move_cursor(self._cursor - 1)
        return True

    def select_interface(self, name: str) -> bool:
        """Select an active interface by name."""
        for cursor, iface in enumerate(self._active):
            if iface.name == name:
                if cursor != self._cursor:
                    self._move_cursor(cursor)
                return True
        return False

    def _move_cursor(self, cursor: int) -> None:
        resume_state = self._state if self._state is SessionState.QUITTING else SessionState.READY
        self._state = SessionState.SWITCHING
        self._cursor = cursor
        # Only the displayed series restarts; the stored snapshot is kept
        self.selected_history.clear()
        self._state = resume_state
        logger.debug("Selected %s", self.selected_interface.name)

    def clear_history(self) -> None:
        """Reset the selected interface's history and graph scale."""
        self.selected_history.clear()

    # ------------------------------------------------------------------
    # Commands and lifecycle
    # ------------------------------------------------------------------

    def handle(self, command: Command) -> bool:
        """
        Apply a logical command.

        Returns:
            False once the session should stop, True otherwise.
        """
        if command is Command.QUIT:
            self.request_quit()
        elif command is Command.SELECT_PREVIOUS:
            self.select_previous()
        elif command is Command.SELECT_NEXT:
            self.select_next()
        elif command is Command.FORCE_UPDATE:
            self.tick()
        elif command is Command.CLEAR_HISTORY:
            self.clear_history()
        return not self.should_quit

    def request_quit(self) -> None:
        if self._state is not SessionState.STOPPED:
            self._state = SessionState.QUITTING

    def stop(self) -> None:
        self._state = SessionState.STOPPED
        logger.info("Monitoring session stopped")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def should_quit(self) -> bool:
        return self._state in (SessionState.QUITTING, SessionState.STOPPED)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def interfaces(self) -> Tuple[InterfaceIdentity, ...]:
        return self._interfaces

    @property
    def active_interfaces(self) -> Tuple[InterfaceIdentity, ...]:
        return self._active

    @property
    def selected_interface(self) -> InterfaceIdentity:
        return self._active[self._cursor]

    @property
    def position(self) -> Tuple[int, int]:
        """(1-based position of the selection, number of active interfaces)."""
        return self._cursor + 1, len(self._active)

    @property
    def selected_snapshot(self) -> Optional[CounterSnapshot]:
        return self.snapshot_for(self.selected_interface.index)

    @property
    def selected_history(self) -> HistoryWindow:
        return self._histories[self.selected_interface.index]

    @property
    def selected_sample(self) -> Optional[BandwidthSample]:
        return self.sample_for(self.selected_interface.index)

    @property
    def last_collection_time(self) -> Optional[datetime]:
        """Wall-clock time of the last tick that collected anything."""
        return self._last_collection_time

    def snapshot_for(self, index: int) -> Optional[CounterSnapshot]:
        return self._snapshots.get(index)

    def history_for(self, index: int) -> HistoryWindow:
        return self._histories[index]

    def sample_for(self, index: int) -> Optional[BandwidthSample]:
        return self._samples.get(index)

    def view(self) -> SessionView:
        """Snapshot of everything the display needs for the selection."""
        iface = self.selected_interface
        history = self._histories[iface.index]
        position, count = self.position
        return SessionView(
            interface=iface,
            snapshot=self._snapshots.get(iface.index),
            sample=self._samples.get(iface.index),
            download_history=tuple(history.download_rates),
            upload_history=tuple(history.upload_rates),
            max_download_rate=history.max_download_rate,
            max_upload_rate=history.max_upload_rate,
            position=position,
            active_count=count,
            last_update=self._last_collection_time,
        )
