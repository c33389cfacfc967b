"""Concurrent counter collection across interfaces."""

import logging
import os
import time
from concurrent.futures import BrokenExecutor, Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..models.counters import CounterSnapshot
from ..models.interface import InterfaceIdentity
from .platform_source import CounterSource

logger = logging.getLogger(__name__)


ExecutorFactory = Callable[[int], Executor]


def default_worker_count(interface_count: int) -> int:
    """Thread count for one collection: never more threads than interfaces."""
    pool_default = min(32, (os.cpu_count() or 1) + 4)
    return max(1, min(interface_count, pool_default))


def _thread_pool(max_workers: int) -> Executor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="counter-read")


@dataclass
class CollectorStats:
    """Statistics for counter collection."""
    collections: int = 0
    fallbacks: int = 0
    failed_reads: int = 0
    stale_discarded: int = 0
    last_duration: float = 0.0
    last_collected_at: float = 0.0


class ParallelCollector:
    """
    Reads counters for many interfaces at once.

    Each collect() call fans the reads out over a short-lived thread pool
    and joins them before returning. A read that fails only drops that
    interface for this call. If the pool itself cannot run, the reads are
    repeated one by one on the calling thread.
    """

    def __init__(
        self,
        source: CounterSource,
        parallel: bool = True,
        max_workers: Optional[int] = None,
        executor_factory: Optional[ExecutorFactory] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.parallel = parallel
        self.max_workers = max_workers
        self._executor_factory = executor_factory or _thread_pool
        self._clock = clock

        self._last_captured: Dict[int, float] = {}
        self._fallback_logged = False
        self._stats = CollectorStats()

    def collect(self, interfaces: Sequence[InterfaceIdentity]) -> Dict[int, CounterSnapshot]:
        """
        Read one snapshot per interface.

        Returns:
            Snapshots keyed by interface index. Interfaces whose read
            failed, or whose snapshot is not newer than the last one
            delivered, are missing from the result.
        """
        start = self._clock()
        interfaces = list(interfaces)

        if not interfaces:
            snapshots: Dict[int, CounterSnapshot] = {}
        elif self.parallel:
            try:
                snapshots = self._collect_parallel(interfaces)
            except RuntimeError as e:
                self._note_fallback(e)
                snapshots = self._collect_sequential(interfaces)
        else:
            snapshots = self._collect_sequential(interfaces)

        snapshots = self._drop_stale(snapshots)

        end = self._clock()
        self._stats.collections += 1
        self._stats.last_duration = end - start
        self._stats.last_collected_at = end
        return snapshots

    def _collect_parallel(self, interfaces: List[InterfaceIdentity]) -> Dict[int, CounterSnapshot]:
        workers = self.max_workers or default_worker_count(len(interfaces))
        snapshots = {}
        # Only counted once the pool has finished; a broken pool retries them all
        failures = []

        with self._executor_factory(workers) as executor:
            futures = {
                executor.submit(self.source.read_counters, iface.index): iface
                for iface in interfaces
            }
            for future in as_completed(futures):
                iface = futures[future]
                try:
                    snapshot = future.result()
                except BrokenExecutor:
                    raise
                except Exception as e:
                    failures.append((iface, e))
                    continue
                error = self._attribution_error(iface, snapshot)
                if error is not None:
                    failures.append((iface, error))
                    continue
                snapshots[iface.index] = snapshot

        for iface, error in failures:
            self._note_failed_read(iface, error)
        return snapshots

    def _collect_sequential(self, interfaces: List[InterfaceIdentity]) -> Dict[int, CounterSnapshot]:
        snapshots = {}
        for iface in interfaces:
            try:
                snapshot = self.source.read_counters(iface.index)
            except Exception as e:
                self._note_failed_read(iface, e)
                continue
            error = self._attribution_error(iface, snapshot)
            if error is not None:
                self._note_failed_read(iface, error)
                continue
            snapshots[iface.index] = snapshot
        return snapshots

    @staticmethod
    def _attribution_error(iface: InterfaceIdentity, snapshot: CounterSnapshot) -> Optional[Exception]:
        if snapshot.interface_id != iface.index:
            return ValueError(f"snapshot attributed to interface {snapshot.interface_id}")
        return None

    def _drop_stale(self, snapshots: Dict[int, CounterSnapshot]) -> Dict[int, CounterSnapshot]:
        fresh = {}
        for index, snapshot in snapshots.items():
            last = self._last_captured.get(index)
            if last is not None and snapshot.captured_at <= last:
                self._stats.stale_discarded += 1
                logger.debug(
                    "Discarding stale snapshot for interface %d (%.6f <= %.6f)",
                    index, snapshot.captured_at, last,
                )
                continue
            self._last_captured[index] = snapshot.captured_at
            fresh[index] = snapshot
        return fresh

    def _note_failed_read(self, iface: InterfaceIdentity, error: Exception) -> None:
        self._stats.failed_reads += 1
        logger.debug("Counter read failed for %s: %s", iface.name, error)

    def _note_fallback(self, error: Exception) -> None:
        self._stats.fallbacks += 1
        if not self._fallback_logged:
            logger.warning("Parallel collection failed (%s); reading interfaces sequentially", error)
            self._fallback_logged = True
        else:
            logger.debug("Parallel collection failed again: %s", error)

    def get_stats(self) -> CollectorStats:
        """Get a copy of the collection statistics."""
        return CollectorStats(
            collections=self._stats.collections,
            fallbacks=self._stats.fallbacks,
            failed_reads=self._stats.failed_reads,
            stale_discarded=self._stats.stale_discarded,
            last_duration=self._stats.last_duration,
            last_collected_at=self._stats.last_collected_at,
        )
