"""Benchmark records and the factory that builds them.

A benchmark is a single named, timed span of work. It carries a component
label (the subsystem that raised it, e.g. "Database"), an open metadata
mapping and wall-clock start/end timestamps in seconds.

Timestamps and durations are stored in seconds. Conversion to milliseconds
happens only at the presentation boundary (``to_dict``).
"""

import logging
import time
import tracemalloc
from collections.abc import Callable, Mapping
from typing import Any

from prophiler.exceptions import BenchmarkNotFinishedError, InvalidBenchmarkError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _traced_memory() -> int | None:
    """Return currently traced heap bytes, or None when tracemalloc is off."""
    if not tracemalloc.is_tracing():
        return None
    current, _peak = tracemalloc.get_traced_memory()
    return current


class Benchmark:
    """A single timed unit of work.

    Attributes:
        name: Identifier such as ``"Repository::find"``
        component: Subsystem that triggered the benchmark, or None
        metadata: Arbitrary key/value data, merged shallowly
        start_time: Wall-clock start in seconds (None until started)
        end_time: Wall-clock end in seconds (None until stopped)
        memory_start: Traced heap bytes at start (None when not tracked)
        memory_end: Traced heap bytes at stop (None when not tracked)
    """

    def __init__(
        self,
        name: str,
        metadata: Mapping[str, Any] | None = None,
        component: str | None = None,
        clock: Clock = time.time,
        track_memory: bool = False,
    ) -> None:
        """Initialize benchmark.

        Args:
            name: Benchmark identifier
            metadata: Initial metadata (copied)
            component: Optional component label
            clock: Callable returning the current time in seconds
            track_memory: Record traced heap usage at start and stop
        """
        self._name = name
        self._component = component
        self._metadata: dict[str, Any] = dict(metadata) if metadata else {}
        self._clock = clock
        self._track_memory = track_memory

        self._start_time: float | None = None
        self._end_time: float | None = None
        self._memory_start: int | None = None
        self._memory_end: int | None = None

    def __repr__(self) -> str:
        return (
            f"Benchmark(name={self._name!r}, component={self._component!r}, "
            f"start_time={self._start_time!r}, end_time={self._end_time!r})"
        )

    # === Lifecycle ===

    def start(self) -> None:
        """Record the start timestamp.

        Raises:
            RuntimeError: If the benchmark was already started
        """
        if self._start_time is not None:
            raise RuntimeError(f"Benchmark {self._name!r} already started")

        if self._track_memory:
            self._memory_start = _traced_memory()
        self._start_time = self._clock()

    def stop(self) -> None:
        """Record the end timestamp.

        Raises:
            RuntimeError: If the benchmark was never started or already stopped
        """
        if self._start_time is None:
            raise RuntimeError(f"Benchmark {self._name!r} stopped before it was started")
        if self._end_time is not None:
            raise RuntimeError(f"Benchmark {self._name!r} already stopped")

        # A clock stepping backwards must not yield a negative duration
        self._end_time = max(self._clock(), self._start_time)
        if self._track_memory:
            self._memory_end = _traced_memory()

    def add_metadata(self, extra: Mapping[str, Any] | None) -> None:
        """Merge additional metadata; new values win for existing keys.

        Args:
            extra: Metadata to merge
        """
        if extra:
            self._metadata.update(extra)

    # === Accessors ===

    @property
    def name(self) -> str:
        return self._name

    @property
    def component(self) -> str | None:
        return self._component

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata

    @property
    def start_time(self) -> float | None:
        return self._start_time

    @property
    def end_time(self) -> float | None:
        return self._end_time

    @property
    def memory_start(self) -> int | None:
        return self._memory_start

    @property
    def memory_end(self) -> int | None:
        return self._memory_end

    @property
    def is_running(self) -> bool:
        """True between start() and stop()."""
        return self._start_time is not None and self._end_time is None

    def get_duration(self) -> float:
        """Get elapsed time in seconds.

        Returns:
            ``end_time - start_time``

        Raises:
            BenchmarkNotFinishedError: If the benchmark has not been stopped
        """
        if self._end_time is None or self._start_time is None:
            raise BenchmarkNotFinishedError(f"Benchmark {self._name!r} has not finished")
        return self._end_time - self._start_time

    def get_memory_usage(self) -> int | None:
        """Get traced heap growth in bytes across the benchmark.

        Returns:
            Byte delta, or None when memory was not tracked

        Raises:
            BenchmarkNotFinishedError: If the benchmark has not been stopped
        """
        if self._end_time is None:
            raise BenchmarkNotFinishedError(f"Benchmark {self._name!r} has not finished")
        if self._memory_start is None or self._memory_end is None:
            return None
        return self._memory_end - self._memory_start

    def to_dict(self) -> dict[str, Any]:
        """Snapshot for renderers and exporters.

        Returns:
            Dictionary with timing in seconds and duration in milliseconds
            (duration_ms is None while running)
        """
        duration_ms = None
        memory_bytes = None
        if self._end_time is not None:
            duration_ms = self.get_duration() * 1000.0
            memory_bytes = self.get_memory_usage()

        return {
            "name": self._name,
            "component": self._component,
            "metadata": dict(self._metadata),
            "start_time": self._start_time,
            "end_time": self._end_time,
            "duration_ms": duration_ms,
            "memory_bytes": memory_bytes,
        }


class BenchmarkFactory:
    """Builds benchmarks, applying the profiler's construction policy."""

    def __init__(self, clock: Clock = time.time, track_memory: bool = False) -> None:
        """Initialize factory.

        Args:
            clock: Clock handed to every built benchmark
            track_memory: Whether built benchmarks record heap usage
        """
        self.clock = clock
        self.track_memory = track_memory

    def build(
        self,
        name: str,
        metadata: Mapping[str, Any] | None = None,
        component: str | None = None,
    ) -> Benchmark:
        """Build a new, unstarted benchmark.

        Args:
            name: Benchmark identifier (must be non-empty)
            metadata: Initial metadata
            component: Optional component label

        Returns:
            New Benchmark instance

        Raises:
            InvalidBenchmarkError: If name is empty or None
        """
        if not name or not isinstance(name, str):
            raise InvalidBenchmarkError(f"Benchmark name must be a non-empty string, got {name!r}")

        return Benchmark(
            name,
            metadata=metadata,
            component=component,
            clock=self.clock,
            track_memory=self.track_memory,
        )
