"""Benchmark registry for one profiling session.

The profiler owns an insertion-ordered collection of benchmarks keyed by
opaque tokens. Callers start a benchmark, keep the returned token and stop
it later; omitting the token targets the most recently inserted benchmark.

Architecture:
    caller → Profiler.start() → BenchmarkFactory.build() → Benchmark.start()
                   ↓
             token → Benchmark (ordered, append-only)
                   ↓
    renderers / exporters → iteration, get_duration(), get_summary()

Thread-safety: token minting and insertion are guarded by a single lock.
Individual benchmarks are owned by whoever holds their token and are not
synchronized.
"""

import logging
import threading
import time
import tracemalloc
import uuid
from collections.abc import Generator, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from prophiler.benchmark import Benchmark, BenchmarkFactory, Clock
from prophiler.config import ProfilerConfig
from prophiler.exceptions import EmptyProfilerError, UnknownBenchmarkError

logger = logging.getLogger(__name__)


class Profiler:
    """Ordered, append-only registry of benchmarks.

    Attributes:
        config: Profiler configuration
        factory: Factory used by start() to build benchmarks
    """

    def __init__(
        self,
        config: ProfilerConfig | None = None,
        clock: Clock = time.time,
        factory: BenchmarkFactory | None = None,
    ) -> None:
        """Initialize profiler and record its start time.

        Args:
            config: Profiler configuration (defaults if None)
            clock: Callable returning the current time in seconds
            factory: Benchmark factory (built from config and clock if None).
                An injected factory's clock and memory policy take precedence
                over clock and config.track_memory.
        """
        self.config = config or ProfilerConfig()
        if factory is None:
            factory = BenchmarkFactory(clock=clock, track_memory=self.config.track_memory)
        self.factory = factory
        self._clock = factory.clock

        if factory.track_memory and not tracemalloc.is_tracing():
            tracemalloc.start()

        self._lock = threading.RLock()
        self._benchmarks: dict[str, Benchmark] = {}
        self._start_time = self._clock()

    # === Lifecycle ===

    def start(
        self,
        name: str,
        metadata: Mapping[str, Any] | None = None,
        component: str | None = None,
    ) -> str:
        """Start a new benchmark.

        Args:
            name: Identifier like ``"Repository::find"``
            metadata: Additional metadata
            component: Component that triggered the benchmark, e.g. "Database"

        Returns:
            Opaque benchmark token

        Raises:
            InvalidBenchmarkError: If name is empty
        """
        benchmark = self.factory.build(name, metadata, component)
        benchmark.start()
        token = self.add_benchmark(benchmark)

        logger.debug(
            f"Benchmark started: {name}",
            extra={"token": token, "benchmark": name, "component": component},
        )
        return token

    def stop(self, token: str | None = None, metadata: Mapping[str, Any] | None = None) -> Benchmark:
        """Stop a running benchmark.

        If no token is given, the most recently inserted benchmark is stopped.

        Args:
            token: Benchmark token
            metadata: Metadata merged in before stopping

        Returns:
            The stopped benchmark

        Raises:
            UnknownBenchmarkError: If the token is not registered
            EmptyProfilerError: If no token is given and nothing is registered
        """
        if token is None:
            token = self._last_token()
        benchmark = self.get_benchmark(token)
        benchmark.add_metadata(metadata)
        benchmark.stop()

        duration_ms = benchmark.get_duration() * 1000.0
        logger.debug(
            f"Benchmark stopped: {benchmark.name} ({duration_ms:.3f}ms)",
            extra={
                "token": token,
                "benchmark": benchmark.name,
                "component": benchmark.component,
                "duration_ms": duration_ms,
            },
        )

        threshold = self.config.slow_benchmark_ms
        if threshold is not None and duration_ms > threshold:
            logger.warning(
                f"Slow benchmark: {benchmark.name} took {duration_ms:.1f}ms "
                f"(threshold {threshold}ms)",
                extra={
                    "benchmark": benchmark.name,
                    "component": benchmark.component,
                    "duration_ms": duration_ms,
                },
            )

        return benchmark

    def add_benchmark(self, benchmark: Benchmark) -> str:
        """Register an already constructed benchmark.

        The benchmark may be unstarted, running or finished; it is appended
        after every benchmark registered so far.

        Args:
            benchmark: Benchmark to register

        Returns:
            Fresh opaque token for the benchmark
        """
        with self._lock:
            token = uuid.uuid4().hex
            while token in self._benchmarks:
                token = uuid.uuid4().hex
            self._benchmarks[token] = benchmark
        return token

    @contextmanager
    def benchmark(
        self,
        name: str,
        metadata: Mapping[str, Any] | None = None,
        component: str | None = None,
    ) -> Generator[str, None, None]:
        """Context manager benchmarking the enclosed block.

        The benchmark is stopped even if the block raises; the exception
        type name is recorded under the ``exception`` metadata key. If the
        block already stopped the benchmark, the original exception still
        propagates.

        Usage:
            with profiler.benchmark("Repository::find", component="Database"):
                repository.find(42)

        Yields:
            Benchmark token
        """
        token = self.start(name, metadata, component)
        try:
            yield token
        except BaseException as e:
            if self.get_benchmark(token).is_running:
                self.stop(token, {"exception": type(e).__name__})
            raise
        else:
            self.stop(token)

    # === Lookup ===

    def get_benchmark(self, token: str | None = None) -> Benchmark:
        """Get a benchmark by token, or the last inserted one.

        Args:
            token: Benchmark token (None for the last inserted benchmark)

        Returns:
            Matching benchmark

        Raises:
            UnknownBenchmarkError: If the token is not registered
            EmptyProfilerError: If no token is given and nothing is registered
        """
        if token is None:
            return self.get_last_benchmark()

        try:
            return self._benchmarks[token]
        except (KeyError, TypeError):
            raise UnknownBenchmarkError(f"Unknown benchmark: {token}") from None

    def get_last_benchmark(self) -> Benchmark:
        """Get the most recently inserted benchmark.

        Raises:
            EmptyProfilerError: If nothing is registered
        """
        with self._lock:
            return self._benchmarks[self._last_token()]

    def _last_token(self) -> str:
        with self._lock:
            if not self._benchmarks:
                raise EmptyProfilerError("No benchmarks to return last one")
            return next(reversed(self._benchmarks))

    def get_benchmarks(self) -> dict[str, Benchmark]:
        """Return an ordered snapshot of all benchmarks keyed by token."""
        with self._lock:
            return dict(self._benchmarks)

    def __iter__(self) -> Iterator[tuple[str, Benchmark]]:
        """Iterate (token, benchmark) pairs in insertion order.

        Each call iterates its own snapshot, so traversals are independent
        and benchmarks added meanwhile do not disturb a running traversal.
        """
        with self._lock:
            items = list(self._benchmarks.items())
        return iter(items)

    def __contains__(self, token: object) -> bool:
        try:
            return token in self._benchmarks
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._benchmarks)

    def count(self) -> int:
        """Get the total number of benchmarks, finished or not."""
        return len(self)

    # === Timing ===

    @property
    def start_time(self) -> float:
        return self._start_time

    def get_start_time(self) -> float:
        """Get the profiler's creation timestamp in seconds."""
        return self._start_time

    def get_duration(self) -> float:
        """Get elapsed session time in seconds.

        Uses the end time of the most recently inserted benchmark, not the
        latest end time across all benchmarks. While that benchmark is still
        running, or when nothing is registered, the current time is used.

        Returns:
            Elapsed seconds since the profiler was created
        """
        try:
            last = self.get_last_benchmark()
        except EmptyProfilerError:
            return self._clock() - self._start_time

        end_time = last.end_time
        if end_time is None:
            end_time = self._clock()
        return end_time - self._start_time

    # === Summary statistics ===

    def get_summary(self) -> dict[str, Any]:
        """Get aggregate statistics for dashboards and toolbars.

        Returns:
            Dictionary with overall count and duration plus per-component
            totals (unclassified benchmarks are grouped under None)
        """
        components: dict[str | None, dict[str, Any]] = {}

        for _token, benchmark in self:
            stats = components.setdefault(
                benchmark.component,
                {"count": 0, "finished": 0, "total_ms": 0.0},
            )
            stats["count"] += 1
            if benchmark.end_time is not None:
                stats["finished"] += 1
                stats["total_ms"] += benchmark.get_duration() * 1000.0

        return {
            "count": self.count(),
            "duration_ms": self.get_duration() * 1000.0,
            "components": components,
        }
