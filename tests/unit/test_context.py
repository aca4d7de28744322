"""Unit tests for session-scoped profiling helpers.

Tests cover:
- Installing and restoring the current profiler
- profile() blocks inside and outside a session
- timed() decorator for sync and async callables
- Propagation across async tasks
"""

import asyncio

import pytest

from prophiler.config import ProfilerConfig
from prophiler.context import get_current_profiler, profile, profiling_session, timed
from prophiler.profiler import Profiler


class TestProfilingSession:
    """Test session installation."""

    def test_session_installs_profiler(self) -> None:
        """Test the profiler is current only within the session."""
        assert get_current_profiler() is None

        with profiling_session() as profiler:
            assert isinstance(profiler, Profiler)
            assert get_current_profiler() is profiler

        assert get_current_profiler() is None

    def test_session_with_existing_profiler(self, clock) -> None:
        """Test an explicit profiler is installed as is."""
        existing = Profiler(clock=clock)

        with profiling_session(existing) as profiler:
            assert profiler is existing

    def test_session_from_config(self) -> None:
        """Test a new profiler is built from the given config."""
        config = ProfilerConfig(slow_benchmark_ms=10)

        with profiling_session(config=config) as profiler:
            assert profiler.config is config

    def test_nested_sessions(self) -> None:
        """Test inner sessions shadow and then restore outer ones."""
        with profiling_session() as outer:
            with profiling_session() as inner:
                assert get_current_profiler() is inner
            assert get_current_profiler() is outer

    def test_session_restored_after_error(self) -> None:
        """Test the session is reset when the block raises."""
        with pytest.raises(RuntimeError):
            with profiling_session():
                raise RuntimeError("boom")

        assert get_current_profiler() is None


class TestProfile:
    """Test profile() blocks."""

    def test_profile_records_on_current_profiler(self, clock) -> None:
        """Test the block is benchmarked with metadata and component."""
        with profiling_session(Profiler(clock=clock)) as profiler:
            with profile("Repository::find", component="Database", id=42) as token:
                clock.advance(0.01)

        benchmark = profiler.get_benchmark(token)
        assert benchmark.name == "Repository::find"
        assert benchmark.component == "Database"
        assert benchmark.metadata == {"id": 42}
        assert benchmark.get_duration() == pytest.approx(0.01)

    def test_profile_outside_session_is_noop(self) -> None:
        """Test profile() yields None without a session."""
        with profile("work") as token:
            assert token is None


class TestTimed:
    """Test timed() decorator."""

    def test_timed_sync(self) -> None:
        """Test sync calls are benchmarked under their qualified name."""

        @timed(component="App")
        def compute(x: int) -> int:
            return x * 2

        with profiling_session() as profiler:
            assert compute(21) == 42

        benchmark = profiler.get_benchmark()
        assert benchmark.name.endswith("compute")
        assert benchmark.component == "App"
        assert benchmark.end_time is not None

    def test_timed_custom_name(self) -> None:
        """Test an explicit benchmark name."""

        @timed("custom")
        def work() -> None:
            pass

        with profiling_session() as profiler:
            work()
            work()

        assert [benchmark.name for _, benchmark in profiler] == ["custom", "custom"]

    def test_timed_preserves_metadata(self) -> None:
        """Test functools.wraps keeps the wrapped function's identity."""

        @timed()
        def documented() -> None:
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."

    def test_timed_outside_session(self) -> None:
        """Test decorated functions run normally without a session."""

        @timed()
        def work() -> str:
            return "done"

        assert work() == "done"

    def test_timed_records_exception(self) -> None:
        """Test failing calls are still stopped."""

        @timed("failing")
        def fail() -> None:
            raise KeyError("missing")

        with profiling_session() as profiler:
            with pytest.raises(KeyError):
                fail()

        benchmark = profiler.get_benchmark()
        assert benchmark.end_time is not None
        assert benchmark.metadata["exception"] == "KeyError"

    @pytest.mark.asyncio
    async def test_timed_async(self) -> None:
        """Test coroutine functions are awaited inside the benchmark."""

        @timed("fetch", component="Http")
        async def fetch() -> str:
            await asyncio.sleep(0.01)
            return "payload"

        with profiling_session() as profiler:
            assert await fetch() == "payload"

        benchmark = profiler.get_benchmark()
        assert benchmark.name == "fetch"
        assert benchmark.component == "Http"
        assert benchmark.get_duration() >= 0.005

    @pytest.mark.asyncio
    async def test_session_follows_tasks(self) -> None:
        """Test concurrent tasks record on the session's profiler."""

        @timed("task")
        async def task(delay: float) -> None:
            await asyncio.sleep(delay)

        with profiling_session() as profiler:
            await asyncio.gather(task(0.02), task(0.01), task(0.0))

        assert profiler.count() == 3
        assert all(benchmark.end_time is not None for _, benchmark in profiler)
