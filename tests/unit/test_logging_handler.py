"""Unit tests for the logging bridge."""

import logging
from collections.abc import Generator

import pytest

from prophiler.context import profiling_session
from prophiler.logging_handler import BenchmarkLogHandler
from prophiler.profiler import Profiler


@pytest.fixture
def app_logger() -> Generator[logging.Logger, None, None]:
    """Isolated application logger with handlers removed afterwards."""
    logger = logging.getLogger("tests.app")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    logger.handlers.clear()
    logger.propagate = True


def test_records_become_benchmarks(app_logger: logging.Logger) -> None:
    """Test each record is added as a finished benchmark."""
    profiler = Profiler()
    app_logger.addHandler(BenchmarkLogHandler(profiler))

    app_logger.info("user %s logged in", "alice")
    app_logger.warning("cache miss")

    benchmarks = [benchmark for _, benchmark in profiler]
    assert [benchmark.name for benchmark in benchmarks] == ["user alice logged in", "cache miss"]
    assert benchmarks[0].component == "Logger"
    assert benchmarks[0].metadata == {"severity": "info", "logger": "tests.app"}
    assert benchmarks[1].metadata["severity"] == "warning"
    assert all(benchmark.end_time is not None for benchmark in benchmarks)


def test_empty_profiler_is_used(app_logger: logging.Logger) -> None:
    """Test an explicit empty profiler is not mistaken for a missing one."""
    profiler = Profiler()
    app_logger.addHandler(BenchmarkLogHandler(profiler))

    with profiling_session() as session_profiler:
        app_logger.info("hello")

    assert profiler.count() == 1
    assert session_profiler.count() == 0


def test_uses_current_session(app_logger: logging.Logger) -> None:
    """Test records go to the session's profiler when none is given."""
    app_logger.addHandler(BenchmarkLogHandler(component="Log"))

    app_logger.info("before session")
    with profiling_session() as profiler:
        app_logger.error("failure")

    assert profiler.count() == 1
    benchmark = profiler.get_benchmark()
    assert benchmark.name == "failure"
    assert benchmark.component == "Log"


def test_level_filter(app_logger: logging.Logger) -> None:
    """Test records below the handler level are ignored."""
    profiler = Profiler()
    app_logger.addHandler(BenchmarkLogHandler(profiler, level=logging.WARNING))

    app_logger.debug("noise")
    app_logger.warning("signal")

    assert profiler.count() == 1


def test_profiler_records_are_skipped() -> None:
    """Test the profiler's own log output is not recorded."""
    profiler = Profiler()
    handler = BenchmarkLogHandler(profiler)
    prophiler_logger = logging.getLogger("prophiler.profiler")
    previous_level = prophiler_logger.level
    prophiler_logger.setLevel(logging.DEBUG)
    prophiler_logger.addHandler(handler)
    try:
        token = profiler.start("work")
        profiler.stop(token)
    finally:
        prophiler_logger.removeHandler(handler)
        prophiler_logger.setLevel(previous_level)

    assert profiler.count() == 1
