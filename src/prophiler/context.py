"""Session-scoped profiler access.

This module keeps the current profiling session in a context variable, so
instrumented code can record benchmarks without threading a profiler
through every call. The session follows async task boundaries.

Usage:
    with profiling_session() as profiler:
        with profile("Repository::find", component="Database", id=42):
            repository.find(42)

        handle_request()  # functions decorated with @timed record too

    render(profiler)

Outside a session, ``profile`` and ``timed`` do nothing.
"""

import asyncio
import contextvars
import functools
import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from prophiler.config import ProfilerConfig
from prophiler.profiler import Profiler

logger = logging.getLogger(__name__)

_current_profiler: contextvars.ContextVar[Profiler | None] = contextvars.ContextVar(
    "current_profiler", default=None
)


@contextmanager
def profiling_session(
    profiler: Profiler | None = None,
    config: ProfilerConfig | None = None,
) -> Generator[Profiler, None, None]:
    """Install a profiler as the current one for the enclosed block.

    Args:
        profiler: Profiler to install (created from config if None)
        config: Configuration for a newly created profiler

    Yields:
        The active profiler
    """
    if profiler is None:
        profiler = Profiler(config)

    token = _current_profiler.set(profiler)
    logger.info("Profiling session started")
    try:
        yield profiler
    finally:
        _current_profiler.reset(token)
        logger.info(
            "Profiling session ended",
            extra={
                "benchmark_count": profiler.count(),
                "duration_ms": profiler.get_duration() * 1000.0,
            },
        )


def get_current_profiler() -> Profiler | None:
    """Get the profiler of the current session.

    Returns:
        Active profiler or None if not in a session
    """
    return _current_profiler.get()


@contextmanager
def profile(
    name: str,
    component: str | None = None,
    **metadata: Any,
) -> Generator[str | None, None, None]:
    """Benchmark a block on the current session's profiler.

    Args:
        name: Benchmark identifier
        component: Optional component label
        **metadata: Initial benchmark metadata

    Yields:
        Benchmark token, or None outside a session
    """
    profiler = get_current_profiler()
    if profiler is None:
        yield None
        return

    with profiler.benchmark(name, metadata, component) as token:
        yield token


def timed(name: str | None = None, component: str | None = None) -> Any:
    """Decorator benchmarking each call on the current session's profiler.

    Args:
        name: Benchmark name (defaults to the function's qualified name)
        component: Optional component label

    Usage:
        @timed(component="Database")
        async def load_user(user_id: int) -> User:
            ...
    """

    def decorator(func: Any) -> Any:
        benchmark_name = name or func.__qualname__

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with profile(benchmark_name, component):
                    return await func(*args, **kwargs)

            return async_wrapper
        else:

            @functools.wraps(func)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                with profile(benchmark_name, component):
                    return func(*args, **kwargs)

            return sync_wrapper

    return decorator
