"""Method-call proxy that benchmarks every call on a wrapped object."""

import asyncio
import functools
from typing import Any

from prophiler.context import get_current_profiler
from prophiler.profiler import Profiler


class ProfiledProxy:
    """Forward attribute access to a target, benchmarking method calls.

    Each call is recorded as ``"ClassName::method"`` with the number of
    positional and keyword arguments as metadata. Plain attributes pass
    through untouched. Without an explicit profiler, calls are recorded on
    the current profiling session, or not at all outside one.

    Usage:
        repository = ProfiledProxy(UserRepository(), component="Database")
        repository.find(42)  # benchmarked as "UserRepository::find"
    """

    def __init__(
        self,
        target: Any,
        profiler: Profiler | None = None,
        component: str | None = None,
    ) -> None:
        """Initialize proxy.

        Args:
            target: Object to wrap
            profiler: Target profiler (current session's if None)
            component: Component label for recorded benchmarks
        """
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_profiler", profiler)
        object.__setattr__(self, "_component", component)

    @property
    def target(self) -> Any:
        return self._target

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if not callable(attr):
            return attr

        benchmark_name = f"{type(self._target).__name__}::{name}"

        if asyncio.iscoroutinefunction(attr):

            @functools.wraps(attr)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                profiler = self._resolve_profiler()
                if profiler is None:
                    return await attr(*args, **kwargs)

                metadata = {"arguments": len(args) + len(kwargs)}
                with profiler.benchmark(benchmark_name, metadata, self._component):
                    return await attr(*args, **kwargs)

            return async_wrapper

        @functools.wraps(attr)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            profiler = self._resolve_profiler()
            if profiler is None:
                return attr(*args, **kwargs)

            metadata = {"arguments": len(args) + len(kwargs)}
            with profiler.benchmark(benchmark_name, metadata, self._component):
                return attr(*args, **kwargs)

        return wrapper

    def _resolve_profiler(self) -> Profiler | None:
        if self._profiler is not None:
            return self._profiler
        return get_current_profiler()

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._target, name, value)

    def __repr__(self) -> str:
        return f"ProfiledProxy({self._target!r})"
