"""Exceptions raised by the profiler and its benchmarks."""


class ProphilerError(Exception):
    """Base exception for profiler errors."""

    pass


class InvalidBenchmarkError(ProphilerError):
    """Raised when a benchmark is built without a usable name."""

    pass


class UnknownBenchmarkError(ProphilerError):
    """Raised when a token does not resolve to a registered benchmark."""

    pass


class EmptyProfilerError(UnknownBenchmarkError):
    """Raised when the last benchmark is requested but none are registered."""

    pass


class BenchmarkNotFinishedError(ProphilerError):
    """Raised when reading the duration of a benchmark that is still running."""

    pass
