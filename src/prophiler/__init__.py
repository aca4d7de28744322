"""In-process benchmark profiler.

Callers mark the start and stop of named units of work; the profiler
records timing and metadata for each and exposes them as an ordered,
iterable collection with aggregate duration queries.
"""

from .benchmark import Benchmark, BenchmarkFactory
from .config import ProfilerConfig
from .context import get_current_profiler, profile, profiling_session, timed
from .exceptions import (
    BenchmarkNotFinishedError,
    EmptyProfilerError,
    InvalidBenchmarkError,
    ProphilerError,
    UnknownBenchmarkError,
)
from .logging_handler import BenchmarkLogHandler
from .profiler import Profiler
from .proxy import ProfiledProxy

__version__ = "0.1.0"

__all__ = [
    # Core
    "Benchmark",
    "BenchmarkFactory",
    "Profiler",
    "ProfilerConfig",
    # Session helpers
    "profiling_session",
    "get_current_profiler",
    "profile",
    "timed",
    "BenchmarkLogHandler",
    "ProfiledProxy",
    # Errors
    "ProphilerError",
    "InvalidBenchmarkError",
    "UnknownBenchmarkError",
    "EmptyProfilerError",
    "BenchmarkNotFinishedError",
]
