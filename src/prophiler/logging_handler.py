"""Logging bridge that records log records as benchmarks.

Attaching ``BenchmarkLogHandler`` to a logger places every emitted record on
the profiler's timeline as an instantly finished benchmark, so log output
shows up next to the timed work it belongs to.
"""

import logging

from prophiler.context import get_current_profiler
from prophiler.profiler import Profiler


class BenchmarkLogHandler(logging.Handler):
    """Logging handler that adds each record to a profiler.

    Records are attached to the handler's own profiler or, when none was
    given, to the current profiling session. Records emitted with no
    profiler available are dropped.
    """

    def __init__(
        self,
        profiler: Profiler | None = None,
        component: str = "Logger",
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize handler.

        Args:
            profiler: Target profiler (current session's if None)
            component: Component label for recorded benchmarks
            level: Minimum level handled
        """
        super().__init__(level)
        self.profiler = profiler
        self.component = component

    def emit(self, record: logging.LogRecord) -> None:
        # The profiler logs its own activity; recording it would recurse
        if record.name.split(".", 1)[0] == "prophiler":
            return

        profiler = self.profiler if self.profiler is not None else get_current_profiler()
        if profiler is None:
            return

        try:
            message = self.format(record)
            metadata = {
                "severity": record.levelname.lower(),
                "logger": record.name,
            }
            token = profiler.start(message or record.levelname, metadata, self.component)
            profiler.stop(token)
        except Exception:
            self.handleError(record)
