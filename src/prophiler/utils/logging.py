"""Logging setup helpers."""

import logging

from prophiler.config import ProfilerConfig


def setup_logging(level: str = "INFO") -> None:
    """Setup logging for profiler output.

    Args:
        level: Logging level name
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def setup_logging_from_config(config: ProfilerConfig) -> None:
    """Setup logging using the level from a profiler configuration.

    Args:
        config: Profiler configuration
    """
    setup_logging(config.log_level)
