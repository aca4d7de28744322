"""Configuration schema for the profiler.

Defines a Pydantic model for loading and validating profiler settings
from YAML files and environment variables.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ProfilerConfig(BaseModel):
    """Profiler configuration.

    Example usage:
        ```yaml
        track_memory: true
        slow_benchmark_ms: 250
        log_level: "DEBUG"
        ```
    """

    track_memory: bool = Field(
        default=False,
        description="Record traced heap usage per benchmark (starts tracemalloc)",
    )
    slow_benchmark_ms: float | None = Field(
        default=None,
        ge=0,
        description="Log a warning when a stopped benchmark exceeds this duration",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize logging level name."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @classmethod
    def from_yaml(cls, path: Path) -> "ProfilerConfig":
        """Load configuration from YAML file with environment variable overrides.

        Args:
            path: Path to YAML configuration file

        Returns:
            Loaded configuration

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        import os

        import yaml  # type: ignore[import-untyped]

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")

        # Apply environment variable overrides
        if track_memory := os.getenv("PROPHILER_TRACK_MEMORY"):
            data["track_memory"] = track_memory.lower() in ("true", "1", "yes")

        if slow_ms := os.getenv("PROPHILER_SLOW_BENCHMARK_MS"):
            data["slow_benchmark_ms"] = float(slow_ms)

        if log_level := os.getenv("PROPHILER_LOG_LEVEL"):
            data["log_level"] = log_level

        return cls.model_validate(data)

    @classmethod
    def from_yaml_with_defaults(cls, path: Path | None = None) -> "ProfilerConfig":
        """Load configuration from YAML or use defaults if file doesn't exist.

        Args:
            path: Optional path to YAML configuration file

        Returns:
            Loaded configuration or defaults
        """
        if path is not None and path.exists():
            return cls.from_yaml(path)

        # Return defaults
        return cls()
