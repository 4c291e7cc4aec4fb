"""
Structured configuration for photojob using typed dataclasses.

This is the AUTHORITATIVE source of truth for all configuration values.
``config.py`` imports from here for the flat-constant interface.

Usage:
    from photojob.config_structured import get_config
    cfg = get_config()
    cfg.output.suffix           # "dreamtime"
    cfg.tool.stream_limit       # max bytes per captured output line
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


@dataclass
class OutputNamingConfig:
    """Naming of the output artifact produced by a job run."""

    max_name_length: int = 30
    suffix: str = "dreamtime"
    extension: str = "png"

    def __post_init__(self):
        if not isinstance(self.max_name_length, int) or self.max_name_length < 1:
            raise ValueError(
                f"max_name_length must be a positive integer, got {self.max_name_length}"
            )
        self.extension = self.extension.lstrip(".")
        if not self.extension:
            raise ValueError("extension must not be empty")
        for bad in ("/", "\\"):
            if bad in self.suffix or bad in self.extension:
                raise ValueError(f"suffix/extension must not contain {bad!r}")


@dataclass
class ToolConfig:
    """Invocation defaults for the external transformation tool."""

    executable: str = "hadron"
    base_args: List[str] = field(default_factory=lambda: ["run"])
    input_flag: str = "--input"
    output_flag: str = "--output"
    stream_limit: int = 2 ** 20  # asyncio StreamReader line limit (bytes)

    def __post_init__(self):
        if self.stream_limit < 1024:
            raise ValueError(f"stream_limit must be >= 1024 bytes, got {self.stream_limit}")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        self.level = self.level.upper()
        if self.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.level}")


@dataclass
class PhotoJobConfig:
    """Top-level configuration aggregating every subsystem."""

    output: OutputNamingConfig = field(default_factory=OutputNamingConfig)
    tool: ToolConfig = field(default_factory=ToolConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_config() -> PhotoJobConfig:
    """Return the process-wide configuration singleton."""
    return PhotoJobConfig()
