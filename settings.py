"""Environment-driven settings for the transformation tool."""
from __future__ import annotations

import shlex
from typing import List, Optional

from pydantic_settings import BaseSettings

from .config import LOG_JSON, LOG_LEVEL, TOOL_EXECUTABLE, TOOL_STREAM_LIMIT


class ToolSettings(BaseSettings):
    """Immutable settings loaded from environment / .env file."""

    executable: str = TOOL_EXECUTABLE
    extra_args: str = ""
    working_dir: Optional[str] = None
    stream_limit: int = TOOL_STREAM_LIMIT
    log_level: str = LOG_LEVEL
    json_logs: bool = LOG_JSON

    model_config = {"env_prefix": "PHOTOJOB_", "env_file": ".env", "extra": "ignore"}

    def extra_arg_list(self) -> List[str]:
        """``extra_args`` split with shell quoting rules."""
        return shlex.split(self.extra_args) if self.extra_args else []
