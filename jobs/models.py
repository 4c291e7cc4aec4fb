"""Job data models."""
from __future__ import annotations

import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JobState(str, enum.Enum):
    idle = "idle"
    running = "running"
    finished = "finished"
    failed = "failed"


class ConsoleLine(BaseModel):
    """One captured line of tool output."""

    model_config = ConfigDict(frozen=True)

    text: str
    is_error: bool = False


class JobSnapshot(BaseModel):
    """Point-in-time view of a photo job for observers."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    state: JobState
    is_loading: bool
    has_failed: bool
    has_finished: bool
    console_log: List[ConsoleLine] = Field(default_factory=list)
    error_text: str = ""
    elapsed: float = 0.0
    output_path: str
    output_exists: bool = False
    output_size: int = 0
    error: Optional[str] = None
