"""Typed events emitted by a supervised transformation process.

Every run produces either a single ``SpawnError`` or any number of output
chunks followed by exactly one ``Exit``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SpawnError:
    """The tool could not be launched."""

    cause: BaseException


@dataclass(frozen=True)
class StdoutChunk:
    text: str


@dataclass(frozen=True)
class StderrChunk:
    text: str


@dataclass(frozen=True)
class Exit:
    """The process terminated. ``code`` is ``None`` when the tool reported none."""

    code: Optional[int]

    @property
    def succeeded(self) -> bool:
        return self.code is None or self.code == 0


ProcessEvent = Union[SpawnError, StdoutChunk, StderrChunk, Exit]


def is_terminal(event: ProcessEvent) -> bool:
    return isinstance(event, (SpawnError, Exit))
