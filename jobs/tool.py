"""External transformation tool invocation.

The tool is an injected capability: a job only needs something with an async
``spawn(job)`` returning a process handle. ``CliTransformTool`` launches a
real executable through ``asyncio.create_subprocess_exec``.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shlex
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Sequence

from ..config import TOOL_BASE_ARGS, TOOL_INPUT_FLAG, TOOL_OUTPUT_FLAG, TOOL_STREAM_LIMIT

if TYPE_CHECKING:
    from ..settings import ToolSettings
    from .job import PhotoJob

logger = logging.getLogger(__name__)


class ProcessHandle(Protocol):
    """The subset of ``asyncio.subprocess.Process`` the supervisor relies on."""

    stdout: Optional[asyncio.StreamReader]
    stderr: Optional[asyncio.StreamReader]
    returncode: Optional[int]

    async def wait(self) -> Optional[int]:
        ...

    def terminate(self) -> None:
        ...


class TransformTool(Protocol):
    """Protocol for anything able to launch the transformation for a job."""
    async def spawn(self, job: "PhotoJob") -> ProcessHandle:
        """Start the process. Raising here is reported as a spawn failure."""
        ...


def _preference_args(preferences: Mapping[str, Any]) -> List[str]:
    args: List[str] = []
    for key in sorted(preferences):
        value = preferences[key]
        flag = "--" + str(key).replace("_", "-")
        if value is None or value is False:
            continue
        if value is True:
            args.append(flag)
        else:
            args.extend([flag, str(value)])
    return args


class CliTransformTool:
    """Run the transformation executable as a child process.

    Command line:
        <executable> <base args> --input <source> --output <artifact> [--<pref> <value>...] <extra args>
    """

    def __init__(
        self,
        executable: str,
        *,
        base_args: Optional[Sequence[str]] = None,
        extra_args: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        stream_limit: int = TOOL_STREAM_LIMIT,
    ) -> None:
        self.executable = executable
        self.base_args = list(TOOL_BASE_ARGS if base_args is None else base_args)
        self.extra_args = list(extra_args or [])
        self.cwd = cwd
        self.env = dict(env or {})
        self.stream_limit = stream_limit

    @classmethod
    def from_settings(cls, settings: "ToolSettings") -> "CliTransformTool":
        return cls(
            settings.executable,
            extra_args=settings.extra_arg_list(),
            cwd=settings.working_dir,
            stream_limit=settings.stream_limit,
        )

    def build_command(self, job: "PhotoJob") -> List[str]:
        photo = job.get_photo()
        source = photo.get_source_file()
        get_path = getattr(source, "get_path", None)
        source_ref = str(get_path()) if get_path is not None else source.get_name()

        get_preferences = getattr(photo, "get_preferences", None)
        preferences = get_preferences() if get_preferences is not None else {}

        return [
            self.executable,
            *self.base_args,
            TOOL_INPUT_FLAG,
            source_ref,
            TOOL_OUTPUT_FLAG,
            str(Path(job.get_file().path)),
            *_preference_args(preferences),
            *self.extra_args,
        ]

    async def spawn(self, job: "PhotoJob") -> asyncio.subprocess.Process:
        cmd = self.build_command(job)
        logger.debug("Spawning transformation tool: %s", shlex.join(cmd))
        env = {**os.environ, **self.env} if self.env else None
        return await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.cwd,
            env=env,
            limit=self.stream_limit,
        )


def default_tool() -> CliTransformTool:
    """CLI tool configured from ``PHOTOJOB_*`` environment variables."""
    from ..settings import ToolSettings

    return CliTransformTool.from_settings(ToolSettings())
