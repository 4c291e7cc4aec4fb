"""Shared test fixtures for the photojob test suite."""
from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from photojob.jobs.output import FileMetadata
from photojob.photo import Photo

FIXED_UNIX_TIME = 1_700_000_000


# ── Fake process / tool ──────────────────────────────────────────────


class FakeProcess:
    """In-memory stand-in for ``asyncio.subprocess.Process``.

    Output is fed up front. With ``hang=True`` the streams stay open until
    ``terminate()`` (or ``finish()``) is called.
    """

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: Optional[int] = 0,
        hang: bool = False,
    ) -> None:
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.returncode: Optional[int] = None
        self.terminate_calls = 0
        self._final_code = returncode
        self._exited = asyncio.Event()
        if stdout:
            self.stdout.feed_data(stdout)
        if stderr:
            self.stderr.feed_data(stderr)
        if not hang:
            self.finish(returncode)

    def finish(self, code: Optional[int]) -> None:
        self._final_code = code
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._exited.set()

    async def wait(self) -> Optional[int]:
        await self._exited.wait()
        self.returncode = self._final_code
        return self.returncode

    def terminate(self) -> None:
        self.terminate_calls += 1
        self.finish(-15)


class FakeTool:
    """``TransformTool`` returning ``FakeProcess`` instances.

    Parameters
    ----------
    make_process : callable, optional
        Builds the process for each spawn (called inside the event loop).
    error : Exception, optional
        Raised from ``spawn`` instead of returning a process.
    writes_output : bool
        Write a small artifact at the job's output path when spawning.
    """

    def __init__(
        self,
        make_process: Optional[Callable[[], FakeProcess]] = None,
        error: Optional[BaseException] = None,
        writes_output: bool = False,
    ) -> None:
        self.make_process = make_process or FakeProcess
        self.error = error
        self.writes_output = writes_output
        self.spawned: List[FakeProcess] = []
        self.jobs = []

    async def spawn(self, job):
        self.jobs.append(job)
        if self.error is not None:
            raise self.error
        if self.writes_output:
            path = Path(job.get_file().path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"\x89PNG fake artifact")
        process = self.make_process()
        self.spawned.append(process)
        return process


class InMemoryFileSystem:
    """Lightweight ``FileSystem`` keeping file sizes in a dict."""

    def __init__(self) -> None:
        self.files = {}
        self.removed: List[Path] = []

    def exists(self, path):
        return Path(path) in self.files

    def remove(self, path):
        self.removed.append(Path(path))
        self.files.pop(Path(path), None)

    def refresh_metadata(self, path):
        size = self.files.get(Path(path))
        if size is None:
            return FileMetadata()
        return FileMetadata(exists=True, size=size)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until *predicate* holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.001)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def photo(tmp_path):
    """Source photo named like the reference scenario, output next to it."""
    source = tmp_path / "sunset beach.jpg"
    source.write_bytes(b"\xff\xd8 fake jpeg")
    return Photo.from_path(source, folder=tmp_path / "out")


@pytest.fixture
def fake_clock():
    """Monotonic clock advancing 0.5s per reading."""
    return itertools.count(start=100.0, step=0.5).__next__


@pytest.fixture
def wall_clock():
    return lambda: float(FIXED_UNIX_TIME)


@pytest.fixture
def memory_fs():
    return InMemoryFileSystem()
