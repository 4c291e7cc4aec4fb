"""Photo job: one supervised run of the external transformation tool.

State machine::

    idle --start()--> running --exit 0 / no code--> finished
                              --exit != 0, spawn error--> failed

``reset()`` brings a terminal job back to ``idle``; ``start()`` performs that
reset itself, so rerunning a job ("remake") is just another ``start()``.
``cancel()`` only asks the process to stop: the job lands in ``failed`` once
the process reports its exit.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, AsyncGenerator, Callable, Deque, Dict, List, Optional

from ..photo import PhotoDescriptor
from .errors import JobAlreadyRunningError, PhotoJobError, ProcessFailedError, SpawnFailedError
from .events import Exit, SpawnError, StderrChunk, StdoutChunk
from .models import ConsoleLine, JobSnapshot, JobState
from .output import FileSystem, OutputLocation, derive_file_name
from .supervisor import ProcessSupervisor
from .timer import ClockTimer
from .tool import ProcessHandle, TransformTool, default_tool

logger = logging.getLogger(__name__)


class PhotoJob:
    """Supervise the transformation of one photo.

    Parameters
    ----------
    job_id : str or int
        Caller-supplied identifier, unique per job instance.
    photo : PhotoDescriptor
        Source photo; only read by the job.
    tool : TransformTool, optional
        Launches the external process. Defaults to the CLI tool configured
        through ``PHOTOJOB_*`` environment variables.
    fs : FileSystem, optional
        File-system capability for the output artifact (local disk by default).
    clock, wall_clock : callable, optional
        Monotonic clock for the run timer and unix clock for the file name.
    log : logging.Logger, optional
        Diagnostic sink for lifecycle events.
    """

    def __init__(
        self,
        job_id: Any,
        photo: PhotoDescriptor,
        *,
        tool: Optional[TransformTool] = None,
        fs: Optional[FileSystem] = None,
        clock: Callable[[], float] = time.perf_counter,
        wall_clock: Callable[[], float] = time.time,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._id = job_id
        self._photo = photo
        self._tool = tool if tool is not None else default_tool()
        self._clock = clock
        self._wall_clock = wall_clock
        self._log = log or logger

        self._state = JobState.idle
        self._supervisor: Optional[ProcessSupervisor] = None
        self._task: Optional[asyncio.Task] = None
        self._error: Optional[PhotoJobError] = None
        self._console: Deque[ConsoleLine] = deque()
        self._error_text = ""
        self._subscribers: List[asyncio.Queue] = []
        self.timer = ClockTimer(clock)

        # Output file: the photo once transformed. The name is computed once
        # and reused by every rerun of this job.
        self.file = OutputLocation.from_path(
            photo.get_folder_path(self.get_file_name()), fs=fs
        )

        self.reset()
        self.debug("Job created (source=%s, output=%s)", self._source_name(), self.file.path)

    # ── Accessors ────────────────────────────────────────────────────

    @property
    def id(self) -> Any:
        return self._id

    @property
    def photo(self) -> PhotoDescriptor:
        return self._photo

    def get_id(self) -> Any:
        return self._id

    def get_photo(self) -> PhotoDescriptor:
        return self._photo

    def get_file(self) -> OutputLocation:
        return self.file

    def get_file_name(self) -> str:
        """Output file name for a run started now. Not memoized."""
        return derive_file_name(self._source_name(), self._id, self._wall_clock())

    def _source_name(self) -> str:
        return self._photo.get_source_file().get_name()

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is JobState.running

    @property
    def has_failed(self) -> bool:
        return self._state is JobState.failed

    @property
    def has_finished(self) -> bool:
        return self._state is JobState.finished

    @property
    def console_log(self) -> List[ConsoleLine]:
        """Captured output lines, most recent first."""
        return list(self._console)

    @property
    def error_text(self) -> str:
        return self._error_text

    @property
    def error(self) -> Optional[PhotoJobError]:
        """Failure of the last run, if it failed."""
        return self._error

    @property
    def elapsed(self) -> float:
        return self.timer.elapsed

    @property
    def process(self) -> Optional[ProcessHandle]:
        return self._supervisor.process if self._supervisor is not None else None

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Completion task of the current or last run."""
        return self._task

    def snapshot(self) -> JobSnapshot:
        return JobSnapshot(
            job_id=str(self._id),
            state=self._state,
            is_loading=self.is_loading,
            has_failed=self.has_failed,
            has_finished=self.has_finished,
            console_log=list(self._console),
            error_text=self._error_text,
            elapsed=self.timer.elapsed,
            output_path=str(self.file.path),
            output_exists=self.file.exists,
            output_size=self.file.size,
            error=str(self._error) if self._error is not None else None,
        )

    def debug(self, message: str, *args: Any) -> None:
        self._log.debug("[%s] " + message, self._id, *args)

    # ── Lifecycle ────────────────────────────────────────────────────

    def reset(self) -> None:
        """Return to ``idle`` and delete any artifact of a previous run."""
        if self._state is JobState.running:
            raise JobAlreadyRunningError(
                f"Job {self._id} is running; cancel it and wait for it to end before resetting"
            )
        self._console.clear()
        self._error_text = ""
        self._error = None
        self._state = JobState.idle
        self.timer = ClockTimer(self._clock)
        self.file.remove()

    def start(self) -> asyncio.Task:
        """Launch the tool and return the run's completion task.

        The job is ``running`` when this returns. The task resolves when the
        process exits with code 0 (or none), and raises ``SpawnFailedError``
        or ``ProcessFailedError`` otherwise. Must be called with a running
        event loop.

        Raises
        ------
        JobAlreadyRunningError
            If a run is already in progress.
        """
        if self._state is JobState.running:
            raise JobAlreadyRunningError(f"Job {self._id} is already running")
        loop = asyncio.get_running_loop()

        self.reset()
        supervisor = ProcessSupervisor(self._tool)
        self._supervisor = supervisor
        self._on_start()
        self._task = loop.create_task(self._run(supervisor), name=f"photojob-{self._id}")
        return self._task

    def cancel(self) -> bool:
        """Request termination of the running process.

        No-op returning ``False`` when the job is not running or its process
        is not up yet. The state changes only when the process exits.
        """
        if self._state is not JobState.running or self._supervisor is None:
            return False
        sent = self._supervisor.terminate()
        if sent:
            self._log.info("[%s] Cancellation requested", self._id)
            self._emit({"event": "cancel_requested", "job_id": self._id})
        return sent

    async def _run(self, supervisor: ProcessSupervisor) -> None:
        try:
            await supervisor.spawn(self)
            async for event in supervisor.events():
                if isinstance(event, (StdoutChunk, StderrChunk)):
                    self._on_output(event)
                elif isinstance(event, SpawnError):
                    error = SpawnFailedError(event.cause)
                    self._on_fail(error)
                    raise error from event.cause
                elif isinstance(event, Exit):
                    if event.succeeded:
                        self._on_finish()
                        return
                    error = ProcessFailedError(self._error_text, event.code)
                    self._on_fail(error)
                    raise error
        except asyncio.CancelledError:
            supervisor.terminate()
            if self._state is JobState.running:
                self._on_fail(ProcessFailedError(self._error_text, None))
            raise
        except PhotoJobError:
            raise
        except Exception as exc:
            supervisor.terminate()
            error = ProcessFailedError(self._error_text, None)
            if self._state is JobState.running:
                self._on_fail(error)
            raise error from exc

    # ── Transitions ──────────────────────────────────────────────────

    def _on_start(self) -> None:
        self._state = JobState.running
        self.timer.start()
        self._log.info("[%s] Job started", self._id)

    def _on_output(self, event: Any) -> None:
        is_error = isinstance(event, StderrChunk)
        for text in event.text.splitlines():
            self._console.appendleft(ConsoleLine(text=text, is_error=is_error))
            if is_error:
                self._error_text += f"{text}\n"
            self._emit({"event": "line", "job_id": self._id, "text": text, "is_error": is_error})

    def _on_finish(self) -> None:
        elapsed = self.timer.stop()
        self.file.refresh()
        self._supervisor = None
        self._state = JobState.finished
        self._log.info(
            "[%s] Job finished in %.2fs -> %s",
            self._id,
            elapsed,
            self.file.path,
            extra={
                "job_id": self._id,
                "metrics": {"elapsed_s": elapsed, "output_bytes": self.file.size},
            },
        )
        self._emit({"event": "finished", "job_id": self._id, "elapsed": elapsed})
        self._emit({"event": "done", "job_id": self._id})

    def _on_fail(self, error: PhotoJobError) -> None:
        elapsed = self.timer.stop()
        self._supervisor = None
        self._state = JobState.failed
        self._error = error
        self._log.warning(
            "[%s] Job failed after %.2fs: %s",
            self._id,
            elapsed,
            error,
            extra={"job_id": self._id, "metrics": {"elapsed_s": elapsed}},
        )
        self._emit({"event": "failed", "job_id": self._id, "error": str(error)})
        self._emit({"event": "done", "job_id": self._id})

    # ── Observers ────────────────────────────────────────────────────

    async def subscribe_events(self) -> AsyncGenerator[Dict[str, Any], None]:
        """Yield the current status, then the events of the active run until it is done.

        Ends right after the status event when no run is in progress.
        """
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        try:
            yield {"event": "status", "data": self.snapshot().model_dump(mode="json")}
            if self._state is not JobState.running:
                return
            while True:
                event = await queue.get()
                yield event
                if event.get("event") == "done":
                    break
        finally:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

    def _emit(self, event: Dict[str, Any]) -> None:
        for q in self._subscribers:
            q.put_nowait(event)

    def __repr__(self) -> str:
        return f"PhotoJob(id={self._id!r}, state={self._state.value}, file={str(self.file.path)!r})"
