"""Process supervision: turn a child process into an ordered event stream."""
from __future__ import annotations

import asyncio
import codecs
import logging
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional

from .events import Exit, ProcessEvent, SpawnError, StderrChunk, StdoutChunk, is_terminal
from .tool import ProcessHandle, TransformTool

if TYPE_CHECKING:
    from .job import PhotoJob

logger = logging.getLogger(__name__)


class ProcessSupervisor:
    """Owns the process handle of one job run.

    Events are delivered over a single queue: ``SpawnError`` alone, or output
    chunks followed by exactly one ``Exit``. stdout and stderr are read
    concurrently, so chunks of the two streams may interleave while each
    stream stays in order. If reading the streams fails, the process is
    terminated and ``events()`` raises that error in place of ``Exit``.
    """

    def __init__(self, tool: TransformTool) -> None:
        self._tool = tool
        self._process: Optional[ProcessHandle] = None
        self._events: asyncio.Queue = asyncio.Queue()
        self._pump_task: Optional[asyncio.Task] = None
        self._spawned = False
        self._terminal_sent = False

    # ── Spawn ────────────────────────────────────────────────────────

    @property
    def process(self) -> Optional[ProcessHandle]:
        return self._process

    @property
    def is_alive(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def spawn(self, job: "PhotoJob") -> None:
        """Launch the tool for *job*. Launch errors become a ``SpawnError`` event."""
        if self._spawned:
            raise RuntimeError("ProcessSupervisor instances are single-use")
        self._spawned = True
        try:
            self._process = await self._tool.spawn(job)
        except Exception as exc:
            logger.debug("Spawn failed: %r", exc)
            self._put(SpawnError(exc))
            return
        self._pump_task = asyncio.create_task(self._pump(self._process))

    async def _pump(self, process: ProcessHandle) -> None:
        readers = [
            asyncio.ensure_future(self._read_stream(process.stdout, StdoutChunk)),
            asyncio.ensure_future(self._read_stream(process.stderr, StderrChunk)),
        ]
        try:
            await asyncio.gather(*readers)
            code = await process.wait()
        except asyncio.CancelledError:
            self.terminate()
            raise
        except Exception as exc:
            logger.warning("Lost the tool's output streams: %r", exc)
            for reader in readers:
                reader.cancel()
            self.terminate()
            self._process = None
            self._put_failure(exc)
            return
        self._process = None
        self._put(Exit(code))

    async def _read_stream(
        self,
        stream: Optional[asyncio.StreamReader],
        kind: Callable[[str], ProcessEvent],
    ) -> None:
        if stream is None:
            return
        # Pieces of an over-long line may split a multi-byte character.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            try:
                chunk = await stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                chunk = exc.partial
            except asyncio.LimitOverrunError as exc:
                # Line longer than the reader limit: deliver what is buffered.
                chunk = await stream.read(exc.consumed)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                self._put(kind(text))
            if not chunk:
                return

    def _put(self, event: ProcessEvent) -> None:
        if self._terminal_sent:
            return
        self._terminal_sent = is_terminal(event)
        self._events.put_nowait(event)

    def _put_failure(self, exc: BaseException) -> None:
        if self._terminal_sent:
            return
        self._terminal_sent = True
        self._events.put_nowait(exc)

    # ── Consume ──────────────────────────────────────────────────────

    async def events(self) -> AsyncIterator[ProcessEvent]:
        """Yield events until, and including, the terminal one.

        Raises the underlying error when the output streams could not be read.
        """
        while True:
            event = await self._events.get()
            if isinstance(event, BaseException):
                raise event
            yield event
            if is_terminal(event):
                return

    # ── Terminate ────────────────────────────────────────────────────

    def terminate(self) -> bool:
        """Ask the live process to stop. Returns whether a signal was sent."""
        process = self._process
        if process is None or process.returncode is not None:
            return False
        try:
            process.terminate()
        except ProcessLookupError:
            return False
        logger.debug("Termination requested")
        return True
