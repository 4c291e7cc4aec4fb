"""Photo job exceptions."""
from __future__ import annotations

from typing import Optional


class PhotoJobError(Exception):
    """Base class for every failure surfaced by a photo job."""


class SpawnFailedError(PhotoJobError):
    """The transformation tool could not be launched."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            "Unable to start the transformation tool. This can be caused by a "
            "corrupt installation; make sure the executable exists and works "
            f"correctly. ({type(cause).__name__}: {cause})"
        )


class ProcessFailedError(PhotoJobError):
    """The tool ran but exited with a failure code.

    Also raised for runs ended by ``cancel()``: a terminated process is
    reported the same way as a crash.
    """

    def __init__(self, stderr: str, exit_code: Optional[int] = None) -> None:
        self.stderr = stderr
        self.exit_code = exit_code
        message = (
            f"The process has been interrupted by a tool error (exit code {exit_code}). "
            "This can be caused by a corrupt installation, insufficient memory or "
            "a missing GPU device."
        )
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)


class JobAlreadyRunningError(PhotoJobError):
    """``start()`` or ``reset()`` was called while the job is running."""
