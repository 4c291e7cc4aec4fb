"""Single photo job supervision: lifecycle, process events and output naming."""
from .errors import JobAlreadyRunningError, PhotoJobError, ProcessFailedError, SpawnFailedError
from .job import PhotoJob
from .models import ConsoleLine, JobSnapshot, JobState
from .output import FileMetadata, LocalFileSystem, OutputLocation, derive_file_name
from .supervisor import ProcessSupervisor
from .timer import ClockTimer
from .tool import CliTransformTool, TransformTool

__all__ = [
    "ClockTimer",
    "CliTransformTool",
    "ConsoleLine",
    "FileMetadata",
    "JobAlreadyRunningError",
    "JobSnapshot",
    "JobState",
    "LocalFileSystem",
    "OutputLocation",
    "PhotoJob",
    "PhotoJobError",
    "ProcessFailedError",
    "ProcessSupervisor",
    "SpawnFailedError",
    "TransformTool",
    "derive_file_name",
]
