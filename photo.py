"""
Photo descriptors consumed by photo jobs.

A job only reads its photo: the source file name feeds the output file name,
and the destination folder decides where the artifact is written.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Protocol


class SourceFileDescriptor(Protocol):
    """Protocol for the source file of a photo."""
    def get_name(self) -> str:
        """Return the file name (no directories)."""
        ...


class PhotoDescriptor(Protocol):
    """Protocol defining the minimal interface a job expects from a photo."""
    def get_source_file(self) -> SourceFileDescriptor:
        ...

    def get_folder_path(self, filename: str) -> Path:
        """Return the destination path for ``filename``."""
        ...


@dataclass
class SourceFile:
    path: Path

    def __post_init__(self):
        self.path = Path(self.path)

    def get_name(self) -> str:
        return self.path.name

    def get_path(self) -> Path:
        return self.path


@dataclass
class Photo:
    """A source photo on disk plus the folder transformed copies go to.

    ``preferences`` are forwarded to the transformation tool as
    ``--<key> <value>`` arguments by ``CliTransformTool``.
    """

    source_file: SourceFile
    folder: Optional[Path] = None
    preferences: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.folder is None:
            self.folder = self.source_file.get_path().parent
        self.folder = Path(self.folder)

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        folder: str | Path | None = None,
        preferences: Optional[Dict[str, Any]] = None,
    ) -> "Photo":
        return cls(
            source_file=SourceFile(Path(path)),
            folder=Path(folder) if folder is not None else None,
            preferences=dict(preferences or {}),
        )

    def get_source_file(self) -> SourceFile:
        return self.source_file

    def get_folder_path(self, filename: str) -> Path:
        return self.folder / filename

    def get_preferences(self) -> Dict[str, Any]:
        return dict(self.preferences)
