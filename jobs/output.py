"""Output artifact location for a photo job.

The output file name is derived from the source photo name, the job id and a
unix timestamp so that reruns of the same photo never collide:

    <normalized source name>-<job id>-<unix seconds>-<suffix>.<extension>

The physical file is handled through a small ``FileSystem`` protocol so the
job can be exercised against an in-memory fake.
"""
from __future__ import annotations

import logging
import time
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Union

from ..config import OUTPUT_EXTENSION, OUTPUT_NAME_MAX_LENGTH, OUTPUT_SUFFIX

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Latin letters that have no Unicode decomposition into base + combining mark.
_DEBURR_LETTERS = {
    "Æ": "Ae", "æ": "ae",
    "Ð": "D", "ð": "d",
    "Đ": "D", "đ": "d",
    "Ħ": "H", "ħ": "h",
    "ı": "i",
    "Ĳ": "IJ", "ĳ": "ij",
    "ĸ": "k",
    "Ŀ": "L", "ŀ": "l",
    "Ł": "L", "ł": "l",
    "ŉ": "'n",
    "Ŋ": "N", "ŋ": "n",
    "Ø": "O", "ø": "o",
    "Œ": "Oe", "œ": "oe",
    "ß": "ss",
    "Þ": "Th", "þ": "th",
    "Ŧ": "T", "ŧ": "t",
    "ſ": "s",
}


# Precomposed Latin-1 Supplement and Latin Extended-A letters are folded to
# basic Latin; other scripts pass through untouched.
_LATIN_RANGES = ((0xC0, 0xD6), (0xD8, 0xF6), (0xF8, 0xFF), (0x100, 0x17F))

# Combining Diacritical Marks, Combining Half Marks, Combining Marks for Symbols.
_COMBINING_MARK_RANGES = ((0x300, 0x36F), (0xFE20, 0xFE2F), (0x20D0, 0x20FF))


def _in_ranges(ch: str, ranges) -> bool:
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in ranges)


def _fold_latin(ch: str) -> str:
    if ch in _DEBURR_LETTERS:
        return _DEBURR_LETTERS[ch]
    return "".join(
        c for c in unicodedata.normalize("NFD", ch)
        if not _in_ranges(c, _COMBINING_MARK_RANGES)
    )


def deburr(text: str) -> str:
    """Strip Latin diacritics, mapping accented letters to their basic form.

    Marks of other scripts (kana voicing, Devanagari virama, Hebrew points)
    are kept.
    """
    out = []
    for ch in text:
        if _in_ranges(ch, _LATIN_RANGES):
            out.append(_fold_latin(ch))
        elif not _in_ranges(ch, _COMBINING_MARK_RANGES):
            out.append(ch)
    return "".join(out)


def derive_file_name(
    source_name: str,
    job_id: object,
    now: Optional[float] = None,
    *,
    max_length: int = OUTPUT_NAME_MAX_LENGTH,
    suffix: str = OUTPUT_SUFFIX,
    extension: str = OUTPUT_EXTENSION,
) -> str:
    """Build the collision-avoiding output file name.

    Parameters
    ----------
    source_name : str
        File name of the source photo, e.g. ``"sunset beach.jpg"``.
    job_id : object
        Job identifier, rendered with ``str()``.
    now : float, optional
        Unix time in seconds. Defaults to ``time.time()``; only the integer
        part is used.
    max_length : int
        The normalized source name is truncated to this many characters,
        without any truncation marker.

    Returns
    -------
    str
        ``"<name>-<id>-<unixSeconds>-<suffix>.<extension>"``
    """
    seconds = int(time.time() if now is None else now)
    name = deburr(str(source_name))[:max_length]
    return f"{name}-{job_id}-{seconds}-{suffix}.{extension}"


@dataclass(frozen=True)
class FileMetadata:
    """Cached file-system facts about a path."""

    exists: bool = False
    size: int = 0
    modified_at: Optional[datetime] = None


class FileSystem(Protocol):
    """Minimal file-system capability consumed by ``OutputLocation``."""

    def exists(self, path: Path) -> bool:
        ...

    def remove(self, path: Path) -> None:
        """Delete ``path``; a missing file must not raise."""
        ...

    def refresh_metadata(self, path: Path) -> FileMetadata:
        ...


class LocalFileSystem:
    """``FileSystem`` backed by the local disk through ``pathlib``."""

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def remove(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)

    def refresh_metadata(self, path: Path) -> FileMetadata:
        try:
            st = Path(path).stat()
        except FileNotFoundError:
            return FileMetadata()
        return FileMetadata(
            exists=True,
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )


class OutputLocation:
    """Path of a job's output artifact plus its last known metadata."""

    def __init__(self, path: PathLike, fs: Optional[FileSystem] = None) -> None:
        self.path = Path(path)
        self._fs: FileSystem = fs if fs is not None else LocalFileSystem()
        self._metadata = FileMetadata()

    @classmethod
    def from_path(cls, path: PathLike, fs: Optional[FileSystem] = None) -> "OutputLocation":
        return cls(path, fs=fs)

    # ── Metadata ─────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def metadata(self) -> FileMetadata:
        return self._metadata

    @property
    def exists(self) -> bool:
        """Existence as of the last ``refresh()`` or ``remove()``."""
        return self._metadata.exists

    @property
    def size(self) -> int:
        return self._metadata.size

    @property
    def modified_at(self) -> Optional[datetime]:
        return self._metadata.modified_at

    def check_exists(self) -> bool:
        """Ask the file system directly, bypassing the cached metadata."""
        return self._fs.exists(self.path)

    # ── Mutation ─────────────────────────────────────────────────────

    def refresh(self) -> FileMetadata:
        """Re-read metadata so callers see the produced artifact."""
        self._metadata = self._fs.refresh_metadata(self.path)
        return self._metadata

    def remove(self) -> None:
        """Delete the artifact if present. Already-absent counts as success."""
        if self._fs.exists(self.path):
            logger.debug("Removing stale output %s", self.path)
            self._fs.remove(self.path)
        self._metadata = FileMetadata()

    def __fspath__(self) -> str:
        return str(self.path)

    def __repr__(self) -> str:
        return f"OutputLocation({str(self.path)!r}, exists={self.exists})"
