"""Shared data type definitions (FileMetadata, ByteRange)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FileMetadata:
    """
    Snapshot of a path's filesystem attributes, taken at request time.
    """
    path: str
    modified_at: datetime
    size: int
    is_directory: bool

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ByteRange:
    """
    Half-open window [start, start + length) of a resource's bytes.
    """
    start: int
    length: int

    @property
    def end(self) -> int:
        """Inclusive index of the last byte, as written in Content-Range."""
        return self.start + self.length - 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"
