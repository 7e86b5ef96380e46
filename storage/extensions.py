"""Extension classification used to decide how a file is previewed."""

import posixpath
from enum import Enum


class FileKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    VIDEO = "video"
    OTHER = "other"


EXTENSION_KINDS = {
    ".jpg": FileKind.IMAGE,
    ".gif": FileKind.IMAGE,
    ".png": FileKind.IMAGE,
    ".txt": FileKind.TEXT,
    ".mkv": FileKind.VIDEO,
    ".mp4": FileKind.VIDEO,
    ".mov": FileKind.VIDEO,
}


def classify(path: str) -> FileKind:
    """
    Classify a path by its extension, ignoring case.

    Args:
        path: Logical or filesystem path

    Returns:
        FileKind for the extension, FileKind.OTHER when unknown
    """
    extension = posixpath.splitext(path)[1].lower()
    return EXTENSION_KINDS.get(extension, FileKind.OTHER)
