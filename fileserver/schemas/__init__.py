"""Pydantic schemas for API responses."""

from fileserver.schemas.common import ErrorResponse, HealthResponse
from fileserver.schemas.files import FileEntryResponse, ListFilesResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "FileEntryResponse",
    "ListFilesResponse",
]
