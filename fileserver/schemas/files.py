"""Pydantic schemas for directory listing endpoints."""

from typing import List, Optional
from pydantic import BaseModel


class FileEntryResponse(BaseModel):
    """Response model for a single directory entry."""
    path: str
    name: str
    size: int
    modified_at: str
    is_directory: bool
    kind: str


class ListFilesResponse(BaseModel):
    """Response model for one page of a directory listing."""
    path: str
    page: int
    page_size: int
    files: List[FileEntryResponse]
    next_page: Optional[int] = None
    previous_page: Optional[int] = None
