"""Browse service: directory pages, text previews, uploads and deletes."""

import logging
from typing import BinaryIO, List, Tuple

from common.types import FileMetadata
from storage.chunk_streamer import CancellationSignal, open_stream
from storage.file_store import FileStore

logger = logging.getLogger(__name__)

GBK_ENCODING = "gbk"


class BrowseService:
    def __init__(self, file_store: FileStore, page_size: int, chunk_size: int):
        self.file_store = file_store
        self.page_size = page_size
        self.chunk_size = chunk_size

    def list_page(self, path: str, page: int) -> Tuple[List[FileMetadata], bool]:
        """
        Fetch one listing page.

        Returns:
            (entries on the page, whether a following page exists)
        """
        entries, total = self.file_store.list_page(path, page, self.page_size)
        return entries, (page + 1) * self.page_size < total

    async def read_text(self, path: str, encoding: str, cancel: CancellationSignal) -> str:
        """
        Read a whole file for preview and decode it.

        Args:
            path: Logical file path
            encoding: "gbk" to decode as GBK, anything else decodes as UTF-8
            cancel: Signal that stops the read early

        Returns:
            Decoded text; undecodable bytes are replaced

        Raises:
            InvalidPathError, NotFoundError, IOFaultError: If the file cannot be read
        """
        metadata = self.file_store.stat(path)
        stream = await open_stream(
            self.file_store.resolve(metadata.path),
            metadata.path,
            0,
            0,
            cancel,
            chunk_size=self.chunk_size,
        )
        try:
            body = b"".join([chunk async for chunk in stream])
        finally:
            await stream.aclose()

        codec = GBK_ENCODING if encoding.lower() == GBK_ENCODING else "utf-8"
        return body.decode(codec, errors="replace")

    def delete(self, path: str) -> None:
        self.file_store.delete(path)

    def save_upload(self, directory: str, filename: str, source: BinaryIO) -> FileMetadata:
        metadata = self.file_store.save(directory, filename, source)
        logger.info(f"Upload stored at {metadata.path} ({metadata.size} bytes)")
        return metadata
