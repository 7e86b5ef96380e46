"""Transfer service: turns a download request into a status, headers and a chunk stream."""

import logging
import mimetypes
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional

from fastapi import status

from common.constants import CACHE_CONTROL, DEFAULT_MEDIA_TYPE, STREAM_CHUNK_SIZE_BYTES
from common.exceptions import FileServerException, RangeError, StreamReadError
from common.types import ByteRange
from fileserver.conditional import format_http_date, is_fresh, parse_http_date
from fileserver.range_parser import parse_range
from storage.chunk_streamer import CancellationSignal, ChunkStream, open_stream
from storage.file_store import FileStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferRequest:
    """
    Download request as seen by the transfer service.
    """
    path: str
    range_header: Optional[str] = None
    if_modified_since: Optional[str] = None


@dataclass
class TransferResponse:
    """
    Decision for a download: status, headers and the body stream when there is one.
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[ChunkStream] = None
    detail: Optional[str] = None


def guess_media_type(path: str) -> str:
    media_type, _ = mimetypes.guess_type(path)
    return media_type or DEFAULT_MEDIA_TYPE


class TransferService:
    def __init__(
        self,
        file_store: FileStore,
        chunk_size: int = STREAM_CHUNK_SIZE_BYTES,
        cache_control: str = CACHE_CONTROL,
    ):
        self.file_store = file_store
        self.chunk_size = chunk_size
        self.cache_control = cache_control

    async def prepare(self, request: TransferRequest, cancel: CancellationSignal) -> TransferResponse:
        """
        Validate a download request and open the body stream.

        Order of checks: metadata lookup, freshness, then the Range header,
        so a fresh cached copy wins over any range.

        Args:
            request: Path and conditional/range headers of the request
            cancel: Signal fired when the client disconnects

        Returns:
            TransferResponse with 200, 206, 304, 416 or 503
        """
        try:
            metadata = self.file_store.stat(request.path)
        except FileServerException as e:
            logger.warning(f"Stat failed for {request.path!r}: {e}")
            return TransferResponse(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

        headers = {
            "Cache-Control": self.cache_control,
            "Last-Modified": format_http_date(metadata.modified_at),
        }

        if is_fresh(parse_http_date(request.if_modified_since), metadata.modified_at):
            return TransferResponse(status.HTTP_304_NOT_MODIFIED, headers)

        unsatisfiable = {**headers, "Content-Range": f"bytes */{metadata.size}"}
        try:
            byte_range = parse_range(request.range_header, metadata.size)
        except RangeError as e:
            logger.info(f"Rejected range for {metadata.path!r}: {e}")
            return TransferResponse(
                status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE, unsatisfiable, detail=str(e)
            )

        if byte_range is not None and byte_range.length == 0:
            # suffix of zero bytes, or any suffix of an empty file
            return TransferResponse(
                status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
                unsatisfiable,
                detail=f"Range {request.range_header!r} selects no bytes",
            )

        if byte_range is None:
            status_code = status.HTTP_200_OK
            window = ByteRange(start=0, length=metadata.size)
        else:
            status_code = status.HTTP_206_PARTIAL_CONTENT
            window = byte_range
            headers["Content-Range"] = window.content_range(metadata.size)

        headers["Content-Type"] = guess_media_type(metadata.path)
        headers["Content-Length"] = str(window.length)
        headers["Accept-Ranges"] = "bytes"

        if window.length == 0:
            # a zero length stream would mean "until EOF"
            return TransferResponse(status_code, headers)

        try:
            stream = await open_stream(
                self.file_store.resolve(metadata.path),
                metadata.path,
                window.start,
                window.length,
                cancel,
                chunk_size=self.chunk_size,
            )
        except FileServerException as e:
            logger.warning(f"Open failed for {metadata.path!r}: {e}")
            return TransferResponse(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

        logger.info(
            f"Transfer started: {metadata.path} status={status_code} "
            f"start={window.start} length={window.length} size={metadata.size}"
        )
        return TransferResponse(status_code, headers, body=stream)

    async def drain(self, stream: ChunkStream, cancel: CancellationSignal) -> AsyncIterator[bytes]:
        """
        Yield a stream's chunks to the response writer.

        Headers are already committed when this runs, so a read fault ends the
        body early and is only logged. If the writer stops pulling (client
        disconnect) the cancellation signal is fired.
        """
        failed = False
        try:
            async for chunk in stream:
                yield chunk
        except StreamReadError as e:
            failed = True
            logger.error(
                f"Transfer aborted: {stream.path} after {stream.bytes_delivered} of "
                f"{stream.length} bytes: {e}"
            )
        finally:
            if stream.completed:
                logger.info(f"Transfer completed: {stream.path} {stream.bytes_delivered} bytes")
            elif not failed:
                cancel.fire()
                logger.info(
                    f"Transfer cancelled: {stream.path} after {stream.bytes_delivered} bytes"
                )
            await stream.aclose()
