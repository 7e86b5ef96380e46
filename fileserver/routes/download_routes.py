"""File download route with Range and If-Modified-Since support."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from fileserver.dependencies import get_transfer_service
from fileserver.services import TransferRequest, TransferService
from storage.chunk_streamer import CancellationSignal

router = APIRouter(tags=["Transfer"])


@router.get("/download")
async def download_file(
    path: str = Query("", description="File path relative to the served root"),
    range_header: Optional[str] = Header(None, alias="Range"),
    if_modified_since: Optional[str] = Header(None, alias="If-Modified-Since"),
    transfer_service: TransferService = Depends(get_transfer_service),
):
    """
    Download a file, whole or a single byte range.

    Parameters:
        - path: File path relative to the served root
        - Range header: bytes=start-end, bytes=start- or bytes=-suffix (first unit served)
        - If-Modified-Since header: HTTP date; a later date answers 304

    Returns:
        - 200 with the whole file, or 206 with the requested range

    Raises:
        - 304: Client copy is current
        - 416: Range header malformed or not satisfiable
        - 503: File cannot be stat'ed or opened
    """
    cancel = CancellationSignal()
    result = await transfer_service.prepare(
        TransferRequest(
            path=path,
            range_header=range_header,
            if_modified_since=if_modified_since,
        ),
        cancel,
    )

    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)

    return StreamingResponse(
        transfer_service.drain(result.body, cancel),
        status_code=result.status_code,
        headers=result.headers,
        background=BackgroundTask(result.body.aclose),
    )
