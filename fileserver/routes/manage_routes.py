"""Delete and upload routes."""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from fileserver import pages
from fileserver.dependencies import get_browse_service, return_url
from fileserver.services import BrowseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Manage"])


@router.get("/del", response_class=HTMLResponse)
async def delete_file(
    request: Request,
    path: str = Query(""),
    page: str = Query(""),
    confirm: str = Query(""),
    browse_service: BrowseService = Depends(get_browse_service),
):
    """
    Delete a file after confirmation.

    Parameters:
        - path: File path relative to the served root
        - page: Listing URL to link back to from the confirmation page
        - confirm: "yes" performs the delete, anything else shows the confirmation page

    Returns:
        - Confirmation page, or 302 back to the listing the user came from

    Raises:
        - 403: Path outside the served root
        - 404: File not found
        - 503: File cannot be removed
    """
    if not path:
        return RedirectResponse("/list", status_code=status.HTTP_302_FOUND)

    if confirm == "yes":
        browse_service.delete(path)
        return RedirectResponse(return_url(request), status_code=status.HTTP_302_FOUND)

    return HTMLResponse(pages.render_delete_confirm(path, page))


@router.post("/upload")
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    path: str = Form(""),
    browse_service: BrowseService = Depends(get_browse_service),
):
    """
    Store an uploaded file in a directory under the served root.

    Parameters:
        - file: File to upload (multipart/form-data)
        - path: Target directory relative to the served root

    Returns:
        - 302 back to the listing the user came from

    Raises:
        - 403: Target outside the served root or invalid filename
        - 404: Target directory not found
        - 503: File cannot be written
    """
    logger.info(f"Upload received: {file.filename!r} into /{path}")
    try:
        await run_in_threadpool(browse_service.save_upload, path, file.filename, file.file)
    finally:
        await file.close()

    return RedirectResponse(return_url(request), status_code=status.HTTP_302_FOUND)
