"""Directory listing and preview routes."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from common.constants import HSTS_HEADER
from fileserver import pages
from fileserver.config import ServerConfig
from fileserver.dependencies import get_browse_service, get_config
from fileserver.schemas import FileEntryResponse, HealthResponse, ListFilesResponse
from fileserver.services import BrowseService
from storage.chunk_streamer import CancellationSignal
from storage.extensions import classify

router = APIRouter(tags=["Browse"])


def parse_page_number(value: str) -> int:
    """Parse the listing page parameter; anything unparsable or negative is page 0."""
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


def redirect_to_list() -> RedirectResponse:
    return RedirectResponse("/list", status_code=status.HTTP_302_FOUND)


@router.get("/")
async def index():
    """
    Redirect to the root listing.
    """
    response = redirect_to_list()
    response.headers["Strict-Transport-Security"] = HSTS_HEADER
    return response


@router.get("/favicon.ico")
async def favicon():
    return Response(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/test", response_class=PlainTextResponse)
async def hello():
    """
    Liveness probe.
    """
    return "Hello\n"


@router.get("/health", response_model=HealthResponse)
async def health_check(config: ServerConfig = Depends(get_config)):
    """
    Health check endpoint.
    Returns 200 if service is alive.
    """
    return HealthResponse(status="healthy", service="fileserver", root=str(config.root))


@router.get("/list", response_class=HTMLResponse)
async def list_directory(
    path: str = Query(""),
    p: str = Query("0"),
    browse_service: BrowseService = Depends(get_browse_service),
):
    """
    Render one page of a directory listing.

    Parameters:
        - path: Directory path relative to the served root
        - p: Zero-based page number

    Raises:
        - 403: Path outside the served root
        - 404: Directory not found
        - 503: Directory cannot be read
    """
    page = parse_page_number(p)
    entries, has_next = browse_service.list_page(path, page)

    response = HTMLResponse(pages.render_listing(path, page, entries, has_next))
    response.set_cookie("from", pages.url_for("/list", path=path, p=page or None), path="/")
    return response


@router.get("/api/list", response_model=ListFilesResponse)
async def list_directory_json(
    path: str = Query(""),
    p: str = Query("0"),
    browse_service: BrowseService = Depends(get_browse_service),
):
    """
    Same listing as /list, as JSON.
    """
    page = parse_page_number(p)
    entries, has_next = browse_service.list_page(path, page)

    return ListFilesResponse(
        path=path,
        page=page,
        page_size=browse_service.page_size,
        files=[
            FileEntryResponse(
                path=entry.path,
                name=entry.name,
                size=entry.size,
                modified_at=entry.modified_at.isoformat(),
                is_directory=entry.is_directory,
                kind=classify(entry.path).value,
            )
            for entry in entries
        ],
        next_page=page + 1 if has_next else None,
        previous_page=page - 1 if page > 0 else None,
    )


@router.get("/img", response_class=HTMLResponse)
async def show_image(path: str = Query(""), page: str = Query("")):
    if not path:
        return redirect_to_list()
    return HTMLResponse(pages.render_image(path, page))


@router.get("/video", response_class=HTMLResponse)
async def show_video(path: str = Query(""), page: str = Query("")):
    if not path:
        return redirect_to_list()
    return HTMLResponse(pages.render_video(path, page))


@router.get("/txt", response_class=HTMLResponse)
async def show_text(
    path: str = Query(""),
    page: str = Query(""),
    encode: str = Query(""),
    browse_service: BrowseService = Depends(get_browse_service),
):
    """
    Render a text file inline.

    Parameters:
        - path: File path relative to the served root
        - page: Listing URL to link back to
        - encode: "gbk" to decode the file as GBK instead of UTF-8
    """
    if not path:
        return redirect_to_list()

    content = await browse_service.read_text(path, encode, CancellationSignal())
    return HTMLResponse(pages.render_text(path, page, content))
