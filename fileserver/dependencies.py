"""FastAPI dependencies exposing the per-app configuration and services."""

from fastapi import Request

from fileserver.config import ServerConfig
from fileserver.pages import local_url
from fileserver.services import BrowseService, TransferService


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


def get_transfer_service(request: Request) -> TransferService:
    return request.app.state.transfer_service


def get_browse_service(request: Request) -> BrowseService:
    return request.app.state.browse_service


def return_url(request: Request) -> str:
    """
    Where to send the browser after a delete or upload.

    Uses the "from" cookie set by listing pages; only same-site paths are accepted.
    """
    return local_url(request.cookies.get("from", ""))
