"""Entry point for the file server."""

import sys
import time
import uuid
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from common.exceptions import (
    ConfigError,
    FileServerException,
    InvalidPathError,
    IOFaultError,
    NotFoundError,
)
from common.logging_config import configure_package_loggers, setup_logging
from fileserver.config import ServerConfig, load_config
from fileserver.routes import browse_router, download_router, manage_router
from fileserver.schemas import ErrorResponse
from fileserver.services import BrowseService, TransferService
from storage.file_store import FileStore

logger = setup_logging('fileserver')

STATIC_MOUNTS = ("css", "js", "images")


async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


def _error_response(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{code}: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump()
    )


async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


async def invalid_path_handler(request: Request, exc: InvalidPathError):
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN, "INVALID_PATH")


async def io_fault_handler(request: Request, exc: IOFaultError):
    return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, "IO_FAULT")


async def file_server_exception_handler(request: Request, exc: FileServerException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


def create_app(config: ServerConfig) -> FastAPI:
    """
    Build the application for one served root.

    Args:
        config: Server configuration; stored on app.state and never mutated

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="File Server",
        description="Directory tree file server with range and conditional downloads",
        version="1.0.0"
    )

    file_store = FileStore(config.root)
    app.state.config = config
    app.state.file_store = file_store
    app.state.transfer_service = TransferService(
        file_store,
        chunk_size=config.chunk_size,
        cache_control=config.cache_control,
    )
    app.state.browse_service = BrowseService(
        file_store,
        page_size=config.page_size,
        chunk_size=config.chunk_size,
    )

    app.middleware("http")(log_requests)

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InvalidPathError, invalid_path_handler)
    app.add_exception_handler(IOFaultError, io_fault_handler)
    app.add_exception_handler(FileServerException, file_server_exception_handler)

    app.include_router(browse_router)
    app.include_router(download_router)
    app.include_router(manage_router)

    if config.static_dir is not None:
        for name in STATIC_MOUNTS:
            directory = config.static_dir / name
            if directory.is_dir():
                app.mount(f"/{name}", StaticFiles(directory=str(directory)), name=name)
                logger.debug(f"Serving static /{name} from {directory}")

    logger.info(f"File server ready for {config.root}")
    return app


def main(argv: Optional[List[str]] = None) -> None:
    """
    Start the file server with uvicorn.
    """
    try:
        config = load_config(argv)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(2)

    configure_package_loggers(config.log_level)

    logger.info(f"Serving {config.root} on {config.host}:{config.port}")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
