"""Configuration settings for the file server."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from common.constants import (
    CACHE_CONTROL,
    DEFAULT_LISTEN,
    DEFAULT_PAGE_SIZE,
    STREAM_CHUNK_SIZE_BYTES,
)
from common.exceptions import ConfigError


SERVED_ROOT = os.environ.get("FILESERVER_ROOT", "")

LISTEN = os.environ.get("FILESERVER_LISTEN", DEFAULT_LISTEN)

STATIC_DIR = os.environ.get("FILESERVER_STATIC_DIR", ".")

PAGE_SIZE = int(os.environ.get("FILESERVER_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class ServerConfig:
    """
    Immutable settings for one server process. The root is never changed after startup.
    """
    root: Path
    host: str = "127.0.0.1"
    port: int = 8080
    static_dir: Optional[Path] = None
    page_size: int = DEFAULT_PAGE_SIZE
    chunk_size: int = STREAM_CHUNK_SIZE_BYTES
    cache_control: str = CACHE_CONTROL
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.root.is_dir():
            raise ConfigError(f"Served root {self.root} is not a directory")
        if self.page_size < 1:
            raise ConfigError("Page size must be at least 1")
        if not 0 < self.chunk_size <= STREAM_CHUNK_SIZE_BYTES:
            raise ConfigError(f"Chunk size must be between 1 and {STREAM_CHUNK_SIZE_BYTES} bytes")


def parse_listen(value: str) -> Tuple[str, int]:
    """
    Split a listen endpoint into host and port.

    Args:
        value: Endpoint such as "127.0.0.1:8080" or ":8080"

    Returns:
        (host, port) tuple; an empty host means all interfaces

    Raises:
        ConfigError: If the endpoint is malformed
    """
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"Invalid listen endpoint {value!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Serve a directory tree over HTTP with range and conditional requests",
    )
    parser.add_argument("root", nargs="?", default=SERVED_ROOT, help="directory to serve")
    parser.add_argument("--listen", default=LISTEN, help="listen endpoint (default: %(default)s)")
    parser.add_argument("--static-dir", default=STATIC_DIR, help="directory holding css/, js/ and images/")
    parser.add_argument("--page-size", type=int, default=PAGE_SIZE, help="entries per listing page")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def load_config(argv: Optional[List[str]] = None) -> ServerConfig:
    """
    Build the server configuration from environment defaults and command line arguments.

    Args:
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        ServerConfig instance

    Raises:
        ConfigError: If the root is missing or any setting is invalid
    """
    args = build_arg_parser().parse_args(argv)

    if not args.root:
        raise ConfigError("No directory to serve: pass it as an argument or set FILESERVER_ROOT")

    host, port = parse_listen(args.listen)
    static_dir = Path(args.static_dir).resolve() if args.static_dir else None

    return ServerConfig(
        root=Path(args.root).resolve(),
        host=host,
        port=port,
        static_dir=static_dir,
        page_size=args.page_size,
        log_level="DEBUG" if args.debug else LOG_LEVEL,
    )
