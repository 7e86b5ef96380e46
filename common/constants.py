"""Project-wide constants (transfer sizes, default endpoints, header values)."""

STREAM_CHUNK_SIZE_BYTES: int = 64 * 1024  # 64 KiB upper bound per chunk

DEFAULT_LISTEN: str = "127.0.0.1:8080"
DEFAULT_PAGE_SIZE: int = 10

CACHE_CONTROL: str = "private, max-age=3600"
HSTS_HEADER: str = "max-age=31536000;"

DEFAULT_MEDIA_TYPE: str = "application/octet-stream"
