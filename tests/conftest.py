"""Shared pytest fixtures for all tests."""

import os

import pytest
from fastapi.testclient import TestClient

from fileserver.config import ServerConfig
from fileserver.main import create_app
from storage.file_store import FileStore

# 2024-01-01 00:00:00 UTC
FIXED_MTIME = 1704067200

SAMPLE_DATA = (bytes(range(256)) * 4)[:1000]
LARGE_DATA = bytes(range(256)) * 800  # 200 KiB, spans several 64 KiB chunks


class FakeHandle:
    """In-memory stand-in for an aiofiles handle that can fail on a given read."""

    def __init__(self, data: bytes, fail_on_read: int = None):
        self.data = data
        self.position = 0
        self.reads = 0
        self.fail_on_read = fail_on_read
        self.closed = False

    async def read(self, size):
        self.reads += 1
        if self.fail_on_read is not None and self.reads >= self.fail_on_read:
            raise OSError(5, "Input/output error")
        chunk = self.data[self.position:self.position + size]
        self.position += len(chunk)
        return chunk

    async def close(self):
        self.closed = True


@pytest.fixture
def served_root(tmp_path):
    """
    Create a served directory tree.

    Layout:
        hello.txt       "Hello, world!\\n"
        data.bin        1000 bytes
        large.bin       200 KiB
        empty.txt       0 bytes
        photos/a.jpg
        videos/clip.MP4
        docs/file00.txt .. docs/file11.txt

    Returns:
        Path to the root directory
    """
    root = tmp_path / 'root'
    root.mkdir()

    (root / 'hello.txt').write_text('Hello, world!\n')
    (root / 'data.bin').write_bytes(SAMPLE_DATA)
    (root / 'large.bin').write_bytes(LARGE_DATA)
    (root / 'empty.txt').write_bytes(b'')

    (root / 'photos').mkdir()
    (root / 'photos' / 'a.jpg').write_bytes(b'\xff\xd8\xff\xe0fakejpeg')

    (root / 'videos').mkdir()
    (root / 'videos' / 'clip.MP4').write_bytes(b'\x00\x00\x00\x18ftypmp42')

    (root / 'docs').mkdir()
    for i in range(12):
        (root / 'docs' / f'file{i:02d}.txt').write_text(f'document {i}')

    for path in (root / 'data.bin', root / 'hello.txt'):
        os.utime(path, (FIXED_MTIME, FIXED_MTIME))

    return root


@pytest.fixture
def file_store(served_root):
    """FileStore over the served root."""
    return FileStore(served_root)


@pytest.fixture
def server_config(served_root):
    """ServerConfig with a small page size for paging tests."""
    return ServerConfig(root=served_root, page_size=10, static_dir=None)


@pytest.fixture
def client(server_config):
    """Create FastAPI test client."""
    return TestClient(create_app(server_config))
