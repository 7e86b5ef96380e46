"""Tests for FileStore path resolution and filesystem operations."""

import io
from datetime import datetime, timezone

import pytest

from common.exceptions import InvalidPathError, IOFaultError, NotFoundError
from storage.extensions import FileKind, classify
from storage.file_store import FileStore
from tests.conftest import FIXED_MTIME, SAMPLE_DATA


class TestResolve:

    def test_resolves_relative_path(self, file_store, served_root):
        assert file_store.resolve("docs/file00.txt") == served_root / "docs" / "file00.txt"

    def test_leading_slash_is_relative_to_root(self, file_store, served_root):
        assert file_store.resolve("/hello.txt") == served_root / "hello.txt"

    def test_empty_path_is_root(self, file_store, served_root):
        assert file_store.resolve("") == served_root

    def test_dot_segments_inside_root_are_normalized(self, file_store, served_root):
        assert file_store.resolve("docs/../hello.txt") == served_root / "hello.txt"

    @pytest.mark.parametrize("path", ["..", "../outside.txt", "docs/../../x", "/../../etc/passwd"])
    def test_traversal_rejected(self, file_store, path):
        with pytest.raises(InvalidPathError):
            file_store.resolve(path)

    @pytest.mark.parametrize("path", ["data\x00.bin", "\x00", "docs/\x00/file00.txt"])
    def test_null_byte_rejected(self, file_store, path):
        with pytest.raises(InvalidPathError):
            file_store.resolve(path)

    def test_symlink_out_of_root_rejected(self, file_store, served_root, tmp_path):
        outside = tmp_path / "secret.txt"
        outside.write_text("secret")
        (served_root / "link.txt").symlink_to(outside)

        with pytest.raises(InvalidPathError):
            file_store.stat("link.txt")


class TestStat:

    def test_stat_file(self, file_store):
        metadata = file_store.stat("data.bin")

        assert metadata.path == "data.bin"
        assert metadata.name == "data.bin"
        assert metadata.size == len(SAMPLE_DATA)
        assert metadata.is_directory is False
        assert metadata.modified_at == datetime.fromtimestamp(FIXED_MTIME, tz=timezone.utc)

    def test_stat_directory(self, file_store):
        metadata = file_store.stat("/docs/")

        assert metadata.path == "docs"
        assert metadata.is_directory is True

    def test_stat_missing(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.stat("missing.txt")

    def test_stat_below_a_file(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.stat("hello.txt/child")

    def test_stat_is_not_cached(self, file_store, served_root):
        assert file_store.stat("hello.txt").size == 14
        (served_root / "hello.txt").write_text("changed")
        assert file_store.stat("hello.txt").size == 7


class TestListPage:

    def test_first_page(self, file_store):
        entries, total = file_store.list_page("docs", 0, 10)

        assert total == 12
        assert [e.name for e in entries] == [f"file{i:02d}.txt" for i in range(10)]
        assert entries[0].path == "docs/file00.txt"

    def test_last_partial_page(self, file_store):
        entries, total = file_store.list_page("docs", 1, 10)

        assert total == 12
        assert [e.name for e in entries] == ["file10.txt", "file11.txt"]

    def test_page_past_end_is_empty(self, file_store):
        entries, _ = file_store.list_page("docs", 5, 10)
        assert entries == []

    def test_negative_page_is_empty(self, file_store):
        entries, _ = file_store.list_page("docs", -1, 10)
        assert entries == []

    def test_root_listing_in_name_order(self, file_store):
        entries, _ = file_store.list_page("", 0, 100)

        names = [e.name for e in entries]
        assert names == sorted(names)
        assert "docs" in names
        assert next(e for e in entries if e.name == "docs").is_directory

    def test_missing_directory(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.list_page("nope", 0, 10)

    def test_listing_a_file(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.list_page("hello.txt", 0, 10)


class TestDeleteAndSave:

    def test_delete_file(self, file_store, served_root):
        file_store.delete("docs/file00.txt")
        assert not (served_root / "docs" / "file00.txt").exists()

    def test_delete_missing(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.delete("missing.txt")

    def test_delete_root_refused(self, file_store):
        with pytest.raises(InvalidPathError):
            file_store.delete("/")

    def test_delete_non_empty_directory(self, file_store):
        with pytest.raises(IOFaultError):
            file_store.delete("docs")

    def test_save_upload(self, file_store, served_root):
        metadata = file_store.save("docs", "new.txt", io.BytesIO(b"uploaded"))

        assert metadata.path == "docs/new.txt"
        assert metadata.size == 8
        assert (served_root / "docs" / "new.txt").read_bytes() == b"uploaded"

    def test_save_overwrites_existing(self, file_store, served_root):
        file_store.save("", "hello.txt", io.BytesIO(b"hi"))
        assert (served_root / "hello.txt").read_bytes() == b"hi"

    def test_save_strips_directories_from_filename(self, file_store, served_root):
        metadata = file_store.save("docs", "../../evil.txt", io.BytesIO(b"x"))

        assert metadata.path == "docs/evil.txt"
        assert not (served_root.parent / "evil.txt").exists()

    def test_save_windows_style_filename(self, file_store):
        metadata = file_store.save("", "C:\\Users\\me\\report.txt", io.BytesIO(b"x"))
        assert metadata.path == "report.txt"

    @pytest.mark.parametrize("filename", ["", ".", "..", "dir/"])
    def test_save_invalid_filename(self, file_store, filename):
        with pytest.raises(InvalidPathError):
            file_store.save("", filename, io.BytesIO(b"x"))

    def test_save_outside_root(self, file_store):
        with pytest.raises(InvalidPathError):
            file_store.save("../", "x.txt", io.BytesIO(b"x"))

    def test_save_into_missing_directory(self, file_store):
        with pytest.raises(NotFoundError):
            file_store.save("nope", "x.txt", io.BytesIO(b"x"))


class TestExtensions:

    @pytest.mark.parametrize("path,kind", [
        ("a.jpg", FileKind.IMAGE),
        ("dir/B.PNG", FileKind.IMAGE),
        ("x.Gif", FileKind.IMAGE),
        ("notes.TXT", FileKind.TEXT),
        ("movie.mkv", FileKind.VIDEO),
        ("clip.MP4", FileKind.VIDEO),
        ("clip.mov", FileKind.VIDEO),
        ("archive.tar.gz", FileKind.OTHER),
        ("README", FileKind.OTHER),
    ])
    def test_classify(self, path, kind):
        assert classify(path) == kind
