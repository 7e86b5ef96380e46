"""Resolves logical paths under the served root: stat, listing, delete, save."""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from common.exceptions import InvalidPathError, IOFaultError, NotFoundError
from common.types import FileMetadata

logger = logging.getLogger(__name__)


class FileStore:
    """
    Filesystem access confined to a single root directory.

    The root is fixed at construction; every operation takes a logical path
    relative to it ("" or "/" being the root itself).
    """

    def __init__(self, root: Union[str, Path]):
        """
        Initialize the store.

        Args:
            root: Directory served by this store
        """
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        """
        Map a logical path onto the filesystem, rejecting traversal out of the root.

        Args:
            path: Logical path relative to the root

        Returns:
            Absolute filesystem path inside the root

        Raises:
            InvalidPathError: If the path escapes the root or cannot be resolved
        """
        path = path or ""
        if "\x00" in path:
            raise InvalidPathError(f"Path {path!r} contains a null byte")
        try:
            candidate = (self.root / path.lstrip("/")).resolve()
        except (OSError, ValueError) as e:
            raise InvalidPathError(f"Path {path!r} cannot be resolved: {e}") from e
        try:
            candidate.relative_to(self.root)
        except ValueError:
            logger.warning(f"Rejected path outside root: {path!r}")
            raise InvalidPathError(f"Path {path!r} is outside the served directory")
        return candidate

    def logical_path(self, filepath: Path) -> str:
        relative = filepath.relative_to(self.root).as_posix()
        return "" if relative == "." else relative

    def stat(self, path: str) -> FileMetadata:
        """
        Take a metadata snapshot of a path.

        Args:
            path: Logical path relative to the root

        Returns:
            FileMetadata for the path

        Raises:
            InvalidPathError: If the path escapes the root or cannot be resolved
            NotFoundError: If nothing exists at the path
            IOFaultError: If the filesystem reports any other failure
        """
        filepath = self.resolve(path)
        try:
            st = filepath.stat()
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(f"{path or '/'} not found")
        except OSError as e:
            raise IOFaultError(f"Cannot stat {path or '/'}: {e}") from e

        return FileMetadata(
            path=self.logical_path(filepath),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            size=st.st_size,
            is_directory=filepath.is_dir(),
        )

    def list_page(self, path: str, page: int, page_size: int) -> Tuple[List[FileMetadata], int]:
        """
        List one page of a directory's entries in name order.

        Args:
            path: Logical directory path
            page: Zero-based page number
            page_size: Entries per page

        Returns:
            (entries on the requested page, total number of entries in the directory);
            the page is empty past the end

        Raises:
            NotFoundError: If the directory does not exist
            IOFaultError: If the directory or an entry cannot be read
        """
        dirpath = self.resolve(path)
        try:
            names = sorted(os.listdir(dirpath))
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(f"Directory {path or '/'} not found")
        except OSError as e:
            raise IOFaultError(f"Cannot list {path or '/'}: {e}") from e

        if page < 0:
            return [], len(names)

        base = self.logical_path(dirpath)
        selected = names[page * page_size:(page + 1) * page_size]
        return [self.stat(f"{base}/{name}" if base else name) for name in selected], len(names)

    def delete(self, path: str) -> None:
        """
        Remove a file or an empty directory.

        Raises:
            InvalidPathError: If the path escapes the root or names the root itself
            NotFoundError: If nothing exists at the path
            IOFaultError: If removal fails
        """
        filepath = self.resolve(path)
        if filepath == self.root:
            raise InvalidPathError("Refusing to delete the served root")
        try:
            if filepath.is_dir():
                filepath.rmdir()
            else:
                filepath.unlink()
        except FileNotFoundError:
            raise NotFoundError(f"{path} not found")
        except OSError as e:
            raise IOFaultError(f"Cannot delete {path}: {e}") from e
        logger.info(f"Deleted {self.logical_path(filepath)}")

    def save(self, directory: str, filename: str, source: BinaryIO) -> FileMetadata:
        """
        Write an uploaded stream into a directory under the root.

        Args:
            directory: Logical directory path to save into
            filename: Client supplied name; only its final component is used
            source: Readable binary stream with the upload contents

        Returns:
            Metadata of the written file

        Raises:
            InvalidPathError: If the target escapes the root or the name is empty
            NotFoundError: If the target directory does not exist
            IOFaultError: If writing fails
        """
        name = os.path.basename((filename or "").replace("\\", "/"))
        if name in ("", ".", ".."):
            raise InvalidPathError(f"Invalid upload filename {filename!r}")

        target_dir = self.resolve(directory)
        if not target_dir.is_dir():
            raise NotFoundError(f"Directory {directory or '/'} not found")

        target = self.resolve(f"{self.logical_path(target_dir)}/{name}")
        try:
            with open(target, "wb") as out:
                shutil.copyfileobj(source, out)
        except OSError as e:
            raise IOFaultError(f"Cannot save {name}: {e}") from e

        logger.info(f"Saved upload {self.logical_path(target)}")
        return self.stat(self.logical_path(target))
