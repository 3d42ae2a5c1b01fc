"""Local file system implementation of ContentStore."""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from ..domain.entities.content import ContentEntry, EntryType
from ..domain.exceptions import ContentNotFoundError, PathOutsideRootError, StorageError
from ..domain.interfaces.content_store import ContentStore

logger = logging.getLogger(__name__)


class LocalContentStore(ContentStore):
    """Local implementation of the ContentStore protocol.

    Every path is resolved beneath ``root``; paths that would escape it
    (``..`` segments, absolute paths, symlinks pointing outside) are
    rejected with PathOutsideRootError. Listings are sorted by
    case-folded name, ties broken by the raw name.
    """

    def __init__(self, root: Union[str, Path]):
        """Initialize the store.

        Args:
            root: Directory the store is confined to. It does not need to
                  exist yet; it is created by the first write or create_dir.
        """
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _is_inside(self, path: Path) -> bool:
        return path == self._root or self._root in path.parents

    def _resolve(self, path: str) -> Path:
        candidate = (self._root / path).resolve() if path else self._root
        if not self._is_inside(candidate):
            raise PathOutsideRootError(f"Path {path} is outside of {self._root}")
        return candidate

    def _relative(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    def list_contents(self, subpath: str = "") -> list[ContentEntry]:
        """List the direct children of a directory.

        Symlinks that dangle or point outside the root are left out of the
        listing, as they cannot be read through the store.

        Args:
            subpath: Directory to list, relative to the root.

        Returns:
            list[ContentEntry]: Entries with paths relative to the root.

        Raises:
            ContentNotFoundError: If the directory does not exist.
            StorageError: If the directory cannot be read.
        """
        directory = self._resolve(subpath)
        if not directory.is_dir():
            raise ContentNotFoundError(f"Directory {subpath or '.'} not found in {self._root}")

        try:
            children = sorted(directory.iterdir(), key=lambda p: (p.name.casefold(), p.name))
        except OSError as e:
            raise StorageError(f"Error listing directory {subpath or '.'}: {e}") from e

        entries = []
        for child in children:
            entry = self._entry(child)
            if entry is not None:
                entries.append(entry)
        return entries

    def _entry(self, child: Path) -> Optional[ContentEntry]:
        if not self._is_inside(child.resolve()):
            logger.warning(f"Skipping {child}: it points outside of {self._root}")
            return None
        try:
            stat = child.stat()
        except OSError as e:
            logger.warning(f"Skipping unreadable entry {child}: {e}")
            return None

        if child.is_dir():
            return ContentEntry(path=self._relative(child), type=EntryType.DIR, timestamp=stat.st_mtime)
        return ContentEntry(
            path=self._relative(child),
            type=EntryType.FILE,
            extension=child.suffix[1:],
            size=stat.st_size,
            timestamp=stat.st_mtime,
        )

    def has(self, path: str) -> bool:
        """Check whether a file or directory exists.

        Raises:
            PathOutsideRootError: If the path escapes the root.
        """
        return self._resolve(path).exists()

    def read(self, path: str) -> bytes:
        """Read a file's bytes.

        Args:
            path: File path relative to the root.

        Returns:
            bytes: The file content.

        Raises:
            ContentNotFoundError: If the file does not exist.
            StorageError: If the file cannot be read.
        """
        target = self._resolve(path)
        if not target.is_file():
            raise ContentNotFoundError(f"File {path} not found in {self._root}")
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(f"Error reading file {path}: {e}") from e

    def write(self, path: str, data: bytes) -> None:
        """Create or replace a file, creating missing parent directories.

        Args:
            path: File path relative to the root.
            data: Content to write.

        Raises:
            StorageError: If the file cannot be written.
        """
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Error writing file {path}: {e}") from e

    def delete(self, path: str) -> None:
        """Delete a file.

        Raises:
            ContentNotFoundError: If the file does not exist.
            StorageError: If the file cannot be deleted.
        """
        target = self._resolve(path)
        if not target.is_file():
            raise ContentNotFoundError(f"File {path} not found in {self._root}")
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"Error deleting file {path}: {e}") from e

    def create_dir(self, path: str) -> None:
        """Create a directory and any missing parents.

        Raises:
            StorageError: If the path already exists or cannot be created.
        """
        target = self._resolve(path)
        if target.exists():
            raise StorageError(f"Directory {path} already exists in {self._root}")
        try:
            target.mkdir(parents=True)
        except OSError as e:
            raise StorageError(f"Error creating directory {path}: {e}") from e

    def delete_dir(self, path: str) -> None:
        """Delete a directory with its whole subtree.

        Raises:
            ContentNotFoundError: If the directory does not exist.
            StorageError: If the path is the root or cannot be deleted.
        """
        target = self._resolve(path)
        if target == self._root:
            raise StorageError("Refusing to delete the store root")
        if not target.is_dir():
            raise ContentNotFoundError(f"Directory {path} not found in {self._root}")
        try:
            shutil.rmtree(target)
        except OSError as e:
            raise StorageError(f"Error deleting directory {path}: {e}") from e

    def rename(self, old_path: str, new_path: str) -> None:
        """Move a file or a whole subtree.

        Args:
            old_path: Current path relative to the root.
            new_path: Target path relative to the root.

        Raises:
            ContentNotFoundError: If ``old_path`` does not exist.
            StorageError: If ``new_path`` exists or the move fails.
        """
        source = self._resolve(old_path)
        target = self._resolve(new_path)
        if not source.exists():
            raise ContentNotFoundError(f"{old_path} not found in {self._root}")
        if target.exists():
            raise StorageError(f"Cannot move {old_path}: {new_path} already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise StorageError(f"Error moving {old_path} to {new_path}: {e}") from e
        logger.debug(f"Moved {source} to {target}")

    def get_timestamp(self, path: str) -> float:
        """Return the modification time of a path, in seconds since the epoch.

        Raises:
            ContentNotFoundError: If the path does not exist.
        """
        target = self._resolve(path)
        try:
            return target.stat().st_mtime
        except FileNotFoundError as e:
            raise ContentNotFoundError(f"{path} not found in {self._root}") from e

    def absolute_path(self, path: str = "") -> str:
        return str(self._resolve(path))

    def scoped(self, subpath: str) -> "LocalContentStore":
        """Return a store confined to a subdirectory of this one."""
        return LocalContentStore(self._resolve(subpath))
