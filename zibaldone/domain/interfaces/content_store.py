"""Content store protocol."""

from typing import Protocol, runtime_checkable

from ..entities.content import ContentEntry


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for hierarchical file trees holding book content.

    All paths are relative to the store's root and must not escape it.
    Implementations can use different backends (local disk, in-memory, etc.).
    """

    def list_contents(self, subpath: str = "") -> list[ContentEntry]:
        """List the direct children of a directory.

        Args:
            subpath: Directory to list, relative to the root.

        Returns:
            list[ContentEntry]: Entries in a deterministic order, with paths
            relative to the root.
        """
        ...

    def has(self, path: str) -> bool:
        """Check whether a file or directory exists."""
        ...

    def read(self, path: str) -> bytes:
        """Read a file.

        Raises:
            ContentNotFoundError: If the file does not exist.
            StorageError: If the file cannot be read.
        """
        ...

    def write(self, path: str, data: bytes) -> None:
        """Write a file, creating or replacing it.

        Raises:
            StorageError: If the file cannot be written.
        """
        ...

    def delete(self, path: str) -> None:
        """Delete a file.

        Raises:
            ContentNotFoundError: If the file does not exist.
        """
        ...

    def create_dir(self, path: str) -> None:
        """Create a directory and any missing parents.

        Raises:
            StorageError: If the directory already exists or cannot be created.
        """
        ...

    def delete_dir(self, path: str) -> None:
        """Delete a directory and everything beneath it."""
        ...

    def rename(self, old_path: str, new_path: str) -> None:
        """Move a file or a whole directory subtree.

        Raises:
            StorageError: If the source is missing or the target exists.
        """
        ...

    def get_timestamp(self, path: str) -> float:
        """Return the last modification time as a POSIX timestamp."""
        ...

    def absolute_path(self, path: str = "") -> str:
        """Return the absolute location of a path."""
        ...

    def scoped(self, subpath: str) -> "ContentStore":
        """Return a store rooted at a subdirectory of this one."""
        ...
