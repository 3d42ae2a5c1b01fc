"""Domain errors raised by the stores and services."""


class ZibaldoneError(Exception):
    """Base class for all domain errors."""


class InvalidTitleError(ZibaldoneError):
    """Raised when a book title cannot be turned into a valid book."""


class BookAlreadyExistsError(ZibaldoneError):
    """Raised when another book already owns the target directory."""


class RecordNotFoundError(ZibaldoneError, ValueError):
    """Raised when a book, fragment or reference id is unknown."""


class StorageError(ZibaldoneError):
    """Raised when a content store operation fails."""


class PathOutsideRootError(StorageError):
    """Raised when a path resolves outside the content store root."""


class ContentNotFoundError(StorageError):
    """Raised when reading a path that does not exist."""


class RenderUnavailableError(ZibaldoneError):
    """Raised when a book cannot be rendered because a fragment is missing."""

    def __init__(self, full_filename: str, reason: str = "missing"):
        self.full_filename = full_filename
        self.reason = reason
        super().__init__(f"Fragment file {full_filename} is {reason}, render aborted")


class InvalidFragmentOrderError(ZibaldoneError):
    """Raised when a reorder request is not a permutation of a book's fragments."""
