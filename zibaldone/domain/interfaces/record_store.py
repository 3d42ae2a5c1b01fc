"""Record store protocol for books, fragments and references."""

from typing import Iterable, Optional, Protocol, runtime_checkable
from uuid import UUID

from ..entities.book import Book
from ..entities.fragment import Fragment
from ..entities.reference import Reference


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for structured record persistence.

    This interface can be implemented by different storage backends
    (in-memory, DynamoDB, etc.). Missing records are reported with
    RecordNotFoundError.
    """

    # Books

    def save_book(self, book: Book) -> None:
        """Create or replace a book record."""
        ...

    def get_book(self, book_id: UUID) -> Book:
        """Retrieve a book by ID.

        Raises:
            RecordNotFoundError: If the book is not found.
        """
        ...

    def find_book_by_dir(self, dir_name: str) -> Optional[Book]:
        """Find the book owning a directory name, if any."""
        ...

    def list_books(self) -> list[Book]:
        """List all books ordered by title."""
        ...

    def delete_book(self, book_id: UUID) -> None:
        """Delete a book record.

        Raises:
            RecordNotFoundError: If the book is not found.
        """
        ...

    # Fragments

    def save_fragment(self, fragment: Fragment) -> None:
        """Create or replace a fragment record."""
        ...

    def get_fragment(self, fragment_id: UUID) -> Fragment:
        """Retrieve a fragment by ID.

        Raises:
            RecordNotFoundError: If the fragment is not found.
        """
        ...

    def find_fragment(self, book_id: UUID, full_filename: str) -> Optional[Fragment]:
        """Find a book's fragment by its exact filename."""
        ...

    def list_fragments(self, book_id: UUID) -> list[Fragment]:
        """List a book's fragments in ascending position order."""
        ...

    def delete_fragment(self, fragment_id: UUID) -> None:
        """Delete a fragment record.

        Raises:
            RecordNotFoundError: If the fragment is not found.
        """
        ...

    def delete_fragments_not_in(self, book_id: UUID, full_filenames: Iterable[str]) -> list[Fragment]:
        """Delete the book's fragments whose filename is not in the given set.

        Only fragments of ``book_id`` are considered; an empty set removes
        all of that book's fragments and nothing else.

        Returns:
            list[Fragment]: The deleted fragments.
        """
        ...

    # References

    def save_reference(self, reference: Reference) -> None:
        """Create or replace a reference record."""
        ...

    def get_reference(self, reference_id: UUID) -> Reference:
        """Retrieve a reference by ID.

        Raises:
            RecordNotFoundError: If the reference is not found.
        """
        ...

    def list_references(self, book_id: UUID) -> list[Reference]:
        """List a book's references, oldest first."""
        ...

    def delete_reference(self, reference_id: UUID) -> None:
        """Delete a reference record.

        Raises:
            RecordNotFoundError: If the reference is not found.
        """
        ...
