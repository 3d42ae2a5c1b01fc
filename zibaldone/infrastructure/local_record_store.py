"""Local in-memory implementation of RecordStore."""

import threading
from typing import Dict, Iterable, Optional
from uuid import UUID

from ..domain.entities.book import Book
from ..domain.entities.fragment import Fragment
from ..domain.entities.reference import Reference
from ..domain.exceptions import RecordNotFoundError
from ..domain.interfaces.record_store import RecordStore


class LocalRecordStore(RecordStore):
    """Local in-memory implementation of the RecordStore protocol.

    Stores records in dictionaries for testing and development purposes.
    Records are copied on the way in and out so callers cannot mutate the
    stored state without saving. All dictionary access goes through one
    lock, since API handlers for different books run on different threads.
    """

    def __init__(self):
        """Initialize the local record store with empty dictionaries."""
        self._lock = threading.RLock()
        self._books: Dict[UUID, Book] = {}
        self._fragments: Dict[UUID, Fragment] = {}
        self._references: Dict[UUID, Reference] = {}

    # Books

    def save_book(self, book: Book) -> None:
        """Insert or replace a book record.

        Args:
            book: The book entity to save.
        """
        with self._lock:
            self._books[book.id] = book.model_copy()

    def get_book(self, book_id: UUID) -> Book:
        """Retrieve a book by id.

        Args:
            book_id: The unique identifier of the book.

        Returns:
            Book: A copy of the stored book.

        Raises:
            RecordNotFoundError: If the book is not found.
        """
        with self._lock:
            if book_id not in self._books:
                raise RecordNotFoundError(f"Book with id {book_id} not found")
            return self._books[book_id].model_copy()

    def find_book_by_dir(self, dir_name: str) -> Optional[Book]:
        """Find the book owning a directory name.

        Args:
            dir_name: Directory name relative to the repository root.

        Returns:
            Optional[Book]: The owning book, or None.
        """
        with self._lock:
            for book in self._books.values():
                if book.dir == dir_name:
                    return book.model_copy()
        return None

    def list_books(self) -> list[Book]:
        """List all books ordered by title."""
        with self._lock:
            books = sorted(self._books.values(), key=lambda b: b.title)
            return [book.model_copy() for book in books]

    def delete_book(self, book_id: UUID) -> None:
        """Delete a book record.

        Args:
            book_id: The unique identifier of the book to delete.

        Raises:
            RecordNotFoundError: If the book is not found.
        """
        with self._lock:
            if book_id not in self._books:
                raise RecordNotFoundError(f"Book with id {book_id} not found")
            del self._books[book_id]

    # Fragments

    def save_fragment(self, fragment: Fragment) -> None:
        """Insert or replace a fragment record.

        Args:
            fragment: The fragment entity to save.
        """
        with self._lock:
            self._fragments[fragment.id] = fragment.model_copy()

    def get_fragment(self, fragment_id: UUID) -> Fragment:
        """Retrieve a fragment by id.

        Args:
            fragment_id: The unique identifier of the fragment.

        Returns:
            Fragment: A copy of the stored fragment.

        Raises:
            RecordNotFoundError: If the fragment is not found.
        """
        with self._lock:
            if fragment_id not in self._fragments:
                raise RecordNotFoundError(f"Fragment with id {fragment_id} not found")
            return self._fragments[fragment_id].model_copy()

    def find_fragment(self, book_id: UUID, full_filename: str) -> Optional[Fragment]:
        """Find a book's fragment by filename.

        Args:
            book_id: The book the fragment belongs to.
            full_filename: Path relative to the manuscript directory.

        Returns:
            Optional[Fragment]: The matching fragment, or None.
        """
        with self._lock:
            for fragment in self._fragments.values():
                if fragment.book_id == book_id and fragment.full_filename == full_filename:
                    return fragment.model_copy()
        return None

    def list_fragments(self, book_id: UUID) -> list[Fragment]:
        """List a book's fragments ordered by position."""
        with self._lock:
            fragments = [f for f in self._fragments.values() if f.book_id == book_id]
            return [f.model_copy() for f in sorted(fragments, key=lambda f: f.position)]

    def delete_fragment(self, fragment_id: UUID) -> None:
        """Delete a fragment record.

        Args:
            fragment_id: The unique identifier of the fragment to delete.

        Raises:
            RecordNotFoundError: If the fragment is not found.
        """
        with self._lock:
            if fragment_id not in self._fragments:
                raise RecordNotFoundError(f"Fragment with id {fragment_id} not found")
            del self._fragments[fragment_id]

    def delete_fragments_not_in(self, book_id: UUID, full_filenames: Iterable[str]) -> list[Fragment]:
        """Delete the book's fragments whose filename is not in ``full_filenames``.

        Args:
            book_id: The book to prune.
            full_filenames: Filenames to keep.

        Returns:
            list[Fragment]: The deleted fragments.
        """
        keep = set(full_filenames)
        with self._lock:
            dead = [
                fragment
                for fragment in self._fragments.values()
                if fragment.book_id == book_id and fragment.full_filename not in keep
            ]
            for fragment in dead:
                del self._fragments[fragment.id]
        return dead

    # References

    def save_reference(self, reference: Reference) -> None:
        """Insert or replace a reference record.

        Args:
            reference: The reference entity to save.
        """
        with self._lock:
            self._references[reference.id] = reference.model_copy()

    def get_reference(self, reference_id: UUID) -> Reference:
        """Retrieve a reference by id.

        Args:
            reference_id: The unique identifier of the reference.

        Returns:
            Reference: A copy of the stored reference.

        Raises:
            RecordNotFoundError: If the reference is not found.
        """
        with self._lock:
            if reference_id not in self._references:
                raise RecordNotFoundError(f"Reference with id {reference_id} not found")
            return self._references[reference_id].model_copy()

    def list_references(self, book_id: UUID) -> list[Reference]:
        """List a book's references, oldest first."""
        with self._lock:
            references = [r for r in self._references.values() if r.book_id == book_id]
            return [r.model_copy() for r in sorted(references, key=lambda r: r.created_at)]

    def delete_reference(self, reference_id: UUID) -> None:
        """Delete a reference record.

        Args:
            reference_id: The unique identifier of the reference to delete.

        Raises:
            RecordNotFoundError: If the reference is not found.
        """
        with self._lock:
            if reference_id not in self._references:
                raise RecordNotFoundError(f"Reference with id {reference_id} not found")
            del self._references[reference_id]

    def clear(self) -> None:
        """Clear all records."""
        with self._lock:
            self._books.clear()
            self._fragments.clear()
            self._references.clear()
