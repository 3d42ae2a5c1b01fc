"""Book lifecycle service: on-disk layout, records, and access to sync and render."""

import logging
from contextlib import ExitStack
from typing import Callable, Optional
from uuid import UUID

from ..entities.book import Book
from ..entities.fragment import Fragment, FragmentType
from ..entities.reference import Reference
from ..entities.render import ReconcileReport, RenderInfo
from ..exceptions import (
    BookAlreadyExistsError,
    InvalidFragmentOrderError,
    RecordNotFoundError,
)
from ..interfaces.content_store import ContentStore
from ..interfaces.record_store import RecordStore
from .layout import BookLayout
from .locks import BookLocks
from .naming import normalize_title, title_to_dir, validate_title
from .reconciler import FragmentReconciler
from .renderer import BookRenderer

logger = logging.getLogger(__name__)

# marks "leave the reference link as it is"; None means "detach"
UNSET = object()


class BookService:
    """
    Orchestrates books: creation, rename and deletion of their directory
    layout and records, plus locked access to reconciliation and rendering.

    Mutating operations on one book are serialized through ``locks``;
    render info lookups and listings take no lock.
    """

    def __init__(
        self,
        content_store: ContentStore,
        record_store: RecordStore,
        reconciler: FragmentReconciler,
        renderer: BookRenderer,
        layout: Optional[BookLayout] = None,
        locks: Optional[BookLocks] = None,
    ):
        self.content_store = content_store
        self.record_store = record_store
        self.reconciler = reconciler
        self.renderer = renderer
        self.layout = layout or BookLayout()
        self.locks = locks or BookLocks()

    # Books

    def get_book(self, book_id: UUID) -> Book:
        return self.record_store.get_book(book_id)

    def list_books(self) -> list[Book]:
        return self.record_store.list_books()

    def create_book(self, title: str) -> Book:
        """Create a book, its directory layout and its record.

        Every step already done is undone, in reverse order, when a later
        step fails; the original error is then re-raised.

        Raises:
            InvalidTitleError: If the title is invalid; nothing is touched.
            BookAlreadyExistsError: If another book has the same directory name.
            StorageError: If a directory or file cannot be created.
        """
        title = normalize_title(title)
        validate_title(title)
        book = Book(title=title, dir=title_to_dir(title))

        if self.record_store.find_book_by_dir(book.dir) is not None:
            raise BookAlreadyExistsError(f"A book already uses the directory {book.dir}")

        with ExitStack() as undo:
            self.content_store.create_dir(self.layout.book_path(book))
            undo.callback(self._compensate, self.content_store.delete_dir, self.layout.book_path(book))

            self.content_store.create_dir(self.layout.manuscript_path(book))
            undo.callback(self._compensate, self.content_store.delete_dir, self.layout.manuscript_path(book))

            for filename in self.layout.placeholder_files:
                path = f"{self.layout.book_path(book)}/{filename}"
                self.content_store.write(path, b"")
                undo.callback(self._compensate, self.content_store.delete, path)

            self.content_store.create_dir(self.layout.render_path(book))
            undo.callback(self._compensate, self.content_store.delete_dir, self.layout.render_path(book))

            self.record_store.save_book(book)
            undo.pop_all()

        logger.info(f"Created book {book.id} in {book.dir}")
        return book

    def rename_book(self, book_id: UUID, title: str) -> Book:
        """Retitle a book, moving its directory when the directory name changes.

        Raises:
            InvalidTitleError: If the new title is invalid.
            BookAlreadyExistsError: If another book owns the new directory name.
            StorageError: If the directory cannot be moved.
        """
        with self.locks.hold(book_id):
            book = self.record_store.get_book(book_id)
            title = normalize_title(title)
            validate_title(title)
            renamed = book.model_copy(update={"title": title, "dir": title_to_dir(title)})

            with ExitStack() as undo:
                if renamed.dir != book.dir:
                    owner = self.record_store.find_book_by_dir(renamed.dir)
                    if owner is not None and owner.id != book.id:
                        raise BookAlreadyExistsError(f"A book already uses the directory {renamed.dir}")

                    self.content_store.rename(book.dir, renamed.dir)
                    undo.callback(self._compensate, self.content_store.rename, renamed.dir, book.dir)

                    # the artifact is named after the directory
                    render_store = self.content_store.scoped(self.layout.render_path(renamed))
                    old_artifact = self.layout.render_filename(book)
                    new_artifact = self.layout.render_filename(renamed)
                    if render_store.has(old_artifact):
                        render_store.rename(old_artifact, new_artifact)
                        undo.callback(self._compensate, render_store.rename, new_artifact, old_artifact)

                self.record_store.save_book(renamed)
                undo.pop_all()

        logger.info(f"Renamed book {book.id} from {book.dir} to {renamed.dir}")
        return renamed

    def delete_book(self, book_id: UUID) -> None:
        """Delete a book with its references, fragments and directory subtree."""
        with self.locks.hold(book_id):
            book = self.record_store.get_book(book_id)

            for reference in self.record_store.list_references(book.id):
                self.record_store.delete_reference(reference.id)

            for fragment in self.record_store.list_fragments(book.id):
                self.record_store.delete_fragment(fragment.id)

            if self.content_store.has(self.layout.book_path(book)):
                self.content_store.delete_dir(self.layout.book_path(book))

            self.record_store.delete_book(book.id)

        self.locks.discard(book_id)
        logger.info(f"Deleted book {book_id} ({book.dir})")

    # Fragments

    def sync_fragments(self, book_id: UUID) -> ReconcileReport:
        with self.locks.hold(book_id):
            return self.reconciler.sync(self.record_store.get_book(book_id))

    def list_fragments(self, book_id: UUID) -> list[Fragment]:
        book = self.record_store.get_book(book_id)
        return self.record_store.list_fragments(book.id)

    def update_fragment(
        self,
        book_id: UUID,
        fragment_id: UUID,
        menu_label: Optional[str] = None,
        child: Optional[bool] = None,
        reference_id=UNSET,
    ) -> Fragment:
        """Change a fragment's menu label, child flag and/or reference link.

        Every lookup happens before the single save, so a failed update
        changes nothing.

        Args:
            book_id: The book the fragment belongs to.
            fragment_id: The fragment to change.
            menu_label: New menu label; None keeps the current one.
            child: New child flag; None keeps the current one.
            reference_id: Reference to link, None to detach, or UNSET to
                leave the link alone.

        Raises:
            RecordNotFoundError: If the fragment or reference is not part of the book.
        """
        with self.locks.hold(book_id):
            fragment = self._get_book_fragment(book_id, fragment_id)
            if reference_id is None:
                fragment.reference_id = None
                fragment.type = FragmentType.LOCAL
            elif reference_id is not UNSET:
                reference = self._get_book_reference(book_id, reference_id)
                fragment.reference_id = reference.id
                fragment.type = FragmentType.REFERENCE
            if menu_label is not None:
                fragment.menu_label = menu_label
            if child is not None:
                fragment.child = child
            self.record_store.save_fragment(fragment)
            return fragment

    def link_reference(self, book_id: UUID, fragment_id: UUID, reference_id: Optional[UUID]) -> Fragment:
        """Attach a fragment to one of the book's references, or detach it with None."""
        return self.update_fragment(book_id, fragment_id, reference_id=reference_id)

    def reorder_fragments(self, book_id: UUID, fragment_ids: list[UUID]) -> list[Fragment]:
        """Give the book's fragments positions 1..n in the order of ``fragment_ids``.

        Raises:
            InvalidFragmentOrderError: If the ids are not exactly the book's fragments.
        """
        with self.locks.hold(book_id):
            book = self.record_store.get_book(book_id)
            fragments = {fragment.id: fragment for fragment in self.record_store.list_fragments(book.id)}

            if len(fragment_ids) != len(set(fragment_ids)) or set(fragment_ids) != set(fragments):
                raise InvalidFragmentOrderError(
                    f"Order must list each of the {len(fragments)} fragments of book {book_id} exactly once"
                )

            ordered = []
            for position, fragment_id in enumerate(fragment_ids, start=1):
                fragment = fragments[fragment_id]
                fragment.position = position
                self.record_store.save_fragment(fragment)
                ordered.append(fragment)
            return ordered

    def _get_book_fragment(self, book_id: UUID, fragment_id: UUID) -> Fragment:
        fragment = self.record_store.get_fragment(fragment_id)
        if fragment.book_id != book_id:
            raise RecordNotFoundError(f"Fragment with id {fragment_id} not found in book {book_id}")
        return fragment

    # References

    def add_reference(self, book_id: UUID, html_url: str) -> Reference:
        with self.locks.hold(book_id):
            book = self.record_store.get_book(book_id)
            reference = Reference(book_id=book.id, html_url=html_url)
            self.record_store.save_reference(reference)
            return reference

    def list_references(self, book_id: UUID) -> list[Reference]:
        book = self.record_store.get_book(book_id)
        return self.record_store.list_references(book.id)

    def delete_reference(self, book_id: UUID, reference_id: UUID) -> None:
        """Delete a reference, turning the fragments that cited it back into local ones."""
        with self.locks.hold(book_id):
            reference = self._get_book_reference(book_id, reference_id)
            for fragment in self.record_store.list_fragments(book_id):
                if fragment.reference_id == reference.id:
                    fragment.reference_id = None
                    fragment.type = FragmentType.LOCAL
                    self.record_store.save_fragment(fragment)
            self.record_store.delete_reference(reference.id)

    def _get_book_reference(self, book_id: UUID, reference_id: UUID) -> Reference:
        reference = self.record_store.get_reference(reference_id)
        if reference.book_id != book_id:
            raise RecordNotFoundError(f"Reference with id {reference_id} not found in book {book_id}")
        return reference

    # Rendering

    def render_book(self, book_id: UUID, sync: bool = False) -> RenderInfo:
        """Render a book, optionally reconciling its fragments first.

        Raises:
            RenderUnavailableError: If a fragment's file is missing or unreadable.
        """
        with self.locks.hold(book_id):
            book = self.record_store.get_book(book_id)
            if sync:
                self.reconciler.sync(book)
            return self.renderer.render(book)

    def get_render_info(self, book_id: UUID) -> Optional[RenderInfo]:
        return self.renderer.get_render_info(self.record_store.get_book(book_id))

    @staticmethod
    def _compensate(action: Callable[..., None], *args) -> None:
        try:
            action(*args)
        except Exception:
            logger.error(f"Compensating action {action.__name__}{args} failed", exc_info=True)
