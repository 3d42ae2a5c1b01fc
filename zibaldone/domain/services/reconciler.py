"""Reconciliation of the fragment index against the manuscript directory."""

import logging
from typing import Dict, Iterable, Optional

from ..entities.book import Book
from ..entities.content import ContentEntry
from ..entities.fragment import Fragment, FragmentType
from ..entities.render import ReconcileReport
from ..interfaces.content_store import ContentStore
from ..interfaces.record_store import RecordStore
from .layout import BookLayout

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = ("txt", "md")
DEFAULT_SENTINEL_FILENAME = "Book.txt"


class FragmentReconciler:
    """
    Makes a book's fragment index an exact mirror of its manuscript files.

    A sync adds an index entry for every eligible file the index lacks and
    deletes every entry whose file is no longer eligible. Positions of
    existing entries are never changed.
    """

    def __init__(
        self,
        content_store: ContentStore,
        record_store: RecordStore,
        layout: Optional[BookLayout] = None,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        sentinel_filename: str = DEFAULT_SENTINEL_FILENAME,
    ):
        """
        Args:
            content_store: Store rooted at the repository root.
            record_store: Store holding the fragment index.
            layout: Book directory layout.
            allowed_extensions: Extensions (without dot) of fragment files.
            sentinel_filename: Listing entry that ends the eligibility scan.
        """
        self.content_store = content_store
        self.record_store = record_store
        self.layout = layout or BookLayout()
        self.allowed_extensions = frozenset(allowed_extensions)
        self.sentinel_filename = sentinel_filename

    def list_fragment_files(self, book: Book) -> Dict[str, ContentEntry]:
        """List the manuscript files eligible to be fragments, in listing order.

        Returns:
            Dict mapping each eligible path (relative to the manuscript
            directory) to its listing entry.

        Raises:
            ContentNotFoundError: If the manuscript directory is missing.
        """
        manuscript = self.content_store.scoped(self.layout.manuscript_path(book))
        files: Dict[str, ContentEntry] = {}
        for entry in manuscript.list_contents():
            # Book.txt is the Leanpub index file: it and everything listed
            # after it are left out
            if entry.path == self.sentinel_filename:
                break
            if entry.is_file and entry.extension in self.allowed_extensions:
                files[entry.path] = entry
        return files

    def sync(self, book: Book) -> ReconcileReport:
        """Bring the book's fragment index in line with its manuscript files.

        Args:
            book: The book to reconcile.

        Returns:
            ReconcileReport: Filenames added to and removed from the index.
        """
        files = self.list_fragment_files(book)
        report = ReconcileReport()
        taken = {fragment.position for fragment in self.record_store.list_fragments(book.id)}

        for index, path in enumerate(files):
            if self.record_store.find_fragment(book.id, path) is not None:
                continue

            # new local fragments go to the bottom of the list
            position = len(files) + index + 1
            if position in taken:
                position = max(taken) + 1
            taken.add(position)

            fragment = Fragment(
                book_id=book.id,
                type=FragmentType.LOCAL,
                full_filename=path,
                position=position,
            )
            fragment.menu_label = fragment.guess_menu_label()
            self.record_store.save_fragment(fragment)
            report.added.append(path)

        removed = self.record_store.delete_fragments_not_in(book.id, files.keys())
        report.removed = [fragment.full_filename for fragment in removed]

        if report.changed:
            logger.info(
                f"Synced book {book.dir}: {len(report.added)} added, {len(report.removed)} removed"
            )
        else:
            logger.debug(f"Book {book.dir} already in sync")
        return report
