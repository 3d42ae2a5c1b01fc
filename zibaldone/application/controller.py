"""Book controller wiring the stores and services together for the API."""

import logging
from typing import Optional
from uuid import UUID

from ..domain.interfaces.content_store import ContentStore
from ..domain.interfaces.record_store import RecordStore
from ..domain.services import (
    BookLayout,
    BookRenderer,
    BookService,
    FragmentReconciler,
)
from ..domain.services.book_service import UNSET
from ..infrastructure.commonmark_converter import CommonMarkConverter
from ..infrastructure.dynamodb_record_store import DynamoDBRecordStore
from ..infrastructure.local_content_store import LocalContentStore
from ..infrastructure.local_record_store import LocalRecordStore
from .config import Settings

logger = logging.getLogger(__name__)


def build_record_store(settings: Settings) -> RecordStore:
    """Create the record store selected by ``settings.record_store_type``."""
    if settings.record_store_type == "dynamodb":
        return DynamoDBRecordStore(
            books_table_name=settings.books_table_name,
            fragments_table_name=settings.fragments_table_name,
            references_table_name=settings.references_table_name,
            region_name=settings.aws_region,
        )
    if settings.record_store_type == "local":
        return LocalRecordStore()
    raise ValueError(f"Unknown record store type: {settings.record_store_type}")


def build_book_service(
    settings: Settings,
    content_store: Optional[ContentStore] = None,
    record_store: Optional[RecordStore] = None,
) -> BookService:
    """Assemble a BookService from settings, with optional store overrides."""
    content_store = content_store or LocalContentStore(settings.repo_root)
    record_store = record_store or build_record_store(settings)
    layout = BookLayout(manuscript_dir=settings.manuscript_dir, render_dir=settings.render_dir)

    reconciler = FragmentReconciler(
        content_store=content_store,
        record_store=record_store,
        layout=layout,
        allowed_extensions=settings.allowed_extensions,
        sentinel_filename=settings.sentinel_filename,
    )
    renderer = BookRenderer(
        content_store=content_store,
        record_store=record_store,
        converter=CommonMarkConverter(),
        layout=layout,
        timestamp_format=settings.render_timestamp_format,
    )
    return BookService(
        content_store=content_store,
        record_store=record_store,
        reconciler=reconciler,
        renderer=renderer,
        layout=layout,
    )


class BookController:
    """
    Controller for book operations.

    Keeps the API layer thin: it calls the BookService and turns the
    returned entities into JSON-ready dictionaries. Domain errors are
    left for the API layer to translate.
    """

    def __init__(self, book_service: BookService):
        self.book_service = book_service
        logger.info("BookController initialized")

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "stores": {
                "content_store": type(self.book_service.content_store).__name__,
                "record_store": type(self.book_service.record_store).__name__,
            },
        }

    # Books

    def list_books(self) -> list:
        return [book.model_dump(mode="json") for book in self.book_service.list_books()]

    def create_book(self, title: str) -> dict:
        return self.book_service.create_book(title).model_dump(mode="json")

    def get_book(self, book_id: UUID) -> dict:
        """Get a book with its fragments, references and last render."""
        book = self.book_service.get_book(book_id)
        render_info = self.book_service.get_render_info(book_id)
        return {
            **book.model_dump(mode="json"),
            "fragments": self.list_fragments(book_id),
            "references": self.list_references(book_id),
            "render": render_info.model_dump(mode="json") if render_info else None,
        }

    def rename_book(self, book_id: UUID, title: str) -> dict:
        return self.book_service.rename_book(book_id, title).model_dump(mode="json")

    def delete_book(self, book_id: UUID) -> None:
        self.book_service.delete_book(book_id)

    # Fragments

    def sync_fragments(self, book_id: UUID) -> dict:
        return self.book_service.sync_fragments(book_id).model_dump(mode="json")

    def list_fragments(self, book_id: UUID) -> list:
        return [fragment.model_dump(mode="json") for fragment in self.book_service.list_fragments(book_id)]

    def update_fragment(self, book_id: UUID, fragment_id: UUID, changes: dict) -> dict:
        """Apply a partial update: menu_label, child and/or reference_id.

        A ``reference_id`` key set to None detaches the fragment from its reference.
        """
        fragment = self.book_service.update_fragment(
            book_id,
            fragment_id,
            menu_label=changes.get("menu_label"),
            child=changes.get("child"),
            reference_id=changes.get("reference_id", UNSET),
        )
        return fragment.model_dump(mode="json")

    def reorder_fragments(self, book_id: UUID, fragment_ids: list[UUID]) -> list:
        fragments = self.book_service.reorder_fragments(book_id, fragment_ids)
        return [fragment.model_dump(mode="json") for fragment in fragments]

    # References

    def list_references(self, book_id: UUID) -> list:
        return [reference.model_dump(mode="json") for reference in self.book_service.list_references(book_id)]

    def add_reference(self, book_id: UUID, html_url: str) -> dict:
        return self.book_service.add_reference(book_id, html_url).model_dump(mode="json")

    def delete_reference(self, book_id: UUID, reference_id: UUID) -> None:
        self.book_service.delete_reference(book_id, reference_id)

    # Rendering

    def render_book(self, book_id: UUID, sync: bool = False) -> dict:
        return self.book_service.render_book(book_id, sync=sync).model_dump(mode="json")

    def get_render_info(self, book_id: UUID) -> Optional[dict]:
        render_info = self.book_service.get_render_info(book_id)
        return render_info.model_dump(mode="json") if render_info else None
