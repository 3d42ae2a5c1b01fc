"""Domain entities for the zibaldone application."""

from .book import Book
from .content import ContentEntry, EntryType
from .fragment import Fragment, FragmentType
from .reference import Reference
from .render import ReconcileReport, RenderedFragment, RenderInfo

__all__ = [
    # Book entities
    "Book",
    # Fragment entities
    "Fragment",
    "FragmentType",
    # Reference entities
    "Reference",
    # Content store entities
    "ContentEntry",
    "EntryType",
    # Render entities
    "RenderedFragment",
    "RenderInfo",
    "ReconcileReport",
]
