"""Domain interfaces for the zibaldone application."""

from .content_store import ContentStore
from .markdown_converter import MarkdownConverter
from .record_store import RecordStore

__all__ = ["ContentStore", "MarkdownConverter", "RecordStore"]
