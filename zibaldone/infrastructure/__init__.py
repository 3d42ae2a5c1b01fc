"""Infrastructure layer components."""

from .commonmark_converter import CommonMarkConverter
from .dynamodb_record_store import DynamoDBRecordStore
from .local_content_store import LocalContentStore
from .local_record_store import LocalRecordStore

__all__ = [
    "CommonMarkConverter",
    "DynamoDBRecordStore",
    "LocalContentStore",
    "LocalRecordStore",
]
