"""DynamoDB implementation of RecordStore."""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from ..domain.entities.book import Book
from ..domain.entities.fragment import Fragment, FragmentType
from ..domain.entities.reference import Reference
from ..domain.exceptions import RecordNotFoundError
from ..domain.interfaces.record_store import RecordStore


class DynamoDBRecordStore(RecordStore):
    """DynamoDB implementation of the RecordStore protocol.

    Books, fragments and references live in one table each, keyed by
    ``id``. Per-book lookups scan with a ``book_id`` filter.
    """

    def __init__(
        self,
        books_table_name: str,
        fragments_table_name: str,
        references_table_name: str,
        region_name: str = "us-east-1",
    ):
        """Initialize the DynamoDB record store.

        Args:
            books_table_name: The name of the books table.
            fragments_table_name: The name of the fragments table.
            references_table_name: The name of the references table.
            region_name: AWS region name (default: us-east-1).
        """
        self.region_name = region_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.books_table = self.dynamodb.Table(books_table_name)
        self.fragments_table = self.dynamodb.Table(fragments_table_name)
        self.references_table = self.dynamodb.Table(references_table_name)

    # Books

    def save_book(self, book: Book) -> None:
        """Put a book item, replacing any item with the same id.

        Args:
            book: The book entity to save.
        """
        self.books_table.put_item(Item=self._book_to_item(book))

    def get_book(self, book_id: UUID) -> Book:
        """Retrieve a book by id.

        Args:
            book_id: The unique identifier of the book.

        Returns:
            Book: The book entity.

        Raises:
            RecordNotFoundError: If the book is not found.
            ClientError: If the DynamoDB request fails.
        """
        response = self.books_table.get_item(Key={"id": str(book_id)})
        if "Item" not in response:
            raise RecordNotFoundError(f"Book with id {book_id} not found")
        return self._item_to_book(response["Item"])

    def find_book_by_dir(self, dir_name: str) -> Optional[Book]:
        """Find the book owning a directory name, or None."""
        items = self._scan(self.books_table, FilterExpression=Attr("dir").eq(dir_name))
        return self._item_to_book(items[0]) if items else None

    def list_books(self) -> list[Book]:
        books = [self._item_to_book(item) for item in self._scan(self.books_table)]
        return sorted(books, key=lambda b: b.title)

    def delete_book(self, book_id: UUID) -> None:
        """Delete a book item.

        Raises:
            RecordNotFoundError: If the book is not found.
        """
        self._delete(self.books_table, "Book", book_id)

    # Fragments

    def save_fragment(self, fragment: Fragment) -> None:
        self.fragments_table.put_item(Item=self._fragment_to_item(fragment))

    def get_fragment(self, fragment_id: UUID) -> Fragment:
        """Retrieve a fragment by id.

        Raises:
            RecordNotFoundError: If the fragment is not found.
        """
        response = self.fragments_table.get_item(Key={"id": str(fragment_id)})
        if "Item" not in response:
            raise RecordNotFoundError(f"Fragment with id {fragment_id} not found")
        return self._item_to_fragment(response["Item"])

    def find_fragment(self, book_id: UUID, full_filename: str) -> Optional[Fragment]:
        items = self._scan(
            self.fragments_table,
            FilterExpression=Attr("book_id").eq(str(book_id)) & Attr("full_filename").eq(full_filename),
        )
        return self._item_to_fragment(items[0]) if items else None

    def list_fragments(self, book_id: UUID) -> list[Fragment]:
        """List a book's fragments ordered by position."""
        items = self._scan(self.fragments_table, FilterExpression=Attr("book_id").eq(str(book_id)))
        return sorted((self._item_to_fragment(item) for item in items), key=lambda f: f.position)

    def delete_fragment(self, fragment_id: UUID) -> None:
        self._delete(self.fragments_table, "Fragment", fragment_id)

    def delete_fragments_not_in(self, book_id: UUID, full_filenames: Iterable[str]) -> list[Fragment]:
        """Delete the book's fragments whose filename is not kept, in one batch.

        Args:
            book_id: The book to prune.
            full_filenames: Filenames to keep.

        Returns:
            list[Fragment]: The deleted fragments.
        """
        keep = set(full_filenames)
        dead = [f for f in self.list_fragments(book_id) if f.full_filename not in keep]
        if dead:
            with self.fragments_table.batch_writer() as batch:
                for fragment in dead:
                    batch.delete_item(Key={"id": str(fragment.id)})
        return dead

    # References

    def save_reference(self, reference: Reference) -> None:
        self.references_table.put_item(Item=self._reference_to_item(reference))

    def get_reference(self, reference_id: UUID) -> Reference:
        """Retrieve a reference by id.

        Raises:
            RecordNotFoundError: If the reference is not found.
        """
        response = self.references_table.get_item(Key={"id": str(reference_id)})
        if "Item" not in response:
            raise RecordNotFoundError(f"Reference with id {reference_id} not found")
        return self._item_to_reference(response["Item"])

    def list_references(self, book_id: UUID) -> list[Reference]:
        """List a book's references, oldest first."""
        items = self._scan(self.references_table, FilterExpression=Attr("book_id").eq(str(book_id)))
        return sorted((self._item_to_reference(item) for item in items), key=lambda r: r.created_at)

    def delete_reference(self, reference_id: UUID) -> None:
        self._delete(self.references_table, "Reference", reference_id)

    # Helpers

    def _scan(self, table: Any, **kwargs: Any) -> list[Dict[str, Any]]:
        """Scan a table, following pagination."""
        items: list[Dict[str, Any]] = []
        while True:
            response = table.scan(**kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                return items
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def _delete(self, table: Any, kind: str, record_id: UUID) -> None:
        """Delete an item that must exist, mapping a failed condition to RecordNotFoundError."""
        try:
            table.delete_item(
                Key={"id": str(record_id)},
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={"#id": "id"},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise RecordNotFoundError(f"{kind} with id {record_id} not found") from e
            raise

    def _book_to_item(self, book: Book) -> Dict[str, Any]:
        return {
            "id": str(book.id),
            "title": book.title,
            "dir": book.dir,
            "created_at": book.created_at.isoformat(),
        }

    def _item_to_book(self, item: Dict[str, Any]) -> Book:
        return Book(
            id=item["id"],
            title=item["title"],
            dir=item["dir"],
            created_at=datetime.fromisoformat(item["created_at"]),
        )

    def _fragment_to_item(self, fragment: Fragment) -> Dict[str, Any]:
        item = {
            "id": str(fragment.id),
            "book_id": str(fragment.book_id),
            "position": fragment.position,
            "full_filename": fragment.full_filename,
            "type": fragment.type.value,
            "child": fragment.child,
        }
        # DynamoDB items leave optional attributes out instead of storing nulls
        if fragment.menu_label is not None:
            item["menu_label"] = fragment.menu_label
        if fragment.reference_id is not None:
            item["reference_id"] = str(fragment.reference_id)
        return item

    def _item_to_fragment(self, item: Dict[str, Any]) -> Fragment:
        return Fragment(
            id=item["id"],
            book_id=item["book_id"],
            position=int(item["position"]),
            full_filename=item["full_filename"],
            menu_label=item.get("menu_label"),
            type=FragmentType(item.get("type", FragmentType.LOCAL.value)),
            child=bool(item.get("child", False)),
            reference_id=item.get("reference_id"),
        )

    def _reference_to_item(self, reference: Reference) -> Dict[str, Any]:
        return {
            "id": str(reference.id),
            "book_id": str(reference.book_id),
            "html_url": reference.html_url,
            "created_at": reference.created_at.isoformat(),
        }

    def _item_to_reference(self, item: Dict[str, Any]) -> Reference:
        return Reference(
            id=item["id"],
            book_id=item["book_id"],
            html_url=item["html_url"],
            created_at=datetime.fromisoformat(item["created_at"]),
        )
