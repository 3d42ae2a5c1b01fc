"""Tests for LocalRecordStore."""

import threading
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from zibaldone.domain.entities import Book, Fragment, FragmentType, Reference
from zibaldone.domain.exceptions import RecordNotFoundError
from zibaldone.infrastructure.local_record_store import LocalRecordStore


@pytest.fixture
def store():
    """Create a fresh LocalRecordStore for each test."""
    return LocalRecordStore()


@pytest.fixture
def book(store):
    """Create and save a sample book."""
    book = Book(title="Sample Book", dir="sample_book")
    store.save_book(book)
    return book


def make_fragment(book, position, filename, **kwargs):
    return Fragment(book_id=book.id, position=position, full_filename=filename, **kwargs)


class TestBooks:
    """Tests for book records."""

    def test_save_and_get_book(self, store, book):
        retrieved = store.get_book(book.id)

        assert retrieved == book

    def test_get_nonexistent_book(self, store):
        book_id = uuid.uuid4()
        with pytest.raises(RecordNotFoundError, match=f"Book with id {book_id} not found"):
            store.get_book(book_id)

    def test_not_found_is_a_value_error(self, store):
        with pytest.raises(ValueError):
            store.get_book(uuid.uuid4())

    def test_find_book_by_dir(self, store, book):
        assert store.find_book_by_dir("sample_book") == book
        assert store.find_book_by_dir("other") is None

    def test_list_books_sorted_by_title(self, store, book):
        store.save_book(Book(title="Another Book", dir="another_book"))

        assert [b.title for b in store.list_books()] == ["Another Book", "Sample Book"]

    def test_delete_book(self, store, book):
        store.delete_book(book.id)

        with pytest.raises(RecordNotFoundError):
            store.get_book(book.id)

    def test_delete_nonexistent_book(self, store):
        with pytest.raises(RecordNotFoundError):
            store.delete_book(uuid.uuid4())

    def test_returned_records_are_copies(self, store, book):
        retrieved = store.get_book(book.id)
        retrieved.title = "Changed Title"

        assert store.get_book(book.id).title == "Sample Book"


class TestFragments:
    """Tests for fragment records."""

    def test_list_fragments_ordered_by_position(self, store, book):
        store.save_fragment(make_fragment(book, 3, "c.md"))
        store.save_fragment(make_fragment(book, 1, "a.md"))
        store.save_fragment(make_fragment(book, 2, "b.md"))

        assert [f.full_filename for f in store.list_fragments(book.id)] == ["a.md", "b.md", "c.md"]

    def test_find_fragment_is_scoped_to_book(self, store, book):
        other = Book(title="Other Book", dir="other_book")
        store.save_fragment(make_fragment(other, 1, "a.md"))

        assert store.find_fragment(book.id, "a.md") is None
        assert store.find_fragment(other.id, "a.md").book_id == other.id

    def test_get_and_delete_fragment(self, store, book):
        fragment = make_fragment(book, 1, "a.md")
        store.save_fragment(fragment)

        assert store.get_fragment(fragment.id) == fragment
        store.delete_fragment(fragment.id)
        with pytest.raises(RecordNotFoundError, match="Fragment with id .* not found"):
            store.get_fragment(fragment.id)

    def test_delete_fragments_not_in(self, store, book):
        store.save_fragment(make_fragment(book, 1, "a.md"))
        store.save_fragment(make_fragment(book, 2, "gone.md"))
        store.save_fragment(make_fragment(book, 3, "ref.md", type=FragmentType.REFERENCE))

        removed = store.delete_fragments_not_in(book.id, ["a.md"])

        assert sorted(f.full_filename for f in removed) == ["gone.md", "ref.md"]
        assert [f.full_filename for f in store.list_fragments(book.id)] == ["a.md"]

    def test_delete_fragments_not_in_empty_set_spares_other_books(self, store, book):
        other = Book(title="Other Book", dir="other_book")
        store.save_fragment(make_fragment(book, 1, "a.md"))
        store.save_fragment(make_fragment(other, 1, "a.md"))

        removed = store.delete_fragments_not_in(book.id, [])

        assert len(removed) == 1
        assert store.list_fragments(book.id) == []
        assert len(store.list_fragments(other.id)) == 1


class TestReferences:
    """Tests for reference records."""

    def test_list_references_oldest_first(self, store, book):
        now = datetime.now(timezone.utc)
        newer = Reference(book_id=book.id, html_url="https://example.com/2", created_at=now)
        older = Reference(book_id=book.id, html_url="https://example.com/1", created_at=now - timedelta(hours=1))
        store.save_reference(newer)
        store.save_reference(older)

        assert [r.html_url for r in store.list_references(book.id)] == [
            "https://example.com/1",
            "https://example.com/2",
        ]

    def test_get_and_delete_reference(self, store, book):
        reference = Reference(book_id=book.id, html_url="https://example.com")
        store.save_reference(reference)

        assert store.get_reference(reference.id) == reference
        store.delete_reference(reference.id)
        with pytest.raises(RecordNotFoundError, match="Reference with id .* not found"):
            store.get_reference(reference.id)


def test_clear(store, book):
    store.save_fragment(make_fragment(book, 1, "a.md"))
    store.save_reference(Reference(book_id=book.id, html_url="https://example.com"))

    store.clear()

    assert store.list_books() == []
    assert store.list_fragments(book.id) == []
    assert store.list_references(book.id) == []


def test_reads_survive_concurrent_writes_to_another_book(store, book):
    """Scans of one book must not fail while another book's fragments are being saved."""
    other = Book(title="Other Book", dir="other_book")
    store.save_fragment(make_fragment(book, 1, "a.md"))
    stop = threading.Event()
    errors = []

    def writer():
        position = 1
        while not stop.is_set() and position <= 5000:
            store.save_fragment(make_fragment(other, position, f"{position}.md"))
            position += 1

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(2000):
            try:
                assert store.find_fragment(book.id, "a.md") is not None
                assert len(store.list_fragments(book.id)) == 1
                assert store.delete_fragments_not_in(book.id, ["a.md"]) == []
            except RuntimeError as e:
                errors.append(e)
                break
    finally:
        stop.set()
        thread.join(timeout=5)

    assert errors == []
