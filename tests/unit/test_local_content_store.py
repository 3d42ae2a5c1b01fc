"""Tests for LocalContentStore."""

import os

import pytest

from zibaldone.domain.entities.content import EntryType
from zibaldone.domain.exceptions import (
    ContentNotFoundError,
    PathOutsideRootError,
    StorageError,
)
from zibaldone.domain.interfaces.content_store import ContentStore
from zibaldone.infrastructure.local_content_store import LocalContentStore


@pytest.fixture
def store(tmp_path):
    """Create a store rooted at a fresh temporary directory."""
    return LocalContentStore(tmp_path / "repo")


def test_store_implements_protocol(store):
    assert isinstance(store, ContentStore)


def test_root_is_created_lazily(tmp_path):
    store = LocalContentStore(tmp_path / "later")
    assert not (tmp_path / "later").exists()

    store.write("a.txt", b"hello")

    assert (tmp_path / "later" / "a.txt").read_bytes() == b"hello"


def test_write_and_read(store):
    store.write("book/manuscript/a.md", b"# Hi")

    assert store.has("book/manuscript/a.md")
    assert store.read("book/manuscript/a.md") == b"# Hi"


def test_write_replaces_existing_file(store):
    store.write("a.md", b"one")
    store.write("a.md", b"two")

    assert store.read("a.md") == b"two"


def test_read_missing_file(store):
    with pytest.raises(ContentNotFoundError, match="missing.md not found"):
        store.read("missing.md")


def test_delete(store):
    store.write("a.md", b"x")
    store.delete("a.md")

    assert not store.has("a.md")


def test_delete_missing_file(store):
    with pytest.raises(ContentNotFoundError):
        store.delete("missing.md")


class TestListContents:
    """Tests for directory listings."""

    def test_entries_are_relative_and_typed(self, store):
        store.write("book/manuscript/a.md", b"a")
        store.write("book/manuscript/notes.pdf", b"%PDF")
        store.create_dir("book/manuscript/images")

        entries = store.list_contents("book/manuscript")
        by_path = {entry.path: entry for entry in entries}

        assert set(by_path) == {
            "book/manuscript/a.md",
            "book/manuscript/images",
            "book/manuscript/notes.pdf",
        }
        assert by_path["book/manuscript/a.md"].type == EntryType.FILE
        assert by_path["book/manuscript/a.md"].extension == "md"
        assert by_path["book/manuscript/a.md"].size == 1
        assert by_path["book/manuscript/notes.pdf"].extension == "pdf"
        assert by_path["book/manuscript/images"].type == EntryType.DIR
        assert by_path["book/manuscript/images"].extension == ""

    def test_listing_is_sorted_case_insensitively(self, store):
        for name in ["c.md", "Book.txt", "a.md", "B.md"]:
            store.write(name, b"")

        assert [entry.path for entry in store.list_contents()] == ["a.md", "B.md", "Book.txt", "c.md"]

    def test_listing_is_stable(self, store):
        for name in ["z.md", "m.txt", "a.md"]:
            store.write(name, b"")

        assert store.list_contents() == store.list_contents()

    def test_listing_is_not_recursive(self, store):
        store.write("top.md", b"")
        store.write("sub/deep.md", b"")

        assert [entry.path for entry in store.list_contents()] == ["sub", "top.md"]

    def test_missing_directory(self, store):
        with pytest.raises(ContentNotFoundError):
            store.list_contents("nowhere")

    def test_dangling_symlink_is_skipped(self, store):
        store.write("book/a.md", b"a")
        os.symlink(store.root / "book" / "nowhere.md", store.root / "book" / "dangling.md")

        assert [entry.path for entry in store.list_contents("book")] == ["book/a.md"]

    def test_symlink_outside_root_is_skipped(self, store, tmp_path):
        outside = tmp_path / "secret.md"
        outside.write_bytes(b"secret")
        store.write("book/a.md", b"a")
        os.symlink(outside, store.root / "book" / "leak.md")

        assert [entry.path for entry in store.list_contents("book")] == ["book/a.md"]

    def test_symlink_inside_root_is_listed(self, store):
        store.write("shared/a.md", b"a")
        store.create_dir("book")
        os.symlink(store.root / "shared" / "a.md", store.root / "book" / "link.md")

        entries = store.list_contents("book")

        assert [entry.path for entry in entries] == ["book/link.md"]
        assert entries[0].size == 1


class TestPathConfinement:
    """Paths must never resolve outside the store root."""

    @pytest.mark.parametrize("path", ["../escape.md", "book/../../escape.md", "/etc/passwd"])
    def test_escaping_paths_are_rejected(self, store, path):
        with pytest.raises(PathOutsideRootError):
            store.read(path)
        with pytest.raises(PathOutsideRootError):
            store.write(path, b"x")

    def test_dotdot_inside_root_is_normalized(self, store):
        store.write("book/a.md", b"a")
        assert store.read("book/manuscript/../a.md") == b"a"

    def test_escape_via_symlink_is_rejected(self, store, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        store.create_dir("book")
        os.symlink(outside, store.root / "book" / "link")

        with pytest.raises(PathOutsideRootError):
            store.write("book/link/a.md", b"x")

    def test_scoped_store_is_confined_to_subdirectory(self, store):
        store.write("other/secret.md", b"s")
        scoped = store.scoped("book")

        with pytest.raises(PathOutsideRootError):
            scoped.read("../other/secret.md")


class TestDirectories:
    """Tests for directory operations."""

    def test_create_dir_with_parents(self, store):
        store.create_dir("book/manuscript")
        assert (store.root / "book" / "manuscript").is_dir()

    def test_create_existing_dir_fails(self, store):
        store.create_dir("book")
        with pytest.raises(StorageError, match="already exists"):
            store.create_dir("book")

    def test_delete_dir_removes_subtree(self, store):
        store.write("book/manuscript/a.md", b"a")
        store.delete_dir("book")

        assert not store.has("book")

    def test_delete_missing_dir(self, store):
        with pytest.raises(ContentNotFoundError):
            store.delete_dir("nowhere")

    def test_delete_root_is_refused(self, store):
        store.create_dir("book")
        with pytest.raises(StorageError, match="store root"):
            store.delete_dir("")

    def test_rename_moves_subtree(self, store):
        store.write("old/manuscript/a.md", b"a")
        store.rename("old", "new")

        assert not store.has("old")
        assert store.read("new/manuscript/a.md") == b"a"

    def test_rename_onto_existing_target_fails(self, store):
        store.create_dir("old")
        store.create_dir("new")

        with pytest.raises(StorageError, match="already exists"):
            store.rename("old", "new")
        assert store.has("old")

    def test_rename_missing_source(self, store):
        with pytest.raises(ContentNotFoundError):
            store.rename("nowhere", "new")


def test_timestamp_matches_file_mtime(store):
    store.write("a.md", b"x")
    os.utime(store.root / "a.md", (1_700_000_000, 1_700_000_000))

    assert store.get_timestamp("a.md") == 1_700_000_000


def test_timestamp_of_missing_path(store):
    with pytest.raises(ContentNotFoundError):
        store.get_timestamp("missing.md")


def test_scoped_store_paths_are_relative_to_subdirectory(store):
    store.write("book/manuscript/a.md", b"a")
    manuscript = store.scoped("book/manuscript")

    assert [entry.path for entry in manuscript.list_contents()] == ["a.md"]
    assert manuscript.read("a.md") == b"a"
    assert manuscript.absolute_path("a.md") == str(store.root / "book" / "manuscript" / "a.md")
