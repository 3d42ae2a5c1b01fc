"""On-disk layout of a book beneath the repository root."""

from dataclasses import dataclass

from ..entities.book import Book


@dataclass(frozen=True)
class BookLayout:
    """Relative paths of a book's directories and files.

    <repo_root>/<dir>/manuscript/   fragment sources
    <repo_root>/<dir>/render/       <dir>.html
    <repo_root>/<dir>/README.md, license.md
    """

    manuscript_dir: str = "manuscript"
    render_dir: str = "render"
    placeholder_files: tuple[str, ...] = ("README.md", "license.md")

    def book_path(self, book: Book) -> str:
        return book.dir

    def manuscript_path(self, book: Book) -> str:
        return f"{book.dir}/{self.manuscript_dir}"

    def render_path(self, book: Book) -> str:
        return f"{book.dir}/{self.render_dir}"

    def render_filename(self, book: Book) -> str:
        return f"{book.dir}.html"
