"""Rendering of a book's fragments into a single HTML document."""

import logging
from datetime import datetime, timezone
from html import escape as html_escape
from typing import Dict, Iterable, Optional

from ..entities.book import Book
from ..entities.fragment import Fragment, FragmentType
from ..entities.render import RenderedFragment, RenderInfo
from ..exceptions import RecordNotFoundError, RenderUnavailableError, StorageError
from ..interfaces.content_store import ContentStore
from ..interfaces.markdown_converter import MarkdownConverter
from ..interfaces.record_store import RecordStore
from .layout import BookLayout

logger = logging.getLogger(__name__)

DEFAULT_TIMESTAMP_FORMAT = "%a, %Y-%m-%d %H:%M:%S"


class BookRenderer:
    """
    Renders a book's fragments, in position order, into one HTML artifact.

    Rendering is all-or-nothing: if any fragment's file is missing or
    unreadable nothing is written and RenderUnavailableError is raised.
    The renderer does not reconcile the index first; callers that want
    "sync then render" must sync explicitly.
    """

    def __init__(
        self,
        content_store: ContentStore,
        record_store: RecordStore,
        converter: MarkdownConverter,
        layout: Optional[BookLayout] = None,
        converters: Optional[Dict[FragmentType, MarkdownConverter]] = None,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    ):
        """
        Args:
            content_store: Store rooted at the repository root.
            record_store: Store holding fragments and references.
            converter: Default markdown converter.
            layout: Book directory layout.
            converters: Per fragment type overrides of the default converter.
            timestamp_format: strftime format of RenderInfo.created.
        """
        self.content_store = content_store
        self.record_store = record_store
        self.converter = converter
        self.layout = layout or BookLayout()
        self.converters = dict(converters or {})
        self.timestamp_format = timestamp_format

    def converter_for(self, fragment: Fragment) -> MarkdownConverter:
        return self.converters.get(fragment.type, self.converter)

    def fragments_to_html(self, book: Book) -> list[RenderedFragment]:
        """Convert every fragment of the book, in ascending position order.

        Raises:
            RenderUnavailableError: If a fragment's file is missing or unreadable.
        """
        manuscript = self.content_store.scoped(self.layout.manuscript_path(book))
        items: list[RenderedFragment] = []

        for fragment in self.record_store.list_fragments(book.id):
            try:
                if not manuscript.has(fragment.full_filename):
                    raise RenderUnavailableError(fragment.full_filename)
                content = manuscript.read(fragment.full_filename).decode("utf-8")
            except (StorageError, UnicodeDecodeError) as e:
                raise RenderUnavailableError(fragment.full_filename, "unreadable") from e

            item = RenderedFragment(
                id=fragment.id,
                child=fragment.child,
                menu_label=fragment.label,
                content=self.converter_for(fragment).convert(content),
            )
            if fragment.reference_id:
                item.origin = self._origin(fragment)
            items.append(item)

        return items

    def _origin(self, fragment: Fragment) -> Optional[str]:
        try:
            return self.record_store.get_reference(fragment.reference_id).html_url
        except RecordNotFoundError:
            logger.warning(
                f"Fragment {fragment.full_filename} points at missing reference {fragment.reference_id}"
            )
            return None

    def compose(self, book: Book, items: Iterable[RenderedFragment]) -> str:
        """Assemble rendered fragments into a standalone HTML document."""
        items = list(items)
        menu_lines = []
        section_lines = []
        for item in items:
            css_class = "fragment child" if item.child else "fragment"
            label = html_escape(item.menu_label)
            menu_lines.append(f'      <li class="{css_class}"><a href="#fragment-{item.id}">{label}</a></li>')
            section_lines.append(f'    <section id="fragment-{item.id}" class="{css_class}">')
            section_lines.append(item.content.rstrip("\n"))
            if item.origin:
                origin = html_escape(item.origin, quote=True)
                section_lines.append(f'      <p class="origin"><a href="{origin}">{origin}</a></p>')
            section_lines.append("    </section>")

        title = html_escape(book.title)
        lines = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="utf-8" />',
            f"  <title>{title}</title>",
            "</head>",
            "<body>",
            '  <nav class="fragment-menu">',
            "    <ul>",
            *menu_lines,
            "    </ul>",
            "  </nav>",
            "  <main>",
            f"    <h1 class=\"book-title\">{title}</h1>",
            *section_lines,
            "  </main>",
            "</body>",
            "</html>",
        ]
        return "\n".join(lines) + "\n"

    def store(self, book: Book, html: str) -> None:
        """Replace the book's render artifact with the given document."""
        render_store = self.content_store.scoped(self.layout.render_path(book))
        filename = self.layout.render_filename(book)

        if render_store.has(filename):
            render_store.delete(filename)

        render_store.write(filename, html.encode("utf-8"))

    def render(self, book: Book) -> RenderInfo:
        """Render the book and persist the artifact.

        Returns:
            RenderInfo: Metadata of the freshly written artifact.

        Raises:
            RenderUnavailableError: If a fragment cannot be rendered; any
                previous artifact is left untouched.
        """
        items = self.fragments_to_html(book)
        self.store(book, self.compose(book, items))
        logger.info(f"Rendered book {book.dir} with {len(items)} fragments")
        return self.get_render_info(book)

    def get_render_info(self, book: Book) -> Optional[RenderInfo]:
        """Return the location and time of the last render, or None if never rendered."""
        render_store = self.content_store.scoped(self.layout.render_path(book))
        filename = self.layout.render_filename(book)

        if not render_store.has(filename):
            return None

        created_at = datetime.fromtimestamp(render_store.get_timestamp(filename), tz=timezone.utc)
        return RenderInfo(
            filepath=render_store.absolute_path(filename),
            created=created_at.strftime(self.timestamp_format),
            created_at=created_at,
        )
