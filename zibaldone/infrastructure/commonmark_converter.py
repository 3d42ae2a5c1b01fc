"""CommonMark implementation of MarkdownConverter."""

from typing import Any, Mapping, Optional

from markdown_it import MarkdownIt

from ..domain.interfaces.markdown_converter import MarkdownConverter


class CommonMarkConverter(MarkdownConverter):
    """Markdown to HTML conversion following the CommonMark spec, via markdown-it-py."""

    def __init__(self, preset: str = "commonmark", options: Optional[Mapping[str, Any]] = None):
        """Initialize the converter.

        Args:
            preset: markdown-it preset name ("commonmark", "default", "zero").
            options: Parser options overriding the preset's.
        """
        self.preset = preset
        self._parser = MarkdownIt(preset, options_update=dict(options) if options else None)

    def convert(self, text: str) -> str:
        return self._parser.render(text)
