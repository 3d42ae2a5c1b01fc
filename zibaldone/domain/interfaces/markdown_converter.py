"""Markdown converter protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MarkdownConverter(Protocol):
    """Converts raw fragment text to HTML. Implementations hold no shared state."""

    def convert(self, text: str) -> str:
        """Convert markdown text to an HTML snippet."""
        ...
