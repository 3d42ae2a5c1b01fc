"""Title normalization and validation."""

import re

from ..entities.fragment import guess_menu_label
from ..exceptions import InvalidTitleError

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 50

_UNSAFE_DIR_CHARS = re.compile(r"[^A-Za-z0-9\-_]")

__all__ = ["guess_menu_label", "normalize_title", "title_to_dir", "validate_title"]


def normalize_title(title: str) -> str:
    return title.strip()


def title_to_dir(title: str) -> str:
    """Turn a title into a filesystem-safe directory name.

    Spaces become underscores, anything outside ``[A-Za-z0-9_-]`` is dropped
    and the result is lowercased: ``"My Book!"`` -> ``"my_book"``.
    """
    return _UNSAFE_DIR_CHARS.sub("", title.replace(" ", "_")).lower()


def validate_title(title: str) -> None:
    """Check a normalized title.

    Raises:
        InvalidTitleError: If the title length is outside [3, 50] or the
            title yields an empty directory name.
    """
    if len(title) < TITLE_MIN_LENGTH or len(title) > TITLE_MAX_LENGTH:
        raise InvalidTitleError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters, got {len(title)}"
        )
    if not title_to_dir(title):
        raise InvalidTitleError(f"Title {title!r} has no characters usable in a directory name")

