"""Fragment entities for the zibaldone application."""

import re
import uuid
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

_LABEL_SEPARATORS = re.compile(r"[\s_\-]+")


def guess_menu_label(full_filename: str) -> str:
    """Derive a human readable label from a fragment filename.

    ``"part1/the_first-chapter.md"`` -> ``"The first chapter"``
    """
    stem = PurePosixPath(full_filename).stem
    label = _LABEL_SEPARATORS.sub(" ", stem).strip()
    if not label:
        return full_filename
    return label[:1].upper() + label[1:]


class FragmentType(str, Enum):
    """Provenance of a fragment's content."""
    LOCAL = "local"
    REFERENCE = "reference"


class Fragment(BaseModel):
    """One manuscript file of a book, as recorded in the fragment index."""

    id: UUID = Field(default_factory=uuid.uuid4)
    book_id: UUID
    position: int = Field(ge=1, description="Render order, unique within a book")
    full_filename: str = Field(min_length=1, description="Path relative to the manuscript directory")
    menu_label: Optional[str] = None
    type: FragmentType = FragmentType.LOCAL
    child: bool = False
    reference_id: Optional[UUID] = None

    def guess_menu_label(self) -> str:
        """Derive a menu label from the fragment's filename."""
        return guess_menu_label(self.full_filename)

    @property
    def label(self) -> str:
        """The menu label, falling back to the guessed one when unset."""
        return self.menu_label or self.guess_menu_label()
