"""Book entities for the zibaldone application."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field


class Book(BaseModel):
    """A document project made of manuscript fragments.

    The ``dir`` attribute is the filesystem-safe directory name derived
    from the title; the book's files live under ``<repo_root>/<dir>``.
    """

    id: UUID = Field(default_factory=uuid.uuid4)
    title: str = Field(min_length=3, max_length=50, description="Display name of the book")
    dir: str = Field(min_length=1, description="Directory name derived from the title")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "id": "0b7e2a4e-6a3c-4b61-9f38-2f1c4a8f0c11",
                "title": "My First Book",
                "dir": "my_first_book",
            }
        }
