"""Reference entities for the zibaldone application."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field


class Reference(BaseModel):
    """An externally sourced document contributing content to a book."""

    id: UUID = Field(default_factory=uuid.uuid4)
    book_id: UUID
    html_url: str = Field(min_length=1, description="Origin URL of the referenced document")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
