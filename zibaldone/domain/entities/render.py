"""Render entities: per-fragment rendering records and artifact metadata."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RenderedFragment(BaseModel):
    """A fragment converted to HTML, ready to be assembled into a document."""

    id: UUID
    child: bool = False
    menu_label: str
    content: str = Field(description="Converted HTML")
    origin: Optional[str] = Field(None, description="URL of the source reference, if any")


class RenderInfo(BaseModel):
    """Metadata of the last render artifact of a book."""

    model_config = ConfigDict(frozen=True)

    filepath: str
    created: str = Field(description="Formatted modification time of the artifact")
    created_at: datetime


class ReconcileReport(BaseModel):
    """Filenames added to and removed from the fragment index by a sync."""

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
