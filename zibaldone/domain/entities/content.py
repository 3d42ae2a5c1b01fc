"""Content store listing entities."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EntryType(str, Enum):
    """Kind of an entry in a content listing."""
    FILE = "file"
    DIR = "dir"


class ContentEntry(BaseModel):
    """One item of a directory listing, with a path relative to the store root."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: EntryType
    extension: str = Field(default="", description="Extension without the dot, as found on disk")
    size: int = 0
    timestamp: float = 0.0

    @property
    def is_file(self) -> bool:
        return self.type == EntryType.FILE
