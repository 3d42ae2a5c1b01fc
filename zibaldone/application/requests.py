"""Request bodies accepted by the HTTP API."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    """Body of POST /books."""

    title: str = Field(description="Title of the new book")


class BookRename(BaseModel):
    """Body of PUT /books/{book_id}."""

    title: str = Field(description="New title of the book")


class FragmentUpdate(BaseModel):
    """Body of PATCH /books/{book_id}/fragments/{fragment_id}.

    Only the fields present in the body are changed; an explicit
    ``"reference_id": null`` detaches the fragment from its reference.
    """

    menu_label: Optional[str] = Field(None, min_length=1)
    child: Optional[bool] = None
    reference_id: Optional[UUID] = None


class FragmentOrder(BaseModel):
    """Body of PUT /books/{book_id}/fragments/order."""

    fragment_ids: list[UUID] = Field(description="Every fragment of the book, in the wanted order")


class ReferenceCreate(BaseModel):
    """Body of POST /books/{book_id}/references."""

    html_url: str = Field(min_length=1, description="Origin URL of the referenced document")
