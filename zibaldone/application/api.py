"""FastAPI application entry point."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from ..domain.exceptions import (
    BookAlreadyExistsError,
    InvalidFragmentOrderError,
    InvalidTitleError,
    RecordNotFoundError,
    RenderUnavailableError,
    ZibaldoneError,
)
from .config import Settings, settings
from .controller import BookController, build_book_service
from .requests import BookCreate, BookRename, FragmentOrder, FragmentUpdate, ReferenceCreate

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _http_error(e: ZibaldoneError) -> HTTPException:
    """Translate a domain error into an HTTP error."""
    if isinstance(e, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (InvalidTitleError, InvalidFragmentOrderError)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (BookAlreadyExistsError, RenderUnavailableError)):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"Unhandled domain error: {e}", exc_info=e)
    return HTTPException(status_code=500, detail="Internal server error")


def create_app(app_settings: Settings = settings, controller: Optional[BookController] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        app_settings: Settings used to build the stores when no controller is given.
        controller: Pre-built controller, e.g. one wired to test stores.
    """
    if controller is None:
        controller = BookController(build_book_service(app_settings))

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.controller = controller

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return controller.get_health_status()

    @app.get("/books")
    def list_books():
        return {"books": controller.list_books()}

    @app.post("/books", status_code=201)
    def create_book(body: BookCreate):
        """Create a book with its manuscript and render directories."""
        try:
            return controller.create_book(body.title)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.get("/books/{book_id}")
    def get_book(book_id: UUID):
        try:
            return controller.get_book(book_id)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.put("/books/{book_id}")
    def rename_book(book_id: UUID, body: BookRename):
        """Retitle a book; its directory moves when the derived name changes."""
        try:
            return controller.rename_book(book_id, body.title)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.delete("/books/{book_id}", status_code=204)
    def delete_book(book_id: UUID):
        try:
            controller.delete_book(book_id)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.post("/books/{book_id}/sync")
    def sync_fragments(book_id: UUID):
        """Reconcile the fragment index with the manuscript directory."""
        try:
            return controller.sync_fragments(book_id)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.get("/books/{book_id}/fragments")
    def list_fragments(book_id: UUID):
        try:
            return {"fragments": controller.list_fragments(book_id)}
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.put("/books/{book_id}/fragments/order")
    def reorder_fragments(book_id: UUID, body: FragmentOrder):
        try:
            return {"fragments": controller.reorder_fragments(book_id, body.fragment_ids)}
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.patch("/books/{book_id}/fragments/{fragment_id}")
    def update_fragment(book_id: UUID, fragment_id: UUID, body: FragmentUpdate):
        try:
            return controller.update_fragment(book_id, fragment_id, body.model_dump(exclude_unset=True))
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.get("/books/{book_id}/references")
    def list_references(book_id: UUID):
        try:
            return {"references": controller.list_references(book_id)}
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.post("/books/{book_id}/references", status_code=201)
    def add_reference(book_id: UUID, body: ReferenceCreate):
        try:
            return controller.add_reference(book_id, body.html_url)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.delete("/books/{book_id}/references/{reference_id}", status_code=204)
    def delete_reference(book_id: UUID, reference_id: UUID):
        try:
            controller.delete_reference(book_id, reference_id)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.post("/books/{book_id}/render")
    def render_book(book_id: UUID, sync: bool = Query(False, description="Reconcile fragments before rendering")):
        """Render the book's fragments into its HTML artifact."""
        try:
            return controller.render_book(book_id, sync=sync)
        except ZibaldoneError as e:
            raise _http_error(e) from e

    @app.get("/books/{book_id}/render")
    def get_render_info(book_id: UUID):
        try:
            render_info = controller.get_render_info(book_id)
        except ZibaldoneError as e:
            raise _http_error(e) from e
        if render_info is None:
            raise HTTPException(status_code=404, detail=f"Book {book_id} has not been rendered yet")
        return render_info

    @app.get("/books/{book_id}/render/file")
    def get_render_file(book_id: UUID):
        """Serve the book's rendered HTML document."""
        render_info = get_render_info(book_id)
        return FileResponse(render_info["filepath"], media_type="text/html")

    return app


# Create FastAPI app instance
app = create_app()
