"""Book API routes (CRUD and similar-book lookup)."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from bookvault.api.schemas import (
    BookCreate,
    BookResponse,
    BookUpdate,
    DuplicateResponse,
    SearchResponse,
    SearchResultResponse,
)
from bookvault.core.dependencies import get_catalog_service, get_retrieval_engine
from bookvault.domain.entities import BookStatus
from bookvault.domain.exceptions import (
    DuplicateRecord,
    NotFound,
    ProviderError,
    StorageFailure,
    ValidationFailure,
)
from bookvault.domain.services import ICatalogService, IRetrievalEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------
@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": DuplicateResponse}},
)
async def create_book(
    body: BookCreate,
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    force: bool = False,
):
    """Add a book to the catalog.

    Duplicates (same ISBN, or same title and author ignoring case) are
    rejected with 409 and the existing record; pass ``force=true`` to add
    anyway.  If the embedding provider fails the book is still stored and
    the response is 502; ``POST /reindex`` retries later.
    """
    book = body.to_entity()
    try:
        if force:
            created = await catalog.force_add_book(book)
        else:
            created = await catalog.add_book(book)
    except DuplicateRecord as e:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=DuplicateResponse(
                detail=str(e),
                reason=e.reason,
                existing=BookResponse.model_validate(e.existing),
            ).model_dump(mode="json"),
        )
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=f"Book stored without embedding: {e}")
    except StorageFailure as e:
        logger.error("Failed to create book: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create book")
    return BookResponse.model_validate(created)


@router.get("/", response_model=list[BookResponse])
async def list_books(
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    book_status: Annotated[Optional[BookStatus], Query(alias="status")] = None,
) -> list[BookResponse]:
    """List books, most recently added first."""
    if book_status is None:
        books = await catalog.list_books()
    else:
        books = await catalog.list_books_by_status(book_status)
    return [BookResponse.model_validate(b) for b in books]


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: int,
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> BookResponse:
    """Get a book by ID."""
    try:
        book = await catalog.get_book(book_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookResponse.model_validate(book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    body: BookUpdate,
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> BookResponse:
    """Replace a book's details and regenerate its embedding."""
    try:
        updated = await catalog.update_book(body.to_entity(book_id))
    except NotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=f"Book updated, embedding not refreshed: {e}")
    return BookResponse.model_validate(updated)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> None:
    """Remove a book.  Deleting an absent book is not an error."""
    await catalog.delete_book(book_id)


# ---------------------------------------------------------------------------
# Similar books
# ---------------------------------------------------------------------------
@router.get("/{book_id}/similar", response_model=SearchResponse)
async def similar_books(
    book_id: int,
    engine: Annotated[IRetrievalEngine, Depends(get_retrieval_engine)],
    limit: int = 5,
) -> SearchResponse:
    """Books closest in meaning to the given one (the book itself excluded)."""
    results = await engine.find_similar(book_id, limit)
    return SearchResponse(results=[SearchResultResponse.model_validate(r) for r in results])
