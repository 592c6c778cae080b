"""Catalog-wide routes: export, import, statistics and reindexing."""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from bookvault.api.schemas import ImportResponse, ReindexResponse, StatsResponse
from bookvault.core.dependencies import get_catalog_service
from bookvault.domain.exceptions import ValidationFailure
from bookvault.domain.services import ICatalogService
from bookvault.services.stats import compute_stats
from bookvault.services.transfer import (
    export_csv,
    export_json,
    import_books,
    parse_csv,
    parse_json,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["catalog"])


@router.get("/export")
async def export_catalog(
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    format: Literal["json", "csv"] = "json",
) -> Response:
    """Download the whole catalog as JSON or CSV."""
    books = await catalog.list_books()
    if format == "csv":
        return Response(
            content=export_csv(books),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="bookvault-books.csv"'},
        )
    return Response(
        content=export_json(books),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="bookvault-books.json"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_catalog(
    file: Annotated[UploadFile, File()],
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> ImportResponse:
    """Import a ``.json`` or ``.csv`` export.  Duplicates are skipped."""
    filename = (file.filename or "").lower()
    payload = (await file.read()).decode("utf-8", errors="replace")
    try:
        if filename.endswith(".json"):
            books = parse_json(payload)
        elif filename.endswith(".csv"):
            books = parse_csv(payload)
        else:
            raise HTTPException(
                status_code=400, detail="Unsupported file format. Please use .json or .csv"
            )
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = await import_books(catalog, books)
    return ImportResponse.model_validate(report)


@router.get("/stats", response_model=StatsResponse)
async def catalog_stats(
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> StatsResponse:
    return StatsResponse.model_validate(compute_stats(await catalog.list_books()))


@router.post("/reindex", response_model=ReindexResponse)
async def reindex(
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> ReindexResponse:
    """Retry embedding generation for books that have no embedding."""
    return ReindexResponse(embedded=await catalog.reindex_missing())
