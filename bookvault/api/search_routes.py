"""Semantic search and metadata discovery routes."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from bookvault.api.schemas import CandidateResponse, SearchResponse, SearchResultResponse
from bookvault.core.config import settings
from bookvault.core.dependencies import get_catalog_service, get_metadata_source, get_retrieval_engine
from bookvault.domain.exceptions import MetadataSourceError, ProviderError, ValidationFailure
from bookvault.domain.services import ICatalogService, IRetrievalEngine

logger = logging.getLogger(__name__)
router = APIRouter(tags=["search"])


@router.get("/search", response_model=SearchResponse)
async def search(
    engine: Annotated[IRetrievalEngine, Depends(get_retrieval_engine)],
    q: Annotated[str, Query(min_length=1)],
    limit: Optional[int] = None,
) -> SearchResponse:
    """Rank catalog books by semantic similarity to ``q``.

    ``limit <= 0`` returns every embedded book.
    """
    if limit is None:
        limit = settings.default_search_limit
    try:
        results = await engine.search(q, limit)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=f"Embedding provider failed: {e}")
    return SearchResponse(
        query=q, results=[SearchResultResponse.model_validate(r) for r in results]
    )


@router.get("/discover", response_model=list[CandidateResponse])
async def discover(
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    q: Annotated[str, Query(min_length=1)],
    source: Optional[str] = None,
    limit: int = 0,
) -> list[CandidateResponse]:
    """Search a metadata source for candidates, flagging ones already owned."""
    try:
        metadata_source = get_metadata_source(source)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        candidates = await metadata_source.search(q, limit)
    except MetadataSourceError as e:
        logger.warning("Discovery via %s failed: %s", metadata_source.name, e)
        raise HTTPException(status_code=502, detail=str(e))

    response = []
    for candidate in candidates:
        item = CandidateResponse.model_validate(candidate)
        match = await catalog.check_duplicate(candidate)
        if match is not None:
            item.duplicate_of = match.existing.id
            item.duplicate_reason = match.reason
        response.append(item)
    return response
