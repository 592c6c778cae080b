"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookvault.api.catalog_routes import router as catalog_router
from bookvault.api.routes import router as books_router
from bookvault.api.search_routes import router as search_router
from bookvault.core.config import settings
from bookvault.infrastructure.database.connection import close_db, init_db

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting bookvault (embedding provider: %s)", settings.embedding_provider)
    await init_db()
    yield
    await close_db()
    logger.info("Shutting down bookvault")


app = FastAPI(
    title="bookvault",
    description="Personal book catalog with semantic search",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(books_router)
app.include_router(search_router)
app.include_router(catalog_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
