"""Google Books metadata source."""

import logging
from typing import Any, Optional

import httpx

from bookvault.domain.entities import Book, BookStatus
from bookvault.domain.exceptions import MetadataSourceError
from bookvault.domain.repositories import IMetadataSource
from bookvault.infrastructure.metadata.common import MAX_TAGS, get_json, normalize_isbn, truncate

logger = logging.getLogger(__name__)

MAX_RESULTS = 40  # Google Books API cap


class GoogleBooksSource(IMetadataSource):
    name = "googlebooks"

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://www.googleapis.com/books/v1",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str, limit: int = 0) -> list[Book]:
        if limit <= 0:
            limit = 20
        limit = min(limit, MAX_RESULTS)
        params = {
            "q": query,
            "maxResults": limit,
            "printType": "books",
            "langRestrict": "en",
        }
        if self.api_key:
            params["key"] = self.api_key

        logger.info("GoogleBooks: searching %r (limit=%d)", query, limit)
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            data = await get_json(client, self.name, "/volumes", params=params)
        if data is None:
            raise MetadataSourceError("googlebooks volumes endpoint not found")
        return self._items_to_books(data.get("items") or [])

    async def fetch_by_isbn(self, isbn: str) -> Optional[Book]:
        books = await self.search(f"isbn:{normalize_isbn(isbn)}", 1)
        return books[0] if books else None

    @staticmethod
    def _items_to_books(items: list[dict[str, Any]]) -> list[Book]:
        books = []
        for item in items:
            info = item.get("volumeInfo") or {}
            if not info.get("title"):
                continue

            # Prefer ISBN-13
            isbn = ""
            for ident in info.get("industryIdentifiers") or []:
                if ident.get("type") == "ISBN_13":
                    isbn = ident.get("identifier", "")
                    break
                if ident.get("type") == "ISBN_10" and not isbn:
                    isbn = ident.get("identifier", "")

            categories = info.get("categories") or []
            thumbnail = (info.get("imageLinks") or {}).get("thumbnail", "")
            books.append(
                Book(
                    title=info["title"],
                    author=", ".join(info.get("authors") or []),
                    isbn=isbn,
                    description=truncate(info.get("description") or ""),
                    genre=categories[0] if categories else "",
                    tags=list(categories[:MAX_TAGS]),
                    cover_url=thumbnail,
                    page_count=info.get("pageCount") or 0,
                    status=BookStatus.WANT_TO_READ,
                )
            )
        return books
