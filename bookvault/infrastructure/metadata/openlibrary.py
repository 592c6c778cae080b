"""Open Library metadata source (https://openlibrary.org)."""

import logging
from typing import Any, Optional

import httpx

from bookvault.domain.entities import Book, BookStatus
from bookvault.domain.exceptions import MetadataSourceError
from bookvault.domain.repositories import IMetadataSource
from bookvault.infrastructure.metadata.common import MAX_TAGS, get_json, normalize_isbn, truncate

logger = logging.getLogger(__name__)


class OpenLibrarySource(IMetadataSource):
    name = "openlibrary"

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    async def search(self, query: str, limit: int = 0) -> list[Book]:
        if limit <= 0:
            limit = 10
        logger.info("OpenLibrary: searching %r (limit=%d)", query, limit)
        async with self._client() as client:
            data = await get_json(
                client, self.name, "/search.json", params={"q": query, "limit": limit}
            )
        if data is None:
            raise MetadataSourceError("openlibrary search endpoint not found")

        books = []
        for doc in data.get("docs") or []:
            isbns = doc.get("isbn") or []
            books.append(
                Book(
                    title=doc.get("title") or "",
                    author=", ".join(doc.get("author_name") or []),
                    isbn=isbns[0] if isbns else "",
                    tags=list((doc.get("subject") or [])[:MAX_TAGS]),
                    cover_url=_cover_url(doc.get("cover_i")),
                    status=BookStatus.WANT_TO_READ,
                )
            )
        return books

    async def fetch_by_isbn(self, isbn: str) -> Optional[Book]:
        isbn = normalize_isbn(isbn)
        logger.info("OpenLibrary: fetching ISBN %s", isbn)
        async with self._client() as client:
            edition = await get_json(client, self.name, f"/isbn/{isbn}.json")
            if edition is None:
                return None

            description = ""
            subjects: list[str] = []
            works = edition.get("works") or []
            if works:
                try:
                    work = await get_json(client, self.name, f"{works[0]['key']}.json")
                except MetadataSourceError as exc:
                    logger.warning("OpenLibrary: work lookup failed for %s: %s", isbn, exc)
                    work = None
                if work:
                    description = _extract_description(work.get("description"))
                    subjects = work.get("subjects") or []

            authors = []
            for ref in edition.get("authors") or []:
                try:
                    author = await get_json(client, self.name, f"{ref['key']}.json")
                except MetadataSourceError as exc:
                    logger.warning("OpenLibrary: author lookup failed for %s: %s", isbn, exc)
                    continue
                if author and author.get("name"):
                    authors.append(author["name"])

        final_isbn = isbn
        if edition.get("isbn_13"):
            final_isbn = edition["isbn_13"][0]
        elif edition.get("isbn_10"):
            final_isbn = edition["isbn_10"][0]

        covers = edition.get("covers") or []
        return Book(
            title=edition.get("title") or "",
            author=", ".join(authors),
            isbn=final_isbn,
            description=truncate(description),
            tags=list(subjects[:MAX_TAGS]),
            cover_url=_cover_url(covers[0] if covers else None),
            page_count=edition.get("number_of_pages") or 0,
            status=BookStatus.WANT_TO_READ,
        )


def _extract_description(desc: Any) -> str:
    # Either a plain string or {"type": "/type/text", "value": "..."}
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict) and isinstance(desc.get("value"), str):
        return desc["value"]
    return ""


def _cover_url(cover_id: Optional[int]) -> str:
    if not cover_id:
        return ""
    return f"https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"
