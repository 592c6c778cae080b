"""Duplicate detection for incoming catalog records.

Rules are checked in order and the first match wins:

1. ISBN: an existing record carries the candidate's exact ISBN.  Two
   editions may share a title and author, but an ISBN collision is
   definitive, so this rule comes first.
2. title+author: an existing record with the same title and author,
   compared case-insensitively.

Matching is purely syntactic; embeddings are never compared.
"""

import logging
from typing import Optional

from bookvault.domain.entities import Book, DuplicateMatch
from bookvault.domain.repositories import IBookRepository

logger = logging.getLogger(__name__)

MATCH_ISBN = "ISBN"
MATCH_TITLE_AUTHOR = "title+author"


class DuplicateDetector:

    def __init__(self, book_repository: IBookRepository):
        self.book_repository = book_repository

    async def check(self, candidate: Book) -> Optional[DuplicateMatch]:
        isbn = (candidate.isbn or "").strip()
        if isbn:
            existing = await self.book_repository.find_by_isbn(isbn)
            if existing is not None:
                return DuplicateMatch(existing=existing, reason=MATCH_ISBN)

        title = (candidate.title or "").strip()
        author = (candidate.author or "").strip()
        if title and author:
            existing = await self.book_repository.find_by_title_author(title, author)
            if existing is not None:
                return DuplicateMatch(existing=existing, reason=MATCH_TITLE_AUTHOR)

        return None

    async def is_duplicate(self, candidate: Book) -> bool:
        return await self.check(candidate) is not None
