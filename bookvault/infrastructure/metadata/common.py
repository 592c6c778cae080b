"""Helpers shared by the metadata source clients."""

import logging
from typing import Any, Optional

import httpx

from bookvault.domain.exceptions import MetadataSourceError

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 500
MAX_TAGS = 5


def normalize_isbn(isbn: str) -> str:
    """Remove hyphens and spaces."""
    return isbn.replace("-", "").replace(" ", "")


def truncate(text: str, max_len: int = MAX_DESCRIPTION_LENGTH) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


async def get_json(
    client: httpx.AsyncClient,
    source: str,
    url: str,
    params: Optional[dict[str, Any]] = None,
) -> Optional[Any]:
    """GET ``url`` and decode JSON.  Returns ``None`` on 404."""
    try:
        resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise MetadataSourceError(f"{source} request failed: {exc}") from exc
    if resp.status_code == 404:
        return None
    if resp.status_code != 200:
        raise MetadataSourceError(f"{source} returned status {resp.status_code}")
    try:
        return resp.json()
    except ValueError as exc:
        raise MetadataSourceError(f"{source} returned invalid JSON") from exc
