"""Embedding service implementations.

Every provider turns text into a vector or raises :class:`ProviderError`.
None of them retries; a failed call is reported to the caller, which
decides whether to try again or leave the record without an embedding.
"""

import hashlib
import logging
from typing import Optional

import httpx
import numpy as np

from bookvault.domain.exceptions import ProviderError
from bookvault.domain.repositories import IEmbeddingService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Mock (development / testing)
# ---------------------------------------------------------------------------
class MockEmbeddingService(IEmbeddingService):
    """Returns deterministic unit vectors for tests and offline development."""

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    async def generate_embedding(self, text: str) -> list[float]:
        """Generate deterministic embedding from text."""
        hash_obj = hashlib.md5(text.encode())
        seed = int(hash_obj.hexdigest(), 16) % (2**32)
        rng = np.random.RandomState(seed)
        embedding = rng.randn(self.dimension).astype(float)
        embedding = embedding / np.linalg.norm(embedding)
        return embedding.tolist()


# ---------------------------------------------------------------------------
# Ollama (local)
# ---------------------------------------------------------------------------
class OllamaEmbeddingService(IEmbeddingService):
    """Embedding provider backed by `Ollama <https://ollama.com>`_.

    Communicates with the Ollama REST API over HTTP using **httpx**.

    Constructor args:
        base_url:  Ollama server URL (default ``http://localhost:11434``).
        model:     Embedding model tag (default ``nomic-embed-text``).
        timeout:   Per-request timeout in seconds (default 30).
        transport: Optional httpx transport, used by tests.
    """

    DEFAULT_MODEL = "nomic-embed-text"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def generate_embedding(self, text: str) -> list[float]:
        """Call ``POST /api/embed`` and return the first embedding."""
        payload = {"model": self.model, "input": text}
        logger.info("Ollama: requesting embedding from %s (model=%s)", self.base_url, self.model)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/api/embed", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(f"ollama returned status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"ollama request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"ollama returned invalid JSON: {exc}") from exc

        # Ollama returns {"embeddings": [[...]]}
        embeddings = data.get("embeddings") or []
        if not embeddings or not embeddings[0]:
            raise ProviderError("ollama returned an empty embedding")
        return [float(v) for v in embeddings[0]]


# ---------------------------------------------------------------------------
# OpenAI (remote API)
# ---------------------------------------------------------------------------
class OpenAIEmbeddingService(IEmbeddingService):
    """OpenAI-backed embedding provider.

    Requires ``EMBEDDING_API_KEY`` in env and the optional ``openai``
    package.
    """

    DEFAULT_MODEL = "text-embedding-3-small"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def generate_embedding(self, text: str) -> list[float]:
        try:
            import openai
        except ImportError as exc:
            raise ProviderError("the openai package is not installed") from exc

        try:
            client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
            response = await client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as exc:
            raise ProviderError(f"openai embedding failed: {exc}") from exc
        embedding = response.data[0].embedding if response.data else []
        if not embedding:
            raise ProviderError("openai returned an empty embedding")
        return list(embedding)
