"""
Tests for embedding providers and provider selection.
"""

import json

import httpx
import numpy as np
import pytest

from bookvault.core import dependencies
from bookvault.core.config import settings
from bookvault.domain.exceptions import ProviderError
from bookvault.infrastructure.embedding.services import (
    MockEmbeddingService,
    OllamaEmbeddingService,
    OpenAIEmbeddingService,
)


class TestMockEmbeddingService:

    async def test_deterministic_and_normalised(self):
        service = MockEmbeddingService(dimension=32)

        first = await service.generate_embedding("Dune by Frank Herbert")
        second = await service.generate_embedding("Dune by Frank Herbert")
        other = await service.generate_embedding("Emma by Jane Austen")

        assert first == second
        assert first != other
        assert len(first) == 32
        assert np.linalg.norm(first) == pytest.approx(1.0)


class TestOllamaEmbeddingService:

    async def test_posts_model_and_input(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3]]})

        service = OllamaEmbeddingService(
            base_url="http://ollama:11434/", model="nomic-embed-text",
            transport=httpx.MockTransport(handler),
        )

        vector = await service.generate_embedding("Foo by Bar")

        assert vector == [0.1, 0.2, 0.3]
        assert seen["url"] == "http://ollama:11434/api/embed"
        assert seen["body"] == {"model": "nomic-embed-text", "input": "Foo by Bar"}

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="boom"),
            httpx.Response(200, json={"embeddings": []}),
            httpx.Response(200, json={"embeddings": [[]]}),
            httpx.Response(200, text="not json"),
        ],
    )
    async def test_bad_responses_raise_provider_error(self, response):
        service = OllamaEmbeddingService(transport=httpx.MockTransport(lambda request: response))

        with pytest.raises(ProviderError):
            await service.generate_embedding("text")

    async def test_connection_errors_raise_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        service = OllamaEmbeddingService(transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderError):
            await service.generate_embedding("text")


class TestProviderSelection:

    def test_mock_is_default(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "mock")
        monkeypatch.setattr(settings, "embedding_dimension", 8)

        service = dependencies.get_embedding_service()

        assert isinstance(service, MockEmbeddingService)
        assert service.dimension == 8

    def test_ollama_uses_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "ollama")
        monkeypatch.setattr(settings, "embedding_base_url", "http://gpu-box:11434")
        monkeypatch.setattr(settings, "embedding_model", "mxbai-embed-large")

        service = dependencies.get_embedding_service()

        assert isinstance(service, OllamaEmbeddingService)
        assert service.base_url == "http://gpu-box:11434"
        assert service.model == "mxbai-embed-large"

    def test_openai(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "openai")
        monkeypatch.setattr(settings, "embedding_api_key", "sk-test")
        monkeypatch.setattr(settings, "embedding_model", "")

        service = dependencies.get_embedding_service()

        assert isinstance(service, OpenAIEmbeddingService)
        assert service.api_key == "sk-test"

    def test_openai_uses_configured_model(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "openai")
        monkeypatch.setattr(settings, "embedding_model", "text-embedding-3-large")

        service = dependencies.get_embedding_service()

        assert service.model == "text-embedding-3-large"

    @pytest.mark.parametrize(
        "provider, expected",
        [("ollama", "nomic-embed-text"), ("openai", "text-embedding-3-small")],
    )
    def test_empty_model_falls_back_to_provider_default(self, monkeypatch, provider, expected):
        monkeypatch.setattr(settings, "embedding_provider", provider)
        monkeypatch.setattr(settings, "embedding_model", "")

        assert dependencies.get_embedding_service().model == expected

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "word2vec")

        with pytest.raises(ValueError):
            dependencies.get_embedding_service()
