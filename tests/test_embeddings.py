"""Tests for the embedding provider chain with mocked Jina and OpenAI APIs."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.config import Settings
from app.core.embeddings import (
    Embedder,
    EmbeddingTask,
    JinaEmbeddingProvider,
    OpenAIEmbeddingProvider,
)
from app.core.errors import EmbeddingConfigurationError, EmbeddingError
from tests.fakes.fake_providers import FakeEmbeddingProvider


def _jina_client(response: MagicMock):
    client_instance = AsyncMock()
    client_instance.post.return_value = response
    return client_instance


def _jina_response(vector: list[float]) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"data": [{"embedding": vector}]}
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI embeddings response."""

    def _create_response(dimension: int = 1536):
        mock_response = MagicMock()
        mock_embedding = MagicMock()
        mock_embedding.embedding = [0.1] * dimension
        mock_response.data = [mock_embedding]
        return mock_response

    return _create_response


class TestJinaProvider:
    @pytest.mark.asyncio
    async def test_passage_task_and_vector(self):
        provider = JinaEmbeddingProvider("jina-key", "jina-embeddings-v3", timeout=5)
        client_instance = _jina_client(_jina_response([0.5] * 1024))

        with patch("httpx.AsyncClient") as MockClient:
            MockClient.return_value.__aenter__ = AsyncMock(return_value=client_instance)
            MockClient.return_value.__aexit__ = AsyncMock(return_value=None)

            vector = await provider.embed("permit text", EmbeddingTask.PASSAGE)

        assert len(vector) == 1024
        payload = client_instance.post.call_args.kwargs["json"]
        assert payload["task"] == "retrieval.passage"
        assert payload["input"] == ["permit text"]
        assert payload["model"] == "jina-embeddings-v3"

    @pytest.mark.asyncio
    async def test_query_task(self):
        provider = JinaEmbeddingProvider("jina-key", "jina-embeddings-v3", timeout=5)
        client_instance = _jina_client(_jina_response([0.5] * 1024))

        with patch("httpx.AsyncClient") as MockClient:
            MockClient.return_value.__aenter__ = AsyncMock(return_value=client_instance)
            MockClient.return_value.__aexit__ = AsyncMock(return_value=None)

            await provider.embed("what permits?", EmbeddingTask.QUERY)

        assert client_instance.post.call_args.kwargs["json"]["task"] == "retrieval.query"


class TestEmbedderChain:
    @pytest.mark.asyncio
    async def test_no_provider_configured(self):
        embedder = Embedder(providers=[FakeEmbeddingProvider(configured=False)])

        with pytest.raises(EmbeddingConfigurationError):
            await embedder.embed_text("text")

    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self):
        primary = FakeEmbeddingProvider(model="primary-model")
        secondary = FakeEmbeddingProvider(model="secondary-model")
        embedder = Embedder(providers=[primary, secondary])

        embedding = await embedder.embed_text("text")

        assert embedding.model == "primary-model"
        assert secondary.calls == []

    @pytest.mark.asyncio
    async def test_falls_back_on_failure(self):
        primary = FakeEmbeddingProvider(model="primary-model", fail_on={"text"})
        secondary = FakeEmbeddingProvider(model="secondary-model")
        embedder = Embedder(providers=[primary, secondary])

        embedding = await embedder.embed_text("text")

        assert embedding.model == "secondary-model"
        assert embedding.dimension == 8

    @pytest.mark.asyncio
    async def test_all_providers_fail(self):
        embedder = Embedder(
            providers=[
                FakeEmbeddingProvider(model="a", fail_on={"x"}),
                FakeEmbeddingProvider(model="b", fail_on={"x"}),
            ]
        )

        with pytest.raises(EmbeddingError) as exc_info:
            await embedder.embed_text("x")

        assert len(exc_info.value.failures) == 2

    @pytest.mark.asyncio
    async def test_input_truncated(self):
        provider = FakeEmbeddingProvider()
        embedder = Embedder(providers=[provider], max_chars=10)

        await embedder.embed_text("a" * 50)

        assert provider.calls[0][0] == "a" * 10

    @pytest.mark.asyncio
    async def test_jina_http_error_falls_back_to_openai(self, mock_openai_response):
        settings = Settings(JINA_API_KEY="jina-key", OPENAI_API_KEY="openai-key")
        embedder = Embedder.from_settings(settings)

        error_response = MagicMock()
        error_response.status_code = 500
        error_response.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError("boom", request=MagicMock(), response=error_response)
        )
        client_instance = _jina_client(error_response)

        with patch("httpx.AsyncClient") as MockClient, patch(
            "app.core.embeddings.OpenAI"
        ) as MockOpenAI:
            MockClient.return_value.__aenter__ = AsyncMock(return_value=client_instance)
            MockClient.return_value.__aexit__ = AsyncMock(return_value=None)
            MockOpenAI.return_value.embeddings.create.return_value = mock_openai_response()

            embedding = await embedder.embed_text("text")

        assert embedding.model == "text-embedding-3-small"
        assert embedding.dimension == 1536

    @pytest.mark.asyncio
    async def test_wrong_dimension_counts_as_failure(self, mock_openai_response):
        settings = Settings(JINA_API_KEY=None, OPENAI_API_KEY="openai-key")
        embedder = Embedder.from_settings(settings)

        with patch("app.core.embeddings.OpenAI") as MockOpenAI:
            MockOpenAI.return_value.embeddings.create.return_value = mock_openai_response(12)

            with pytest.raises(EmbeddingError, match="All embedding providers failed"):
                await embedder.embed_text("text")

    @pytest.mark.asyncio
    async def test_malformed_jina_body_falls_back(self, mock_openai_response):
        settings = Settings(JINA_API_KEY="jina-key", OPENAI_API_KEY="openai-key")
        embedder = Embedder.from_settings(settings)

        malformed = MagicMock()
        malformed.raise_for_status = MagicMock()
        malformed.json.return_value = {"unexpected": True}
        client_instance = _jina_client(malformed)

        with patch("httpx.AsyncClient") as MockClient, patch(
            "app.core.embeddings.OpenAI"
        ) as MockOpenAI:
            MockClient.return_value.__aenter__ = AsyncMock(return_value=client_instance)
            MockClient.return_value.__aexit__ = AsyncMock(return_value=None)
            MockOpenAI.return_value.embeddings.create.return_value = mock_openai_response()

            embedding = await embedder.embed_text("text")

        assert embedding.model == "text-embedding-3-small"


def test_openai_provider_not_configured_without_key():
    provider = OpenAIEmbeddingProvider(None, "text-embedding-3-small", timeout=5)
    assert not provider.is_configured()
