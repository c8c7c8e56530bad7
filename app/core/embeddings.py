"""Embedding generation with an ordered provider fallback chain.

The primary provider is Jina (``jina-embeddings-v3``), which distinguishes
query and passage embeddings. OpenAI (``text-embedding-3-small``) is the
fallback. Vectors from different models are not comparable, so every
``Embedding`` carries the model that produced it.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from openai import OpenAI

from app.core.config import Settings, get_settings
from app.core.errors import EmbeddingConfigurationError, EmbeddingError
from app.core.logging import get_logger

logger = get_logger(__name__)

JINA_EMBEDDINGS_URL = "https://api.jina.ai/v1/embeddings"

MODEL_DIMENSIONS: dict[str, int] = {
    "jina-embeddings-v3": 1024,
    "jina-embeddings-v2-base-en": 768,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class EmbeddingTask(str, Enum):
    QUERY = "query"
    PASSAGE = "passage"


JINA_TASKS = {
    EmbeddingTask.QUERY: "retrieval.query",
    EmbeddingTask.PASSAGE: "retrieval.passage",
}


@dataclass
class Embedding:
    """A vector plus the model that produced it."""

    vector: list[float]
    model: str

    @property
    def dimension(self) -> int:
        return len(self.vector)


class ProviderError(Exception):
    """One provider failed for one input; the chain moves on."""


def _validate_vector(vector: Any, model: str) -> list[float]:
    if not isinstance(vector, list) or not vector:
        raise ProviderError(f"{model} returned no embedding vector")
    if not all(isinstance(v, (int, float)) for v in vector):
        raise ProviderError(f"{model} returned a non-numeric embedding")
    expected = MODEL_DIMENSIONS.get(model)
    if expected is not None and len(vector) != expected:
        raise ProviderError(
            f"Embedding dimension mismatch for {model}: expected {expected}, got {len(vector)}"
        )
    return [float(v) for v in vector]


class EmbeddingProvider(ABC):
    """One embedding backend in the fallback chain."""

    name: str

    def __init__(self, api_key: str | None, model: str, timeout: float):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    async def embed(self, text: str, task: EmbeddingTask) -> list[float]:
        """Return a validated vector or raise ProviderError."""


class JinaEmbeddingProvider(EmbeddingProvider):
    name = "jina"

    async def embed(self, text: str, task: EmbeddingTask) -> list[float]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    JINA_EMBEDDINGS_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "task": JINA_TASKS[task],
                        "input": [text],
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Jina HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Jina request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Jina returned a malformed body") from e

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Jina response missing data[0].embedding") from e

        return _validate_vector(vector, self.model)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    name = "openai"

    def _embed_sync(self, text: str) -> Any:
        client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return client.embeddings.create(model=self.model, input=text)

    async def embed(self, text: str, task: EmbeddingTask) -> list[float]:
        # OpenAI embeddings are symmetric; task is ignored
        try:
            response = await asyncio.to_thread(self._embed_sync, text)
            vector = response.data[0].embedding
        except (AttributeError, IndexError) as e:
            raise ProviderError("OpenAI response missing data[0].embedding") from e
        except Exception as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e

        return _validate_vector(vector, self.model)


class Embedder:
    """Embeds text through the first provider in the chain that succeeds."""

    def __init__(self, providers: list[EmbeddingProvider], max_chars: int = 20_000):
        self.providers = providers
        self.max_chars = max_chars

    @classmethod
    def from_settings(cls, settings: Settings | None = None, timeout: float | None = None) -> "Embedder":
        settings = settings or get_settings()
        request_timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        return cls(
            providers=[
                JinaEmbeddingProvider(
                    settings.JINA_API_KEY, settings.JINA_EMBEDDING_MODEL, request_timeout
                ),
                OpenAIEmbeddingProvider(
                    settings.OPENAI_API_KEY, settings.OPENAI_EMBEDDING_MODEL, request_timeout
                ),
            ],
            max_chars=settings.EMBEDDING_MAX_CHARS,
        )

    @property
    def configured_providers(self) -> list[EmbeddingProvider]:
        return [p for p in self.providers if p.is_configured()]

    def ensure_configured(self) -> None:
        """
        Raises:
            EmbeddingConfigurationError: If no provider has credentials
        """
        if not self.configured_providers:
            raise EmbeddingConfigurationError(
                "No embedding provider configured. Set JINA_API_KEY or OPENAI_API_KEY."
            )

    async def embed_text(self, text: str, task: EmbeddingTask = EmbeddingTask.PASSAGE) -> Embedding:
        """
        Embed one text.

        Args:
            text: Text to embed; truncated to max_chars before sending
            task: Query or passage mode (honoured by providers that support it)

        Returns:
            Embedding with vector and model name

        Raises:
            EmbeddingConfigurationError: If no provider is configured
            EmbeddingError: If every configured provider fails
        """
        self.ensure_configured()
        text = text[: self.max_chars]
        failures: list[str] = []

        for provider in self.configured_providers:
            try:
                vector = await provider.embed(text, task)
            except ProviderError as e:
                logger.warning(f"Embedding provider {provider.name} failed: {e}")
                failures.append(f"{provider.name}: {e}")
                continue

            logger.debug(
                f"Embedded {len(text)} chars with {provider.model}",
                extra={"extra_data": {"model": provider.model, "dimension": len(vector)}},
            )
            return Embedding(vector=vector, model=provider.model)

        raise EmbeddingError("All embedding providers failed", failures=failures)


def get_embedder() -> Embedder:
    """Embedder built from current settings."""
    return Embedder.from_settings()
