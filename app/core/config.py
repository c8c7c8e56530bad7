"""Configuration management for the Compliance RAG Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    COMPLIANCE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Provider credentials (all optional; missing keys select fallbacks)
    JINA_API_KEY: str | None = Field(
        default=None, description="Jina API key (embeddings and reader service)"
    )
    OPENAI_API_KEY: str | None = Field(
        default=None, description="OpenAI API key (fallback embedding provider)"
    )
    BRAVE_API_KEY: str | None = Field(
        default=None, description="Brave Search API key; unset routes discovery to curated sources"
    )

    # Embedding configuration
    JINA_EMBEDDING_MODEL: str = Field(
        default="jina-embeddings-v3", description="Primary embedding model"
    )
    OPENAI_EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="Fallback embedding model"
    )
    EMBEDDING_MAX_CHARS: int = Field(
        default=20_000, description="Input characters sent to an embedding provider"
    )

    # External calls
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Timeout for every outbound HTTP call"
    )
    SEARCH_RESULT_COUNT: int = Field(default=10, description="Hits requested per web search")
    READER_MAX_CHARS: int = Field(
        default=10_000, description="Characters kept from a reader-service page"
    )

    # Discovery
    MAX_CHUNKS_PER_SOURCE: int = Field(default=3, description="Chunks embedded per search hit")
    CHUNK_MAX_TOKENS: int = Field(default=512, description="Token budget per chunk")

    # Retrieval
    RETRIEVAL_CONTENT_CHARS: int = Field(
        default=1000, description="Characters of chunk content returned per result"
    )

    # Uploads
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024, description="Max decoded upload size in bytes"
    )
    MAX_EXTRACTED_TEXT_CHARS: int = Field(
        default=100 * 1024, description="Max characters kept from an uploaded file"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment
    """
    return Settings()
