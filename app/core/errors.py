"""Error taxonomy for discovery, embedding and retrieval.

Extraction failures live with the extractors in
``app.core.document_processing.base``.
"""


class ComplianceEngineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(ComplianceEngineError):
    """A required provider or credential is not configured. Fatal for the run."""


class EmbeddingConfigurationError(ConfigurationError):
    """No embedding provider has credentials."""


class EmbeddingError(ComplianceEngineError):
    """Every configured embedding provider failed for one input."""

    def __init__(self, message: str, failures: list[str] | None = None):
        super().__init__(message)
        self.failures = failures or []


class SearchUnavailableError(ComplianceEngineError):
    """Live search failed and no curated sources exist for the jurisdiction."""


class DimensionMismatchError(ValueError):
    """Two vectors of different lengths were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vector dimension mismatch: {left} != {right}")
        self.left = left
        self.right = right


class DiscoveryCancelledError(ComplianceEngineError):
    """A discovery run was cancelled through its cancellation token."""
