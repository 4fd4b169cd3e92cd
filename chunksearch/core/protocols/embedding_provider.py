"""Embedding provider protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProviderProtocol(Protocol):
    """Protocol for query embedding."""

    def embed(self, text: str) -> list[float]:
        """Embed a query text.

        Args:
            text: Query text.

        Returns:
            Embedding vector.

        Raises:
            EmbeddingUnavailable: If the model cannot produce a vector.
        """
        ...
