"""Chunk store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.chunk import Chunk


@runtime_checkable
class ChunkStoreProtocol(Protocol):
    """Read-only access to the indexed chunk corpus.

    Implementations must be safe for concurrent reads and raise
    ``StoreUnavailable`` when the backing store fails.
    """

    async def fetch_by_keywords(
        self,
        keywords: list[str],
        document_id: Optional[str] = None,
        limit: int = 15,
    ) -> list[Chunk]:
        """Fetch chunks matching any of the keywords.

        Args:
            keywords: Search keywords.
            document_id: Restrict to one document (optional).
            limit: Maximum number of chunks.

        Returns:
            Matching chunks, best matches first.
        """
        ...

    async def fetch_by_text(
        self,
        text: str,
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        """Fetch chunks containing the free text.

        Args:
            text: Free-text query.
            document_id: Restrict to one document (optional).
            limit: Maximum number of chunks.

        Returns:
            Matching chunks, best matches first.
        """
        ...

    async def fetch_by_vector(
        self,
        embedding: list[float],
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        """Fetch chunks nearest to the embedding.

        Args:
            embedding: Query vector.
            document_id: Restrict to one document (optional).
            limit: Maximum number of chunks.

        Returns:
            Nearest chunks, most similar first.
        """
        ...

    async def fetch_all(self, limit: int = 10000) -> list[Chunk]:
        """Fetch the whole corpus (up to limit)."""
        ...
