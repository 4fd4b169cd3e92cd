"""Search error taxonomy."""
from typing import Optional


class ChunkSearchError(Exception):
    """Base class for search errors."""


class InvalidQuery(ChunkSearchError):
    """Query has neither keywords nor raw text."""


class StoreUnavailable(ChunkSearchError):
    """Chunk store fetch failed."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.cause = cause


class EmbeddingUnavailable(ChunkSearchError):
    """Query embedding could not be produced."""


class NoResults(ChunkSearchError):
    """No strategy, fallback included, produced a candidate."""

    def __init__(self, message: str, metrics=None):
        super().__init__(message)
        self.metrics = metrics
