"""Protocol interfaces for dependency injection."""
from .chunk_store import ChunkStoreProtocol
from .embedding_provider import EmbeddingProviderProtocol
from .synonym_expander import SynonymExpanderProtocol

__all__ = [
    "ChunkStoreProtocol",
    "EmbeddingProviderProtocol",
    "SynonymExpanderProtocol",
]
