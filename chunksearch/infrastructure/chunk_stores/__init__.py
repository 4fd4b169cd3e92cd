"""Chunk store adapters."""
from .chroma_store import ChromaChunkStore
from .memory_store import InMemoryChunkStore

__all__ = ["ChromaChunkStore", "InMemoryChunkStore"]
