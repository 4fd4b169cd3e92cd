import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from chunksearch.core.errors import StoreUnavailable
from chunksearch.core.models.chunk import Chunk
from chunksearch.core.strategies.scoring import LexicalScorer, SemanticScorer

logger = logging.getLogger(__name__)


class InMemoryChunkStore:
    """Chunk store over an immutable in-memory corpus."""

    def __init__(self, chunks: Iterable[Chunk] = ()):
        """Initialize store.

        Args:
            chunks: Corpus chunks, in document order.
        """
        self._chunks: tuple[Chunk, ...] = tuple(chunks)
        self._matcher = LexicalScorer()

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryChunkStore":
        """Load a corpus file: a list of chunk dicts or {"chunks": [...]}."""
        corpus_file = Path(path)
        try:
            with open(corpus_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailable(f"Cannot load corpus {path}: {e}", cause=e) from e

        records = data.get("chunks", []) if isinstance(data, dict) else data
        chunks = []
        for record in records:
            if not record.get("content"):
                logger.warning(f"Skip chunk without content: {record.get('id')}")
                continue
            chunks.append(Chunk.from_dict(record))

        logger.info(f"Loaded {len(chunks)} chunks from {corpus_file}")
        return cls(chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def _scope(self, document_id: Optional[str]) -> Iterable[Chunk]:
        if document_id is None:
            return self._chunks
        return (c for c in self._chunks if c.document_id == document_id)

    @staticmethod
    def _top(scored: list[tuple[float, Chunk]], limit: int) -> list[Chunk]:
        scored = [item for item in scored if item[0] > 0]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [chunk for _, chunk in scored[:limit]]

    async def fetch_by_keywords(
        self,
        keywords: list[str],
        document_id: Optional[str] = None,
        limit: int = 15,
    ) -> list[Chunk]:
        """Chunks ranked by keyword match points."""
        if not keywords:
            return []
        scored = [(self._matcher.raw_score(c, keywords), c) for c in self._scope(document_id)]
        return self._top(scored, limit)

    async def fetch_by_text(
        self,
        text: str,
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        """Chunks containing the text, or keywords containing it."""
        needle = text.strip().lower()
        if not needle:
            return []

        scored = []
        for chunk in self._scope(document_id):
            score = 0.0
            if needle in chunk.content.lower():
                score += 2
            score += sum(1 for k in chunk.keywords if needle in k.lower())
            scored.append((score, chunk))
        return self._top(scored, limit)

    async def fetch_by_vector(
        self,
        embedding: list[float],
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        """Chunks with embeddings, most similar first."""
        if not embedding:
            return []
        scored = [
            (SemanticScorer.cosine_similarity(embedding, c.embedding), c)
            for c in self._scope(document_id)
            if c.embedding
        ]
        return self._top(scored, limit)

    async def fetch_all(self, limit: int = 10000) -> list[Chunk]:
        return list(self._chunks[:limit])
