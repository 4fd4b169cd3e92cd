import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import numpy as np

from ..models.chunk import Chunk
from ..models.query import QueryAnalysis

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class ChunkScorer(ABC):
    """Base class for per-chunk scoring strategies."""

    name: str = ""

    @abstractmethod
    def score(self, chunk: Chunk, query: QueryAnalysis) -> float:
        """Score a chunk against a query, in [0, 1]."""
        ...


class LexicalScorer(ChunkScorer):
    """Exact/partial keyword and content-substring scoring."""

    name = "keyword"

    EXACT_POINTS = 10
    PARTIAL_POINTS = 3
    CONTENT_POINTS = 5
    REPEAT_CAP = 5

    def __init__(
        self,
        exact_points: Optional[int] = None,
        partial_points: Optional[int] = None,
        content_points: Optional[int] = None,
        repeat_cap: Optional[int] = None,
    ):
        """Initialize scorer.

        Args:
            exact_points: Points for an exact chunk-keyword match.
            partial_points: Points for a substring chunk-keyword match.
            content_points: Points for a keyword found in content.
            repeat_cap: Maximum bonus for repeated content occurrences.
        """
        self._exact = self.EXACT_POINTS if exact_points is None else exact_points
        self._partial = self.PARTIAL_POINTS if partial_points is None else partial_points
        self._content = self.CONTENT_POINTS if content_points is None else content_points
        self._repeat_cap = self.REPEAT_CAP if repeat_cap is None else repeat_cap

    def raw_score(self, chunk: Chunk, keywords: Sequence[str]) -> float:
        """Unnormalized points summed over all keywords."""
        content = chunk.content.lower()
        chunk_keywords = [k.lower() for k in chunk.keywords]
        points = 0.0

        for keyword in keywords:
            keyword = keyword.strip().lower()
            if not keyword:
                continue

            # every chunk keyword counts: exact or containment either way
            for ck in chunk_keywords:
                if not ck:
                    continue
                if ck == keyword:
                    points += self._exact
                elif keyword in ck or ck in keyword:
                    points += self._partial

            occurrences = content.count(keyword)
            if occurrences:
                points += self._content
                points += min(occurrences - 1, self._repeat_cap)

        return points

    def score_keywords(self, chunk: Chunk, keywords: Sequence[str]) -> float:
        """Normalized keyword score in [0, 1]."""
        keywords = [k for k in keywords if k and k.strip()]
        if not keywords:
            return 0.0
        return _clamp(self.raw_score(chunk, keywords) / (self._exact * len(keywords)))

    def score(self, chunk: Chunk, query: QueryAnalysis) -> float:
        return self.score_keywords(chunk, query.clean_keywords)


class SynonymScorer(ChunkScorer):
    """Content occurrence scoring over synonym-expanded keywords."""

    name = "synonym"

    OCCURRENCE_CAP = 5

    def __init__(self, occurrence_cap: Optional[int] = None):
        self._cap = self.OCCURRENCE_CAP if occurrence_cap is None else occurrence_cap

    def score_synonyms(self, chunk: Chunk, expanded_keywords: Sequence[str]) -> float:
        """Normalized synonym score; 0 when there is no expansion."""
        synonyms = [s.strip().lower() for s in expanded_keywords if s and s.strip()]
        if not synonyms:
            return 0.0

        content = chunk.content.lower()
        points = sum(min(content.count(s), self._cap) for s in synonyms)
        return _clamp(points / (self._cap * len(synonyms)))

    def score(self, chunk: Chunk, query: QueryAnalysis) -> float:
        return self.score_synonyms(chunk, query.clean_expanded_keywords)


class SemanticScorer(ChunkScorer):
    """Cosine similarity between query and chunk embeddings."""

    name = "semantic"

    @staticmethod
    def cosine_similarity(
        query_embedding: Optional[Sequence[float]],
        chunk_embedding: Optional[Sequence[float]],
    ) -> float:
        """Cosine similarity clamped to [0, 1].

        The shorter vector is padded with trailing zeros. Missing vectors
        and zero magnitudes score 0; negative similarity scores 0.
        """
        if query_embedding is None or chunk_embedding is None:
            return 0.0
        if len(query_embedding) == 0 or len(chunk_embedding) == 0:
            return 0.0

        size = max(len(query_embedding), len(chunk_embedding))
        v1 = np.zeros(size, dtype=np.float64)
        v2 = np.zeros(size, dtype=np.float64)
        v1[: len(query_embedding)] = query_embedding
        v2[: len(chunk_embedding)] = chunk_embedding

        norm1 = np.linalg.norm(v1)
        norm2 = np.linalg.norm(v2)
        if norm1 == 0 or norm2 == 0:
            return 0.0

        similarity = float(np.dot(v1, v2) / (norm1 * norm2))
        if not np.isfinite(similarity):
            return 0.0
        return _clamp(similarity)

    def score(self, chunk: Chunk, query: QueryAnalysis) -> float:
        return self.cosine_similarity(query.embedding, chunk.embedding)
