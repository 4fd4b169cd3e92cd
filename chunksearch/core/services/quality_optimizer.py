"""Quality optimizer - quality metrics and budget-constrained selection."""

import logging
import re
from typing import Optional, Sequence

from ..models.chunk import Chunk
from ..models.query import QueryAnalysis
from ..models.search import (
    ContextInfo,
    EnhancedChunk,
    Importance,
    QualityMetrics,
    QualitySummary,
    ScoredChunk,
)
from ..models.weights import QualityWeights

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN_TERMS = (
    "법", "규정", "지침", "안내", "절차", "요건",
    "law", "regulation", "guideline", "procedure", "requirement",
)

FACT_PATTERN = re.compile(
    r"\d{4}년|\d+일|\d+원|\d+(?:\.\d+)?\s?%"
    r"|\d{4}[-./]\d{1,2}[-./]\d{1,2}"
    r"|\d+(?:\.\d+)?\s?(?:㎡|m²|km|kg|cm|mm|m)(?![A-Za-z])"
)
TECHNICAL_PATTERN = re.compile(r"[가-힣]{3,}(?:법|규정|지침)")
COMMON_PATTERN = re.compile(r"[가-힣]{2,}(?:시설|장소|방법)")
SENTENCE_SPLIT = re.compile(r"[.!?。]")
TERMINAL_PUNCTUATION = re.compile(r"[.!?。][\"'”’)\]]*$")


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class QualityOptimizer:
    """Score chunk quality and select a context under a character budget."""

    def __init__(
        self,
        weights: Optional[QualityWeights] = None,
        domain_terms: Sequence[str] = DEFAULT_DOMAIN_TERMS,
    ):
        """Initialize optimizer.

        Args:
            weights: Weights of the quality sub-scores.
            domain_terms: Terms indicating authoritative content.
        """
        self._weights = weights or QualityWeights()
        self._domain_terms = tuple(t.lower() for t in domain_terms)

    def optimize(
        self,
        ranked: list[ScoredChunk],
        query: QueryAnalysis,
        max_chunks: int,
        max_context_chars: int,
    ) -> list[EnhancedChunk]:
        """Enhance ranked chunks and select the best under the budget."""
        enhanced = [self.enhance(scored, query) for scored in ranked]
        # stable: ranker order breaks ties
        enhanced.sort(key=lambda c: c.quality.overall, reverse=True)
        selected = self.select(enhanced, max_chunks, max_context_chars)

        if selected:
            avg = sum(c.quality.overall for c in selected) / len(selected)
            logger.info(
                f"Quality: selected {len(selected)}/{len(enhanced)} chunks, "
                f"{sum(len(c.content) for c in selected)} chars, avg overall={avg:.2f}"
            )
        return selected

    def enhance(self, scored: ScoredChunk, query: QueryAnalysis) -> EnhancedChunk:
        """Attach quality metrics and context info to a scored chunk."""
        chunk = scored.chunk
        relevance = _clamp(scored.total_score)
        completeness = self.completeness(chunk, query)
        accuracy = self.accuracy(chunk)
        clarity = self.clarity(chunk)

        w = self._weights
        overall = _clamp(
            relevance * w.relevance
            + completeness * w.completeness
            + accuracy * w.accuracy
            + clarity * w.clarity
        )

        return EnhancedChunk(
            chunk=chunk,
            breakdown=scored.breakdown,
            total_score=scored.total_score,
            quality=QualityMetrics(
                relevance=relevance,
                completeness=completeness,
                accuracy=accuracy,
                clarity=clarity,
                overall=overall,
            ),
            context_info=ContextInfo(
                document_type=chunk.metadata.document_type or "unknown",
                section=chunk.metadata.section or "general",
                importance=self.importance(relevance),
            ),
        )

    def completeness(self, chunk: Chunk, query: QueryAnalysis) -> float:
        content = chunk.content
        lowered = content.lower()
        score = 0.0

        keywords = query.clean_keywords
        if keywords:
            covered = sum(1 for k in keywords if k.lower() in lowered)
            score += covered / len(keywords) * 0.5

        length = len(content)
        if 100 <= length <= 2000:
            score += 0.3
        elif length > 2000:
            score += 0.2

        if TERMINAL_PUNCTUATION.search(content.rstrip()):
            score += 0.2

        return _clamp(score)

    def accuracy(self, chunk: Chunk) -> float:
        content = chunk.content
        score = 0.5

        lowered = content.lower()
        if any(term in lowered for term in self._domain_terms):
            score += 0.2

        if FACT_PATTERN.search(content):
            score += 0.2

        source = (chunk.metadata.source or "").strip()
        if source and source != "Unknown":
            score += 0.1

        return _clamp(score)

    def clarity(self, chunk: Chunk) -> float:
        content = chunk.content
        score = 0.5

        sentences = [s.strip() for s in SENTENCE_SPLIT.split(content) if s.strip()]
        if sentences:
            avg_length = sum(len(s) for s in sentences) / len(sentences)
            if 20 <= avg_length <= 100:
                score += 0.3
            elif 10 <= avg_length <= 150:
                score += 0.2

        has_technical = bool(TECHNICAL_PATTERN.search(content))
        has_common = bool(COMMON_PATTERN.search(content))
        if has_technical and has_common:
            score += 0.2
        elif has_technical or has_common:
            score += 0.1

        if FACT_PATTERN.search(content):
            score += 0.1

        return _clamp(score)

    @staticmethod
    def importance(relevance: float) -> Importance:
        if relevance >= 0.8:
            return Importance.HIGH
        if relevance >= 0.6:
            return Importance.MEDIUM
        return Importance.LOW

    @staticmethod
    def select(
        candidates: list[EnhancedChunk],
        max_chunks: int,
        max_context_chars: int,
    ) -> list[EnhancedChunk]:
        """Greedy selection in candidate order.

        The first candidate is always taken, whatever its length. Selection
        stops at max_chunks or at the first candidate that would push the
        total length past max_context_chars.
        """
        selected: list[EnhancedChunk] = []
        total_length = 0

        for candidate in candidates:
            if selected and len(selected) >= max_chunks:
                break

            length = len(candidate.content)
            if selected and total_length + length > max_context_chars:
                logger.info(
                    f"Context limit reached: {total_length} chars "
                    f"(max {max_context_chars}), {len(selected)} chunks"
                )
                break

            selected.append(candidate)
            total_length += length

        return selected

    @staticmethod
    def summarize(chunks: list[EnhancedChunk]) -> QualitySummary:
        """Average quality metrics and quality buckets of a selection."""
        if not chunks:
            return QualitySummary()

        n = len(chunks)
        overall = [c.quality.overall for c in chunks]
        return QualitySummary(
            total_chunks=n,
            average_relevance=round(sum(c.quality.relevance for c in chunks) / n, 3),
            average_completeness=round(sum(c.quality.completeness for c in chunks) / n, 3),
            average_accuracy=round(sum(c.quality.accuracy for c in chunks) / n, 3),
            average_clarity=round(sum(c.quality.clarity for c in chunks) / n, 3),
            average_overall=round(sum(overall) / n, 3),
            high_quality_chunks=sum(1 for s in overall if s >= 0.8),
            medium_quality_chunks=sum(1 for s in overall if 0.6 <= s < 0.8),
            low_quality_chunks=sum(1 for s in overall if s < 0.6),
        )
