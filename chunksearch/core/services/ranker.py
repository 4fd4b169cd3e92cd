"""Deduplication and ranking of scored chunks."""

import logging
from typing import Iterable

from ..models.search import ScoreBreakdown, ScoredChunk

logger = logging.getLogger(__name__)


def rank_key(scored: ScoredChunk) -> tuple:
    """Sort key: score desc, position asc, chunk id asc, document id asc."""
    return (
        -scored.total_score,
        scored.chunk.metadata.position,
        scored.chunk.id,
        scored.chunk.document_id,
    )


def deduplicate_and_rank(scored_chunks: Iterable[ScoredChunk]) -> list[ScoredChunk]:
    """Collapse entries sharing a chunk id and sort them.

    When an id comes from several stages the entry with the higher
    total score is kept; on equal scores the first one seen stays.
    """
    unique: dict[str, ScoredChunk] = {}
    total = 0

    for scored in scored_chunks:
        total += 1
        existing = unique.get(scored.id)
        if existing is None or scored.total_score > existing.total_score:
            unique[scored.id] = scored

    ranked = sorted(unique.values(), key=rank_key)

    if len(ranked) < total:
        logger.info(f"Dedup: {total} → {len(ranked)} unique chunks")

    return ranked


def average_breakdown(scored_chunks: list[ScoredChunk]) -> ScoreBreakdown:
    """Mean keyword/synonym/semantic scores."""
    if not scored_chunks:
        return ScoreBreakdown()

    n = len(scored_chunks)
    return ScoreBreakdown(
        keyword=sum(s.breakdown.keyword for s in scored_chunks) / n,
        synonym=sum(s.breakdown.synonym for s in scored_chunks) / n,
        semantic=sum(s.breakdown.semantic for s in scored_chunks) / n,
    )
