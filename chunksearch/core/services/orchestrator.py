"""Multi-stage orchestrator - concurrent retrieval and score fusion."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from ..errors import StoreUnavailable
from ..models.chunk import Chunk
from ..models.query import QueryAnalysis
from ..models.search import ScoreBreakdown, ScoredChunk, SearchStage
from ..models.weights import ScoringWeights
from ..protocols.chunk_store import ChunkStoreProtocol
from ..strategies.scoring import LexicalScorer, SemanticScorer, SynonymScorer

logger = logging.getLogger(__name__)

KEYWORD_STAGE = "keyword"
SYNONYM_STAGE = "synonym"
SEMANTIC_STAGE = "semantic"
CONTEXTUAL_STAGE = "contextual"
FALLBACK_STAGE = "fallback"

STAGE_WEIGHTS = {
    KEYWORD_STAGE: 1.0,
    SYNONYM_STAGE: 0.8,
    SEMANTIC_STAGE: 0.6,
    CONTEXTUAL_STAGE: 0.4,
    FALLBACK_STAGE: 0.3,
}


@dataclass
class _FetchOutcome:
    name: str
    chunks: list[Chunk] = field(default_factory=list)
    elapsed_ms: float = 0.0
    error: Optional[BaseException] = None


@dataclass
class OrchestrationResult:
    """Stages and scored entries of one orchestrator run."""
    stages: list[SearchStage]
    scored: list[ScoredChunk]
    corpus_size: Optional[int] = None
    fallback_used: bool = False

    @property
    def failed_stages(self) -> list[SearchStage]:
        return [s for s in self.stages if not s.success]


class MultiStageOrchestrator:
    """Run retrieval stages concurrently and fuse per-chunk scores."""

    def __init__(
        self,
        store: ChunkStoreProtocol,
        lexical: LexicalScorer | None = None,
        synonym: SynonymScorer | None = None,
        semantic: SemanticScorer | None = None,
        weights: ScoringWeights | None = None,
        fallback_min_results: int = 50,
        stage_fetch_limit: int = 500,
        full_scan_limit: int = 10000,
        batch_size: int = 100,
    ):
        """Initialize orchestrator.

        Args:
            store: Chunk store.
            lexical: Keyword scorer.
            synonym: Synonym scorer.
            semantic: Embedding scorer.
            weights: Fusion weights.
            fallback_min_results: Distinct results below which the full scan is merged.
            stage_fetch_limit: Per-stage fetch limit.
            full_scan_limit: Limit for the full-corpus scan.
            batch_size: Chunks scored per batch.
        """
        self._store = store
        self._lexical = lexical or LexicalScorer()
        self._synonym = synonym or SynonymScorer()
        self._semantic = semantic or SemanticScorer()
        self._weights = weights or ScoringWeights()
        self._fallback_min_results = fallback_min_results
        self._stage_fetch_limit = stage_fetch_limit
        self._full_scan_limit = full_scan_limit
        self._batch_size = max(1, batch_size)

    async def run(self, query: QueryAnalysis) -> OrchestrationResult:
        """Execute all stages for a query.

        The query is expected to carry its final expanded keywords and
        embedding; nothing is recomputed here.

        Raises:
            StoreUnavailable: If every attempted stage failed.
        """
        plans = self._plan_stages(query)
        plans[FALLBACK_STAGE] = lambda: self._store.fetch_all(limit=self._full_scan_limit)

        outcomes = await asyncio.gather(
            *(self._fetch_stage(name, fetch) for name, fetch in plans.items())
        )
        by_name = {o.name: o for o in outcomes}

        primary = [o for o in outcomes if o.name != FALLBACK_STAGE]
        fallback = by_name[FALLBACK_STAGE]

        if all(o.error is not None for o in outcomes):
            cause = outcomes[-1].error
            raise StoreUnavailable(
                f"All {len(outcomes)} search stages failed", cause=cause
            ) from cause

        primary_ids = {c.id for o in primary if o.error is None for c in o.chunks}
        corpus_size = None
        if fallback.error is None:
            corpus_size = sum(
                1
                for c in fallback.chunks
                if query.document_id is None or c.document_id == query.document_id
            )
        threshold = self._fallback_min_results
        if corpus_size is not None:
            threshold = min(threshold, corpus_size)

        fallback_used = False
        if fallback.error is None:
            if len(primary_ids) < threshold:
                fallback.chunks = self._filter_corpus(fallback.chunks, query)
                fallback_used = True
                logger.warning(
                    f"Insufficient results ({len(primary_ids)} < {threshold}), "
                    f"full scan matched {len(fallback.chunks)} chunks"
                )
            else:
                fallback.chunks = []

        scored_per_stage = await asyncio.gather(
            *(self._score_batches(o.chunks, query, o.name) for o in outcomes)
        )

        stages: list[SearchStage] = []
        scored: list[ScoredChunk] = []
        for outcome, results in zip(outcomes, scored_per_stage):
            stages.append(
                SearchStage(
                    name=outcome.name,
                    weight=STAGE_WEIGHTS[outcome.name],
                    results=results,
                    execution_time=outcome.elapsed_ms,
                    success=outcome.error is None,
                    error=str(outcome.error) if outcome.error is not None else None,
                )
            )
            scored.extend(results)

        logger.info(
            "Stages: "
            + ", ".join(f"{s.name}={len(s.results)}{'' if s.success else '(failed)'}" for s in stages)
        )

        return OrchestrationResult(
            stages=stages,
            scored=scored,
            corpus_size=corpus_size,
            fallback_used=fallback_used,
        )

    def _plan_stages(
        self, query: QueryAnalysis
    ) -> dict[str, Callable[[], Awaitable[list[Chunk]]]]:
        """Primary stages whose inputs are present."""
        plans: dict[str, Callable[[], Awaitable[list[Chunk]]]] = {}
        keywords = query.clean_keywords
        expanded = query.clean_expanded_keywords
        limit = self._stage_fetch_limit

        if keywords:
            plans[KEYWORD_STAGE] = lambda: self._store.fetch_by_keywords(
                keywords, document_id=query.document_id, limit=limit
            )
        if expanded:
            plans[SYNONYM_STAGE] = lambda: self._store.fetch_by_keywords(
                expanded, document_id=query.document_id, limit=limit
            )
        if query.embedding:
            plans[SEMANTIC_STAGE] = lambda: self._store.fetch_by_vector(
                query.embedding, document_id=query.document_id, limit=limit
            )
        if query.raw_text.strip():
            plans[CONTEXTUAL_STAGE] = lambda: self._store.fetch_by_text(
                query.raw_text.strip(), document_id=query.document_id, limit=limit
            )
        return plans

    async def _fetch_stage(
        self, name: str, fetch: Callable[[], Awaitable[list[Chunk]]]
    ) -> _FetchOutcome:
        """Run one stage fetch; failures become an empty, flagged outcome."""
        start = time.perf_counter()
        try:
            chunks = await fetch()
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            cause = e.cause if isinstance(e, StoreUnavailable) and e.cause else e
            logger.warning(f"Stage '{name}' failed: {cause}")
            error = StoreUnavailable(str(e), stage=name, cause=cause)
            return _FetchOutcome(name=name, elapsed_ms=elapsed, error=error)

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"Stage '{name}' fetched {len(chunks)} chunks in {elapsed:.1f}ms")
        return _FetchOutcome(name=name, chunks=list(chunks), elapsed_ms=elapsed)

    def _filter_corpus(self, chunks: list[Chunk], query: QueryAnalysis) -> list[Chunk]:
        """Case-insensitive substring filter over keywords and expansions."""
        terms = {t.lower() for t in query.clean_keywords + query.clean_expanded_keywords}
        if not terms:
            terms = {t.lower() for t in query.raw_text.split() if len(t) > 1}
        if not terms:
            return []

        matched = []
        for chunk in chunks:
            if query.document_id and chunk.document_id != query.document_id:
                continue
            chunk_keywords = [k.lower() for k in chunk.keywords]
            content = chunk.content.lower()
            if any(t in ck for ck in chunk_keywords for t in terms) or any(
                t in content for t in terms
            ):
                matched.append(chunk)
        return matched

    async def _score_batches(
        self, chunks: list[Chunk], query: QueryAnalysis, stage: str
    ) -> list[ScoredChunk]:
        """Score chunks in bounded batches, yielding between batches."""
        scored: list[ScoredChunk] = []
        for i in range(0, len(chunks), self._batch_size):
            batch = [self.score_chunk(c, query, stage) for c in chunks[i : i + self._batch_size]]
            scored.extend(batch)
            await asyncio.sleep(0)
        return scored

    def score_chunk(self, chunk: Chunk, query: QueryAnalysis, stage: str = "") -> ScoredChunk:
        """Fuse the three strategy scores of a chunk."""
        breakdown = ScoreBreakdown(
            keyword=self._lexical.score(chunk, query),
            synonym=self._synonym.score(chunk, query),
            semantic=self._semantic.score(chunk, query),
        )
        return ScoredChunk(
            chunk=chunk,
            breakdown=breakdown,
            total_score=breakdown.total(self._weights),
            stage=stage,
        )
