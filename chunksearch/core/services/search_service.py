"""Search service - pipeline facade over retrieval, ranking and selection."""

import asyncio
import dataclasses
import logging
import time
from typing import Optional

from ..errors import InvalidQuery, NoResults
from ..models.query import QueryAnalysis
from ..models.search import EnhancedChunk, SearchMetrics, SearchResponse
from ..models.weights import ContextBudgetPolicy, QualityWeights, ScoringWeights
from ..protocols.chunk_store import ChunkStoreProtocol
from ..protocols.embedding_provider import EmbeddingProviderProtocol
from ..protocols.synonym_expander import SynonymExpanderProtocol
from ..strategies.budget import ContextBudgetStrategy
from .orchestrator import MultiStageOrchestrator
from .quality_optimizer import QualityOptimizer
from .ranker import average_breakdown, deduplicate_and_rank

logger = logging.getLogger(__name__)


class SearchService:
    """Single entry point: query analysis in, selected chunks out."""

    def __init__(
        self,
        store: ChunkStoreProtocol,
        expander: Optional[SynonymExpanderProtocol] = None,
        embedder: Optional[EmbeddingProviderProtocol] = None,
        scoring_weights: Optional[ScoringWeights] = None,
        quality_weights: Optional[QualityWeights] = None,
        budget_policy: Optional[ContextBudgetPolicy] = None,
        fallback_min_results: int = 50,
        stage_fetch_limit: int = 500,
        full_scan_limit: int = 10000,
        batch_size: int = 100,
    ):
        """Initialize search service.

        Args:
            store: Chunk store.
            expander: Synonym expander, used when a query has no expansions.
            embedder: Query embedding provider (optional).
            scoring_weights: Fusion weights.
            quality_weights: Quality sub-score weights.
            budget_policy: Context budget sizing policy.
            fallback_min_results: Distinct results below which the full scan is merged.
            stage_fetch_limit: Per-stage fetch limit.
            full_scan_limit: Limit for the full-corpus scan.
            batch_size: Chunks scored per batch.
        """
        self._expander = expander
        self._embedder = embedder
        self._orchestrator = MultiStageOrchestrator(
            store=store,
            weights=scoring_weights,
            fallback_min_results=fallback_min_results,
            stage_fetch_limit=stage_fetch_limit,
            full_scan_limit=full_scan_limit,
            batch_size=batch_size,
        )
        self._optimizer = QualityOptimizer(weights=quality_weights)
        self._budget = ContextBudgetStrategy(budget_policy)

    async def search(
        self,
        query: QueryAnalysis,
        max_chunks: Optional[int] = None,
        max_context_chars: Optional[int] = None,
    ) -> SearchResponse:
        """Search chunks for a query.

        Args:
            query: Analyzed query.
            max_chunks: Override chunk cap.
            max_context_chars: Override character budget.

        Returns:
            Selected chunks, metrics, stages, context and sources.

        Raises:
            InvalidQuery: Query has neither keywords nor raw text.
            StoreUnavailable: Every search stage failed.
            NoResults: No stage produced a candidate.
        """
        start = time.perf_counter()

        if query.is_empty():
            raise InvalidQuery("Query has no keywords and no text")

        query = await self._prepare_query(query)
        budget = self._budget.resolve(query, max_chunks, max_context_chars)

        result = await self._orchestrator.run(query)
        ranked = deduplicate_and_rank(result.scored)

        attempted = len(result.stages)
        metrics = SearchMetrics(
            total_processed=len(result.scored),
            unique_results=len(ranked),
            score_breakdown=average_breakdown(ranked),
            search_coverage=(attempted - len(result.failed_stages)) / attempted if attempted else 0.0,
            fallback_used=result.fallback_used,
            embedding_used=query.embedding is not None,
        )

        if not ranked:
            metrics.execution_time = (time.perf_counter() - start) * 1000
            logger.info(f"Search: no results for '{query.raw_text[:50]}'")
            raise NoResults("No candidate chunks found", metrics=metrics)

        selected = self._optimizer.optimize(
            ranked, query, budget.max_chunks, budget.max_context_chars
        )

        metrics.selected = len(selected)
        metrics.average_relevance = sum(c.quality.relevance for c in selected) / len(selected)
        document_types = {c.context_info.document_type for c in selected}
        metrics.result_diversity = len(document_types) / max(len(selected), 1)
        metrics.execution_time = (time.perf_counter() - start) * 1000

        logger.info(
            f"Search: returned {len(selected)}/{len(ranked)} chunks for "
            f"'{query.raw_text[:50]}' in {metrics.execution_time:.0f}ms "
            f"(keyword {metrics.score_breakdown.keyword:.2f}, "
            f"synonym {metrics.score_breakdown.synonym:.2f}, "
            f"semantic {metrics.score_breakdown.semantic:.2f})"
        )

        return SearchResponse(
            chunks=selected,
            metrics=metrics,
            stages=result.stages,
            context=self._format_context(selected),
            sources=self._get_unique_sources(selected),
        )

    async def _prepare_query(self, query: QueryAnalysis) -> QueryAnalysis:
        """Fill in expansions and the query embedding, once per request."""
        expanded = query.clean_expanded_keywords
        if not expanded and self._expander is not None and query.clean_keywords:
            expanded = self._expander.expand(query.clean_keywords)
            logger.debug(f"Expanded {len(query.clean_keywords)} keywords to {len(expanded)}")

        embedding = query.embedding if query.embedding else None
        if embedding is None and self._embedder is not None:
            text = query.raw_text.strip() or " ".join(query.clean_keywords)
            try:
                embedding = await asyncio.to_thread(self._embedder.embed, text)
            except Exception as e:
                logger.warning(f"Query embedding unavailable, semantic scoring disabled: {e}")
                embedding = None

        if embedding is not None and len(embedding) == 0:
            embedding = None

        return dataclasses.replace(
            query,
            expanded_keywords=list(expanded),
            embedding=[float(v) for v in embedding] if embedding is not None else None,
        )

    def _format_context(self, chunks: list[EnhancedChunk]) -> str:
        """Format selected chunks as context for an LLM."""
        if not chunks:
            return ""

        parts = []
        for i, c in enumerate(chunks, 1):
            meta = c.chunk.metadata
            label = meta.title if meta.title and meta.title != "Unknown" else meta.source
            if meta.page:
                label = f"{label} (p. {meta.page})"
            parts.append(f"[{i}] {label}:\n{c.content}")

        return "\n\n".join(parts)

    def _get_unique_sources(self, chunks: list[EnhancedChunk]) -> list[str]:
        """Get unique sources in selection order."""
        seen = set()
        sources = []
        for c in chunks:
            source = c.chunk.metadata.source
            if source not in seen:
                seen.add(source)
                sources.append(source)
        return sources
