"""Tests for the end-to-end search service."""

import pytest

from chunksearch.core.errors import InvalidQuery, NoResults, StoreUnavailable
from chunksearch.core.models.query import QueryAnalysis, QueryComplexity
from chunksearch.core.services.orchestrator import MultiStageOrchestrator
from chunksearch.core.services.ranker import deduplicate_and_rank
from chunksearch.core.services.search_service import SearchService
from chunksearch.infrastructure.chunk_stores.memory_store import InMemoryChunkStore
from conftest import BrokenEmbedder, CountingStore, FailingStore, FakeEmbedder, make_chunk


class RecordingExpander:
    """Expander that appends a fixed synonym and records calls."""

    def __init__(self, synonyms: list[str]):
        self.synonyms = synonyms
        self.calls: list[list[str]] = []

    def expand(self, keywords: list[str]) -> list[str]:
        self.calls.append(list(keywords))
        return list(keywords) + self.synonyms


def _query(**kwargs) -> QueryAnalysis:
    kwargs.setdefault("raw_text", "금연구역 과태료는 얼마인가요")
    kwargs.setdefault("keywords", ["금연구역", "과태료"])
    return QueryAnalysis(**kwargs)


class TestValidation:
    @pytest.mark.asyncio
    async def test_empty_query_rejected_before_store_access(self, store) -> None:
        counting = CountingStore(store)
        service = SearchService(counting)

        with pytest.raises(InvalidQuery):
            await service.search(QueryAnalysis(raw_text="   ", keywords=["", " "]))
        assert counting.calls == []

    @pytest.mark.asyncio
    async def test_empty_corpus_raises_no_results(self) -> None:
        service = SearchService(InMemoryChunkStore([]))

        with pytest.raises(NoResults) as exc_info:
            await service.search(_query())
        assert exc_info.value.metrics.total_processed == 0
        assert exc_info.value.metrics.unique_results == 0

    @pytest.mark.asyncio
    async def test_all_stages_failing_raises(self, store) -> None:
        failing = FailingStore(
            store, {"fetch_by_keywords", "fetch_by_text", "fetch_by_vector", "fetch_all"}
        )
        with pytest.raises(StoreUnavailable):
            await SearchService(failing).search(_query())


class TestSearch:
    @pytest.mark.asyncio
    async def test_returns_ranked_chunks(self, store) -> None:
        response = await SearchService(store).search(_query())

        assert response.chunks[0].id == "c1"
        assert response.metrics.selected == len(response.chunks)
        assert response.metrics.unique_results >= len(response.chunks)
        assert response.metrics.total_processed >= response.metrics.unique_results

    @pytest.mark.asyncio
    async def test_no_duplicate_chunks(self, store) -> None:
        response = await SearchService(store).search(_query(complexity=QueryComplexity.COMPLEX))
        ids = [c.id for c in response.chunks]
        assert len(ids) == len(set(ids))

    @pytest.mark.asyncio
    async def test_deterministic(self, store) -> None:
        service = SearchService(store, embedder=FakeEmbedder([0.6, 0.8, 0.0]))
        first = await service.search(_query())
        second = await service.search(_query())

        assert [c.id for c in first.chunks] == [c.id for c in second.chunks]
        assert [c.total_score for c in first.chunks] == [c.total_score for c in second.chunks]

    @pytest.mark.asyncio
    async def test_scores_and_metrics_bounded(self, store) -> None:
        response = await SearchService(store, embedder=FakeEmbedder([1.0, 1.0, 1.0])).search(
            _query(complexity=QueryComplexity.COMPLEX)
        )
        for chunk in response.chunks:
            assert 0.0 <= chunk.total_score <= 1.0
            assert 0.0 <= chunk.quality.overall <= 1.0
        assert 0.0 <= response.metrics.search_coverage <= 1.0
        assert 0.0 < response.metrics.result_diversity <= 1.0

    @pytest.mark.asyncio
    async def test_synonym_only_match(self, store) -> None:
        """A chunk matching only an expansion scores on synonym, not keyword."""
        query = QueryAnalysis(
            raw_text="체육관 흡연",
            keywords=["체육관"],
            expanded_keywords=["체육관", "운동시설"],
        )
        response = await SearchService(store).search(query)

        c2 = next(c for c in response.chunks if c.id == "c2")
        assert c2.breakdown.keyword == 0.0
        assert c2.breakdown.synonym > 0.0
        assert c2.total_score == pytest.approx(0.3 * c2.breakdown.synonym)

    @pytest.mark.asyncio
    async def test_direct_keyword_match_ranks_above_synonym_only(self) -> None:
        """Equal synonym strength: the chunk that also has the keyword wins."""
        with_keyword = make_chunk("a", "체육관과 운동시설은 금연이다.", position=1)
        synonym_only = make_chunk("b", "운동시설은 금연이다. 흡연 시 과태료.", position=0)
        query = QueryAnalysis(
            raw_text="체육관", keywords=["체육관"], expanded_keywords=["운동시설"]
        )
        store = InMemoryChunkStore([synonym_only, with_keyword])

        response = await SearchService(store).search(query)

        by_id = {c.id: c for c in response.chunks}
        assert by_id["a"].breakdown.synonym == by_id["b"].breakdown.synonym
        assert by_id["a"].breakdown.keyword > 0.0
        assert by_id["b"].breakdown.keyword == 0.0
        assert [c.id for c in response.chunks] == ["a", "b"]

        result = await MultiStageOrchestrator(store).run(query)
        assert [s.id for s in deduplicate_and_rank(result.scored)] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_budget_overrides(self, store) -> None:
        response = await SearchService(store).search(
            _query(complexity=QueryComplexity.COMPLEX), max_chunks=1
        )
        assert len(response.chunks) == 1

    @pytest.mark.asyncio
    async def test_oversized_first_chunk_still_returned(self, store) -> None:
        response = await SearchService(store).search(_query(), max_context_chars=10)
        assert len(response.chunks) == 1

    @pytest.mark.asyncio
    async def test_context_and_sources(self, store) -> None:
        response = await SearchService(store).search(_query())

        assert response.context.startswith("[1] 금연구역 지정 안내 (p. 1):\n")
        assert response.chunks[0].content in response.context
        assert response.sources == ["guide.pdf"]

    @pytest.mark.asyncio
    async def test_partial_stage_failure_lowers_coverage(self, store) -> None:
        failing = FailingStore(store, {"fetch_by_vector"})
        service = SearchService(failing, embedder=FakeEmbedder([1.0, 0.0, 0.0]))
        response = await service.search(_query())

        assert response.metrics.search_coverage == pytest.approx(0.75)
        assert [s.name for s in response.stages if not s.success] == ["semantic"]


class TestQueryPreparation:
    @pytest.mark.asyncio
    async def test_embedding_computed_once(self, store) -> None:
        embedder = FakeEmbedder([1.0, 0.0, 0.0])
        response = await SearchService(store, embedder=embedder).search(_query())

        assert embedder.calls == ["금연구역 과태료는 얼마인가요"]
        assert response.metrics.embedding_used is True
        c1 = next(c for c in response.chunks if c.id == "c1")
        assert c1.breakdown.semantic == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_precomputed_embedding_not_recomputed(self, store) -> None:
        embedder = FakeEmbedder([0.0, 1.0, 0.0])
        await SearchService(store, embedder=embedder).search(_query(embedding=[1.0, 0.0, 0.0]))
        assert embedder.calls == []

    @pytest.mark.asyncio
    async def test_embedding_failure_degrades(self, store) -> None:
        response = await SearchService(store, embedder=BrokenEmbedder()).search(_query())

        assert response.chunks
        assert response.metrics.embedding_used is False
        assert all(c.breakdown.semantic == 0.0 for c in response.chunks)
        assert "semantic" not in [s.name for s in response.stages]

    @pytest.mark.asyncio
    async def test_empty_embedding_treated_as_missing(self, store) -> None:
        response = await SearchService(store, embedder=FakeEmbedder([])).search(_query())
        assert response.metrics.embedding_used is False

    @pytest.mark.asyncio
    async def test_expander_used_when_no_expansions(self, store) -> None:
        expander = RecordingExpander(["흡연금지구역"])
        await SearchService(store, expander=expander).search(_query())
        assert expander.calls == [["금연구역", "과태료"]]

    @pytest.mark.asyncio
    async def test_expander_skipped_when_expansions_given(self, store) -> None:
        expander = RecordingExpander(["흡연금지구역"])
        await SearchService(store, expander=expander).search(
            _query(expanded_keywords=["금연구역", "금연장소"])
        )
        assert expander.calls == []
