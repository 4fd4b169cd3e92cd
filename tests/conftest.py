"""
Shared test fixtures for the search pipeline.

Provides: chunk factory, small Korean regulation corpus, in-memory store,
fake embedding providers, counting/failing store wrappers
"""

from typing import Optional

import pytest

from chunksearch.core.errors import EmbeddingUnavailable, StoreUnavailable
from chunksearch.core.models.chunk import Chunk, ChunkMetadata
from chunksearch.infrastructure.chunk_stores.memory_store import InMemoryChunkStore


def make_chunk(
    chunk_id: str,
    content: str,
    keywords: tuple[str, ...] = (),
    document_id: str = "doc-1",
    position: int = 0,
    embedding: Optional[list[float]] = None,
    source: str = "guide.pdf",
    document_type: Optional[str] = "legal",
    section: str = "general",
    page: int = 1,
) -> Chunk:
    """Build a chunk with sensible metadata defaults."""
    return Chunk(
        id=chunk_id,
        document_id=document_id,
        content=content,
        keywords=keywords,
        embedding=embedding,
        metadata=ChunkMetadata(
            source=source,
            title="금연구역 지정 안내",
            section=section,
            page=page,
            position=position,
            document_type=document_type,
        ),
    )


class FakeEmbedder:
    """Embedding provider returning a fixed vector and counting calls."""

    def __init__(self, vector: list[float]):
        self.vector = vector
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vector)


class BrokenEmbedder:
    """Embedding provider that always fails."""

    def embed(self, text: str) -> list[float]:
        raise EmbeddingUnavailable("model not loaded")


class CountingStore:
    """Wrap a store and record every call."""

    def __init__(self, inner):
        self.inner = inner
        self.calls: list[str] = []

    async def fetch_by_keywords(self, keywords, document_id=None, limit=15):
        self.calls.append("fetch_by_keywords")
        return await self.inner.fetch_by_keywords(keywords, document_id, limit)

    async def fetch_by_text(self, text, document_id=None, limit=10):
        self.calls.append("fetch_by_text")
        return await self.inner.fetch_by_text(text, document_id, limit)

    async def fetch_by_vector(self, embedding, document_id=None, limit=10):
        self.calls.append("fetch_by_vector")
        return await self.inner.fetch_by_vector(embedding, document_id, limit)

    async def fetch_all(self, limit=10000):
        self.calls.append("fetch_all")
        return await self.inner.fetch_all(limit)


class FailingStore(CountingStore):
    """Store whose selected operations raise StoreUnavailable."""

    def __init__(self, inner, failing: set[str]):
        super().__init__(inner)
        self.failing = failing

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise StoreUnavailable(f"{name} unavailable", cause=ConnectionError("refused"))

    async def fetch_by_keywords(self, keywords, document_id=None, limit=15):
        self._check("fetch_by_keywords")
        return await super().fetch_by_keywords(keywords, document_id, limit)

    async def fetch_by_text(self, text, document_id=None, limit=10):
        self._check("fetch_by_text")
        return await super().fetch_by_text(text, document_id, limit)

    async def fetch_by_vector(self, embedding, document_id=None, limit=10):
        self._check("fetch_by_vector")
        return await super().fetch_by_vector(embedding, document_id, limit)

    async def fetch_all(self, limit=10000):
        self._check("fetch_all")
        return await super().fetch_all(limit)


@pytest.fixture
def corpus() -> list[Chunk]:
    """Small corpus about smoke-free zones and sports facilities."""
    return [
        make_chunk(
            "c1",
            "금연구역은 국민건강증진법에 따라 지정된다. 금연구역에서 흡연하면 과태료 10만원이 부과된다.",
            keywords=("금연구역", "과태료"),
            position=0,
            embedding=[1.0, 0.0, 0.0],
        ),
        make_chunk(
            "c2",
            "운동시설 이용 시 실내 흡연은 금지된다. 운동시설 관리자는 안내 표지를 설치해야 한다.",
            keywords=("시설관리",),
            position=1,
            embedding=[0.0, 1.0, 0.0],
        ),
        make_chunk(
            "c3",
            "체육시설의 설치 및 이용에 관한 규정은 2023년 1월 1일부터 시행된다.",
            keywords=("체육시설",),
            document_id="doc-2",
            position=0,
            embedding=[0.6, 0.8, 0.0],
            document_type="guideline",
        ),
        make_chunk(
            "c4",
            "공원과 놀이터는 지방자치단체 조례로 금연구역으로 지정할 수 있다.",
            keywords=("공원", "놀이터"),
            document_id="doc-2",
            position=1,
            embedding=[0.0, 0.0, 1.0],
            document_type="guideline",
        ),
    ]


@pytest.fixture
def store(corpus: list[Chunk]) -> InMemoryChunkStore:
    """In-memory store over the sample corpus."""
    return InMemoryChunkStore(corpus)
