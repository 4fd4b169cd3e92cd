import asyncio
import logging
import sys

from chunksearch.config.settings import settings
from chunksearch.container import configure_container, container
from chunksearch.core.errors import ChunkSearchError, NoResults
from chunksearch.core.models.query import QueryAnalysis
from chunksearch.core.protocols.chunk_store import ChunkStoreProtocol
from chunksearch.core.services.quality_optimizer import QualityOptimizer
from chunksearch.core.services.search_service import SearchService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def build_query(text: str, keywords: list[str]) -> QueryAnalysis:
    """Query analysis from CLI arguments; keywords default to query tokens."""
    if not keywords:
        keywords = [t for t in text.split() if len(t) > 1]
    return QueryAnalysis(raw_text=text, keywords=keywords)


async def run_search(text: str, keywords: list[str]) -> int:
    service = container.resolve(SearchService)
    try:
        response = await service.search(build_query(text, keywords))
    except NoResults:
        logger.info("No results")
        return 1

    for i, c in enumerate(response.chunks, 1):
        b = c.breakdown
        logger.info(
            f"[{i}] {c.id} ({c.chunk.metadata.source}, p. {c.chunk.metadata.page}) "
            f"overall={c.quality.overall:.3f} total={c.total_score:.3f} "
            f"kw={b.keyword:.2f} syn={b.synonym:.2f} sem={b.semantic:.2f}"
        )
        logger.info(f"    {c.content[:120]}")

    m = response.metrics
    summary = QualityOptimizer.summarize(response.chunks)
    logger.info(
        f"Processed {m.total_processed}, unique {m.unique_results}, selected {m.selected}, "
        f"avg relevance {m.average_relevance:.3f}, avg overall {summary.average_overall:.3f}, "
        f"coverage {m.search_coverage:.2f}, {m.execution_time:.0f}ms"
    )
    return 0


async def run_stats() -> int:
    store = container.resolve(ChunkStoreProtocol)
    chunks = await store.fetch_all(limit=settings.full_scan_limit)
    documents = {c.document_id for c in chunks}
    with_embeddings = sum(1 for c in chunks if c.embedding)
    logger.info(
        f"Corpus: {len(chunks)} chunks, {len(documents)} documents, "
        f"{with_embeddings} with embeddings"
    )
    return 0


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: python -m chunksearch.presentation.cli <command>")
        print("Commands: search <query> [keyword ...], stats")
        sys.exit(1)

    command = sys.argv[1]

    configure_container(settings)

    try:
        if command == "search":
            if len(sys.argv) < 3:
                print("Usage: python -m chunksearch.presentation.cli search <query> [keyword ...]")
                sys.exit(1)
            code = asyncio.run(run_search(sys.argv[2], sys.argv[3:]))
        elif command == "stats":
            code = asyncio.run(run_stats())
        else:
            print(f"Unknown command: {command}")
            sys.exit(1)
    except ChunkSearchError as e:
        logger.error(f"Search failed: {e}")
        sys.exit(2)

    sys.exit(code)


if __name__ == "__main__":
    main()
