import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


@dataclass
class _Registration:
    factory: Callable[[], Any]
    singleton: bool = False
    instance: Any = _UNSET


@dataclass
class Container:
    """Factory registry keyed by protocol or service class."""
    _registrations: dict[type, _Registration] = field(default_factory=dict)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface, replacing any earlier one.

        Args:
            interface: Protocol or class the factory provides.
            factory: Zero-argument factory.
            singleton: Build once and reuse the instance.
        """
        self._registrations[interface] = _Registration(factory=factory, singleton=singleton)

    def resolve(self, interface: type[T]) -> T:
        registration = self._registrations.get(interface)
        if registration is None:
            raise KeyError(f"No factory registered for {interface}")

        if registration.instance is not _UNSET:
            return registration.instance

        instance = registration.factory()
        if registration.singleton:
            registration.instance = instance
        return instance

    def is_registered(self, interface: type) -> bool:
        return interface in self._registrations

    def reset(self) -> None:
        """Drop built singletons; registrations stay."""
        for registration in self._registrations.values():
            registration.instance = _UNSET


container = Container()


def _build_store(settings: Settings):
    from .infrastructure.chunk_stores.chroma_store import ChromaChunkStore
    from .infrastructure.chunk_stores.memory_store import InMemoryChunkStore

    if settings.store_backend == "chroma":
        return ChromaChunkStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
        )
    if settings.store_backend == "memory":
        return InMemoryChunkStore.from_json(settings.corpus_path)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def configure_container(settings: Settings, target: Container | None = None) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.
        target: Container to configure (defaults to the module container).

    Returns:
        Configured container.
    """
    from .core.protocols.chunk_store import ChunkStoreProtocol
    from .core.protocols.embedding_provider import EmbeddingProviderProtocol
    from .core.protocols.synonym_expander import SynonymExpanderProtocol
    from .core.services.search_service import SearchService
    from .infrastructure.synonyms.dictionary_expander import DictionarySynonymExpander

    c = target if target is not None else container

    c.register(ChunkStoreProtocol, lambda: _build_store(settings), singleton=True)

    c.register(
        SynonymExpanderProtocol,
        lambda: DictionarySynonymExpander(settings.synonyms_path),
        singleton=True,
    )

    if settings.embedding_enabled:
        from .infrastructure.embeddings.sentence_transformer import (
            SentenceTransformerEmbedder,
        )

        c.register(
            EmbeddingProviderProtocol,
            lambda: SentenceTransformerEmbedder(settings.embedding_model),
            singleton=True,
        )

    c.register(
        SearchService,
        lambda: SearchService(
            store=c.resolve(ChunkStoreProtocol),
            expander=c.resolve(SynonymExpanderProtocol),
            embedder=(
                c.resolve(EmbeddingProviderProtocol)
                if c.is_registered(EmbeddingProviderProtocol)
                else None
            ),
            scoring_weights=settings.scoring_weights(),
            quality_weights=settings.quality_weights(),
            budget_policy=settings.budget_policy(),
            fallback_min_results=settings.fallback_min_results,
            stage_fetch_limit=settings.stage_fetch_limit,
            full_scan_limit=settings.full_scan_limit,
            batch_size=settings.score_batch_size,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return c
