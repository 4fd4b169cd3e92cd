"""Chunk domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True)
class ChunkMetadata:
    """Location and provenance of a chunk inside its document."""
    source: str = "Unknown"
    title: str = "Unknown"
    section: str = "general"
    page: int = 0
    position: int = 0
    start_offset: int = 0
    end_offset: int = 0
    original_size: int = 0
    document_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ChunkMetadata":
        return cls(
            source=_pick(data, "source", default="Unknown"),
            title=_pick(data, "title", default="Unknown"),
            section=_pick(data, "section", default="general"),
            page=int(_pick(data, "page", default=0)),
            position=int(_pick(data, "position", default=0)),
            start_offset=int(
                _pick(data, "start_offset", "startOffset", "startPos", "startPosition", default=0)
            ),
            end_offset=int(
                _pick(data, "end_offset", "endOffset", "endPos", "endPosition", default=0)
            ),
            original_size=int(_pick(data, "original_size", "originalSize", default=0)),
            document_type=_pick(data, "document_type", "documentType"),
        )


@dataclass(frozen=True)
class Chunk:
    """Immutable unit of retrievable text."""
    id: str
    document_id: str
    content: str
    keywords: tuple[str, ...] = ()
    embedding: Optional[list[float]] = field(default=None, compare=False, repr=False)
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError(f"Chunk {self.id!r} has empty content")
        if not isinstance(self.keywords, tuple):
            object.__setattr__(self, "keywords", tuple(self.keywords))

    @property
    def position(self) -> int:
        return self.metadata.position

    @classmethod
    def from_dict(cls, data: dict) -> "Chunk":
        """Build a chunk from an ingestion record (camelCase or snake_case)."""
        embedding = data.get("embedding")
        return cls(
            id=str(data["id"]),
            document_id=str(_pick(data, "document_id", "documentId", default="")),
            content=data.get("content") or "",
            keywords=tuple(data.get("keywords") or ()),
            embedding=[float(v) for v in embedding] if embedding else None,
            metadata=ChunkMetadata.from_dict(data.get("metadata") or {}),
        )
