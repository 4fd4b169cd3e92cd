"""Search result models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .chunk import Chunk
from .weights import ScoringWeights


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-strategy scores of a chunk, each in [0, 1]."""
    keyword: float = 0.0
    synonym: float = 0.0
    semantic: float = 0.0

    def total(self, weights: ScoringWeights) -> float:
        """Weighted sum, clamped to [0, 1]."""
        score = (
            self.keyword * weights.keyword
            + self.synonym * weights.synonym
            + self.semantic * weights.semantic
        )
        return min(max(score, 0.0), 1.0)


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk with its fused score."""
    chunk: Chunk
    breakdown: ScoreBreakdown
    total_score: float
    stage: str = ""

    @property
    def id(self) -> str:
        return self.chunk.id


class Importance(Enum):
    """Importance bucket derived from relevance."""
    HIGH = "high"      # relevance >= 0.8
    MEDIUM = "medium"  # relevance >= 0.6
    LOW = "low"


@dataclass(frozen=True)
class QualityMetrics:
    """Quality sub-scores, each in [0, 1]."""
    relevance: float
    completeness: float
    accuracy: float
    clarity: float
    overall: float


@dataclass(frozen=True)
class ContextInfo:
    document_type: str
    section: str
    importance: Importance


@dataclass(frozen=True)
class EnhancedChunk:
    """Scored chunk with quality metrics; what callers receive."""
    chunk: Chunk
    breakdown: ScoreBreakdown
    total_score: float
    quality: QualityMetrics
    context_info: ContextInfo

    @property
    def id(self) -> str:
        return self.chunk.id

    @property
    def content(self) -> str:
        return self.chunk.content


@dataclass
class SearchStage:
    """One retrieval attempt within a single orchestrator run."""
    name: str
    weight: float
    results: list[ScoredChunk] = field(default_factory=list)
    execution_time: float = 0.0  # ms
    success: bool = True
    error: Optional[str] = None


@dataclass
class SearchMetrics:
    """Counters and averages describing one search."""
    total_processed: int = 0
    unique_results: int = 0
    selected: int = 0
    average_relevance: float = 0.0
    score_breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    execution_time: float = 0.0  # ms
    search_coverage: float = 0.0
    result_diversity: float = 0.0
    fallback_used: bool = False
    embedding_used: bool = False


@dataclass
class QualitySummary:
    """Aggregate quality of a selection."""
    total_chunks: int = 0
    average_relevance: float = 0.0
    average_completeness: float = 0.0
    average_accuracy: float = 0.0
    average_clarity: float = 0.0
    average_overall: float = 0.0
    high_quality_chunks: int = 0
    medium_quality_chunks: int = 0
    low_quality_chunks: int = 0


@dataclass
class SearchResponse:
    """Search response for presentation layer."""
    chunks: list[EnhancedChunk]
    metrics: SearchMetrics
    stages: list[SearchStage]
    context: str
    sources: list[str]
