"""Domain models."""
from .chunk import Chunk, ChunkMetadata
from .query import QueryAnalysis, QueryCategory, QueryComplexity
from .search import (
    ContextInfo,
    EnhancedChunk,
    Importance,
    QualityMetrics,
    QualitySummary,
    ScoreBreakdown,
    ScoredChunk,
    SearchMetrics,
    SearchResponse,
    SearchStage,
)
from .weights import ContextBudgetPolicy, QualityWeights, ScoringWeights

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "QueryAnalysis",
    "QueryCategory",
    "QueryComplexity",
    "ContextInfo",
    "EnhancedChunk",
    "Importance",
    "QualityMetrics",
    "QualitySummary",
    "ScoreBreakdown",
    "ScoredChunk",
    "SearchMetrics",
    "SearchResponse",
    "SearchStage",
    "ContextBudgetPolicy",
    "QualityWeights",
    "ScoringWeights",
]
