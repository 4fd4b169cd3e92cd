"""Scoring and selection knobs with their documented defaults."""
from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringWeights:
    """Fusion weights for keyword/synonym/semantic scores."""
    keyword: float = 0.4
    synonym: float = 0.3
    semantic: float = 0.3


@dataclass(frozen=True)
class QualityWeights:
    """Weights of the quality sub-scores in the overall score."""
    relevance: float = 0.4
    completeness: float = 0.3
    accuracy: float = 0.2
    clarity: float = 0.1


@dataclass(frozen=True)
class ContextBudgetPolicy:
    """Context size limits derived from query complexity and category."""
    base_chars: int = 15000
    max_chars: int = 50000
    max_chunks: int = 15
    simple_multiplier: float = 1.0
    medium_multiplier: float = 1.7
    complex_multiplier: float = 3.3
    simple_chunks: int = 3
    medium_chunks: int = 8
    complex_chunks: int = 15
    category_bonus_chars: int = 10000
    category_bonus_chunks: int = 3
    many_keywords_threshold: int = 5
    keyword_bonus_chars: int = 5000
    keyword_bonus_chunks: int = 2
