"""Scoring and budget strategies."""
from .budget import ContextBudget, ContextBudgetStrategy
from .scoring import ChunkScorer, LexicalScorer, SemanticScorer, SynonymScorer

__all__ = [
    "ContextBudget",
    "ContextBudgetStrategy",
    "ChunkScorer",
    "LexicalScorer",
    "SemanticScorer",
    "SynonymScorer",
]
