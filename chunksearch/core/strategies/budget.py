import logging
from dataclasses import dataclass
from typing import Optional

from ..models.query import QueryAnalysis, QueryCategory, QueryComplexity
from ..models.weights import ContextBudgetPolicy

logger = logging.getLogger(__name__)

WIDE_CATEGORIES = {QueryCategory.COMPARISON, QueryCategory.ANALYSIS}


@dataclass(frozen=True)
class ContextBudget:
    """Resolved selection limits for one search."""
    max_chunks: int
    max_context_chars: int


class ContextBudgetStrategy:
    """Size the context budget from query complexity and category."""

    def __init__(self, policy: ContextBudgetPolicy | None = None):
        self._policy = policy or ContextBudgetPolicy()

    def resolve(
        self,
        query: QueryAnalysis,
        max_chunks: Optional[int] = None,
        max_context_chars: Optional[int] = None,
    ) -> ContextBudget:
        """Compute limits; caller-supplied values always win.

        Args:
            query: Analyzed query.
            max_chunks: Explicit chunk cap (optional).
            max_context_chars: Explicit character budget (optional).

        Returns:
            Resolved budget.
        """
        p = self._policy

        if query.complexity is QueryComplexity.COMPLEX:
            chars = p.base_chars * p.complex_multiplier
            chunks = p.complex_chunks
        elif query.complexity is QueryComplexity.MEDIUM:
            chars = p.base_chars * p.medium_multiplier
            chunks = p.medium_chunks
        else:
            chars = p.base_chars * p.simple_multiplier
            chunks = p.simple_chunks

        if query.category in WIDE_CATEGORIES:
            chars = min(chars + p.category_bonus_chars, p.max_chars)
            chunks = min(chunks + p.category_bonus_chunks, p.max_chunks)

        if len(query.clean_keywords) > p.many_keywords_threshold:
            chars = min(chars + p.keyword_bonus_chars, p.max_chars)
            chunks = min(chunks + p.keyword_bonus_chunks, p.max_chunks)

        budget = ContextBudget(
            max_chunks=max_chunks if max_chunks is not None else chunks,
            max_context_chars=(
                max_context_chars if max_context_chars is not None else int(round(chars))
            ),
        )

        logger.info(
            f"Context budget: {budget.max_context_chars} chars, {budget.max_chunks} chunks "
            f"(complexity={query.complexity.value}, category={query.category.value})"
        )
        return budget
