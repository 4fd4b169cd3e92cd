"""Query analysis models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class QueryCategory(Enum):
    """Kind of question being asked."""
    DEFINITION = "definition"
    PROCEDURE = "procedure"
    REGULATION = "regulation"
    COMPARISON = "comparison"
    ANALYSIS = "analysis"
    GENERAL = "general"


class QueryComplexity(Enum):
    """Estimated complexity; drives context budget sizing."""
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


@dataclass
class QueryAnalysis:
    """Analyzed user query: the input of a search."""
    raw_text: str
    keywords: list[str] = field(default_factory=list)
    expanded_keywords: list[str] = field(default_factory=list)
    embedding: Optional[list[float]] = None
    category: QueryCategory = QueryCategory.GENERAL
    complexity: QueryComplexity = QueryComplexity.SIMPLE
    document_id: Optional[str] = None

    @property
    def clean_keywords(self) -> list[str]:
        """Keywords with blank entries removed."""
        return [k.strip() for k in self.keywords if k and k.strip()]

    @property
    def clean_expanded_keywords(self) -> list[str]:
        return [k.strip() for k in self.expanded_keywords if k and k.strip()]

    def is_empty(self) -> bool:
        return not self.clean_keywords and not self.raw_text.strip()
