"""Synonym expander protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class SynonymExpanderProtocol(Protocol):
    """Protocol for keyword expansion."""

    def expand(self, keywords: list[str]) -> list[str]:
        """Expand keywords with related terms.

        Pure function; may return the input unchanged.

        Args:
            keywords: Normalized query keywords.

        Returns:
            Superset of the keywords.
        """
        ...
