"""Dictionary-based synonym expansion."""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class DictionarySynonymExpander:
    """Expand keywords from a JSON synonym dictionary.

    The file holds either a flat ``{"term": ["synonym", ...]}`` mapping or
    domain-grouped mappings ``{"domain": {"term": [...]}}``.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        mappings: Optional[dict[str, list[str]]] = None,
    ):
        """Initialize expander.

        Args:
            path: Path to the synonym dictionary JSON.
            mappings: Inline term -> synonyms mapping (merged after the file).
        """
        self._synonyms: dict[str, list[str]] = {}
        if path:
            self._merge(self._load(path))
        if mappings:
            self._merge(mappings)

    def _load(self, path: str) -> dict:
        """Load dictionary from JSON."""
        dictionary_file = Path(path)
        if not dictionary_file.exists():
            logger.warning(f"Synonym dictionary {path} not found, expansion disabled")
            return {}

        with open(dictionary_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        logger.info(f"Synonym dictionary loaded from {path}")
        return data

    def _merge(self, data: dict) -> None:
        for key, value in data.items():
            if isinstance(value, dict):
                self._merge(value)
                continue
            bucket = self._synonyms.setdefault(key, [])
            bucket.extend(s for s in value if s not in bucket)

    @property
    def size(self) -> int:
        return len(self._synonyms)

    def expand(self, keywords: list[str]) -> list[str]:
        """Keywords plus direct and partially matching synonyms, sorted."""
        expanded: set[str] = set()

        for keyword in keywords:
            if not keyword:
                continue
            expanded.add(keyword)
            expanded.update(self._synonyms.get(keyword, ()))

            for term, synonyms in self._synonyms.items():
                if term in keyword or keyword in term:
                    expanded.add(term)
                    expanded.update(synonyms)

        return sorted(expanded)
