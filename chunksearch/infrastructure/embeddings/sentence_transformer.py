import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

from chunksearch.core.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(self, model_name: str = "intfloat/multilingual-e5-base"):
        self._model_name = model_name

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        return SentenceTransformer(self._model_name)

    def embed(self, text: str) -> list[float]:
        try:
            vector = self.model.encode(f"query: {text}", convert_to_numpy=True)
        except Exception as e:
            raise EmbeddingUnavailable(f"Embedding failed ({self._model_name}): {e}") from e
        return np.asarray(vector, dtype=np.float64).ravel().tolist()
