from pydantic_settings import BaseSettings

from ..core.models.weights import ContextBudgetPolicy, QualityWeights, ScoringWeights


class Settings(BaseSettings):

    store_backend: str = "memory"  # "memory" | "chroma"
    corpus_path: str = "./data/chunks.json"

    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "chunks"

    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_enabled: bool = True

    synonyms_path: str = "./data/synonyms.json"

    # Fusion weights
    score_keyword_weight: float = 0.4
    score_synonym_weight: float = 0.3
    score_semantic_weight: float = 0.3

    # Quality weights
    quality_relevance_weight: float = 0.4
    quality_completeness_weight: float = 0.3
    quality_accuracy_weight: float = 0.2
    quality_clarity_weight: float = 0.1

    fallback_min_results: int = 50
    stage_fetch_limit: int = 500
    full_scan_limit: int = 10000
    score_batch_size: int = 100

    # Context budget
    context_base_chars: int = 15000
    context_max_chars: int = 50000
    context_max_chunks: int = 15

    class Config:
        env_file = ".env"
        extra = "ignore"

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            keyword=self.score_keyword_weight,
            synonym=self.score_synonym_weight,
            semantic=self.score_semantic_weight,
        )

    def quality_weights(self) -> QualityWeights:
        return QualityWeights(
            relevance=self.quality_relevance_weight,
            completeness=self.quality_completeness_weight,
            accuracy=self.quality_accuracy_weight,
            clarity=self.quality_clarity_weight,
        )

    def budget_policy(self) -> ContextBudgetPolicy:
        return ContextBudgetPolicy(
            base_chars=self.context_base_chars,
            max_chars=self.context_max_chars,
            max_chunks=self.context_max_chunks,
        )


settings = Settings()
