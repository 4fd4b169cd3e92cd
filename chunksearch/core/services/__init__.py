"""Core search services."""
from .orchestrator import MultiStageOrchestrator, OrchestrationResult
from .quality_optimizer import QualityOptimizer
from .ranker import deduplicate_and_rank
from .search_service import SearchService

__all__ = [
    "MultiStageOrchestrator",
    "OrchestrationResult",
    "QualityOptimizer",
    "deduplicate_and_rank",
    "SearchService",
]
