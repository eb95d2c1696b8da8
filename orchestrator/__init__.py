"""orchestrator: entry points used by the surrounding service."""

from orchestrator.recommendation_orchestrator import RecommendationOrchestrator

__all__ = ["RecommendationOrchestrator"]
