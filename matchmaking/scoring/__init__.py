"""Similarity and directional scoring."""

from .similarity import SimilarityEngine
from .directional import DirectionalScorer, ScoringConfig, DEFAULT_IMPORTANCE_WEIGHTS

__all__ = ["SimilarityEngine", "DirectionalScorer", "ScoringConfig", "DEFAULT_IMPORTANCE_WEIGHTS"]
