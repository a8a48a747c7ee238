"""Evaluation module for run diagnostics."""

from .diagnostics import (
    compute_score_distribution_stats,
    compute_reciprocity,
    score_histogram,
    ScoreDistributionStats,
    RunDiagnostics,
    PhaseTimer
)

__all__ = [
    "compute_score_distribution_stats",
    "compute_reciprocity",
    "score_histogram",
    "ScoreDistributionStats",
    "RunDiagnostics",
    "PhaseTimer"
]
