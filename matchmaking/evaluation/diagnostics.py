"""
Run diagnostics.

Collects phase-by-phase counts, score distributions and timings for one
matching run. Diagnostics describe what the engine did; they are the main
tool for explaining why a participant ended up unmatched.
"""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence

import numpy as np
from scipy.stats import spearmanr

logger = logging.getLogger(__name__)

HISTOGRAM_BIN_WIDTH = 20


@dataclass
class ScoreDistributionStats:
    """Statistics about a score distribution."""
    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 42.0, "p50": 61.5, "p90": 80.2}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": int(self.count),
            "mean": float(self.mean),
            "median": float(self.median),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


def compute_score_distribution_stats(
    scores: Sequence[float],
    quantiles: Sequence[float] = (0.1, 0.25, 0.5, 0.75, 0.9)
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for scores.

    An empty input gives count 0 and zeros everywhere.

    Args:
        scores: Scores on the 0-100 scale
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    values = np.asarray(scores, dtype=float)
    if values.size == 0:
        return ScoreDistributionStats(
            count=0, mean=0.0, median=0.0, std=0.0, min=0.0, max=0.0,
            quantiles={f"p{int(q * 100)}": 0.0 for q in quantiles}
        )

    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(values, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        count=int(values.size),
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values)),
        min=float(np.min(values)),
        max=float(np.max(values)),
        quantiles=quantile_dict
    )


def compute_reciprocity(scores_ab: Sequence[float], scores_ba: Sequence[float]) -> Optional[float]:
    """
    Spearman rank correlation between the two directional scores of each pair.

    High values mean interest tends to be mutual; values near zero mean the
    two sides of a pair rate each other independently. Returns None when
    there are fewer than three pairs or either side is constant.
    """
    a = np.asarray(scores_ab, dtype=float)
    b = np.asarray(scores_ba, dtype=float)
    if a.size < 3 or a.min() == a.max() or b.min() == b.max():
        return None
    correlation, _ = spearmanr(a, b)
    return float(correlation)


def score_histogram(scores: Sequence[float], bin_width: int = HISTOGRAM_BIN_WIDTH) -> Dict[str, int]:
    """Bucket 0-100 scores into fixed-width ranges such as "0-20" ... "80-100"."""
    edges = np.arange(0, 100 + bin_width, bin_width)
    counts, _ = np.histogram(np.asarray(scores, dtype=float), bins=edges)
    return {f"{int(lo)}-{int(hi)}": int(c) for lo, hi, c in zip(edges[:-1], edges[1:], counts)}


@dataclass
class RunDiagnostics:
    """
    Complete diagnostics for one run.

    Sections are plain dictionaries produced by each phase's report so the
    whole object serializes directly to JSON.
    """
    n_participants: int = 0
    n_candidate_pairs: int = 0
    hard_filter: Dict[str, Any] = field(default_factory=dict)
    pair_scores: Optional[ScoreDistributionStats] = None
    score_histogram: Dict[str, int] = field(default_factory=dict)
    directional_asymmetry: Optional[ScoreDistributionStats] = None
    reciprocity: Optional[float] = None
    eligibility: Dict[str, Any] = field(default_factory=dict)
    perfectionists: List[str] = field(default_factory=list)
    n_matches: int = 0
    n_matched_participants: int = 0
    unmatched_by_reason: Dict[str, int] = field(default_factory=dict)
    matched_scores: Optional[ScoreDistributionStats] = None
    phase_times_ms: Dict[str, float] = field(default_factory=dict)
    execution_time_ms: float = 0.0
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_participants": self.n_participants,
            "n_candidate_pairs": self.n_candidate_pairs,
            "hard_filter": self.hard_filter,
            "pair_scores": self.pair_scores.to_dict() if self.pair_scores else None,
            "score_histogram": self.score_histogram,
            "directional_asymmetry": (
                self.directional_asymmetry.to_dict() if self.directional_asymmetry else None
            ),
            "reciprocity": self.reciprocity,
            "eligibility": self.eligibility,
            "perfectionists": list(self.perfectionists),
            "n_matches": self.n_matches,
            "n_matched_participants": self.n_matched_participants,
            "unmatched_by_reason": self.unmatched_by_reason,
            "matched_scores": self.matched_scores.to_dict() if self.matched_scores else None,
            "phase_times_ms": {k: round(v, 3) for k, v in self.phase_times_ms.items()},
            "execution_time_ms": round(self.execution_time_ms, 3),
            "notes": list(self.notes)
        }

    def save(self, filepath: str) -> None:
        """Save diagnostics to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved run diagnostics to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the run."""
        lines = [
            "Matching Run Diagnostics",
            "=" * 50,
            f"Participants:      {self.n_participants}",
            f"Candidate pairs:   {self.n_candidate_pairs}",
        ]

        if self.hard_filter:
            lines.append(f"Hard-filtered:     {self.hard_filter.get('pairs_filtered', 0)}")
            for category, count in self.hard_filter.get("filtered_by_category", {}).items():
                lines.append(f"  {category}: {count}")

        if self.pair_scores and self.pair_scores.count:
            lines.extend([
                "",
                f"Pair Scores ({self.pair_scores.count}):",
                f"  Mean:   {self.pair_scores.mean:.2f}",
                f"  Median: {self.pair_scores.median:.2f}",
                f"  Min:    {self.pair_scores.min:.2f}",
                f"  Max:    {self.pair_scores.max:.2f}",
            ])
            for bucket, count in self.score_histogram.items():
                lines.append(f"  [{bucket}]: {count}")
            if self.reciprocity is not None:
                lines.append(f"  Reciprocity (Spearman): {self.reciprocity:.3f}")

        if self.eligibility:
            lines.extend([
                "",
                "Eligibility:",
                f"  Eligible pairs:   {self.eligibility.get('pairs_eligible', 0)}",
                f"  Failed absolute:  {self.eligibility.get('failed_absolute', 0)}",
                f"  Failed relative:  {self.eligibility.get('failed_relative', 0)}",
                f"  Perfectionists:   {len(self.perfectionists)}",
            ])

        lines.extend([
            "",
            f"Matches created:   {self.n_matches}",
        ])
        for reason, count in self.unmatched_by_reason.items():
            lines.append(f"  unmatched ({reason}): {count}")
        if self.matched_scores and self.matched_scores.count:
            lines.append(f"  Mean matched score: {self.matched_scores.mean:.2f}")

        lines.extend(["", f"Execution time:    {self.execution_time_ms:.1f} ms"])
        for phase, ms in self.phase_times_ms.items():
            lines.append(f"  {phase}: {ms:.1f} ms")
        for note in self.notes:
            lines.append(f"Note: {note}")

        return "\n".join(lines)


class PhaseTimer:
    """Wall-clock timings per named phase, in milliseconds."""

    def __init__(self):
        self.times_ms: Dict[str, float] = {}
        self._started = time.perf_counter()

    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.times_ms[name] = (time.perf_counter() - start) * 1000.0
            logger.debug(f"Phase {name} took {self.times_ms[name]:.1f} ms")

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000.0
