"""
Eligibility thresholds.

A scored pair is eligible only if:
1. pair score >= absolute_minimum (global floor), and
2. each side clears its own relative floor.

The relative floor is computed over the participant's own candidate pool
(every pair that survived the hard filter):

    stddev:        mean - k * std
    percentile:    p-th percentile
    best_fraction: fraction * best
    none:          no relative floor

The pool is the participant's own directional scores by default, and each
side's directional score of the pair is what is tested against its floor.
With relative_pool = "pair" both the pool and the tested value are pair
scores. Pools smaller than min_pool_size get no relative floor.
"""

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, List, Sequence

import numpy as np

from ..exceptions import ConfigurationError
from ..schema import PairScore

logger = logging.getLogger(__name__)

RELATIVE_MODES = ("stddev", "percentile", "best_fraction", "none")
RELATIVE_POOLS = ("directional", "pair")


class RejectionReason(Enum):
    """Why a participant ended eligibility with no eligible pairs."""
    NO_CANDIDATES = "no_candidates"
    BELOW_ABSOLUTE = "below_absolute"
    BELOW_RELATIVE = "below_relative"


@dataclass
class EligibilityConfig:
    """
    Configuration for eligibility thresholds.

    Attributes:
        absolute_minimum: Global pair score floor (0-100)
        relative_mode: "stddev", "percentile", "best_fraction" or "none"
        k: Standard deviations below the pool mean (stddev mode)
        percentile: Pool percentile used as the floor (percentile mode)
        best_fraction: Fraction of the pool's best score (best_fraction mode)
        relative_pool: "directional" or "pair"
        min_pool_size: Pools smaller than this get no relative floor
        tolerance: Slack for floating point comparisons against floors
    """
    absolute_minimum: float = 50.0
    relative_mode: str = "stddev"
    k: float = 1.0
    percentile: float = 25.0
    best_fraction: float = 0.6
    relative_pool: str = "directional"
    min_pool_size: int = 3
    tolerance: float = 1e-9

    def validate(self) -> None:
        """Validate configuration values."""
        if not 0 <= self.absolute_minimum <= 100:
            raise ConfigurationError(f"absolute_minimum must be in [0, 100], got {self.absolute_minimum}")
        if self.relative_mode not in RELATIVE_MODES:
            raise ConfigurationError(f"Unknown relative_mode: {self.relative_mode}")
        if self.relative_pool not in RELATIVE_POOLS:
            raise ConfigurationError(f"Unknown relative_pool: {self.relative_pool}")
        if self.k < 0:
            raise ConfigurationError(f"k must be non-negative, got {self.k}")
        if not 0 <= self.percentile <= 100:
            raise ConfigurationError(f"percentile must be in [0, 100], got {self.percentile}")
        if not 0 <= self.best_fraction <= 1:
            raise ConfigurationError(f"best_fraction must be in [0, 1], got {self.best_fraction}")
        if self.min_pool_size < 1:
            raise ConfigurationError(f"min_pool_size must be at least 1, got {self.min_pool_size}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EligibilityConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EligibilityConfig":
        """Create from main config dictionary."""
        e = config.get("eligibility", {})
        relative = e.get("relative", {})
        return cls(
            absolute_minimum=e.get("absolute_minimum", 50.0),
            relative_mode=relative.get("mode", "stddev"),
            k=relative.get("k", 1.0),
            percentile=relative.get("percentile", 25.0),
            best_fraction=relative.get("best_fraction", 0.6),
            relative_pool=relative.get("pool", "directional"),
            min_pool_size=relative.get("min_pool_size", 3),
            tolerance=e.get("tolerance", 1e-9)
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved eligibility config to {filepath}")


@dataclass
class EligibilityReport:
    """
    Eligible pairs plus rejection diagnostics.

    Attributes:
        eligible: Pairs passing both thresholds
        relative_floors: Relative floor per participant with at least one candidate
        n_scored: Number of pairs considered
        failed_absolute: Pairs below the absolute floor
        failed_relative: Pairs above the absolute floor that failed a relative floor
        failed_relative_one_side: Of those, pairs rejected by exactly one side
        failed_relative_both_sides: Of those, pairs rejected by both sides
        rejections: Participants left with no eligible pair, with the reason
        perfectionists: Participants whose own relative floor rejects every
            pair that cleared the absolute floor
    """
    eligible: List[PairScore]
    relative_floors: Dict[str, float]
    n_scored: int
    failed_absolute: int = 0
    failed_relative: int = 0
    failed_relative_one_side: int = 0
    failed_relative_both_sides: int = 0
    rejections: Dict[str, RejectionReason] = field(default_factory=dict)
    perfectionists: List[str] = field(default_factory=list)

    def rejection_counts(self) -> Dict[str, int]:
        counts = {r.value: 0 for r in RejectionReason}
        for reason in self.rejections.values():
            counts[reason.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairs_scored": self.n_scored,
            "pairs_eligible": len(self.eligible),
            "failed_absolute": self.failed_absolute,
            "failed_relative": self.failed_relative,
            "failed_relative_one_side": self.failed_relative_one_side,
            "failed_relative_both_sides": self.failed_relative_both_sides,
            "participant_rejections": self.rejection_counts(),
            "perfectionists": list(self.perfectionists)
        }


class EligibilityFilter:
    """
    Applies the absolute and per-participant relative floors.

    Attributes:
        config: EligibilityConfig
    """

    def __init__(self, config: EligibilityConfig):
        self.config = config
        self.config.validate()

    def relative_floor(self, pool: Sequence[float]) -> float:
        """Relative floor for one participant's candidate pool."""
        if self.config.relative_mode == "none" or len(pool) < self.config.min_pool_size:
            return float("-inf")
        values = np.asarray(pool, dtype=float)
        if self.config.relative_mode == "stddev":
            return float(np.mean(values) - self.config.k * np.std(values))
        if self.config.relative_mode == "percentile":
            return float(np.percentile(values, self.config.percentile))
        if self.config.relative_mode == "best_fraction":
            return float(self.config.best_fraction * np.max(values))
        raise ValueError(f"Unknown relative_mode: {self.config.relative_mode}")

    def _tested_value(self, ps: PairScore, pid: str) -> float:
        """The value held against `pid`'s relative floor, on the same scale as the pool."""
        if self.config.relative_pool == "directional":
            return ps.directional_from(pid)
        return ps.score

    def _pools(self, pair_scores: Sequence[PairScore]) -> Dict[str, List[float]]:
        pools: Dict[str, List[float]] = defaultdict(list)
        for ps in pair_scores:
            for pid in (ps.participant_a_id, ps.participant_b_id):
                pools[pid].append(self._tested_value(ps, pid))
        return pools

    def apply(self, participant_ids: Sequence[str], pair_scores: Sequence[PairScore]) -> EligibilityReport:
        """
        Split scored pairs into eligible and rejected, with diagnostics.

        Args:
            participant_ids: Every participant in the run
            pair_scores: Scored pairs that survived the hard filter

        Returns:
            EligibilityReport
        """
        tol = self.config.tolerance
        floors = {pid: self.relative_floor(pool) for pid, pool in self._pools(pair_scores).items()}

        report = EligibilityReport(eligible=[], relative_floors=floors, n_scored=len(pair_scores))
        has_candidates = set()
        above_absolute: Dict[str, int] = defaultdict(int)
        own_floor_rejections: Dict[str, int] = defaultdict(int)
        has_eligible = set()

        for ps in pair_scores:
            a, b = ps.participant_a_id, ps.participant_b_id
            has_candidates.update((a, b))

            if ps.score < self.config.absolute_minimum - tol:
                report.failed_absolute += 1
                continue
            above_absolute[a] += 1
            above_absolute[b] += 1

            fails_a = self._tested_value(ps, a) < floors[a] - tol
            fails_b = self._tested_value(ps, b) < floors[b] - tol
            if fails_a:
                own_floor_rejections[a] += 1
            if fails_b:
                own_floor_rejections[b] += 1

            if fails_a or fails_b:
                report.failed_relative += 1
                if fails_a and fails_b:
                    report.failed_relative_both_sides += 1
                else:
                    report.failed_relative_one_side += 1
                continue

            report.eligible.append(ps)
            has_eligible.update((a, b))

        for pid in participant_ids:
            if above_absolute[pid] > 0 and own_floor_rejections[pid] == above_absolute[pid]:
                report.perfectionists.append(pid)
            if pid in has_eligible:
                continue
            if pid not in has_candidates:
                report.rejections[pid] = RejectionReason.NO_CANDIDATES
            elif above_absolute[pid] == 0:
                report.rejections[pid] = RejectionReason.BELOW_ABSOLUTE
            else:
                report.rejections[pid] = RejectionReason.BELOW_RELATIVE

        logger.info(
            f"Eligibility: {len(report.eligible)}/{len(pair_scores)} pairs eligible "
            f"(failed absolute={report.failed_absolute}, failed relative={report.failed_relative})"
        )
        if report.perfectionists:
            logger.info(f"Perfectionists: {len(report.perfectionists)} participants")

        return report
