"""
Result structures produced by a matching run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class UnmatchedReason(Enum):
    """Why a participant ended the run without a partner."""
    NO_ELIGIBLE_PAIRS = "no_eligible_pairs"
    LOST_IN_OPTIMIZATION = "lost_in_optimization"


class OutcomeStatus(Enum):
    """Overall status of a run."""
    COMPLETED = "completed"
    NOTHING_TO_MATCH = "nothing_to_match"


def pair_key(a: str, b: str) -> Tuple[str, str]:
    """Canonical order-independent key for a participant pair."""
    return (a, b) if a <= b else (b, a)


@dataclass
class PairScore:
    """
    Symmetric compatibility score for an unordered pair, on a 0-100 scale.

    Both directional scores are kept so diagnostics can show asymmetry.
    """
    participant_a_id: str
    participant_b_id: str
    score: float
    score_a_to_b: float
    score_b_to_a: float

    @property
    def key(self) -> Tuple[str, str]:
        return pair_key(self.participant_a_id, self.participant_b_id)

    def partner_of(self, participant_id: str) -> str:
        if participant_id == self.participant_a_id:
            return self.participant_b_id
        if participant_id == self.participant_b_id:
            return self.participant_a_id
        raise KeyError(f"{participant_id} is not part of pair {self.key}")

    def directional_from(self, participant_id: str) -> float:
        """Directional score with the given participant as rater."""
        if participant_id == self.participant_a_id:
            return self.score_a_to_b
        if participant_id == self.participant_b_id:
            return self.score_b_to_a
        raise KeyError(f"{participant_id} is not part of pair {self.key}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_a_id": self.participant_a_id,
            "participant_b_id": self.participant_b_id,
            "score": float(self.score),
            "score_a_to_b": float(self.score_a_to_b),
            "score_b_to_a": float(self.score_b_to_a)
        }


@dataclass
class Match:
    """A selected pair."""
    participant_a_id: str
    participant_b_id: str
    pair_score: float

    def directed_rows(self) -> List[Dict[str, Any]]:
        """Two rows, one per participant, for symmetric lookup by either side."""
        return [
            {"participant_id": self.participant_a_id, "partner_id": self.participant_b_id,
             "pair_score": float(self.pair_score)},
            {"participant_id": self.participant_b_id, "partner_id": self.participant_a_id,
             "pair_score": float(self.pair_score)},
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_a_id": self.participant_a_id,
            "participant_b_id": self.participant_b_id,
            "pair_score": float(self.pair_score)
        }


@dataclass
class UnmatchedRecord:
    """
    Diagnostic for a participant left without a partner.

    Attributes:
        participant_id: The unmatched participant
        reason: NO_ELIGIBLE_PAIRS or LOST_IN_OPTIMIZATION
        best_possible_score: Best eligible pair score they had, if any
        best_possible_partner_id: Partner of that best pair
        rejection: Eligibility rejection code when no eligible pair existed
    """
    participant_id: str
    reason: UnmatchedReason
    best_possible_score: Optional[float] = None
    best_possible_partner_id: Optional[str] = None
    rejection: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "reason": self.reason.value,
            "best_possible_score": (
                float(self.best_possible_score) if self.best_possible_score is not None else None
            ),
            "best_possible_partner_id": self.best_possible_partner_id,
            "rejection": self.rejection
        }


@dataclass
class MatchingOutcome:
    """Everything a run produces. Every participant is in exactly one of matches/unmatched."""
    status: OutcomeStatus
    matches: List[Match] = field(default_factory=list)
    unmatched: List[UnmatchedRecord] = field(default_factory=list)
    eligible_pairs: List[PairScore] = field(default_factory=list)
    diagnostics: Optional[Any] = None

    @property
    def matched_ids(self) -> List[str]:
        ids = []
        for m in self.matches:
            ids.extend([m.participant_a_id, m.participant_b_id])
        return ids

    def partner_of(self, participant_id: str) -> Optional[str]:
        for m in self.matches:
            if m.participant_a_id == participant_id:
                return m.participant_b_id
            if m.participant_b_id == participant_id:
                return m.participant_a_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "matches": [m.to_dict() for m in self.matches],
            "unmatched": [u.to_dict() for u in self.unmatched],
            "eligible_pairs": len(self.eligible_pairs),
            "diagnostics": self.diagnostics.to_dict() if self.diagnostics is not None else None
        }
