"""Schema module for participant snapshots and run results."""

from .types import (
    DOESNT_MATTER,
    is_wildcard,
    Importance,
    Section,
    ComparatorKind,
    QuestionResponse,
    Participant,
    QuestionSpec,
    questions_by_id
)
from .results import (
    pair_key,
    UnmatchedReason,
    OutcomeStatus,
    PairScore,
    Match,
    UnmatchedRecord,
    MatchingOutcome
)

__all__ = [
    "DOESNT_MATTER",
    "is_wildcard",
    "Importance",
    "Section",
    "ComparatorKind",
    "QuestionResponse",
    "Participant",
    "QuestionSpec",
    "questions_by_id",
    "pair_key",
    "UnmatchedReason",
    "OutcomeStatus",
    "PairScore",
    "Match",
    "UnmatchedRecord",
    "MatchingOutcome"
]
