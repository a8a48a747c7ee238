"""
Comparator registry keyed by ComparatorKind.

All phases dispatch through these functions so question-kind handling lives
in exactly one place.
"""

from typing import Dict, Optional

from ..schema import ComparatorKind, QuestionResponse, QuestionSpec
from .base import Comparator
from .categorical import CategoricalComparator, FreeTextComparator, MultiSelectComparator, WildcardComparator
from .numeric import OrdinalComparator, RangeComparator, ScalarComparator
from .special import BidirectionalSetComparator, CompatibilityMatrixComparator, CompoundComparator

_REGISTRY: Dict[ComparatorKind, Comparator] = {
    c.kind: c for c in (
        ScalarComparator(),
        OrdinalComparator(),
        CategoricalComparator(),
        MultiSelectComparator(),
        BidirectionalSetComparator(),
        CompatibilityMatrixComparator(),
        WildcardComparator(),
        CompoundComparator(),
        RangeComparator(),
        FreeTextComparator(),
    )
}


def get_comparator(kind: ComparatorKind) -> Comparator:
    """Return the comparator registered for a kind."""
    return _REGISTRY[ComparatorKind(kind)]


def check_question(spec: QuestionSpec) -> None:
    """Validate question metadata against its comparator. Raises ConfigurationError."""
    get_comparator(spec.kind).check_spec(spec)


def validate_response(spec: QuestionSpec, response: QuestionResponse, participant_id: str) -> None:
    """Validate one response's shape. Raises MalformedInputError."""
    get_comparator(spec.kind).validate(response, spec, participant_id)


def question_similarity(spec: QuestionSpec, a: QuestionResponse, b: QuestionResponse) -> float:
    """Direction-agnostic similarity in [0, 1] for one question."""
    return get_comparator(spec.kind).similarity(a, b, spec)


def preference_satisfaction(
    spec: QuestionSpec, own: QuestionResponse, other: QuestionResponse
) -> Optional[float]:
    """How well `other` satisfies `own`'s stated preference; None if none is stated."""
    return get_comparator(spec.kind).satisfaction(own, other, spec)


def dealbreaker_violated(
    spec: QuestionSpec, own: QuestionResponse, other: QuestionResponse, threshold: float
) -> bool:
    """Whether `other` violates the preference `own` flagged as a dealbreaker."""
    return get_comparator(spec.kind).violates_dealbreaker(own, other, spec, threshold)
