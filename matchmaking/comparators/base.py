"""
Comparator base class.

A comparator turns two responses to the same question into a similarity
in [0, 1]. Every comparator follows the same preference semantics:

- a "doesn't matter" preference on either side gives 1.0
- otherwise, each side that states a preference is scored by how well the
  other side's answer satisfies it, and the lower of the stated sides is used
- with no stated preferences, the kind's intrinsic answer similarity is used

Taking the minimum keeps the value direction-agnostic, so it can be cached
per pair and reused by both directional scores.
"""

import logging
import numbers
from typing import Any, Iterable, List, Optional, FrozenSet

from ..exceptions import MalformedInputError
from ..schema import ComparatorKind, QuestionResponse, QuestionSpec, is_wildcard

logger = logging.getLogger(__name__)


def clamp(value: float) -> float:
    """Clamp to the unit interval."""
    return max(0.0, min(1.0, float(value)))


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def as_set(value: Any) -> Optional[FrozenSet[str]]:
    """Interpret a list-like value as a set of strings (None if not list-like)."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value)
    return None


def overlap_fraction(a: Iterable[str], b: Iterable[str]) -> float:
    """|A & B| / max(|A|, |B|); two empty selections count as identical."""
    a, b = set(a), set(b)
    if not a and not b:
        return 1.0
    return len(a & b) / max(len(a), len(b))


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    a, b = set(a), set(b)
    if not a and not b:
        return 1.0
    return len(a & b) / len(a | b)


class Comparator:
    """
    Base comparison rule for one question kind.

    Subclasses implement `base_similarity` and `preference_satisfaction`
    and may override the error hooks to validate answer and preference shapes.
    """

    kind: ComparatorKind = None

    def check_spec(self, spec: QuestionSpec) -> None:
        """Validate question metadata. Raises ConfigurationError."""

    def answer_error(self, answer: Any, spec: QuestionSpec) -> Optional[str]:
        """Return a description of what is wrong with an answer, or None."""
        return None

    def preference_error(self, preference: Any, spec: QuestionSpec) -> Optional[str]:
        """Return a description of what is wrong with a non-wildcard preference, or None."""
        return None

    def validate(self, response: QuestionResponse, spec: QuestionSpec, participant_id: str) -> None:
        """
        Check that a response has the right shape for this question.

        Raises:
            MalformedInputError: Naming the participant and offending field
        """
        if response.answer is None:
            raise MalformedInputError(participant_id, f"responses.{spec.id}.answer", "answer is missing")
        error = self.answer_error(response.answer, spec)
        if error:
            raise MalformedInputError(participant_id, f"responses.{spec.id}.answer", error)
        if response.preference is not None and not is_wildcard(response.preference):
            error = self.preference_error(response.preference, spec)
            if error:
                raise MalformedInputError(participant_id, f"responses.{spec.id}.preference", error)

    def base_similarity(self, a: Any, b: Any, spec: QuestionSpec) -> float:
        """Similarity of two answers when neither side states a preference."""
        raise NotImplementedError

    def preference_satisfaction(
        self, own_answer: Any, preference: Any, other_answer: Any, spec: QuestionSpec
    ) -> float:
        """How well `other_answer` satisfies a stated, non-wildcard preference."""
        raise NotImplementedError

    def satisfaction(
        self, own: QuestionResponse, other: QuestionResponse, spec: QuestionSpec
    ) -> Optional[float]:
        """
        Score how well `other` satisfies `own`'s stated preference.

        Returns:
            Value in [0, 1], or None if `own` states no preference.
            A missing counterpart answer never satisfies a preference.
        """
        if own.preference is None:
            return None
        if own.wildcard:
            return 1.0
        if other.answer is None:
            return 0.0
        return clamp(self.preference_satisfaction(own.answer, own.preference, other.answer, spec))

    def meets_dealbreaker(
        self, own_answer: Any, preference: Any, other_answer: Any, spec: QuestionSpec, threshold: float
    ) -> bool:
        """Pass/fail form of a stated preference; kinds with keyword bands override this."""
        return clamp(self.preference_satisfaction(own_answer, preference, other_answer, spec)) >= threshold

    def violates_dealbreaker(
        self, own: QuestionResponse, other: QuestionResponse, spec: QuestionSpec, threshold: float
    ) -> bool:
        """
        Whether `other` violates the preference `own` flagged as a dealbreaker.

        No preference or a wildcard never violates; a missing counterpart
        answer always does.
        """
        if own.preference is None or own.wildcard:
            return False
        if other.answer is None:
            return True
        return not self.meets_dealbreaker(own.answer, own.preference, other.answer, spec, threshold)

    def similarity(self, a: QuestionResponse, b: QuestionResponse, spec: QuestionSpec) -> float:
        """Direction-agnostic similarity of two responses, in [0, 1]."""
        if a.wildcard or b.wildcard:
            return 1.0
        stated: List[float] = [
            s for s in (self.satisfaction(a, b, spec), self.satisfaction(b, a, spec))
            if s is not None
        ]
        if stated:
            return min(stated)
        return clamp(self.base_similarity(a.answer, b.answer, spec))
