"""
Category comparators: single choice, multi-select, wildcard-tolerant
single choice, and free text (validated, never scored).
"""

import logging
from typing import Any, Optional

from ..schema import ComparatorKind, QuestionSpec
from .base import Comparator, as_set, jaccard

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS = ("same", "different")


def _option_error(value: Any, spec: QuestionSpec) -> Optional[str]:
    if not isinstance(value, str):
        return f"expected a category string, got {value!r}"
    if spec.options and value not in spec.options:
        return f"{value!r} is not one of {list(spec.options)}"
    return None


def _preference_set_error(preference: Any, spec: QuestionSpec) -> Optional[str]:
    values = as_set(preference)
    if values is None:
        return f"expected a keyword, an option or a list of options, got {preference!r}"
    if spec.options:
        unknown = values - set(spec.options)
        if unknown:
            return f"unknown options {sorted(unknown)}"
    return None


class CategoricalComparator(Comparator):
    """
    Exact category match.

    Preferences: "same", "different", a single acceptable option, or a list
    of acceptable options (membership).
    """

    kind = ComparatorKind.CATEGORICAL

    def answer_error(self, answer, spec):
        return _option_error(answer, spec)

    def preference_error(self, preference, spec):
        if isinstance(preference, str):
            if preference in CATEGORY_KEYWORDS:
                return None
            return _option_error(preference, spec)
        return _preference_set_error(preference, spec)

    def base_similarity(self, a, b, spec):
        return 1.0 if a == b else 0.0

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        if preference == "same":
            return 1.0 if other_answer == own_answer else 0.0
        if preference == "different":
            return 1.0 if other_answer != own_answer else 0.0
        if isinstance(preference, str):
            return 1.0 if other_answer == preference else 0.0
        return 1.0 if str(other_answer) in as_set(preference) else 0.0


class WildcardComparator(CategoricalComparator):
    """
    Single choice where one designated value (e.g. "flexible") is compatible
    with every other value; otherwise behaves as categorical equality.
    """

    kind = ComparatorKind.WILDCARD

    DEFAULT_WILDCARD = "flexible"

    def _wildcard(self, spec: QuestionSpec) -> str:
        return spec.wildcard_value or self.DEFAULT_WILDCARD

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        if other_answer == self._wildcard(spec):
            return 1.0
        return super().preference_satisfaction(own_answer, preference, other_answer, spec)

    def similarity(self, a, b, spec):
        wildcard = self._wildcard(spec)
        if a.answer == wildcard or b.answer == wildcard:
            return 1.0
        return super().similarity(a, b, spec)


class MultiSelectComparator(Comparator):
    """
    Set-valued answers compared by Jaccard overlap.

    A list preference is satisfied by any overlap with the other's selection;
    "same" uses the Jaccard overlap.
    """

    kind = ComparatorKind.MULTI_SELECT

    def answer_error(self, answer, spec):
        return _preference_set_error(answer, spec)

    def preference_error(self, preference, spec):
        if preference == "same":
            return None
        return _preference_set_error(preference, spec)

    def base_similarity(self, a, b, spec):
        return jaccard(as_set(a), as_set(b))

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        if preference == "same":
            return jaccard(as_set(own_answer), as_set(other_answer))
        return 1.0 if as_set(preference) & as_set(other_answer) else 0.0


class FreeTextComparator(Comparator):
    """Free-response answers. Validated as text and excluded from scoring."""

    kind = ComparatorKind.FREE_TEXT

    def validate(self, response, spec, participant_id):
        if response.answer is None:
            return
        super().validate(response, spec, participant_id)

    def answer_error(self, answer, spec):
        if not isinstance(answer, str):
            return f"expected text, got {type(answer).__name__}"
        return None

    def base_similarity(self, a, b, spec):
        raise ValueError(f"Question {spec.id} is free response and is never scored")

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        raise ValueError(f"Question {spec.id} is free response and is never scored")
