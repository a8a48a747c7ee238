"""
Special-case comparators.

- BidirectionalSetComparator: small "top-k" selections, optionally split
  into what a participant gives and what they like to receive
- CompatibilityMatrixComparator: symmetric lookup table of category pairs
- CompoundComparator: a set component (e.g. substances) bundled with a
  frequency component
"""

import logging
from itertools import combinations_with_replacement
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..exceptions import ConfigurationError
from ..schema import ComparatorKind, QuestionSpec
from .base import Comparator, as_set, jaccard, overlap_fraction
from .categorical import CategoricalComparator
from .numeric import distance_similarity

logger = logging.getLogger(__name__)

GIVE_KEYS = ("give", "show")
RECEIVE_KEYS = ("receive",)


def _directed_sets(answer: Any) -> Optional[Tuple[FrozenSet[str], FrozenSet[str]]]:
    """Extract (give, receive) sets from a mapping answer."""
    if not isinstance(answer, dict):
        return None
    give = next((answer[k] for k in GIVE_KEYS if k in answer), None)
    receive = next((answer[k] for k in RECEIVE_KEYS if k in answer), None)
    give, receive = as_set(give), as_set(receive)
    if give is None or receive is None:
        return None
    return give, receive


class BidirectionalSetComparator(Comparator):
    """
    Fractional overlap between two small selections, independent of order.

    Plain list answers use |A & B| / max(|A|, |B|). Answers of the form
    {"give": [...], "receive": [...]} compare what each side gives against
    what the other side wants to receive and average the two directions.
    Preferences are not part of this question type.
    """

    kind = ComparatorKind.BIDIRECTIONAL_SET

    def answer_error(self, answer, spec):
        if isinstance(answer, dict):
            sets = _directed_sets(answer)
            if sets is None:
                return "expected {'give': [...], 'receive': [...]}"
            values = sets[0] | sets[1]
        else:
            values = as_set(answer)
            if values is None:
                return f"expected a list of options, got {answer!r}"
        if spec.options:
            unknown = values - set(spec.options)
            if unknown:
                return f"unknown options {sorted(unknown)}"
        return None

    def preference_error(self, preference, spec):
        return "this question does not take a preference"

    def base_similarity(self, a, b, spec):
        sets_a, sets_b = _directed_sets(a), _directed_sets(b)
        if sets_a is not None and sets_b is not None:
            give_a, receive_a = sets_a
            give_b, receive_b = sets_b
            directions = []
            if receive_b:
                directions.append(len(give_a & receive_b) / len(receive_b))
            if receive_a:
                directions.append(len(give_b & receive_a) / len(receive_a))
            if not directions:
                return 1.0
            return sum(directions) / len(directions)
        # Mixed shapes fall back to comparing everything each side selected
        flat_a = as_set(a) if sets_a is None else sets_a[0] | sets_a[1]
        flat_b = as_set(b) if sets_b is None else sets_b[0] | sets_b[1]
        return overlap_fraction(flat_a, flat_b)

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        return self.base_similarity(own_answer, other_answer, spec)


class CompatibilityMatrixComparator(CategoricalComparator):
    """
    Category pairs scored from a fixed symmetric table.

    The table may list each unordered pair once in either direction; a pair
    given in both directions must carry the same value.
    """

    kind = ComparatorKind.COMPATIBILITY_MATRIX

    def _categories(self, spec: QuestionSpec):
        if spec.options:
            return list(spec.options)
        return sorted(spec.compatibility_table or {})

    @staticmethod
    def lookup(table: Dict[str, Dict[str, float]], a: str, b: str) -> Optional[float]:
        value = table.get(a, {}).get(b)
        if value is None:
            value = table.get(b, {}).get(a)
        return value

    def check_spec(self, spec):
        table = spec.compatibility_table
        if not table:
            raise ConfigurationError(f"Question {spec.id}: compatibility_matrix needs a compatibility_table")
        for a, b in combinations_with_replacement(self._categories(spec), 2):
            forward = table.get(a, {}).get(b)
            backward = table.get(b, {}).get(a)
            if forward is None and backward is None:
                raise ConfigurationError(f"Question {spec.id}: no compatibility value for ({a}, {b})")
            if forward is not None and backward is not None and abs(forward - backward) > 1e-9:
                raise ConfigurationError(
                    f"Question {spec.id}: table is not symmetric for ({a}, {b}): {forward} vs {backward}"
                )
            value = forward if forward is not None else backward
            if not 0 <= value <= 1:
                raise ConfigurationError(f"Question {spec.id}: value for ({a}, {b}) must be in [0, 1], got {value}")

    def answer_error(self, answer, spec):
        if answer not in self._categories(spec):
            return f"{answer!r} is not one of {self._categories(spec)}"
        return None

    def base_similarity(self, a, b, spec):
        value = self.lookup(spec.compatibility_table, a, b)
        return float(value) if value is not None else 0.0


class CompoundComparator(Comparator):
    """
    Set component plus frequency component, e.g. which substances and how often.

    Answers look like {"items": [...], "frequency": "occasionally"}. The
    question's exclusive value (e.g. "none") may not be combined with other
    items and needs no frequency. Two exclusive answers are identical; one
    exclusive and one non-exclusive answer share nothing.
    """

    kind = ComparatorKind.COMPOUND

    def check_spec(self, spec):
        if len(spec.frequency_options) < 2:
            raise ConfigurationError(f"Question {spec.id}: compound questions need frequency_options")

    def _parse(self, answer) -> Tuple[FrozenSet[str], Optional[str]]:
        return as_set(answer.get("items", [])), answer.get("frequency")

    def _is_exclusive(self, items: FrozenSet[str], spec: QuestionSpec) -> bool:
        return not items or (spec.exclusive_value is not None and items == {spec.exclusive_value})

    def answer_error(self, answer, spec):
        if not isinstance(answer, dict) or as_set(answer.get("items", [])) is None:
            return "expected {'items': [...], 'frequency': ...}"
        items, frequency = self._parse(answer)
        if spec.options:
            unknown = items - set(spec.options) - {spec.exclusive_value}
            if unknown:
                return f"unknown items {sorted(unknown)}"
        if spec.exclusive_value in items and len(items) > 1:
            return f"{spec.exclusive_value!r} cannot be combined with other items"
        if not self._is_exclusive(items, spec) and frequency not in spec.frequency_options:
            return f"frequency must be one of {list(spec.frequency_options)}, got {frequency!r}"
        return None

    def preference_error(self, preference, spec):
        if preference == "same":
            return None
        values = as_set(preference)
        if values is None:
            return f"expected 'same' or a list of acceptable items, got {preference!r}"
        return None

    def base_similarity(self, a, b, spec):
        items_a, freq_a = self._parse(a)
        items_b, freq_b = self._parse(b)
        exclusive_a, exclusive_b = self._is_exclusive(items_a, spec), self._is_exclusive(items_b, spec)
        if exclusive_a and exclusive_b:
            return 1.0
        if exclusive_a or exclusive_b:
            return 0.0

        set_sim = jaccard(items_a, items_b)
        levels = spec.frequency_options
        freq_sim = distance_similarity(levels.index(freq_a), levels.index(freq_b), 0, len(levels) - 1)
        if spec.combine == "mean":
            return spec.set_weight * set_sim + (1 - spec.set_weight) * freq_sim
        return set_sim * freq_sim

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        if preference == "same":
            return self.base_similarity(own_answer, other_answer, spec)
        items, _ = self._parse(other_answer)
        acceptable = as_set(preference)
        # A list names the only items a partner may use; abstaining always passes
        if self._is_exclusive(items, spec):
            return 1.0
        return 1.0 if items <= acceptable else 0.0
