"""
Distance-based comparators: scalar scales, ordered options, numeric ranges.
"""

import logging
from typing import Any, Optional, Tuple

from ..exceptions import ConfigurationError
from ..schema import ComparatorKind, QuestionSpec, is_wildcard
from .base import Comparator, as_set, is_number

logger = logging.getLogger(__name__)

DEFAULT_SCALE = (1.0, 5.0)
DEFAULT_RANGE_SCALE = (18.0, 100.0)

# Multiplier applied to distance similarity when a "more"/"less" preference
# points the opposite way from the partner's actual answer
DIRECTIONAL_CONFLICT_FACTOR = 0.7

DISTANCE_PREFERENCES = ("same", "similar", "different", "more", "less")


def distance_similarity(a: float, b: float, lo: float, hi: float) -> float:
    """1 - |a - b| / range, clamped to [0, 1]."""
    span = hi - lo
    if span <= 0:
        return 1.0 if a == b else 0.0
    return max(0.0, min(1.0, 1.0 - abs(a - b) / span))


def keyword_satisfaction(keyword: str, own: float, other: float, lo: float, hi: float) -> float:
    """
    Satisfaction of a same/similar/different/more/less preference on a numeric axis.

    "same" is fully satisfied at similarity >= 0.8, "similar" at >= 0.4 and
    "different" at <= 0.4; each decays linearly outside its band. "more" and
    "less" are fully satisfied when the partner's answer lies on the preferred
    side (or is equal) and otherwise keep a penalized distance similarity.
    """
    sim = distance_similarity(own, other, lo, hi)
    if keyword == "same":
        return 1.0 if sim >= 0.8 else sim / 0.8
    if keyword == "similar":
        return 1.0 if sim >= 0.4 else sim / 0.4
    if keyword == "different":
        return 1.0 if sim <= 0.4 else (1.0 - sim) / 0.6
    if keyword == "more":
        return 1.0 if other >= own else DIRECTIONAL_CONFLICT_FACTOR * sim
    if keyword == "less":
        return 1.0 if other <= own else DIRECTIONAL_CONFLICT_FACTOR * sim
    raise ValueError(f"unknown preference keyword {keyword!r}")


def keyword_holds(keyword: str, own: float, other: float) -> bool:
    """
    Strict form of a keyword preference, used for dealbreakers.

    Distances are in answer steps: "same" needs an identical answer,
    "similar" at most one step apart, "different" at least two steps apart.
    "more" and "less" need the partner strictly on the preferred side.
    """
    diff = other - own
    if keyword == "same":
        return diff == 0
    if keyword == "similar":
        return abs(diff) <= 1
    if keyword == "different":
        return abs(diff) >= 2
    if keyword == "more":
        return diff > 0
    if keyword == "less":
        return diff < 0
    raise ValueError(f"unknown preference keyword {keyword!r}")


def parse_range(value: Any) -> Optional[Tuple[float, float]]:
    """Read a {"min", "max"} mapping or a two-element list; None if malformed."""
    if isinstance(value, dict):
        lo, hi = value.get("min"), value.get("max")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lo, hi = value
    else:
        return None
    if not (is_number(lo) and is_number(hi)) or lo > hi:
        return None
    return float(lo), float(hi)


class ScalarComparator(Comparator):
    """Likert-style numeric scale, 1-5 unless the question sets another scale."""

    kind = ComparatorKind.SCALAR

    def _scale(self, spec: QuestionSpec) -> Tuple[float, float]:
        return spec.scale or DEFAULT_SCALE

    def answer_error(self, answer, spec):
        lo, hi = self._scale(spec)
        if not is_number(answer):
            return f"expected a number on the {lo:g}-{hi:g} scale, got {answer!r}"
        if not lo <= answer <= hi:
            return f"{answer} is outside the {lo:g}-{hi:g} scale"
        return None

    def preference_error(self, preference, spec):
        if isinstance(preference, str):
            if preference not in DISTANCE_PREFERENCES:
                return f"unknown preference {preference!r}"
            return None
        values = as_set(preference)
        if values is None or not all(is_number(v) for v in preference):
            return f"expected a keyword or a list of acceptable values, got {preference!r}"
        return None

    def base_similarity(self, a, b, spec):
        lo, hi = self._scale(spec)
        return distance_similarity(float(a), float(b), lo, hi)

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        lo, hi = self._scale(spec)
        if isinstance(preference, str):
            return keyword_satisfaction(preference, float(own_answer), float(other_answer), lo, hi)
        return 1.0 if other_answer in preference else 0.0

    def meets_dealbreaker(self, own_answer, preference, other_answer, spec, threshold):
        if isinstance(preference, str):
            return keyword_holds(preference, float(own_answer), float(other_answer))
        return other_answer in preference


class OrdinalComparator(Comparator):
    """Ordered option list compared by position distance."""

    kind = ComparatorKind.ORDINAL

    def check_spec(self, spec):
        if len(spec.options) < 2:
            raise ConfigurationError(f"Question {spec.id}: ordinal questions need at least two options")

    def _position(self, value, spec) -> float:
        return float(spec.options.index(value))

    def answer_error(self, answer, spec):
        if answer not in spec.options:
            return f"{answer!r} is not one of {list(spec.options)}"
        return None

    def preference_error(self, preference, spec):
        if isinstance(preference, str):
            if preference in DISTANCE_PREFERENCES or preference in spec.options:
                return None
            return f"unknown preference {preference!r}"
        values = as_set(preference)
        if values is None:
            return f"expected a keyword or a list of options, got {preference!r}"
        unknown = values - set(spec.options)
        if unknown:
            return f"unknown options {sorted(unknown)}"
        return None

    def base_similarity(self, a, b, spec):
        return distance_similarity(self._position(a, spec), self._position(b, spec), 0, len(spec.options) - 1)

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        if isinstance(preference, str) and preference in DISTANCE_PREFERENCES:
            return keyword_satisfaction(
                preference,
                self._position(own_answer, spec),
                self._position(other_answer, spec),
                0,
                len(spec.options) - 1
            )
        if isinstance(preference, str):
            return 1.0 if other_answer == preference else 0.0
        return 1.0 if other_answer in preference else 0.0

    def meets_dealbreaker(self, own_answer, preference, other_answer, spec, threshold):
        if isinstance(preference, str) and preference in DISTANCE_PREFERENCES:
            return keyword_holds(
                preference, self._position(own_answer, spec), self._position(other_answer, spec)
            )
        if isinstance(preference, str):
            return other_answer == preference
        return other_answer in preference


class RangeComparator(Comparator):
    """
    Numeric answer checked against the other side's acceptable [min, max] range.

    Used for age. The hard filter calls `accepts` for mutual acceptance; the
    similarity form is only used if such a question is configured as scored.
    """

    kind = ComparatorKind.RANGE

    def answer_error(self, answer, spec):
        if not is_number(answer):
            return f"expected a number, got {answer!r}"
        if spec.scale and not spec.scale[0] <= answer <= spec.scale[1]:
            return f"{answer} is outside {spec.scale[0]:g}-{spec.scale[1]:g}"
        return None

    def preference_error(self, preference, spec):
        if parse_range(preference) is None:
            return f"expected {{'min', 'max'}} with min <= max, got {preference!r}"
        return None

    def accepts(self, preference: Any, other_answer: Any) -> bool:
        """
        Whether `other_answer` falls inside a range preference.

        A wildcard or absent preference places no restriction; a missing or
        non-numeric answer is never accepted.
        """
        if not is_number(other_answer):
            return False
        if preference is None:
            return True
        if isinstance(preference, str):
            return is_wildcard(preference)
        bounds = parse_range(preference)
        if bounds is None:
            return False
        return bounds[0] <= other_answer <= bounds[1]

    def base_similarity(self, a, b, spec):
        lo, hi = spec.scale or DEFAULT_RANGE_SCALE
        return distance_similarity(float(a), float(b), lo, hi)

    def preference_satisfaction(self, own_answer, preference, other_answer, spec):
        return 1.0 if self.accepts(preference, other_answer) else 0.0
