"""Question comparator set: per-kind similarity and preference rules."""

from .base import Comparator, clamp, jaccard, overlap_fraction
from .numeric import ScalarComparator, OrdinalComparator, RangeComparator, parse_range
from .categorical import CategoricalComparator, WildcardComparator, MultiSelectComparator, FreeTextComparator
from .special import BidirectionalSetComparator, CompatibilityMatrixComparator, CompoundComparator
from .registry import (
    get_comparator,
    check_question,
    validate_response,
    question_similarity,
    preference_satisfaction,
    dealbreaker_violated
)

__all__ = [
    "Comparator",
    "clamp",
    "jaccard",
    "overlap_fraction",
    "ScalarComparator",
    "OrdinalComparator",
    "RangeComparator",
    "parse_range",
    "CategoricalComparator",
    "WildcardComparator",
    "MultiSelectComparator",
    "FreeTextComparator",
    "BidirectionalSetComparator",
    "CompatibilityMatrixComparator",
    "CompoundComparator",
    "get_comparator",
    "check_question",
    "validate_response",
    "question_similarity",
    "preference_satisfaction",
    "dealbreaker_violated"
]
