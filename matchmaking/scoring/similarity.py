"""
Per-question similarity for candidate pairs.

Similarity is direction-agnostic, so it is computed once per unordered
pair and shared by both directional scores.
"""

import logging
from typing import Dict, Iterable, Tuple

from ..comparators import question_similarity
from ..schema import Participant, QuestionSpec, pair_key

logger = logging.getLogger(__name__)


class SimilarityEngine:
    """
    Computes and caches question id -> similarity maps per pair.

    Only scored questions are considered: lifestyle and personality
    questions that are not hard filters. A question that either side left
    unanswered is skipped for that pair.

    The batch scorer visits each pair once, so it calls `compute` and hands
    the one map to both directional scores. `pair_similarities` caches by
    unordered pair for callers that score the same pair more than once.

    Attributes:
        questions: Scored question specs, in catalog order
    """

    def __init__(self, questions: Iterable[QuestionSpec]):
        self.questions = [q for q in questions if q.scored]
        self._cache: Dict[Tuple[str, str], Dict[str, float]] = {}

    def compute(self, a: Participant, b: Participant) -> Dict[str, float]:
        """Compute the similarity map for a pair without touching the cache."""
        similarities = {}
        for q in self.questions:
            ra, rb = a.response(q.id), b.response(q.id)
            if ra is None or rb is None:
                continue
            similarities[q.id] = question_similarity(q, ra, rb)
        return similarities

    def pair_similarities(self, a: Participant, b: Participant) -> Dict[str, float]:
        """Cached similarity map for an unordered pair."""
        key = pair_key(a.id, b.id)
        cached = self._cache.get(key)
        if cached is None:
            cached = self.compute(a, b)
            self._cache[key] = cached
        return cached

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()
