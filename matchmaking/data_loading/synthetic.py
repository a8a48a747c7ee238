"""
Synthetic participant populations.

Generates questionnaire snapshots for smoke tests and demonstrations when
no real export is available. Reproducible given a random seed.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..schema import (
    ComparatorKind,
    DOESNT_MATTER,
    Importance,
    Participant,
    QuestionResponse,
    QuestionSpec,
)

logger = logging.getLogger(__name__)

GENDERS = ["men", "women", "non_binary"]
IMPORTANCE_LEVELS = list(Importance)


class SyntheticPopulation:
    """
    Random participant generator for a question catalog.

    Attributes:
        questions: Catalog to answer
        random_state: Numpy RandomState for reproducibility
        preference_rate: Probability of stating a preference on a question
        wildcard_rate: Probability that a stated preference is "doesn't matter"
        dealbreaker_rate: Probability of flagging a stated preference as a dealbreaker
    """

    def __init__(
        self,
        questions: Sequence[QuestionSpec],
        random_seed: Optional[int] = None,
        preference_rate: float = 0.3,
        wildcard_rate: float = 0.2,
        dealbreaker_rate: float = 0.05
    ):
        self.questions = list(questions)
        self.random_state = np.random.RandomState(random_seed)
        self.preference_rate = preference_rate
        self.wildcard_rate = wildcard_rate
        self.dealbreaker_rate = dealbreaker_rate

    def _choice(self, options: Sequence[Any]) -> Any:
        return options[self.random_state.randint(len(options))]

    def _subset(self, options: Sequence[str], low: int, high: int) -> List[str]:
        size = self.random_state.randint(low, min(high, len(options)) + 1)
        picked = self.random_state.choice(len(options), size=size, replace=False)
        return [options[i] for i in sorted(picked)]

    def _answer(self, q: QuestionSpec, age: int) -> Any:
        if q.kind == ComparatorKind.SCALAR:
            lo, hi = q.scale or (1, 5)
            return int(self.random_state.randint(int(lo), int(hi) + 1))
        if q.kind in (ComparatorKind.CATEGORICAL, ComparatorKind.ORDINAL, ComparatorKind.WILDCARD):
            return self._choice(q.options)
        if q.kind == ComparatorKind.COMPATIBILITY_MATRIX:
            return self._choice(q.options or sorted(q.compatibility_table))
        if q.kind == ComparatorKind.MULTI_SELECT:
            return self._subset(q.options, 1, 4)
        if q.kind == ComparatorKind.BIDIRECTIONAL_SET:
            return {"give": self._subset(q.options, 2, 2), "receive": self._subset(q.options, 2, 2)}
        if q.kind == ComparatorKind.COMPOUND:
            if self.random_state.rand() < 0.4:
                return {"items": [q.exclusive_value] if q.exclusive_value else [], "frequency": None}
            return {"items": self._subset(q.options, 1, 2), "frequency": self._choice(q.frequency_options)}
        if q.kind == ComparatorKind.RANGE:
            return age
        if q.kind == ComparatorKind.FREE_TEXT:
            return f"Synthetic participant aged {age}"
        raise ValueError(f"No synthetic answer rule for {q.kind}")

    def _preference(self, q: QuestionSpec, answer: Any, age: int) -> Any:
        if q.kind == ComparatorKind.RANGE:
            spread = int(self.random_state.randint(3, 11))
            return {"min": max(18, age - spread), "max": age + spread}
        if q.kind in (ComparatorKind.FREE_TEXT, ComparatorKind.BIDIRECTIONAL_SET):
            return None
        if self.random_state.rand() >= self.preference_rate:
            return None
        if self.random_state.rand() < self.wildcard_rate:
            return DOESNT_MATTER
        if q.kind == ComparatorKind.SCALAR:
            return self._choice(["same", "similar", "more", "less"])
        if q.kind == ComparatorKind.ORDINAL:
            return self._choice(["same", "similar"])
        if q.kind == ComparatorKind.MULTI_SELECT:
            return self._subset(q.options, 2, 4)
        if q.kind == ComparatorKind.COMPOUND:
            return "same"
        return self._subset(q.options or sorted(q.compatibility_table), 2, 3)

    def participant(self, participant_id: str) -> Participant:
        """Generate one participant."""
        gender = self._choice(GENDERS)
        interested = frozenset(self._subset(GENDERS, 1, 2))
        age = int(self.random_state.randint(19, 36))

        responses: Dict[str, QuestionResponse] = {}
        for q in self.questions:
            answer = self._answer(q, age)
            preference = self._preference(q, answer, age)
            importance = self._choice(IMPORTANCE_LEVELS) if q.importance_applies else None
            dealbreaker = (
                preference is not None
                and q.kind not in (ComparatorKind.RANGE, ComparatorKind.FREE_TEXT)
                and self.random_state.rand() < self.dealbreaker_rate
            )
            responses[q.id] = QuestionResponse(
                answer=answer, preference=preference, importance=importance, dealbreaker=dealbreaker
            )

        return Participant(
            id=participant_id, gender=gender, interested_in_genders=interested, responses=responses
        )

    def generate(self, n_participants: int, id_prefix: str = "p") -> List[Participant]:
        """Generate a population of n participants with ids p0001, p0002, ..."""
        width = max(4, len(str(n_participants)))
        population = [self.participant(f"{id_prefix}{i + 1:0{width}d}") for i in range(n_participants)]
        logger.info(f"Created synthetic population: {n_participants} participants")
        return population
