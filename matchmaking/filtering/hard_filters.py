"""
Hard filters.

A pair is excluded outright, regardless of score, if:
1. either side's gender is outside the other's accepted genders
2. either side's age is outside the other's acceptable age range
3. either side flagged a question as a dealbreaker and the other side's
   answer does not satisfy the flagged preference

Missing gender or age data excludes the pair. This phase never raises.
"""

import logging
from collections import Counter
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..comparators import RangeComparator, dealbreaker_violated
from ..exceptions import ConfigurationError
from ..schema import ComparatorKind, Participant, QuestionSpec

logger = logging.getLogger(__name__)

DEFAULT_GENDER_ALIASES = {
    "man": "men",
    "male": "men",
    "woman": "women",
    "female": "women",
    "non-binary": "non_binary",
    "nonbinary": "non_binary",
}


class FilterReason(Enum):
    """Hard-filter category a pair failed."""
    GENDER = "gender"
    AGE = "age"
    DEALBREAKER = "dealbreaker"


@dataclass
class HardFilterConfig:
    """
    Configuration for hard filters.

    Attributes:
        age_question_id: Range question holding each participant's age and accepted range
        question_ids: Questions handled only by the hard filter (excluded from scoring)
        open_gender_values: Interest values that accept every gender
        gender_aliases: Spelling variants mapped to one canonical gender value
        dealbreaker_threshold: Minimum preference satisfaction for a dealbreaker to pass,
            on question kinds without strict keyword bands
    """
    age_question_id: str = "age"
    question_ids: List[str] = field(default_factory=lambda: ["age"])
    open_gender_values: List[str] = field(default_factory=lambda: ["anyone", "everyone"])
    gender_aliases: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_GENDER_ALIASES))
    dealbreaker_threshold: float = 0.5

    def validate(self) -> None:
        """Validate configuration values."""
        if not 0 < self.dealbreaker_threshold <= 1:
            raise ConfigurationError(
                f"dealbreaker_threshold must be in (0, 1], got {self.dealbreaker_threshold}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "HardFilterConfig":
        """Create from main config dictionary."""
        hf = config.get("hard_filters", {})
        aliases = dict(DEFAULT_GENDER_ALIASES)
        aliases.update(hf.get("gender_aliases", {}))
        return cls(
            age_question_id=hf.get("age_question_id", "age"),
            question_ids=list(hf.get("question_ids", ["age"])),
            open_gender_values=list(hf.get("open_gender_values", ["anyone", "everyone"])),
            gender_aliases=aliases,
            dealbreaker_threshold=hf.get("dealbreaker_threshold", 0.5)
        )


@dataclass
class PairFilterResult:
    """Outcome of the hard filter for one pair."""
    passed: bool
    reason: Optional[FilterReason] = None
    failed_questions: List[str] = field(default_factory=list)


@dataclass
class HardFilterReport:
    """
    Surviving pairs plus counts for diagnostics.

    Attributes:
        surviving: (i, j) participant index pairs that passed
        n_evaluated: Number of pairs checked
        by_reason: Filtered pair count per FilterReason value
        by_question: Dealbreaker failures per question id
    """
    surviving: List[Tuple[int, int]]
    n_evaluated: int
    by_reason: Dict[str, int]
    by_question: Dict[str, int]

    @property
    def n_filtered(self) -> int:
        return self.n_evaluated - len(self.surviving)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairs_evaluated": self.n_evaluated,
            "pairs_surviving": len(self.surviving),
            "pairs_filtered": self.n_filtered,
            "filtered_by_category": dict(self.by_reason),
            "dealbreaker_failures_by_question": dict(self.by_question)
        }


class HardFilter:
    """
    Symmetric pair exclusion predicate.

    Attributes:
        config: HardFilterConfig
        questions: Question catalog indexed by id
    """

    def __init__(self, config: HardFilterConfig, questions: Iterable[QuestionSpec]):
        self.config = config
        self.config.validate()
        self.questions = {q.id: q for q in questions}
        self._open = {self._normalize(g) for g in config.open_gender_values}
        self._range = RangeComparator()

        age_spec = self.questions.get(config.age_question_id)
        if age_spec is not None and age_spec.kind != ComparatorKind.RANGE:
            raise ConfigurationError(
                f"Age question {config.age_question_id} must be a range question, got {age_spec.kind.value}"
            )
        self._check_age = age_spec is not None
        if not self._check_age:
            logger.warning(f"No age question '{config.age_question_id}' in catalog; age filter disabled")

        self._dealbreaker_questions = [
            q for q in self.questions.values()
            if not q.hard_filter and q.kind != ComparatorKind.FREE_TEXT
        ]

    def _normalize(self, gender: str) -> str:
        key = gender.strip().lower()
        return self.config.gender_aliases.get(key, key)

    def accepts_gender(self, viewer: Participant, target: Participant) -> bool:
        """Whether `viewer` is open to `target`'s gender. Missing data fails closed."""
        if not target.gender or not viewer.interested_in_genders:
            return False
        interested: Set[str] = {self._normalize(g) for g in viewer.interested_in_genders}
        if interested & self._open:
            return True
        return self._normalize(target.gender) in interested

    def accepts_age(self, viewer: Participant, target: Participant) -> bool:
        """Whether `target`'s age is inside `viewer`'s accepted range. Missing data fails closed."""
        own = viewer.response(self.config.age_question_id)
        other = target.response(self.config.age_question_id)
        if own is None or other is None or own.answer is None:
            return False
        return self._range.accepts(own.preference, other.answer)

    def dealbreaker_failures(self, a: Participant, b: Participant) -> List[str]:
        """Question ids where a dealbreaker flagged by either side is violated."""
        failed = []
        threshold = self.config.dealbreaker_threshold
        for q in self._dealbreaker_questions:
            ra, rb = a.response(q.id), b.response(q.id)
            for own, other in ((ra, rb), (rb, ra)):
                if own is None or not own.dealbreaker or own.preference is None:
                    continue
                if other is None or dealbreaker_violated(q, own, other, threshold):
                    failed.append(q.id)
                    break
        return failed

    def check_pair(self, a: Participant, b: Participant) -> PairFilterResult:
        """
        Evaluate all hard filters for a pair.

        The first failing category is reported; for dealbreakers every
        violated question is listed.
        """
        if not (self.accepts_gender(a, b) and self.accepts_gender(b, a)):
            return PairFilterResult(passed=False, reason=FilterReason.GENDER)

        if self._check_age and not (self.accepts_age(a, b) and self.accepts_age(b, a)):
            return PairFilterResult(passed=False, reason=FilterReason.AGE)

        failed = self.dealbreaker_failures(a, b)
        if failed:
            return PairFilterResult(passed=False, reason=FilterReason.DEALBREAKER, failed_questions=failed)

        return PairFilterResult(passed=True)

    def filter_pairs(
        self,
        participants: Sequence[Participant],
        pairs: Iterable[Tuple[int, int]]
    ) -> HardFilterReport:
        """
        Apply the hard filter to candidate index pairs.

        Args:
            participants: Participant snapshot
            pairs: (i, j) index pairs into `participants`

        Returns:
            HardFilterReport with surviving pairs and breakdowns
        """
        surviving = []
        by_reason: Counter = Counter()
        by_question: Counter = Counter()
        n_evaluated = 0

        for i, j in pairs:
            n_evaluated += 1
            result = self.check_pair(participants[i], participants[j])
            if result.passed:
                surviving.append((i, j))
                continue
            by_reason[result.reason.value] += 1
            by_question.update(result.failed_questions)
            logger.debug(
                f"Filtered pair ({participants[i].id}, {participants[j].id}): {result.reason.value}"
                + (f" {result.failed_questions}" if result.failed_questions else "")
            )

        report = HardFilterReport(
            surviving=surviving,
            n_evaluated=n_evaluated,
            by_reason={r.value: by_reason.get(r.value, 0) for r in FilterReason},
            by_question=dict(by_question)
        )
        logger.info(
            f"Hard filter: {len(surviving)}/{n_evaluated} pairs survive "
            f"(gender={report.by_reason['gender']}, age={report.by_reason['age']}, "
            f"dealbreaker={report.by_reason['dealbreaker']})"
        )
        return report
