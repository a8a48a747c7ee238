"""
Directional scoring.

score(rater, rated) answers "how well does `rated` satisfy `rater`":

    avg_S = sum_q sim(q) * iw(rater, q) / sum_q iw(rater, q)     per section S
    score = 100 * (w_lifestyle * avg_lifestyle + w_personality * avg_personality)

Each section is normalized by its own importance-weight sum before the two
are blended, so a section with many heavily weighted questions cannot
swamp the other. Only the rater's importance is used, which makes the
score asymmetric.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, Mapping, Optional

from ..exceptions import ConfigurationError
from ..schema import Importance, Participant, QuestionSpec, Section

logger = logging.getLogger(__name__)

DEFAULT_IMPORTANCE_WEIGHTS = {
    Importance.NOT_IMPORTANT.value: 0.0,
    Importance.SOMEWHAT_IMPORTANT.value: 0.5,
    Importance.IMPORTANT.value: 1.0,
    Importance.VERY_IMPORTANT.value: 2.0,
}

SCORED_SECTIONS = (Section.LIFESTYLE, Section.PERSONALITY)


@dataclass
class ScoringConfig:
    """
    Configuration for directional scoring.

    Attributes:
        importance_weights: Weight per importance level (keyed by Importance value)
        fixed_importance_weight: Weight for questions where importance does not apply
        lifestyle_weight: Share of the lifestyle section average
        personality_weight: Share of the personality section average
    """
    importance_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_IMPORTANCE_WEIGHTS))
    fixed_importance_weight: float = 1.0
    lifestyle_weight: float = 0.65
    personality_weight: float = 0.35

    def validate(self) -> None:
        """Validate configuration values."""
        missing = [i.value for i in Importance if i.value not in self.importance_weights]
        if missing:
            raise ConfigurationError(f"importance_weights missing levels: {missing}")
        ordered = [self.importance_weights[i.value] for i in Importance]
        if any(w < 0 for w in ordered):
            raise ConfigurationError(f"importance weights must be non-negative, got {ordered}")
        if any(later < earlier for earlier, later in zip(ordered, ordered[1:])):
            raise ConfigurationError(f"importance weights must be non-decreasing, got {ordered}")
        if self.fixed_importance_weight < 0:
            raise ConfigurationError("fixed_importance_weight must be non-negative")
        for name in ("lifestyle_weight", "personality_weight"):
            if not 0 <= getattr(self, name) <= 1:
                raise ConfigurationError(f"{name} must be in [0, 1], got {getattr(self, name)}")
        if abs(self.lifestyle_weight + self.personality_weight - 1.0) > 1e-6:
            raise ConfigurationError(
                f"Section weights don't sum to 1: {self.lifestyle_weight} + {self.personality_weight}"
            )

    def weight_for(self, importance: Optional[Importance]) -> float:
        """Importance weight; a missing importance gets the lowest weight."""
        if importance is None:
            return min(self.importance_weights.values())
        return self.importance_weights[importance.value]

    def section_weight(self, section: Section) -> float:
        if section == Section.LIFESTYLE:
            return self.lifestyle_weight
        if section == Section.PERSONALITY:
            return self.personality_weight
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoringConfig":
        """Create from main config dictionary."""
        scoring = config.get("scoring", {})
        sections = scoring.get("section_weights", {})

        weights = dict(DEFAULT_IMPORTANCE_WEIGHTS)
        for level, weight in scoring.get("importance_weights", {}).items():
            try:
                weights[Importance.parse(level).value] = float(weight)
            except (ValueError, AttributeError):
                raise ConfigurationError(f"Unknown importance level in scoring.importance_weights: {level}")

        return cls(
            importance_weights=weights,
            fixed_importance_weight=scoring.get("fixed_importance_weight", 1.0),
            lifestyle_weight=sections.get("lifestyle", 0.65),
            personality_weight=sections.get("personality", 0.35)
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved scoring config to {filepath}")


class DirectionalScorer:
    """
    Importance- and section-weighted directional scores on a 0-100 scale.

    Edge cases:
    - a section whose importance weights sum to 0 uses the plain mean
    - a section with no answered questions drops out and the remaining
      section takes the full weight
    - a pair with no scored questions at all scores 0
    """

    def __init__(self, config: ScoringConfig, questions: Iterable[QuestionSpec]):
        self.config = config
        self.config.validate()
        self.questions = {q.id: q for q in questions if q.scored}

    def question_weight(self, rater: Participant, question: QuestionSpec) -> float:
        if not question.importance_applies:
            return self.config.fixed_importance_weight
        response = rater.response(question.id)
        return self.config.weight_for(response.importance if response else None)

    def section_averages(self, rater: Participant, similarities: Mapping[str, float]) -> Dict[Section, float]:
        """Importance-weighted average similarity per section that has scored questions."""
        totals = {s: [0.0, 0.0, 0.0, 0] for s in SCORED_SECTIONS}

        for qid, sim in similarities.items():
            question = self.questions.get(qid)
            if question is None or question.section not in totals:
                continue
            weight = self.question_weight(rater, question)
            t = totals[question.section]
            t[0] += sim * weight
            t[1] += weight
            t[2] += sim
            t[3] += 1

        averages = {}
        for section, (weighted, weight_sum, plain, count) in totals.items():
            if count == 0:
                continue
            averages[section] = weighted / weight_sum if weight_sum > 0 else plain / count
        return averages

    def score(self, rater: Participant, similarities: Mapping[str, float]) -> float:
        """
        Directional score of how well the other side satisfies `rater`.

        Args:
            rater: Participant whose importance weights apply
            similarities: Question id -> similarity for the pair

        Returns:
            Score in [0, 100]
        """
        averages = self.section_averages(rater, similarities)
        if not averages:
            return 0.0

        weight_sum = sum(self.config.section_weight(s) for s in averages)
        if weight_sum <= 0:
            blended = sum(averages.values()) / len(averages)
        else:
            blended = sum(self.config.section_weight(s) * avg for s, avg in averages.items()) / weight_sum

        return 100.0 * max(0.0, min(1.0, blended))
