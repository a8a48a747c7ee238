"""
Typed engine configuration.

MatchingConfig bundles every tunable the engine uses: the question catalog,
importance and section weights, hard-filter settings, the pair score
combiner policy, eligibility floors and matcher settings.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..comparators import check_question
from ..eligibility import EligibilityConfig
from ..exceptions import ConfigurationError
from ..filtering import HardFilterConfig
from ..fusion import CombinerConfig
from ..matching import MatcherConfig
from ..schema import QuestionSpec, questions_by_id
from ..scoring import ScoringConfig
from .questionnaire import default_questions

logger = logging.getLogger(__name__)


@dataclass
class MatchingConfig:
    """
    Complete configuration for one matching run.

    Attributes:
        questions: Question catalog
        scoring: Directional scoring settings
        hard_filters: Hard filter settings
        combiner: Pair score combiner policy
        eligibility: Eligibility floors
        matcher: Optimal matcher settings
        n_jobs: Workers for pair scoring (1 = sequential)
        batch_size: Pairs per scoring batch
        random_seed: Seed for synthetic data generation
    """
    questions: List[QuestionSpec] = field(default_factory=default_questions)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    hard_filters: HardFilterConfig = field(default_factory=HardFilterConfig)
    combiner: CombinerConfig = field(default_factory=CombinerConfig)
    eligibility: EligibilityConfig = field(default_factory=EligibilityConfig)
    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    n_jobs: int = 1
    batch_size: int = 2000
    random_seed: int = 42

    def __post_init__(self):
        """Mark configured hard-filter questions so they are excluded from scoring."""
        hard_ids = set(self.hard_filters.question_ids)
        self.questions = [
            replace(q, hard_filter=True) if q.id in hard_ids and not q.hard_filter else q
            for q in self.questions
        ]

    @property
    def question_index(self) -> Dict[str, QuestionSpec]:
        return questions_by_id(self.questions)

    def validate(self) -> None:
        """
        Validate every component.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        if not self.questions:
            raise ConfigurationError("Question catalog is empty")
        index = questions_by_id(self.questions)
        for q in self.questions:
            check_question(q)
        if not any(q.scored for q in self.questions):
            raise ConfigurationError("Question catalog has no scored questions")
        unknown = [qid for qid in self.hard_filters.question_ids if qid not in index]
        if unknown:
            logger.warning(f"Hard-filter question ids not in catalog: {unknown}")

        self.scoring.validate()
        self.hard_filters.validate()
        self.combiner.validate()
        self.eligibility.validate()
        self.matcher.validate()
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must be non-zero")
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {self.batch_size}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary in the same layout as the YAML config."""
        return {
            "global": {"random_seed": self.random_seed},
            "scoring": {
                "importance_weights": dict(self.scoring.importance_weights),
                "fixed_importance_weight": self.scoring.fixed_importance_weight,
                "section_weights": {
                    "lifestyle": self.scoring.lifestyle_weight,
                    "personality": self.scoring.personality_weight,
                },
            },
            "hard_filters": self.hard_filters.to_dict(),
            "combiner": self.combiner.to_dict(),
            "eligibility": {
                "absolute_minimum": self.eligibility.absolute_minimum,
                "tolerance": self.eligibility.tolerance,
                "relative": {
                    "mode": self.eligibility.relative_mode,
                    "k": self.eligibility.k,
                    "percentile": self.eligibility.percentile,
                    "best_fraction": self.eligibility.best_fraction,
                    "pool": self.eligibility.relative_pool,
                    "min_pool_size": self.eligibility.min_pool_size,
                },
            },
            "matching": {
                "weight_scale": self.matcher.weight_scale,
                "max_cardinality": self.matcher.max_cardinality,
                "n_jobs": self.n_jobs,
                "batch_size": self.batch_size,
            },
            "questions": [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "MatchingConfig":
        """Create from main config dictionary (as returned by load_config)."""
        config = config or {}
        raw_questions = config.get("questions")
        if raw_questions:
            questions = [QuestionSpec.from_dict(q) for q in raw_questions]
        else:
            questions = default_questions()

        matching = config.get("matching", {}) or {}
        return cls(
            questions=questions,
            scoring=ScoringConfig.from_config(config),
            hard_filters=HardFilterConfig.from_config(config),
            combiner=CombinerConfig.from_config(config),
            eligibility=EligibilityConfig.from_config(config),
            matcher=MatcherConfig.from_config(config),
            n_jobs=int(matching.get("n_jobs", 1)),
            batch_size=int(matching.get("batch_size", 2000)),
            random_seed=int((config.get("global", {}) or {}).get("random_seed", 42))
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved matching config to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "MatchingConfig":
        """Load from a JSON file written by save()."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_config(d)
