"""
Matchmaking - compatibility scoring and optimal pairing engine

This package pairs participants of a matching cycle into disjoint
one-to-one matches based on a structured compatibility questionnaire.

Key Design Decisions:
- Similarity is computed once per pair and is direction-agnostic
- Directional scores use the rater's own importance weights
- Hard filters (gender, age, dealbreakers) remove pairs before scoring
- Eligibility combines a global floor with a per-participant relative floor
- The final pairing is a general maximum-weight matching (Blossom)
- The engine is pure: snapshot in, outcome and diagnostics out
"""

__version__ = "1.0.0"

from .configs import MatchingConfig, load_config
from .engine import MatchingEngine, run_matching
from .exceptions import ConfigurationError, MalformedInputError, MatchingError, MatchingInvariantError
from .schema import MatchingOutcome, Participant, QuestionResponse, QuestionSpec

__all__ = [
    "MatchingConfig",
    "load_config",
    "MatchingEngine",
    "run_matching",
    "ConfigurationError",
    "MalformedInputError",
    "MatchingError",
    "MatchingInvariantError",
    "MatchingOutcome",
    "Participant",
    "QuestionResponse",
    "QuestionSpec"
]
