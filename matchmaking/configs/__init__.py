"""Configuration loading, validation and the default question catalog."""

from .loader import load_config, validate_config, get_config_value
from .questionnaire import default_questions, DEFAULT_QUESTIONS, CONFLICT_STYLE_TABLE
from .settings import MatchingConfig

__all__ = [
    "load_config",
    "validate_config",
    "get_config_value",
    "default_questions",
    "DEFAULT_QUESTIONS",
    "CONFLICT_STYLE_TABLE",
    "MatchingConfig"
]
