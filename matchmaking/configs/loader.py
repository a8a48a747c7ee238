"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
checks that the values the engine depends on are sane.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ["global", "scoring", "hard_filters", "combiner",
                  "eligibility", "matching", "questions"]


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    for section in config:
        if section not in KNOWN_SECTIONS:
            issues.append(f"Unknown section: {section}")

    # Section weights sum to 1
    scoring = config.get("scoring", {}) or {}
    sections = scoring.get("section_weights", {})
    if sections:
        w_life = sections.get("lifestyle", 0.65)
        w_pers = sections.get("personality", 0.35)
        if abs(w_life + w_pers - 1.0) > 0.01:
            issues.append(f"Section weights don't sum to 1: {w_life} + {w_pers}")

    # Importance weights must not decrease with importance
    weights = scoring.get("importance_weights", {})
    if weights:
        order = ["not_important", "somewhat_important", "important", "very_important"]
        present = [weights[k] for k in order if k in weights]
        if any(later < earlier for earlier, later in zip(present, present[1:])):
            issues.append(f"Importance weights are not monotonic: {present}")

    eligibility = config.get("eligibility", {}) or {}
    floor = eligibility.get("absolute_minimum", 50)
    if not 0 <= floor <= 100:
        issues.append(f"eligibility.absolute_minimum must be in [0, 100], got {floor}")

    combiner = config.get("combiner", {}) or {}
    alpha = combiner.get("alpha", 0.65)
    if not 0 <= alpha <= 1:
        issues.append(f"Combiner alpha must be in [0, 1], got {alpha}")

    questions = config.get("questions")
    if questions is not None:
        if not isinstance(questions, list) or not questions:
            issues.append("questions must be a non-empty list when given")
        else:
            ids = [q.get("id") for q in questions if isinstance(q, dict)]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                issues.append(f"Duplicate question ids: {duplicates}")

    if "global" in config:
        if "random_seed" not in (config["global"] or {}):
            issues.append("Missing global.random_seed (required for reproducible synthetic data)")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "eligibility.relative.k")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
