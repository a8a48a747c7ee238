"""
Pair score combination.

Combines the two directional scores of a pair into one symmetric pair score:

    mean:      (s_ab + s_ba) / 2                       (default)
    geometric: sqrt(s_ab * s_ba)
    min:       min(s_ab, s_ba)
    min_mean:  alpha * min(s_ab, s_ba) + (1 - alpha) * (s_ab + s_ba) / 2

The default treats strong one-sided interest as equally informative as
mutual moderate interest. The other modes penalize asymmetric pairs to
increasing degrees.
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict

import numpy as np

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

COMBINER_MODES = ("mean", "geometric", "min", "min_mean")


@dataclass
class CombinerConfig:
    """
    Configuration for pair score combination.

    Attributes:
        mode: One of "mean", "geometric", "min", "min_mean"
        alpha: Weight of the weaker direction in "min_mean" mode
    """
    mode: str = "mean"
    alpha: float = 0.65

    def validate(self) -> None:
        """Validate configuration values."""
        if self.mode not in COMBINER_MODES:
            raise ConfigurationError(f"Unknown combiner mode: {self.mode}")
        if not 0 <= self.alpha <= 1:
            raise ConfigurationError(f"alpha must be in [0, 1], got {self.alpha}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CombinerConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CombinerConfig":
        """Create from main config dictionary."""
        combiner = config.get("combiner", {})
        return cls(
            mode=combiner.get("mode", "mean"),
            alpha=combiner.get("alpha", 0.65)
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved combiner config to {filepath}")


class PairScoreCombiner:
    """
    Symmetric combiner for directional scores.

    Attributes:
        config: CombinerConfig with the combination policy
    """

    def __init__(self, config: CombinerConfig):
        self.config = config
        self.config.validate()
        logger.debug(f"Initialized PairScoreCombiner with mode={config.mode}, alpha={config.alpha}")

    def combine(self, score_ab: float, score_ba: float) -> float:
        """Combine one pair's directional scores."""
        return float(self.combine_many(np.array([score_ab]), np.array([score_ba]))[0])

    def combine_many(self, scores_ab: np.ndarray, scores_ba: np.ndarray) -> np.ndarray:
        """
        Combine arrays of directional scores element-wise.

        Args:
            scores_ab: Scores with the first participant as rater (N,)
            scores_ba: Scores with the second participant as rater (N,)

        Returns:
            Pair scores (N,), in the same 0-100 range as the inputs
        """
        scores_ab = np.asarray(scores_ab, dtype=float)
        scores_ba = np.asarray(scores_ba, dtype=float)
        if scores_ab.shape != scores_ba.shape:
            raise ValueError(
                f"Score arrays must have same shape: {scores_ab.shape} vs {scores_ba.shape}"
            )

        mean = (scores_ab + scores_ba) / 2
        if self.config.mode == "mean":
            return mean
        if self.config.mode == "geometric":
            return np.sqrt(np.clip(scores_ab, 0, None) * np.clip(scores_ba, 0, None))
        low = np.minimum(scores_ab, scores_ba)
        if self.config.mode == "min":
            return low
        if self.config.mode == "min_mean":
            return self.config.alpha * low + (1 - self.config.alpha) * mean
        raise ValueError(f"Unknown combiner mode: {self.config.mode}")
