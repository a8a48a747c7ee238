"""Pair score combination module."""

from .combiner import PairScoreCombiner, CombinerConfig, COMBINER_MODES

__all__ = ["PairScoreCombiner", "CombinerConfig", "COMBINER_MODES"]
