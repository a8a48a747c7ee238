"""Optimal matching module."""

from .optimal import OptimalMatcher, MatcherConfig, MatchingResult

__all__ = ["OptimalMatcher", "MatcherConfig", "MatchingResult"]
