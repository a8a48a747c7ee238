"""Candidate pair generation module."""

from .generator import PairGenerator

__all__ = ["PairGenerator"]
