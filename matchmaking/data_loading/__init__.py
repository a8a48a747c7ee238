"""Snapshot loading and synthetic populations."""

from .loaders import load_snapshot, save_snapshot, participants_frame
from .synthetic import SyntheticPopulation

__all__ = ["load_snapshot", "save_snapshot", "participants_frame", "SyntheticPopulation"]
