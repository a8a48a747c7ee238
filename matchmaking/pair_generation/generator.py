"""
Candidate pair generation for the pairwise phases.

Key Design Decisions:
- Pairs are unordered: (A, B) and (B, A) are the same candidate pair
- Self-pairs are excluded: (A, A) is never generated
- Every pair is generated; the hard filter does the pruning
- Pairs are split into batches so pair scoring can be spread over workers
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class PairGenerator:
    """
    Generator for candidate participant index pairs.

    Attributes:
        batch_size: Number of pairs per scoring batch
    """

    def __init__(self, batch_size: int = 2000):
        """
        Initialize the pair generator.

        Args:
            batch_size: Number of pairs per batch
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size

    def generate_pairs(self, n_persons: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Enumerate all unordered pairs of person indices.

        Args:
            n_persons: Total number of participants

        Returns:
            Tuple of (indices_a, indices_b) arrays with indices_a[i] < indices_b[i],
            in row-major order
        """
        if n_persons < 2:
            return np.array([], dtype=int), np.array([], dtype=int)

        # Upper triangle without the diagonal
        indices_a, indices_b = np.triu_indices(n_persons, k=1)
        logger.info(f"Generated {len(indices_a)} candidate pairs from {n_persons} participants")
        return indices_a, indices_b

    def batches(self, pairs: Sequence[Tuple[int, int]]) -> List[List[Tuple[int, int]]]:
        """
        Split index pairs into consecutive batches.

        Args:
            pairs: (i, j) participant index pairs, usually the hard-filter survivors

        Returns:
            Lists of (i, j) tuples of at most batch_size pairs, in input order
        """
        return [list(pairs[start:start + self.batch_size]) for start in range(0, len(pairs), self.batch_size)]
