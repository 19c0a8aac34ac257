"""
Reproducibility Environment.

Centralizes RNG seeding for Python's ``random`` and NumPy so simulated
metrics and synthesized results can be replayed from a single seed.
"""

import random
from typing import Optional

import numpy as np


def set_seed(seed: int) -> None:
    """Seed the global Python and NumPy PRNGs."""
    random.seed(seed)
    np.random.seed(seed)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Build an isolated NumPy generator.

    Args:
        seed: Fixed seed, or None to draw fresh OS entropy.

    Returns:
        A ``numpy.random.Generator`` independent of the global state.
    """
    return np.random.default_rng(seed)
