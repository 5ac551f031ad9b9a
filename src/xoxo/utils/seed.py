"""
Random seed management for reproducibility.
"""

from __future__ import annotations

from typing import Optional
import random
import numpy as np


def set_seed(seed: int) -> None:
    """
    Set the global random seeds.

    Players and searches take their own seeded generators; this covers
    anything that falls back to the global ones.

    Args:
        seed: Random seed value
    """
    random.seed(seed)
    np.random.seed(seed)


def derive_seed(seed: Optional[int], *parts: int) -> Optional[int]:
    """Deterministic sub-seed for one game / player, or None if unseeded."""
    if seed is None:
        return None
    return int(np.random.SeedSequence([seed, *parts]).generate_state(1)[0])
