"""Pair generation for the comparison stages."""
from __future__ import annotations

import itertools
import random
from typing import List, Optional, Sequence

from .types import Pair

__all__ = ["generate_pairs", "pair_count"]


def pair_count(n: int) -> int:
    return n * (n - 1) // 2 if n > 1 else 0


def generate_pairs(items: Sequence[str], rng: Optional[random.Random] = None) -> List[Pair]:
    """Return every unordered pair of ``items`` once, in random order.

    Each pair keeps its elements in input order; only the sequence of pairs
    is permuted.  ``random.shuffle`` is a Fisher-Yates shuffle, so every
    ordering is equally likely.
    """

    pairs: List[Pair] = list(itertools.combinations(list(items), 2))
    (rng or random).shuffle(pairs)
    return pairs
