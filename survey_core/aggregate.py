from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

__all__ = ["aggregate_scores"]


def _at(vec: Optional[Sequence[Optional[float]]], idx: int) -> float:
    if not vec or idx >= len(vec):
        return 0.0
    val = vec[idx]
    try:
        return float(val) if val is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def aggregate_scores(
    top_weights: Sequence[Optional[float]],
    category_weights: Mapping[str, Sequence[Optional[float]]],
    categories: Sequence[str],
    n_options: int,
) -> List[float]:
    """score[o] = sum_k top_weights[k] * category_weights[categories[k]][o].

    Missing categories, short vectors and ``None`` entries count as 0.
    """

    scores: List[float] = []
    for o in range(n_options):
        total = 0.0
        for k, cat in enumerate(categories):
            total += _at(category_weights.get(cat), o) * _at(top_weights, k)
        scores.append(total)
    return scores
