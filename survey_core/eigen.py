from __future__ import annotations

import math
from typing import List, Sequence

__all__ = ["geometric_mean_weights"]


def geometric_mean_weights(matrix: Sequence[Sequence[float]]) -> List[float]:
    """Approximate the principal eigenvector of a pairwise matrix.

    Each row's geometric mean (n-th root of the row product) is taken and the
    results are scaled to sum to 1.  No consistency check is made; any
    positive reciprocal matrix yields a vector.
    """

    n = len(matrix)
    if n == 0:
        return []
    gm = [math.prod(float(v) for v in row) ** (1.0 / n) for row in matrix]
    total = sum(gm)
    if total <= 0 or math.isnan(total):
        return [1.0 / n] * n
    return [g / total for g in gm]
