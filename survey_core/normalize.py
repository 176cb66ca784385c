"""Response-time to intensity mapping.

Observed times are rescaled linearly onto ``[SCALE_MIN, SCALE_MAX]``
(1..7 by default): the fastest response maps to the low end and the slowest
to the high end.  The value is later written on the *chosen* side of the
comparison matrix, so a slow choice counts as a strong preference.  That
direction is the long-standing behaviour of the survey and downstream
reports depend on it.
"""
from __future__ import annotations

import math
from typing import Iterable, List

from . import config

__all__ = ["normalize_response_times"]


def normalize_response_times(times: Iterable[float]) -> List[float]:
    vals = [float(t) for t in times]
    finite = [v for v in vals if math.isfinite(v)]
    if not finite:
        return [config.SCALE_MIN for _ in vals]
    lo, hi = min(finite), max(finite)
    if lo == hi:
        return [config.SCALE_MIN for _ in vals]
    span = config.SCALE_MAX - config.SCALE_MIN
    # non-finite times carry no information and stay neutral
    return [
        config.SCALE_MIN + ((v - lo) / (hi - lo)) * span if math.isfinite(v) else config.SCALE_MIN
        for v in vals
    ]
