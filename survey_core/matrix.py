"""Reciprocal comparison matrices built from timed pairwise decisions."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from .normalize import normalize_response_times
from .types import FieldMapping, Matrix

__all__ = [
    "FIELD_MAPPINGS",
    "resolve_mapping",
    "neutral_matrix",
    "build_comparison_matrix",
]

log = logging.getLogger(__name__)

KEYWORD_FIELDS = FieldMapping(left="keyword1", right="keyword2", selected="selectedKeyword", time="responseTime")
OPTION_FIELDS = FieldMapping(
    left="leftImage", right="rightImage", selected="selectedImage", time="responseTime", category="keyword"
)

FIELD_MAPPINGS: Dict[str, FieldMapping] = {
    "keyword": KEYWORD_FIELDS,
    "option": OPTION_FIELDS,
    # storage-key aliases used by the front end
    "keywordResponseTimes": KEYWORD_FIELDS,
    "imageResponseTimes": OPTION_FIELDS,
}


def resolve_mapping(kind: str) -> Optional[FieldMapping]:
    return FIELD_MAPPINGS.get(kind)


def neutral_matrix(n: int) -> Matrix:
    return [[1.0] * n for _ in range(n)]


def _valid_time(val: Any) -> Optional[float]:
    if not val or isinstance(val, bool):
        return None
    try:
        t = float(val)
    except (TypeError, ValueError):
        return None
    if math.isnan(t) or math.isinf(t):
        return None
    return t


def build_comparison_matrix(
    records: Iterable[Mapping[str, Any]],
    items: Sequence[str],
    kind: str,
) -> Matrix:
    """Fold decision records over ``items`` into a reciprocal matrix.

    Response times are normalized once across all records, then each
    record sets ``M[winner][loser] = value`` and the reciprocal cell.  A
    pair that appears more than once keeps the last record's value.
    Records naming an item outside ``items`` are skipped, and records
    without a usable time count as the neutral value 1.
    """

    items = list(items)
    matrix = neutral_matrix(len(items))
    mapping = resolve_mapping(kind)
    if mapping is None:
        log.error("Invalid type: %s", kind)
        return matrix

    rows = [r for r in records if isinstance(r, Mapping)]
    times = [_valid_time(r.get(mapping.time)) for r in rows]
    normalized = iter(normalize_response_times(t for t in times if t is not None))
    index = {label: pos for pos, label in reversed(list(enumerate(items)))}

    for rec, t in zip(rows, times):
        value = next(normalized) if t is not None else 1.0
        left, right = rec.get(mapping.left), rec.get(mapping.right)
        i, j = index.get(left), index.get(right)
        if i is None or j is None or i == j:
            log.debug("skip decision %s vs %s: not a pair over the item list", left, right)
            continue
        chosen = rec.get(mapping.selected)
        if chosen == left:
            winner, loser = i, j
        elif chosen == right:
            winner, loser = j, i
        else:
            log.debug("skip decision %s vs %s: chosen=%r", left, right, chosen)
            continue
        matrix[winner][loser] = value
        matrix[loser][winner] = 1.0 / value
    return matrix
