"""Helpers to export survey results and raw decision logs.

The workbook layout matches the spreadsheet analysts already use: a
"Unified Data" sheet stacking the comparison matrices, eigenvectors and
option scores, and a "Raw Data" sheet with both timed decision logs.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping
import csv
import io

import pandas as pd

from . import config
from .types import SurveyResult

_KEYWORD_FIELDS: tuple[str, ...] = ("responseTime", "keyword1", "keyword2", "selectedKeyword")
_OPTION_FIELDS: tuple[str, ...] = ("responseTime", "leftImage", "rightImage", "selectedImage", "keyword")
_CSV_FIELDS: tuple[str, ...] = (
    "stage",
    "responseTime",
    "left",
    "right",
    "selected",
    "keyword",
)


def _fmt_time(val: Any) -> str:
    try:
        return f"{float(val):.{config.TIME_DECIMALS}f}"
    except (TypeError, ValueError):
        return config.MISSING_CELL


def _cell(val: Any) -> Any:
    return config.MISSING_CELL if val in (None, "") else val


def _normalize_row(entry: Mapping[str, Any], fields: tuple[str, ...]) -> List[Any]:
    out: List[Any] = []
    for key in fields:
        val = entry.get(key)
        out.append(_fmt_time(val) if key == "responseTime" else _cell(val))
    return out


def _as_dict(result: SurveyResult | Mapping[str, Any]) -> Dict[str, Any]:
    if isinstance(result, SurveyResult):
        return vars(result)
    return dict(result)


def unified_rows(result: SurveyResult | Mapping[str, Any]) -> List[List[Any]]:
    """Rows of the "Unified Data" sheet."""

    r = _as_dict(result)
    keywords: List[str] = list(r.get("keywords") or [])
    options: List[str] = list(r.get("options") or [])
    kw_matrix = r.get("keyword_matrix") or []
    kw_weights = r.get("keyword_weights") or []
    opt_matrices = r.get("option_matrices") or {}
    opt_weights = r.get("option_weights") or {}
    scores = r.get("scores") or []

    rows: List[List[Any]] = [["Keyword Comparison Matrix"], ["", *keywords, "Eigenvector"]]
    for i, row in enumerate(kw_matrix):
        rows.append([keywords[i], *row, kw_weights[i] if i < len(kw_weights) else 0])
    rows.append([])

    rows.append(["Image Comparison Matrix"])
    for kw in keywords:
        rows.append([f"Comparison Matrix for {kw}"])
        rows.append(["", *options, "Eigenvector"])
        vec = opt_weights.get(kw) or []
        for i, row in enumerate(opt_matrices.get(kw) or []):
            rows.append([options[i], *row, vec[i] if i < len(vec) else 0])
        rows.append([])

    rows.append(["Image Scores"])
    header: List[Any] = ["Image"]
    for kw in keywords:
        header += [f"Value for {kw}", f"Weight for {kw}"]
    rows.append(header + ["Score"])
    for o, opt in enumerate(options):
        row: List[Any] = [opt]
        for k, kw in enumerate(keywords):
            vec = opt_weights.get(kw) or []
            row.append(vec[o] if o < len(vec) else 0)
            row.append(kw_weights[k] if k < len(kw_weights) else 0)
        row.append(scores[o] if o < len(scores) else 0)
        rows.append(row)
    return rows


def raw_rows(keyword_log: Iterable[Mapping[str, Any]], option_log: Iterable[Mapping[str, Any]]) -> List[List[Any]]:
    """Rows of the "Raw Data" sheet."""

    rows: List[List[Any]] = [
        ["Response Times: Keyword"],
        ["Response Time(s)", "Keyword1", "Keyword2", "Selected Keyword"],
    ]
    rows += [_normalize_row(e or {}, _KEYWORD_FIELDS) for e in keyword_log]
    rows.append([])
    rows.append(["Response Times: Images by Keyword"])
    rows.append(["Response Time(s)", "Left Image", "Right Image", "Selected Image", "Keyword"])
    rows += [_normalize_row(e or {}, _OPTION_FIELDS) for e in option_log]
    return rows


def to_xlsx(result: SurveyResult | Mapping[str, Any]) -> bytes:
    """Render the two-sheet workbook and return its bytes."""

    r = _as_dict(result)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as xw:
        pd.DataFrame(unified_rows(r)).to_excel(xw, sheet_name=config.SHEET_UNIFIED, header=False, index=False)
        pd.DataFrame(raw_rows(r.get("keyword_log") or [], r.get("option_log") or [])).to_excel(
            xw, sheet_name=config.SHEET_RAW, header=False, index=False
        )
    return buf.getvalue()


def _flat_events(keyword_log: Iterable[Mapping[str, Any]], option_log: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for e in keyword_log:
        e = e or {}
        out.append({
            "stage": "keyword",
            "responseTime": _fmt_time(e.get("responseTime")),
            "left": _cell(e.get("keyword1")),
            "right": _cell(e.get("keyword2")),
            "selected": _cell(e.get("selectedKeyword")),
            "keyword": "",
        })
    for e in option_log:
        e = e or {}
        out.append({
            "stage": "option",
            "responseTime": _fmt_time(e.get("responseTime")),
            "left": _cell(e.get("leftImage")),
            "right": _cell(e.get("rightImage")),
            "selected": _cell(e.get("selectedImage")),
            "keyword": _cell(e.get("keyword")),
        })
    return out


def to_json(keyword_log: Iterable[Mapping[str, Any]], option_log: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload of both raw logs."""

    return {
        config.KEY_KEYWORD_LOG: [dict(e or {}) for e in keyword_log],
        config.KEY_OPTION_LOG: [dict(e or {}) for e in option_log],
    }


def to_csv(keyword_log: Iterable[Mapping[str, Any]], option_log: Iterable[Mapping[str, Any]]) -> str:
    """Render both raw logs as one CSV with a fixed header."""

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_CSV_FIELDS)
    writer.writeheader()
    for row in _flat_events(keyword_log, option_log):
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["unified_rows", "raw_rows", "to_xlsx", "to_json", "to_csv"]
