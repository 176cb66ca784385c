from __future__ import annotations
from html import escape
from typing import Dict, Any, List

from .config import EXPORT_ENABLED

def _num(v: Any, places: int = 4) -> str:
    try:
        return f"{float(v):.{places}f}"
    except (TypeError, ValueError):
        return "-"

def _matrix_table(labels: List[str], matrix: List[List[float]], weights: List[float]) -> str:
    head = "".join(f"<th>{escape(str(l))}</th>" for l in labels)
    body: List[str] = []
    for i, row in enumerate(matrix):
        cells = "".join(f"<td>{_num(v, 3)}</td>" for v in row)
        w = weights[i] if i < len(weights) else 0.0
        body.append(f"<tr><th>{escape(str(labels[i]))}</th>{cells}<td><b>{_num(w)}</b></td></tr>")
    return (
        "<table border='1' cellpadding='6' cellspacing='0'>"
        f"<thead><tr><th></th>{head}<th>Eigenvector</th></tr></thead>"
        f"<tbody>{''.join(body)}</tbody></table>"
    )

def export_report_html(result: Dict[str, Any], path: str) -> None:
    keywords: List[str] = list(result.get("keywords") or [])
    options: List[str] = list(result.get("options") or [])
    scores = result.get("scores") or []
    meta = result.get("meta", {}) or {}
    diags = result.get("diagnostics") or []

    invalid_html = ""
    if result.get("valid") is False:
        items = "".join(f"<li>{escape(str(d))}</li>" for d in diags)
        invalid_html = (
            "<div class=\"banner warning\">"
            "Not enough data to score this survey"
            f"<ul>{items}</ul>"
            "</div>"
        )

    ranking = sorted(
        ((opt, scores[i] if i < len(scores) else 0.0) for i, opt in enumerate(options)),
        key=lambda r: r[1], reverse=True,
    )
    rank_rows = "\n".join(
        f"<tr><td>{pos}</td><td>{escape(str(opt))}</td><td>{_num(sc)}</td></tr>"
        for pos, (opt, sc) in enumerate(ranking, start=1)
    ) if scores else ""

    kw_section = ""
    if result.get("keyword_matrix"):
        kw_section = "<h3>Keyword comparison matrix</h3>" + _matrix_table(
            keywords, result["keyword_matrix"], result.get("keyword_weights") or []
        )

    opt_sections: List[str] = []
    matrices = result.get("option_matrices") or {}
    weights = result.get("option_weights") or {}
    for kw in keywords:
        if kw not in matrices:
            continue
        opt_sections.append(
            f"<h4>Comparison matrix for {escape(str(kw))}</h4>"
            + _matrix_table(options, matrices[kw], weights.get(kw) or [])
        )

    export_links = ""
    if EXPORT_ENABLED:
        report_id = result.get("reportId") or meta.get("reportId")
        if report_id:
            rid = escape(str(report_id))
            export_links = (
                "<p class=\"export-links\">"
                f"<a href=\"/results/{rid}/report.xlsx\">Download workbook (xlsx)</a> · "
                f"<a href=\"/results/{rid}/raw.json\">Raw log (JSON)</a> · "
                f"<a href=\"/results/{rid}/raw.csv\">Raw log (CSV)</a>"
                "</p>"
            )

    html = f"""<!doctype html>
<html lang="ko">
<head>
<meta charset="utf-8"/>
<title>구매 기준 가중치 평가</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .banner{{padding:12px 16px;border-radius:6px;margin:16px 0}}
 .banner.warning{{background:#ffe7d9;border:1px solid #f5a623;color:#7a2d00}}
 table{{border-collapse:collapse;width:100%;margin-bottom:16px}}
 th,td{{text-align:left}}
</style>
</head>
<body>
<div class="wrap">
  <h1>구매 기준 가중치 평가</h1>
  {invalid_html}

  <h3>Image scores</h3>
  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>#</th><th>Image</th><th>Score</th></tr></thead>
    <tbody>{rank_rows}</tbody>
  </table>

  {kw_section}

  {'<h3>Image comparison matrices</h3>' + ''.join(opt_sections) if opt_sections else ''}

  <p><b>Decisions:</b> keyword {int(meta.get('keyword_decisions', 0) or 0)} · image {int(meta.get('option_decisions', 0) or 0)}</p>
  {export_links}
</div>
</body>
</html>"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
