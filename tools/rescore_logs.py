"""Re-run scoring over an exported raw-log JSON file.

Usage: python -m tools.rescore_logs raw.json [--keywords a,b,c] [--options x,y]

Keywords and options default to the order they first appear in the logs.
"""
from __future__ import annotations
import argparse, json, sys
from pathlib import Path

from survey_core.config import KEY_KEYWORD_LOG, KEY_OPTION_LOG
from survey_core.engine import score_survey


def _first_seen(rows, *fields):
    seen = []
    for r in rows:
        if not isinstance(r, dict):
            continue
        for f in fields:
            v = r.get(f)
            if v and v not in seen:
                seen.append(v)
    return seen


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("path")
    ap.add_argument("--keywords", default=None)
    ap.add_argument("--options", default=None)
    args = ap.parse_args(argv)

    data = json.loads(Path(args.path).read_text(encoding="utf-8"))
    kw_log = data.get(KEY_KEYWORD_LOG) or []
    opt_log = data.get(KEY_OPTION_LOG) or []
    keywords = [k.strip() for k in args.keywords.split(",")] if args.keywords else _first_seen(kw_log, "keyword1", "keyword2")
    options = [o.strip() for o in args.options.split(",")] if args.options else _first_seen(opt_log, "leftImage", "rightImage")

    res = score_survey(keywords, options, kw_log, opt_log)
    if not res.valid:
        print("Cannot score:", "; ".join(res.diagnostics))
        return 1
    print("Keyword weights:")
    for kw, w in zip(res.keywords, res.keyword_weights):
        print(f"  {kw}: {w:.4f}")
    print("Image scores:")
    for opt, s in res.ranking():
        print(f"  {opt}: {s:.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
