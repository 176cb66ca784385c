from __future__ import annotations

import json

from survey_core.export import to_json
from tools.rescore_logs import main

from tests.conftest import KEYWORDS, OPTIONS, build_keyword_log, build_option_log


def test_rescore_from_exported_logs(tmp_path, capsys):
    path = tmp_path / "raw.json"
    path.write_text(json.dumps(to_json(build_keyword_log(), build_option_log()), ensure_ascii=False), encoding="utf-8")

    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "Keyword weights:" in out
    assert all(opt in out for opt in OPTIONS)
    assert KEYWORDS[0] in out


def test_rescore_reports_missing_logs(tmp_path, capsys):
    path = tmp_path / "raw.json"
    path.write_text(json.dumps({"keywordResponseTimes": build_keyword_log()}), encoding="utf-8")

    assert main([str(path)]) == 1
    assert "missing options" in capsys.readouterr().out


def test_rescore_skips_null_rows(tmp_path, capsys):
    payload = to_json(build_keyword_log(), build_option_log())
    payload["keywordResponseTimes"] = [None, *payload["keywordResponseTimes"]]
    payload["responseTimes"] = [*payload["responseTimes"], None]
    path = tmp_path / "raw.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    assert main([str(path)]) == 0
    assert "Keyword weights:" in capsys.readouterr().out
