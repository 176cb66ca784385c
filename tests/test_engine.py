from __future__ import annotations

import logging
import random

import pytest

from survey_core.engine import SurveySession, score_survey
from survey_core.eigen import geometric_mean_weights
from survey_core.matrix import build_comparison_matrix

from tests.conftest import KEYWORDS, OPTIONS, build_keyword_log, build_option_log


def _walk(session: SurveySession, pick=lambda pair: pair[0]) -> list[str]:
    stages: list[str] = []
    rt = 0.5
    while True:
        prompt = session.next_pair()
        if prompt is None:
            return stages
        stages.append(prompt.stage)
        if prompt.stage == "keyword_start":
            assert session.begin_keyword() == prompt.keyword
            continue
        session.answer_current(pick(prompt.pair), rt)
        rt += 0.3


def test_price_quality_example():
    rows = [{"keyword1": "가격", "keyword2": "품질", "selectedKeyword": "가격", "responseTime": 0.5}]
    matrix = build_comparison_matrix(rows, ["가격", "품질"], "keyword")
    assert matrix == [[1.0, 1.0], [1.0, 1.0]]
    assert geometric_mean_weights(matrix) == pytest.approx([0.5, 0.5])


def test_repeated_pair_example_favours_b():
    opt_rows = [
        {"leftImage": "A", "rightImage": "B", "selectedImage": "A", "responseTime": 1.0, "keyword": "가격"},
        {"leftImage": "A", "rightImage": "B", "selectedImage": "B", "responseTime": 3.0, "keyword": "가격"},
    ]
    kw_rows = [{"keyword1": "가격", "keyword2": "품질", "selectedKeyword": "가격", "responseTime": 0.5}]
    res = score_survey(["가격", "품질"], ["A", "B"], kw_rows, opt_rows)

    assert res.valid
    assert res.option_matrices["가격"][1][0] == pytest.approx(7.0)
    w = res.option_weights["가격"]
    assert w[1] > w[0]
    # no decisions under 품질 -> neutral matrix and uniform weights
    assert res.option_weights["품질"] == pytest.approx([0.5, 0.5])
    assert res.ranking()[0][0] == "B"


def test_score_survey_end_to_end(keyword_log, option_log):
    res = score_survey(KEYWORDS, OPTIONS, keyword_log, option_log)

    assert res.valid and not res.diagnostics
    assert len(res.scores) == len(OPTIONS)
    assert sum(res.keyword_weights) == pytest.approx(1.0)
    assert sum(res.scores) == pytest.approx(1.0)
    assert set(res.option_matrices) == set(KEYWORDS)
    assert res.meta["keyword_decisions"] == len(keyword_log)


@pytest.mark.parametrize(
    "drop, expected",
    [
        ("keywords", "missing keywords"),
        ("options", "missing options"),
        ("keyword_log", "missing keyword decisions"),
        ("option_log", "missing option decisions"),
    ],
)
def test_missing_dataset_is_reported_not_computed(drop, expected, caplog):
    args = {
        "keywords": KEYWORDS,
        "options": OPTIONS,
        "keyword_log": build_keyword_log(),
        "option_log": build_option_log(),
    }
    args[drop] = []
    with caplog.at_level(logging.WARNING, logger="survey_core.engine"):
        res = score_survey(args["keywords"], args["options"], args["keyword_log"], args["option_log"])

    assert res.valid is False
    assert expected in res.diagnostics
    assert res.scores == [] and res.keyword_matrix == [] and res.option_matrices == {}
    assert "One or more data sets are missing" in caplog.text


def test_session_walks_keyword_then_option_stages():
    session = SurveySession(KEYWORDS, OPTIONS[:3], rng=random.Random(7))
    stages = _walk(session)

    assert stages[:3] == ["keyword"] * 3
    per_keyword = ["keyword_start", "option", "option", "option"]
    assert stages[3:] == per_keyword * len(KEYWORDS)
    assert session.total_steps == 3 + 3 * 3
    assert len(session.keyword_log) == 3
    assert len(session.option_log) == 9
    assert [r["keyword"] for r in session.option_log] == [k for k in KEYWORDS for _ in range(3)]
    assert session.next_pair() is None


def test_session_finalize_scores_everything():
    session = SurveySession(KEYWORDS, OPTIONS, rng=random.Random(11))
    _walk(session)
    res = session.finalize()

    assert res.valid
    assert res.meta["complete"] is True
    assert res.meta["steps"] == session.total_steps
    assert len(res.scores) == len(OPTIONS)


def test_answer_must_match_pending_pair():
    session = SurveySession(["a", "b"], ["x", "y"], rng=random.Random(1))
    with pytest.raises(ValueError):
        session.answer_current("not-in-pair", 1.0)
    with pytest.raises(ValueError):
        session.begin_keyword()


def test_answer_before_keyword_start_is_rejected():
    session = SurveySession(["a", "b"], ["x", "y"], rng=random.Random(1))
    session.answer_current("a", 1.0)
    assert session.next_pair().stage == "keyword_start"
    with pytest.raises(ValueError):
        session.answer_current("x", 1.0)


def test_negative_times_are_clamped():
    session = SurveySession(["a", "b"], ["x", "y"], rng=random.Random(1))
    session.answer_current("a", -2.0)
    assert session.keyword_log[0]["responseTime"] == 0.0


def test_state_round_trip_resumes_mid_stage():
    session = SurveySession(KEYWORDS, OPTIONS[:3], rng=random.Random(5))
    for _ in range(3):
        p = session.next_pair()
        session.answer_current(p.pair[1], 1.0)
    session.begin_keyword()
    p = session.next_pair()
    session.answer_current(p.pair[0], 2.0)

    restored = SurveySession.from_state(session.to_state())
    assert restored.next_pair() == session.next_pair()
    assert restored.keyword_log == session.keyword_log
    assert restored.option_log == session.option_log

    _walk(restored)
    assert len(restored.option_log) == 9


def test_single_keyword_skips_keyword_stage_and_reports_invalid():
    session = SurveySession(["only"], ["x", "y"], rng=random.Random(2))
    assert session.next_pair().stage == "keyword_start"
    _walk(session)
    res = session.finalize()
    assert res.valid is False
    assert "missing keyword decisions" in res.diagnostics


def test_malformed_log_rows_are_ignored():
    clean = score_survey(KEYWORDS, OPTIONS, build_keyword_log(), build_option_log())
    res = score_survey(KEYWORDS, OPTIONS, build_keyword_log() + [None, "junk"], build_option_log() + [None])

    assert res.valid and not res.diagnostics
    assert res.scores == pytest.approx(clean.scores)
    assert res.meta["keyword_decisions"] == len(build_keyword_log())


def test_session_records_use_storage_field_names():
    session = SurveySession(KEYWORDS, OPTIONS[:2], rng=random.Random(3))
    _walk(session)

    assert set(session.keyword_log[0]) == {"keyword1", "keyword2", "selectedKeyword", "responseTime"}
    assert set(session.option_log[0]) == {"keyword", "leftImage", "rightImage", "selectedImage", "responseTime"}
