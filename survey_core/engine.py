# survey_core/engine.py
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Mapping, Any
from datetime import datetime, timezone
import random, logging

from .types import Decision, Pair, Prompt, SurveyResult
from .keywords import load_keywords, load_options
from .pairing import generate_pairs, pair_count
from .matrix import build_comparison_matrix, KEYWORD_FIELDS, OPTION_FIELDS
from .eigen import geometric_mean_weights
from .aggregate import aggregate_scores
from .config import (
    load_config,
    seed_rng,
    DEBUG_TRACE,
    TRACE_FIELDS,
    KEY_KEYWORD_LOG,
    KEY_OPTION_LOG,
    KEY_KEYWORD_INDEX,
    KEY_KEYWORDS,
    KEY_OPTIONS,
)


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def score_survey(
    keywords: Sequence[str],
    options: Sequence[str],
    keyword_log: Sequence[Mapping[str, Any]],
    option_log: Sequence[Mapping[str, Any]],
) -> SurveyResult:
    """Run the full scoring chain over both decision logs.

    Keyword decisions give the top-level weights; option decisions are
    split by the keyword they were made under and each slice gives that
    keyword's option weights.  Missing inputs produce an invalid result
    with diagnostics instead of a partial computation.
    """

    keywords = list(keywords); options = list(options)
    res = SurveyResult(
        keywords=keywords,
        options=options,
        keyword_log=[dict(r) for r in keyword_log if isinstance(r, Mapping)],
        option_log=[dict(r) for r in option_log if isinstance(r, Mapping)],
    )
    missing = [
        name for name, data in (
            ("keywords", keywords),
            ("options", options),
            ("keyword decisions", res.keyword_log),
            ("option decisions", res.option_log),
        ) if not data
    ]
    if missing:
        log.warning("One or more data sets are missing: %s", ", ".join(missing))
        res.valid = False
        res.diagnostics = [f"missing {name}" for name in missing]
        return res

    res.keyword_matrix = build_comparison_matrix(res.keyword_log, keywords, "keyword")
    res.keyword_weights = geometric_mean_weights(res.keyword_matrix)

    cat_field = OPTION_FIELDS.category or "keyword"
    for kw in keywords:
        data = [r for r in res.option_log if r.get(cat_field) == kw]
        matrix = build_comparison_matrix(data, options, "option")
        res.option_matrices[kw] = matrix
        res.option_weights[kw] = geometric_mean_weights(matrix)

    res.scores = aggregate_scores(res.keyword_weights, res.option_weights, keywords, len(options))
    res.meta = {
        "keyword_decisions": len(res.keyword_log),
        "option_decisions": len(res.option_log),
    }
    return res


class SurveySession:
    """One participant's walk through the keyword and option stages.

    Stage order: every keyword pair, then for each keyword a start notice
    followed by every option pair judged under that keyword.
    """

    def __init__(
        self,
        keywords: Optional[Sequence[str]] = None,
        options: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        if rng is None:
            self.cfg = load_config(); seed_rng(self.cfg)
        else:
            self.cfg = {}
        self.keywords: List[str] = list(keywords) if keywords is not None else load_keywords()
        self.options: List[str] = list(options) if options is not None else load_options()
        self.keyword_pairs: List[Pair] = generate_pairs(self.keywords, rng)
        # option pairs are reshuffled for every keyword
        self.option_pairs: Dict[str, List[Pair]] = {
            kw: generate_pairs(self.options, rng) for kw in self.keywords
        }
        self.keyword_log: List[Dict[str, object]] = []
        self.option_log: List[Dict[str, object]] = []
        self.keyword_index = 0
        self._kw_pos = 0
        self._opt_pos = 0
        self._keyword_started = False
        self._step = 0
        self.started_at = _now_iso()

    @property
    def total_steps(self) -> int:
        return len(self.keyword_pairs) + len(self.keywords) * pair_count(len(self.options))

    @property
    def current_keyword(self) -> Optional[str]:
        if self.keyword_index < len(self.keywords):
            return self.keywords[self.keyword_index]
        return None

    def _option_stage_open(self) -> bool:
        return self.current_keyword is not None and bool(self.option_pairs.get(self.current_keyword))

    def next_pair(self) -> Optional[Prompt]:
        total = self.total_steps
        if self._kw_pos < len(self.keyword_pairs):
            return Prompt("keyword", self.keyword_pairs[self._kw_pos], None, self._step, total)
        if not self._option_stage_open():
            return None
        kw = self.current_keyword
        if not self._keyword_started:
            return Prompt("keyword_start", None, kw, self._step, total)
        return Prompt("option", self.option_pairs[kw][self._opt_pos], kw, self._step, total)

    @property
    def done(self) -> bool:
        return self.next_pair() is None

    def begin_keyword(self) -> Optional[str]:
        """Acknowledge the start notice for the current keyword."""
        pending = self.next_pair()
        if pending is None or pending.stage != "keyword_start":
            raise ValueError("no keyword start pending")
        self._keyword_started = True
        return pending.keyword

    def answer_current(self, chosen: str, rt_sec: Optional[float] = None) -> None:
        pending = self.next_pair()
        if pending is None or pending.pair is None:
            raise ValueError("no pair pending")
        left, right = pending.pair
        if chosen not in (left, right):
            raise ValueError(f"choice {chosen!r} is not in pair ({left!r}, {right!r})")
        rt = max(0.0, float(rt_sec)) if rt_sec is not None else None

        decision = Decision(left, right, chosen, rt, pending.keyword)
        if pending.stage == "keyword":
            rec = decision.to_record(KEYWORD_FIELDS)
            dup = any(
                e.get("keyword1") == left and e.get("keyword2") == right and e.get("selectedKeyword") == chosen
                for e in self.keyword_log
            )
            if not dup:
                self.keyword_log.append(rec)
            self._kw_pos += 1
        else:
            self.option_log.append(decision.to_record(OPTION_FIELDS))
            self._opt_pos += 1
            if self._opt_pos >= len(self.option_pairs[pending.keyword]):
                self.keyword_index += 1
                self._opt_pos = 0
                self._keyword_started = False

        _emit_trace(stage=pending.stage, keyword=pending.keyword, left=left, right=right,
                    chosen=chosen, rt_sec=rt, step=self._step)
        self._step += 1

    def finalize(self) -> SurveyResult:
        res = score_survey(self.keywords, self.options, self.keyword_log, self.option_log)
        res.meta.update({
            "started_at": self.started_at,
            "completed_at": _now_iso(),
            "complete": self.done,
            "steps": self._step,
            "total_steps": self.total_steps,
        })
        return res

    # ---- persistence round trip ----
    def to_state(self) -> Dict[str, object]:
        return {
            KEY_KEYWORDS: list(self.keywords),
            KEY_OPTIONS: list(self.options),
            KEY_KEYWORD_LOG: [dict(r) for r in self.keyword_log],
            KEY_OPTION_LOG: [dict(r) for r in self.option_log],
            KEY_KEYWORD_INDEX: self.keyword_index,
            "keywordPairs": [list(p) for p in self.keyword_pairs],
            "imagePairs": {kw: [list(p) for p in pairs] for kw, pairs in self.option_pairs.items()},
            "keywordPairIndex": self._kw_pos,
            "imagePairIndex": self._opt_pos,
            "keywordStarted": self._keyword_started,
            "step": self._step,
            "startedAt": self.started_at,
        }

    @classmethod
    def from_state(cls, state: Mapping[str, Any]) -> "SurveySession":
        keywords = list(state.get(KEY_KEYWORDS) or [])
        options = list(state.get(KEY_OPTIONS) or [])
        sess = cls(keywords, options, rng=random.Random(0))
        if state.get("keywordPairs") is not None:
            sess.keyword_pairs = [tuple(p) for p in state["keywordPairs"]]
        stored_pairs = state.get("imagePairs") or {}
        for kw in keywords:
            if kw in stored_pairs:
                sess.option_pairs[kw] = [tuple(p) for p in stored_pairs[kw]]
        sess.keyword_log = [dict(r) for r in state.get(KEY_KEYWORD_LOG) or []]
        sess.option_log = [dict(r) for r in state.get(KEY_OPTION_LOG) or []]
        sess.keyword_index = int(state.get(KEY_KEYWORD_INDEX) or 0)
        sess._kw_pos = int(state.get("keywordPairIndex") or 0)
        sess._opt_pos = int(state.get("imagePairIndex") or 0)
        sess._keyword_started = bool(state.get("keywordStarted"))
        sess._step = int(state.get("step") or 0)
        sess.started_at = str(state.get("startedAt") or sess.started_at)
        return sess
