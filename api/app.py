from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uuid, os, json, logging, typing as t

# ---- Engine imports ----
from survey_core.engine import SurveySession
from survey_core.keywords import load_keywords, load_options
from survey_core.config import EXPORT_ENABLED, EXPORT_FILENAME
from survey_core.export import to_json as raw_to_json, to_csv as raw_to_csv, to_xlsx
from .storage import (
    clear_session_state,
    delete_result,
    find_result_by_session,
    load_result,
    load_session_state,
    save_result,
    save_session_state,
    utcnow_iso,
)

log = logging.getLogger(__name__)

SESS: dict[str, SurveySession] = {}

app = FastAPI(title="Response Time Survey API")

@app.get("/")
def root():
    return {"status": "ok", "service": "response-time-survey"}

ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    keywords: list[str] | None = None
    options: list[str] | None = None

class FEAnswer(BaseModel):
    session_id: str
    chosen: str
    started_at: float | None = None
    submitted_at: float | None = None
    rt_ms: int | None = None

class FESession(BaseModel):
    session_id: str

# ---- Helpers ----
def _serialize_result(res: t.Any) -> dict[str, t.Any]:
    return json.loads(json.dumps(res, default=lambda o: getattr(o, "__dict__", o), ensure_ascii=False))


def _decorate_report(
    base: dict[str, t.Any],
    *,
    session_id: str,
    report_id: str | None = None,
    created_at: str | None = None,
) -> dict[str, t.Any]:
    rid = report_id or str(uuid.uuid4())
    created = created_at or utcnow_iso()
    report = dict(base)
    meta = dict(report.get("meta") or {})
    meta.setdefault("sessionId", session_id)
    meta.setdefault("createdAt", created)
    meta["reportId"] = rid
    report["meta"] = meta
    report["id"] = rid
    report["reportId"] = rid
    report["created_at"] = created
    return report


def _serialize_prompt(p):
    if p is None: return None
    return {
        "stage": p.stage,  # "keyword"|"keyword_start"|"option"
        "pair": list(p.pair) if p.pair else None,
        "keyword": p.keyword,
        "step": p.step,
        "total": p.total,
    }


def _session(sid: str) -> SurveySession:
    sess = SESS.get(sid)
    if sess is None:
        state = load_session_state(sid)
        if state is None:
            raise HTTPException(404, "session not found")
        sess = SurveySession.from_state(state)
        SESS[sid] = sess
    return sess


def _stored_result(rid: str) -> dict[str, t.Any]:
    result = load_result(rid)
    if not result:
        raise HTTPException(404, "result not found")
    return result

# ---- Health ----
@app.get("/health")
def health():
    return {
        "keywords": len(load_keywords()),
        "options": len(load_options()),
        "export_enabled": EXPORT_ENABLED,
    }

# ---- Survey flow ----
@app.post("/session/start")
def start(req: StartReq | None = None):
    req = req or StartReq()
    keywords = req.keywords if req.keywords is not None else load_keywords()
    options = req.options if req.options is not None else load_options()
    if not keywords:
        raise HTTPException(400, "no keywords available")
    sid = str(uuid.uuid4())
    sess = SurveySession(keywords=keywords, options=options)
    SESS[sid] = sess
    save_session_state(sid, sess.to_state())
    return {"session_id": sid, "prompt": _serialize_prompt(sess.next_pair())}

@app.get("/api/survey/next")
def survey_next(session_id: str):
    sess = _session(session_id)
    return {"prompt": _serialize_prompt(sess.next_pair())}

@app.post("/api/survey/begin")
def survey_begin(payload: FESession):
    sess = _session(payload.session_id)
    try:
        keyword = sess.begin_keyword()
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    save_session_state(payload.session_id, sess.to_state())
    return {"keyword": keyword, "prompt": _serialize_prompt(sess.next_pair())}

@app.post("/api/survey/answer")
def survey_answer(payload: FEAnswer = Body(...)):
    sess = _session(payload.session_id)
    rt_sec = None
    if payload.rt_ms is not None:
        rt_sec = max(0, payload.rt_ms) / 1000.0
    elif payload.started_at is not None and payload.submitted_at is not None:
        rt_sec = max(0.0, float(payload.submitted_at - payload.started_at))
    try:
        sess.answer_current(payload.chosen, rt_sec)
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    save_session_state(payload.session_id, sess.to_state())
    nxt = sess.next_pair()
    return {"ok": True, "done": nxt is None, "prompt": _serialize_prompt(nxt)}

@app.post("/api/survey/finish")
def survey_finish(payload: FESession):
    stored = find_result_by_session(payload.session_id)
    if stored:
        return stored
    sess = _session(payload.session_id)
    res = _serialize_result(sess.finalize())
    report = _decorate_report(res, session_id=payload.session_id)
    metadata = {
        "sessionId": payload.session_id,
        "createdAt": report["created_at"],
        "valid": report.get("valid"),
    }
    save_result(report["id"], report, metadata)
    clear_session_state(payload.session_id)
    SESS.pop(payload.session_id, None)
    if not report.get("valid"):
        log.warning("session %s finished without enough data: %s", payload.session_id, report.get("diagnostics"))
    return report

@app.post("/session/{sid}/restart")
def restart(sid: str):
    _session(sid)
    SESS.pop(sid, None)
    clear_session_state(sid)
    return {"ok": True}

# ---- Results ----
@app.get("/results/{result_id}")
def get_result(result_id: str):
    return _stored_result(result_id)


@app.delete("/results/{result_id}")
def delete_result_endpoint(result_id: str):
    ok = delete_result(result_id)
    if not ok:
        raise HTTPException(404, "result not found")
    return {"ok": True}


@app.get("/results/{result_id}/raw.json")
def get_raw_json(result_id: str):
    if not EXPORT_ENABLED:
        raise HTTPException(404, "export disabled")
    result = _stored_result(result_id)
    payload = raw_to_json(result.get("keyword_log") or [], result.get("option_log") or [])
    return {"result_id": result_id, **payload}


@app.get("/results/{result_id}/raw.csv")
def get_raw_csv(result_id: str):
    if not EXPORT_ENABLED:
        raise HTTPException(404, "export disabled")
    result = _stored_result(result_id)
    body = raw_to_csv(result.get("keyword_log") or [], result.get("option_log") or [])
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{result_id}_raw.csv\""},
    )


@app.get("/results/{result_id}/report.xlsx")
def get_report_xlsx(result_id: str):
    if not EXPORT_ENABLED:
        raise HTTPException(404, "export disabled")
    result = _stored_result(result_id)
    return Response(
        content=to_xlsx(result),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=\"{EXPORT_FILENAME}\""},
    )


@app.get("/results/{result_id}/report.html")
def get_report_html(result_id: str):
    from survey_core.report_html import export_report_html
    import tempfile
    result = _stored_result(result_id)
    with tempfile.NamedTemporaryFile("w+", suffix=".html", delete=False, encoding="utf-8") as f:
        export_report_html(result, f.name)
        f.seek(0)
        html = f.read()
    os.unlink(f.name)
    return {"html": html}
