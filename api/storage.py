"""JSON-file persistence for survey sessions and finished results.

In-progress sessions are stored under the same identifiers the browser
front end used for local storage (``keywordResponseTimes``,
``responseTimes``, ``currentKeywordIndex`` ...), so a participant can
reload a page or restart the server without losing answers.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
RESULTS_DIR = DATA_ROOT / "results"
RESULT_INDEX_PATH = DATA_ROOT / "results_index.json"
SESSIONS_PATH = DATA_ROOT / "sessions_active.json"

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _ensure_dirs() -> None:
    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("unreadable store file %s: %s", path, exc)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_result(result_id: str, result: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Persist the finished result JSON and its index metadata."""

    _ensure_dirs()
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        index[result_id] = metadata
        _write_json(RESULT_INDEX_PATH, index)

    _write_json(RESULTS_DIR / f"{result_id}.json", result)


def load_result(result_id: str) -> Optional[Dict[str, Any]]:
    path = RESULTS_DIR / f"{result_id}.json"
    return _read_json(path, None)


def delete_result(result_id: str) -> bool:
    removed = False
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        if result_id in index:
            index.pop(result_id, None)
            _write_json(RESULT_INDEX_PATH, index)
            removed = True
    path = RESULTS_DIR / f"{result_id}.json"
    if path.exists():
        try:
            path.unlink()
            removed = True
        except OSError as exc:
            log.warning("could not remove %s: %s", path, exc)
    return removed


def find_result_by_session(session_id: str) -> Optional[Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
    for rid, meta in index.items():
        if meta.get("sessionId") == session_id:
            result = load_result(rid)
            if result:
                return result
    return None


def _load_sessions() -> Dict[str, Dict[str, Any]]:
    return _read_json(SESSIONS_PATH, {})


def save_session_state(session_id: str, state: Dict[str, Any]) -> None:
    with _LOCK:
        sessions = _load_sessions()
        payload = dict(state)
        payload["lastUpdated"] = utcnow_iso()
        sessions[session_id] = payload
        _write_json(SESSIONS_PATH, sessions)


def load_session_state(session_id: str) -> Optional[Dict[str, Any]]:
    return _load_sessions().get(session_id)


def clear_session_state(session_id: str) -> None:
    with _LOCK:
        sessions = _load_sessions()
        if session_id in sessions:
            sessions.pop(session_id, None)
            _write_json(SESSIONS_PATH, sessions)


def load_all_sessions() -> Dict[str, Dict[str, Any]]:
    return _load_sessions()
