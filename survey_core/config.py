from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    vals = tuple(v.strip() for v in raw.split(",") if v.strip())
    return vals or default


# intensity scale for normalized response times
SCALE_MIN: float = 1.0
SCALE_MAX: float = 7.0

DEFAULT_OPTIONS: tuple[str, ...] = ("image1.jpg", "image2.jpg", "image3.jpg", "image4.jpg")
KEYWORDS_PATH: str | None = None

# raw-log export formatting
TIME_DECIMALS: int = 4
MISSING_CELL: str = "N/A"
EXPORT_ENABLED: bool = True
EXPORT_FILENAME: str = "result_data.xlsx"
SHEET_UNIFIED: str = "Unified Data"
SHEET_RAW: str = "Raw Data"

# persistence identifiers shared with the front end
KEY_KEYWORD_LOG: str = "keywordResponseTimes"
KEY_OPTION_LOG: str = "responseTimes"
KEY_KEYWORD_INDEX: str = "currentKeywordIndex"
KEY_KEYWORDS: str = "keywords"
KEY_OPTIONS: str = "images"

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "stage",
    "keyword",
    "left",
    "right",
    "chosen",
    "rt_sec",
    "step",
)
# // env overrides for staging/ops
SCALE_MIN = _env_float("SCALE_MIN", SCALE_MIN)
SCALE_MAX = _env_float("SCALE_MAX", SCALE_MAX)
TIME_DECIMALS = _env_int("TIME_DECIMALS", TIME_DECIMALS)
EXPORT_ENABLED = _env_bool("EXPORT_ENABLED", EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
KEYWORDS_PATH = os.getenv("KEYWORDS_PATH") or None
DEFAULT_OPTIONS = _env_list("SURVEY_OPTIONS", DEFAULT_OPTIONS)
# the scale must stay positive and increasing: matrix cells hold 1/value
if not (0 < SCALE_MIN < SCALE_MAX):
    SCALE_MIN, SCALE_MAX = 1.0, 7.0


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("SEED"):
        try: cfg["SEED"] = int(e.get("SEED"))
        except ValueError: pass
    if e.get("KEYWORDS_PATH"): cfg["KEYWORDS_PATH"] = e.get("KEYWORDS_PATH")
    return cfg
def seed_rng(cfg: dict):
    s = cfg.get("SEED")
    if s is not None:
        random.seed(int(s))
