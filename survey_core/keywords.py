from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional
from . import config
log = logging.getLogger(__name__)
DEFAULT_KEYWORDS_FILE = Path(__file__).with_name("data") / "keywords.txt"
def parse_keywords(text: str) -> List[str]:
    return [k.strip() for k in text.split(",") if k.strip()]
def load_keywords(path: Optional[str] = None) -> List[str]:
    """Read the comma-delimited keyword resource; [] when it cannot be read."""
    src = path or config.KEYWORDS_PATH
    try:
        if src:
            text = Path(src).read_text(encoding="utf-8")
        else:
            text = DEFAULT_KEYWORDS_FILE.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.error("Failed to load keywords: %s", exc)
        return []
    return parse_keywords(text)
def load_options() -> List[str]:
    return list(config.DEFAULT_OPTIONS)
