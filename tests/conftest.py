from __future__ import annotations

import itertools

import pytest


KEYWORDS = ["가격", "품질", "디자인"]
OPTIONS = ["image1.jpg", "image2.jpg", "image3.jpg", "image4.jpg"]


def build_keyword_log(
    keywords: list[str] | None = None,
    *,
    base_rt: float = 0.8,
    step_rt: float = 0.4,
) -> list[dict]:
    """Deterministic keyword decisions: the earlier keyword always wins."""

    rows: list[dict] = []
    for idx, (a, b) in enumerate(itertools.combinations(keywords or KEYWORDS, 2)):
        rows.append(
            {
                "keyword1": a,
                "keyword2": b,
                "selectedKeyword": a,
                "responseTime": base_rt + idx * step_rt,
            }
        )
    return rows


def build_option_log(
    keywords: list[str] | None = None,
    options: list[str] | None = None,
    *,
    favourite: str | None = None,
    rt: float = 1.5,
) -> list[dict]:
    """Option decisions for every keyword; ``favourite`` wins its pairs."""

    opts = options or OPTIONS
    fav = favourite or opts[0]
    rows: list[dict] = []
    for kw in keywords or KEYWORDS:
        for idx, (a, b) in enumerate(itertools.combinations(opts, 2)):
            chosen = fav if fav in (a, b) else a
            rows.append(
                {
                    "responseTime": rt + 0.25 * idx,
                    "leftImage": a,
                    "rightImage": b,
                    "selectedImage": chosen,
                    "keyword": kw,
                }
            )
    return rows


@pytest.fixture
def keyword_log() -> list[dict]:
    return build_keyword_log()


@pytest.fixture
def option_log() -> list[dict]:
    return build_option_log()
