from __future__ import annotations

import pytest

from survey_core.normalize import normalize_response_times


def test_min_maps_to_one_and_max_to_seven():
    out = normalize_response_times([2.0, 0.5, 3.5, 1.25])
    assert out[1] == pytest.approx(1.0)
    assert out[2] == pytest.approx(7.0)
    assert all(1.0 <= v <= 7.0 for v in out)


def test_values_scale_linearly_between_bounds():
    out = normalize_response_times([1.0, 2.0, 3.0])
    assert out == pytest.approx([1.0, 4.0, 7.0])


@pytest.mark.parametrize("value", [0.0, 0.4, 12.0])
def test_uniform_input_is_neutral(value):
    assert normalize_response_times([value] * 5) == [1.0] * 5


def test_empty_input():
    assert normalize_response_times([]) == []


def test_slower_response_gets_higher_intensity():
    # Slow choices are read as strong preferences. This is the survey's
    # established scoring direction and is intentionally not inverted.
    fast, slow = normalize_response_times([0.3, 4.0])
    assert slow > fast


def test_non_finite_times_stay_neutral_and_do_not_skew_the_span():
    out = normalize_response_times([1.0, float("inf"), 3.0])
    assert out == pytest.approx([1.0, 1.0, 7.0])
    assert normalize_response_times([float("nan")]) == [1.0]
