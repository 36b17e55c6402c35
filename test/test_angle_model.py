# -*- coding: utf-8 -*-

import pytest

from savo_turntable.control.angle_model import (
    angle_for_index,
    delta_angle,
    flip_angle,
    index_for_angle,
    next_index,
    normalize_angle,
)
from savo_turntable.drivers import InvalidSubdivisionsError


# -----------------------------------------------------------------------------
# delta_angle
# -----------------------------------------------------------------------------
def test_delta_angle_crosses_seam_with_target_minus_actual_sign():
    assert delta_angle(350.0, 10.0) == pytest.approx(-20.0)
    assert delta_angle(10.0, 350.0) == pytest.approx(20.0)
    assert delta_angle(0.0, 270.0) == pytest.approx(90.0)


def test_delta_angle_range_and_antisymmetry_over_grid():
    samples = [i * 7.5 for i in range(48)] + [0.1, 179.9, 180.0, 180.1, 359.9]
    for a in samples:
        for b in samples:
            d = delta_angle(a, b)
            assert -180.0 <= d <= 180.0
            assert d == pytest.approx(-delta_angle(b, a), abs=1e-9)


def test_delta_angle_exactly_opposite_headings():
    assert delta_angle(180.0, 0.0) == 180.0
    assert delta_angle(0.0, 180.0) == -180.0
    assert delta_angle(270.0, 90.0) == 180.0
    assert delta_angle(90.0, 270.0) == -180.0


def test_delta_angle_accepts_unnormalized_inputs():
    assert delta_angle(-10.0, 10.0) == pytest.approx(-20.0)
    assert delta_angle(720.0 + 5.0, 355.0) == pytest.approx(10.0)


# -----------------------------------------------------------------------------
# stop index <-> heading
# -----------------------------------------------------------------------------
def test_angle_for_index_four_stops():
    assert [angle_for_index(i, 4) for i in range(4)] == [0.0, 90.0, 180.0, 270.0]


def test_angle_for_index_wraps_negative_and_out_of_range():
    assert angle_for_index(4, 4) == 0.0
    assert angle_for_index(5, 4) == 90.0
    assert angle_for_index(-1, 4) == 270.0
    assert angle_for_index(2, 3) == pytest.approx(240.0)


def test_index_for_angle_nearest_stop_and_remainder():
    assert index_for_angle(93.0, 4) == (1, pytest.approx(3.0))
    assert index_for_angle(86.0, 4) == (1, pytest.approx(-4.0))

    idx, rem = index_for_angle(350.0, 4)
    assert idx == 0
    assert rem == pytest.approx(-10.0)


def test_index_for_angle_halfway_rounds_up():
    idx, rem = index_for_angle(45.0, 4)
    assert idx == 1
    assert rem == pytest.approx(-45.0)


@pytest.mark.parametrize("bad", [0, -3, 2.5, True, "four", None])
def test_invalid_subdivisions_raise(bad):
    with pytest.raises(InvalidSubdivisionsError):
        angle_for_index(1, bad)
    with pytest.raises(InvalidSubdivisionsError):
        index_for_angle(10.0, bad)


# -----------------------------------------------------------------------------
# flip / neighbor / normalize
# -----------------------------------------------------------------------------
def test_flip_angle():
    assert flip_angle(300.0) == pytest.approx(120.0)
    assert flip_angle(10.0) == pytest.approx(190.0)
    assert flip_angle(180.0) == 0.0


def test_next_index_wraps_both_ways():
    assert next_index(3, +1, 4) == 0
    assert next_index(0, -1, 4) == 3
    assert next_index(1, +1, 4) == 2


def test_normalize_angle_stays_in_half_open_range():
    assert normalize_angle(360.0) == 0.0
    assert normalize_angle(-90.0) == 270.0
    assert normalize_angle(-1e-17) == 0.0
    assert 0.0 <= normalize_angle(-1e-12) < 360.0
