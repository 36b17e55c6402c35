# -*- coding: utf-8 -*-

import dataclasses
import math

import pytest

from savo_turntable.control.pid import PidController, PidGains


def test_p_only_output_is_zero_at_target():
    pid = PidController(PidGains(kp=1.0, ki=0.0, kd=0.0))
    for t in (-270.0, -1.5, 0.0, 42.0, 359.9):
        for dt in (1e-3, 0.02, 1.0, 10.0):
            assert pid.update(t, t, dt) == 0.0


def test_i_only_accumulates_n_times_error():
    pid = PidController(PidGains(kp=0.0, ki=1.0, kd=0.0))
    pid.reset()
    e = 2.5
    for n in range(1, 11):
        assert pid.update(e, 0.0, 1.0) == pytest.approx(n * e)


def test_reset_matches_fresh_controller():
    gains = PidGains(kp=0.3, ki=0.2, kd=0.1)
    used = PidController(gains)
    for k in range(5):
        used.update(10.0 - k, 0.0, 0.05)
    used.reset()

    fresh = PidController(gains)
    assert used.update(7.0, 1.0, 0.04) == fresh.update(7.0, 1.0, 0.04)
    assert used.integral == fresh.integral
    assert used.last_error == fresh.last_error


def test_textbook_terms():
    pid = PidController(PidGains(kp=2.0, ki=0.5, kd=0.1))
    r1 = pid.update_detailed(4.0, 0.0, 0.5)
    assert r1.p_term == pytest.approx(8.0)
    assert r1.i_term == pytest.approx(0.5 * 2.0)
    assert r1.d_term == pytest.approx(0.1 * 4.0 / 0.5)
    assert r1.output == pytest.approx(r1.p_term + r1.i_term + r1.d_term)

    r2 = pid.update_detailed(3.0, 0.0, 0.5)
    assert r2.d_term == pytest.approx(0.1 * (3.0 - 4.0) / 0.5)
    assert pid.integral == pytest.approx(2.0 + 1.5)


def test_output_is_not_clamped():
    pid = PidController(PidGains(kp=10.0, ki=0.0, kd=0.0))
    assert pid.update(100.0, 0.0, 0.02) == pytest.approx(1000.0)


@pytest.mark.parametrize("dt", [0.0, 1e-9, -0.5, math.nan, math.inf])
def test_degenerate_dt_skips_derivative_and_holds_integral(dt):
    pid = PidController(PidGains(kp=1.0, ki=1.0, kd=1.0))
    pid.update(2.0, 0.0, 1.0)       # integral 2, last_error 2
    r = pid.update_detailed(5.0, 0.0, dt)

    assert not r.dt_valid
    assert r.d_term == 0.0
    assert pid.integral == pytest.approx(2.0)
    assert r.output == pytest.approx(5.0 + 2.0)
    assert math.isfinite(r.output)
    # newest error is still tracked
    assert pid.last_error == 5.0


def test_gains_are_frozen():
    gains = PidGains(kp=1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        gains.kp = 2.0  # type: ignore[misc]
    pid = PidController(gains)
    pid.update(1.0, 0.0, 0.1)
    assert pid.gains == PidGains(kp=1.0)
