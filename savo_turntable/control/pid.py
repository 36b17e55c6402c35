#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control.pid
=======================================

Purpose
-------
Scalar PID controller used by the turntable rotation tasks.

Caller responsibilities
-----------------------
- pass `target` / `actual` whose difference is already the wrapped angular
  error (the controller does no angle wrapping)
- provide `dt` from the tick source
- call `reset()` once when a rotation task starts, never mid-task

Degenerate dt
-------------
When `dt` is not finite or `dt <= dt_epsilon`, the derivative term is zero and
the integral is held; `last_error` still tracks the newest error so the next
valid tick does not see a stale derivative jump.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite

from ..constants import DT_EPSILON_S_DEFAULT
from ..models.control_config import PidGains


# =============================================================================
# Per-update breakdown
# =============================================================================

@dataclass
class PidResult:
    output: float = 0.0

    p_term: float = 0.0
    i_term: float = 0.0
    d_term: float = 0.0

    error: float = 0.0
    integral: float = 0.0
    dt_sec: float = 0.0
    dt_valid: bool = False


# =============================================================================
# PID controller
# =============================================================================

class PidController:
    """
    Textbook PID: output = kp*e + ki*integral(e dt) + kd*de/dt (unbounded).

    Gains are fixed at construction. Output clamping and lever mapping are the
    rotation task's job.
    """

    def __init__(self, gains: PidGains | None = None, *, dt_epsilon: float = DT_EPSILON_S_DEFAULT) -> None:
        self._gains = gains if gains is not None else PidGains()
        self._dt_epsilon = abs(float(dt_epsilon)) if isfinite(dt_epsilon) else DT_EPSILON_S_DEFAULT

        self._integral = 0.0
        self._last_error = 0.0
        self._last_result = PidResult()

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------
    @property
    def gains(self) -> PidGains:
        return self._gains

    @property
    def integral(self) -> float:
        return self._integral

    @property
    def last_error(self) -> float:
        return self._last_error

    @property
    def last_result(self) -> PidResult:
        return self._last_result

    # -------------------------------------------------------------------------
    # State management
    # -------------------------------------------------------------------------
    def reset(self) -> None:
        self._integral = 0.0
        self._last_error = 0.0
        self._last_result = PidResult()

    # -------------------------------------------------------------------------
    # Control law
    # -------------------------------------------------------------------------
    def update(self, target: float, actual: float, dt: float) -> float:
        return self.update_detailed(target, actual, dt).output

    def update_detailed(self, target: float, actual: float, dt: float) -> PidResult:
        r = PidResult()
        r.error = float(target) - float(actual)
        r.dt_sec = float(dt)
        r.dt_valid = isfinite(r.dt_sec) and r.dt_sec > self._dt_epsilon

        if r.dt_valid:
            self._integral += r.error * r.dt_sec
            derivative = (r.error - self._last_error) / r.dt_sec
        else:
            derivative = 0.0
        self._last_error = r.error

        g = self._gains
        r.integral = self._integral
        r.p_term = g.kp * r.error
        r.i_term = g.ki * self._integral
        r.d_term = g.kd * derivative
        r.output = r.p_term + r.i_term + r.d_term

        self._last_result = r
        return r


__all__ = [
    "PidGains",
    "PidResult",
    "PidController",
]
