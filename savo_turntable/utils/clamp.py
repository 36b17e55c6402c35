#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/utils/clamp.py
------------------------------------------
Small, reusable clamping helpers for the `savo_turntable` package.

Values that must stay bounded in this package:
- PID output before lever mapping (-1.0 .. 1.0)
- normalized lever command (0.0 .. 1.0)
- lever display percentage (-100 .. 100)
"""

from __future__ import annotations

from typing import TypeVar

Number = TypeVar("Number", int, float)


def clamp(value: Number, lo: Number, hi: Number) -> Number:
    """
    Clamp `value` into the closed interval [lo, hi].

    Notes
    -----
    - If `lo > hi`, the bounds are swapped to keep behavior robust.
    """
    if lo > hi:
        lo, hi = hi, lo
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def clamp_float(value: float, lo: float, hi: float) -> float:
    """
    Clamp a float into [lo, hi] and return float.
    """
    return float(clamp(float(value), float(lo), float(hi)))


def clamp01(value: float) -> float:
    """
    Clamp a float into [0.0, 1.0] (lever range).
    """
    return clamp_float(float(value), 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    """
    Linear interpolation between `a` and `b` with `t` clamped to [0, 1].

    >>> lerp(-100.0, 100.0, 0.75)
    50.0
    """
    t = clamp01(t)
    return float(a) + (float(b) - float(a)) * t
