#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control.angle_model
===============================================

Pure angle helpers for a turntable with N equally spaced stop positions.

All angles are degrees. Canonical headings live in [0, 360); signed deltas
live in [-180, 180].

    angle_for_index(1, 4)        -> 90.0
    index_for_angle(93.0, 4)     -> (1, 3.0)
    delta_angle(350.0, 10.0)     -> -20.0   (target 350, actual 10)
"""

from __future__ import annotations

import math
from typing import Tuple

from ..constants import FULL_TURN_DEG, HALF_TURN_DEG
from ..drivers.turntable_exceptions import InvalidSubdivisionsError, TurntableErrorContext


def _require_subdivisions(subdivisions: int) -> int:
    ctx = TurntableErrorContext(operation="angle_model", value=repr(subdivisions))
    try:
        n = int(subdivisions)
    except (TypeError, ValueError) as e:
        raise InvalidSubdivisionsError("subdivisions is not numeric", context=ctx, cause=e) from e
    if isinstance(subdivisions, bool) or n != subdivisions or n <= 0:
        raise InvalidSubdivisionsError("subdivisions must be a positive integer", context=ctx)
    return n


def normalize_angle(angle: float) -> float:
    """Wrap an angle to [0, 360)."""
    a = float(angle) % FULL_TURN_DEG
    # -1e-17 % 360.0 == 360.0 in IEEE arithmetic
    if a >= FULL_TURN_DEG:
        return 0.0
    return a


def angle_for_index(idx: int, subdivisions: int) -> float:
    """
    Heading of stop `idx`: 360 * idx / subdivisions, canonicalized to [0, 360).

    Indexes outside [0, subdivisions) wrap around the table.
    """
    n = _require_subdivisions(subdivisions)
    return normalize_angle(FULL_TURN_DEG * int(idx) / n)


def index_for_angle(angle: float, subdivisions: int) -> Tuple[int, float]:
    """
    Nearest stop for a heading.

    Returns
    -------
    (idx, remainder)
        idx in [0, subdivisions); remainder is the signed offset in degrees
        from that stop to `angle` (|remainder| <= half a stop spacing).
    """
    n = _require_subdivisions(subdivisions)
    spacing = FULL_TURN_DEG / n
    a = normalize_angle(angle)

    # floor(x + 0.5) keeps half-way headings deterministic (round half up)
    idx = int(math.floor(a / spacing + 0.5)) % n
    remainder = delta_angle(a, angle_for_index(idx, n))
    return idx, remainder


def delta_angle(target: float, actual: float) -> float:
    """
    Minimal signed angular difference `target - actual` in [-180, 180].

    Exactly-opposite headings resolve to +180 when target > actual and to
    -180 otherwise, so delta_angle(a, b) == -delta_angle(b, a) always holds.
    """
    t = normalize_angle(target)
    a = normalize_angle(actual)
    d = t - a
    if d > HALF_TURN_DEG:
        d -= FULL_TURN_DEG
    elif d < -HALF_TURN_DEG:
        d += FULL_TURN_DEG
    return d


def flip_angle(angle: float) -> float:
    """Heading 180 degrees away, canonicalized to [0, 360)."""
    return normalize_angle(float(angle) + HALF_TURN_DEG)


def next_index(current_idx: int, direction: int, subdivisions: int) -> int:
    """Neighbor stop in `direction` (+1 or -1), wrapping around the table."""
    n = _require_subdivisions(subdivisions)
    return (int(current_idx) + int(direction) + n) % n


__all__ = [
    "normalize_angle",
    "angle_for_index",
    "index_for_angle",
    "delta_angle",
    "flip_angle",
    "next_index",
]
