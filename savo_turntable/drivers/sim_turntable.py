#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/drivers/sim_turntable.py
----------------------------------------------------
Dry-run turntable backend for tests, tuning and the sim CLI.

Purpose
- Software-only stand-in for a real turntable drive
- Lets you exercise the rotation scheduler, PID tuning and supersession
  behavior without hardware

Motion model
------------
Angular velocity is proportional to the lever deflection from neutral:

    velocity_deg_s = max_speed_deg_s * (lever - 0.5) * 2
    angle += velocity_deg_s * dt        (wrapped to [0, 360))

Optional extras
- `deadband`: lever deflections smaller than this produce no motion (stiction)
- `stalled`: freeze the table regardless of lever (jammed drive / blocked deck)

Typical use
-----------
from savo_turntable.drivers.sim_turntable import SimulatedTurntable

table = SimulatedTurntable(subdivisions=4, angle_deg=0.0, max_speed_deg_s=30.0)
table.set_lever(1.0)
table.advance(0.5)      # table.get_angle() -> 15.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

from ..constants import FULL_TURN_DEG, LEVER_MAX, LEVER_MIN, LEVER_NEUTRAL_DEFAULT
from ..utils.clamp import clamp_float
from .turntable_exceptions import (
    InvalidSubdivisionsError,
    LeverRangeError,
    TurntableConfigError,
    TurntableErrorContext,
)


def _wrap360(angle_deg: float) -> float:
    a = float(angle_deg) % FULL_TURN_DEG
    # float modulo of a tiny negative number can land exactly on 360.0
    return 0.0 if a >= FULL_TURN_DEG else a


# =============================================================================
# Typed records
# =============================================================================
@dataclass(frozen=True)
class SimLeverWrite:
    """
    Snapshot of one lever write applied to the simulated table.
    """
    seq: int
    sim_time_s: float
    value: float
    angle_deg: float


# =============================================================================
# Simulated turntable
# =============================================================================
class SimulatedTurntable:
    """
    Integrating turntable simulator implementing `TurntableActuator`.
    """

    def __init__(
        self,
        *,
        name: str = "sim_turntable",
        subdivisions: int = 4,
        angle_deg: float = 0.0,
        max_speed_deg_s: float = 30.0,
        deadband: float = 0.0,
        lever: float = LEVER_NEUTRAL_DEFAULT,
        max_history: int = 10000,
    ) -> None:
        self.name = str(name)

        if isinstance(subdivisions, bool) or int(subdivisions) != subdivisions or int(subdivisions) <= 0:
            raise InvalidSubdivisionsError(
                "subdivisions must be a positive integer",
                context=TurntableErrorContext(actuator=self.name, operation="init", value=repr(subdivisions)),
            )
        if not math.isfinite(max_speed_deg_s) or max_speed_deg_s <= 0.0:
            raise TurntableConfigError(
                "max_speed_deg_s must be a positive finite number",
                context=TurntableErrorContext(actuator=self.name, operation="init", value=max_speed_deg_s),
            )

        self.subdivisions = int(subdivisions)
        self.max_speed_deg_s = float(max_speed_deg_s)
        self.deadband = abs(float(deadband))
        self.max_history = max(1, int(max_history))
        self.stalled = False

        self._angle_deg = _wrap360(angle_deg)
        self._lever = clamp_float(lever, LEVER_MIN, LEVER_MAX)
        self._sim_time_s = 0.0
        self._history: List[SimLeverWrite] = []
        self._write_seq = 0

    # -------------------------------------------------------------------------
    # TurntableActuator API
    # -------------------------------------------------------------------------
    def get_angle(self) -> float:
        return self._angle_deg

    def get_subdivisions(self) -> int:
        return self.subdivisions

    def get_lever(self) -> float:
        return self._lever

    def set_lever(self, value: float) -> None:
        v = float(value)
        if not math.isfinite(v) or v < LEVER_MIN or v > LEVER_MAX:
            raise LeverRangeError(
                "Lever value outside [0, 1]",
                context=TurntableErrorContext(actuator=self.name, operation="set_lever", value=v),
            )
        self._lever = v
        self._write_seq += 1
        self._history.append(
            SimLeverWrite(
                seq=self._write_seq,
                sim_time_s=self._sim_time_s,
                value=v,
                angle_deg=self._angle_deg,
            )
        )
        if len(self._history) > self.max_history:
            self._history = self._history[-self.max_history :]

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------
    def velocity_deg_s(self) -> float:
        """Angular velocity commanded by the current lever value."""
        if self.stalled:
            return 0.0
        deflection = self._lever - LEVER_NEUTRAL_DEFAULT
        if abs(deflection) * 2.0 < self.deadband:
            return 0.0
        return self.max_speed_deg_s * deflection * 2.0

    def advance(self, dt: float) -> float:
        """
        Integrate motion over `dt` seconds. Returns the new angle.
        """
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0.0:
            return self._angle_deg
        self._angle_deg = _wrap360(self._angle_deg + self.velocity_deg_s() * dt)
        self._sim_time_s += dt
        return self._angle_deg

    def set_angle(self, angle_deg: float) -> None:
        """Teleport the deck (test setup helper)."""
        self._angle_deg = _wrap360(angle_deg)

    # -------------------------------------------------------------------------
    # Diagnostics helpers
    # -------------------------------------------------------------------------
    @property
    def sim_time_s(self) -> float:
        return self._sim_time_s

    def get_history(self) -> List[SimLeverWrite]:
        return list(self._history)

    def reset_history(self) -> None:
        self._history.clear()

    def get_state_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "angle_deg": self._angle_deg,
            "subdivisions": self.subdivisions,
            "lever": self._lever,
            "velocity_deg_s": self.velocity_deg_s(),
            "stalled": self.stalled,
            "sim_time_s": self._sim_time_s,
            "write_count": self._write_seq,
        }

    def summary(self) -> str:
        return (
            f"{self.name}(angle={self._angle_deg:.2f}deg, lever={self._lever:.3f}, "
            f"subdivisions={self.subdivisions}, writes={self._write_seq})"
        )


__all__ = [
    "SimLeverWrite",
    "SimulatedTurntable",
]
