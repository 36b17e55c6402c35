#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/drivers/lever_driver.py
---------------------------------------------------
Owned write handle for a turntable's control lever.

The lever is a single-writer resource. Exactly one live `LeverDriver` exists
per actuator at any time; it is held by the scheduler while idle and handed to
the active rotation task while one runs. Handing it over is a *transfer*:

    new_handle = old_handle.transfer("rotation_task#4")

After the transfer the old handle is released and every write through it raises
`LeverOwnershipError`, so a cancelled task can never write again.

Writes are clamped into [0, 1] (a lever outside that range would be a bug in
the caller, but the actuator must never see it).
"""

from __future__ import annotations

import math
from typing import Optional

from ..constants import LEVER_MAX, LEVER_MIN, LEVER_NEUTRAL_DEFAULT
from ..utils.clamp import clamp_float
from .actuator import TurntableActuator
from .turntable_exceptions import (
    LeverOwnershipError,
    LeverRangeError,
    TurntableErrorContext,
)


class LeverDriver:
    """
    Exclusive lever write handle for one actuator.

    Attributes
    ----------
    owner : str
        Diagnostic label of the current holder ("scheduler", "rotation_task#3").
    write_count : int
        Number of successful writes made through *this* handle.
    """

    def __init__(
        self,
        actuator: TurntableActuator,
        *,
        owner: str = "scheduler",
        neutral: float = LEVER_NEUTRAL_DEFAULT,
    ) -> None:
        self._actuator = actuator
        self._owner = str(owner)
        self._neutral = clamp_float(neutral, LEVER_MIN, LEVER_MAX)
        self._released = False
        self._write_count = 0
        self._last_written: Optional[float] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def owner(self) -> str:
        return self._owner

    @property
    def actuator(self) -> TurntableActuator:
        return self._actuator

    @property
    def released(self) -> bool:
        return self._released

    @property
    def neutral(self) -> float:
        return self._neutral

    @property
    def write_count(self) -> int:
        return self._write_count

    @property
    def last_written(self) -> Optional[float]:
        return self._last_written

    # -------------------------------------------------------------------------
    # Lever access
    # -------------------------------------------------------------------------
    def read(self) -> float:
        """Current lever value as reported by the actuator (display only)."""
        return float(self._actuator.get_lever())

    def write(self, value: float) -> float:
        """
        Write a lever value, clamped to [0, 1]. Returns the value written.
        """
        self._ensure_owned("set_lever", value)

        v = float(value)
        if not math.isfinite(v):
            raise LeverRangeError(
                "Lever value must be finite",
                context=self._context("set_lever", value),
            )

        v = clamp_float(v, LEVER_MIN, LEVER_MAX)
        self._actuator.set_lever(v)
        self._write_count += 1
        self._last_written = v
        return v

    def center(self) -> float:
        """Write the neutral lever value (no motion)."""
        return self.write(self._neutral)

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------
    def release(self) -> None:
        """Give up the write right. Idempotent."""
        self._released = True

    def transfer(self, new_owner: str) -> "LeverDriver":
        """
        Release this handle and return a fresh handle on the same actuator.
        """
        self._ensure_owned("transfer", new_owner)
        self.release()
        return LeverDriver(self._actuator, owner=new_owner, neutral=self._neutral)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _context(self, operation: str, value) -> TurntableErrorContext:
        return TurntableErrorContext(
            actuator=getattr(self._actuator, "name", None),
            operation=operation,
            owner=self._owner,
            value=value if isinstance(value, (int, float, str)) else repr(value),
        )

    def _ensure_owned(self, operation: str, value) -> None:
        if self._released:
            raise LeverOwnershipError(
                "Lever handle has been released",
                context=self._context(operation, value),
            )

    def __repr__(self) -> str:
        return (
            f"LeverDriver(owner={self._owner!r}, released={self._released}, "
            f"writes={self._write_count})"
        )


__all__ = ["LeverDriver"]
