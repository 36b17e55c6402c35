#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/drivers/actuator.py
-----------------------------------------------
Capability interface every turntable backend exposes to the control core.

The core never touches a backend's internal layout. It needs exactly:
- get_angle()        current heading in degrees (mutated between ticks by the
                     physical / simulated turntable)
- get_subdivisions() number of equally spaced stop positions (> 0)
- get_lever()        current normalized lever value [0, 1]
- set_lever(value)   write the normalized lever value [0, 1], 0.5 = neutral

Backends in this package
------------------------
- `SimulatedTurntable` (drivers/sim_turntable.py) for tests and the sim CLI
- `TopicTurntable` inside the ROS2 node (angle from a topic, lever published)
"""

from __future__ import annotations

import math
from typing import Protocol, runtime_checkable

from .turntable_exceptions import (
    ActuatorReadError,
    InvalidSubdivisionsError,
    TurntableErrorContext,
)


@runtime_checkable
class TurntableActuator(Protocol):
    name: str

    def get_angle(self) -> float:
        ...

    def get_subdivisions(self) -> int:
        ...

    def get_lever(self) -> float:
        ...

    def set_lever(self, value: float) -> None:
        ...


def read_angle(actuator: TurntableActuator) -> float:
    """
    Read the actuator angle and reject non-numeric or non-finite values.
    """
    raw = actuator.get_angle()
    try:
        angle = float(raw)
    except (TypeError, ValueError) as e:
        raise ActuatorReadError(
            "Actuator returned a non-numeric angle",
            context=TurntableErrorContext(
                actuator=getattr(actuator, "name", None),
                operation="get_angle",
                value=repr(raw),
            ),
            cause=e,
        ) from e

    if not math.isfinite(angle):
        raise ActuatorReadError(
            "Actuator returned a non-finite angle",
            context=TurntableErrorContext(
                actuator=getattr(actuator, "name", None),
                operation="get_angle",
                value=angle,
            ),
        )
    return angle


def read_subdivisions(actuator: TurntableActuator) -> int:
    """
    Read the subdivision count and require a positive integer.
    """
    raw = actuator.get_subdivisions()
    ctx = TurntableErrorContext(
        actuator=getattr(actuator, "name", None),
        operation="get_subdivisions",
        value=repr(raw),
    )
    try:
        count = int(raw)
    except (TypeError, ValueError) as e:
        raise InvalidSubdivisionsError("Subdivision count is not numeric", context=ctx, cause=e) from e

    if isinstance(raw, bool) or count != raw or count <= 0:
        raise InvalidSubdivisionsError("Subdivision count must be a positive integer", context=ctx)
    return count


__all__ = [
    "TurntableActuator",
    "read_angle",
    "read_subdivisions",
]
