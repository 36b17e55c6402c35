#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/drivers/__init__.py
-----------------------------------------------
Public exports for turntable backends, the lever write handle and the
exception hierarchy.

The ROS2 topic-backed turntable lives in `savo_turntable.nodes` and is not
imported here (keeps this package importable without rclpy).
"""

from .turntable_exceptions import (
    TurntableErrorContext,
    TurntableException,
    TurntableConfigError,
    TurntableValidationError,
    InvalidSubdivisionsError,
    LeverRangeError,
    ActuatorReadError,
    LeverOwnershipError,
)
from .actuator import TurntableActuator, read_angle, read_subdivisions
from .lever_driver import LeverDriver
from .sim_turntable import SimLeverWrite, SimulatedTurntable

__all__ = [
    # exceptions
    "TurntableErrorContext",
    "TurntableException",
    "TurntableConfigError",
    "TurntableValidationError",
    "InvalidSubdivisionsError",
    "LeverRangeError",
    "ActuatorReadError",
    "LeverOwnershipError",
    # capability interface
    "TurntableActuator",
    "read_angle",
    "read_subdivisions",
    # lever ownership
    "LeverDriver",
    # dry-run backend
    "SimLeverWrite",
    "SimulatedTurntable",
]
