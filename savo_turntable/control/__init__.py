#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control

Closed-loop turntable rotation control: angle model, PID controller,
rotation tasks and the per-turntable scheduler.
"""

# Pure angle helpers (stop index <-> heading, wrapped deltas)
from .angle_model import (
    normalize_angle,
    angle_for_index,
    index_for_angle,
    delta_angle,
    flip_angle,
    next_index,
)

# Scalar PID core
from .pid import PidGains, PidResult, PidController

# One rotation toward a fixed heading, stepped by the host tick
from .rotation_task import RotationTask

# Supersession / lever ownership / request handling
from .scheduler import RotationScheduler

# Text commands (topic / CLI)
from .commands import CommandKind, TurntableCommand, parse_command, apply_command

__all__ = [
    # Angle model
    "normalize_angle",
    "angle_for_index",
    "index_for_angle",
    "delta_angle",
    "flip_angle",
    "next_index",
    # PID
    "PidGains",
    "PidResult",
    "PidController",
    # Tasks / scheduling
    "RotationTask",
    "RotationScheduler",
    # Commands
    "CommandKind",
    "TurntableCommand",
    "parse_command",
    "apply_command",
]
