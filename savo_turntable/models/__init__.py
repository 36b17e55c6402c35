#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/models/__init__.py
----------------------------------------------
Configuration and status records shared by the scheduler, the ROS2 node and
the sim CLI. Pure dataclasses / enums, no ROS imports.
"""

from .control_config import PidGains, TurntableControlConfig
from .rotation_status import (
    TaskState,
    RequestKind,
    RequestStatus,
    RequestResult,
    TaskStep,
)
from .telemetry import TurntableTelemetry

__all__ = [
    "PidGains",
    "TurntableControlConfig",
    "TaskState",
    "RequestKind",
    "RequestStatus",
    "RequestResult",
    "TaskStep",
    "TurntableTelemetry",
]
