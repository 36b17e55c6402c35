# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/constants.py
----------------------------------------
Centralized package-wide constants for `savo_turntable`.

Notes
-----
- Dependency-free (no ROS imports).
- These are *code defaults* only. The YAML params file
  (`config/turntable_control.yaml`) overrides them at runtime.
"""

from __future__ import annotations

from typing import Final


# =============================================================================
# Package / Identity
# =============================================================================
PACKAGE_NAME: Final[str] = "savo_turntable"
NODE_NAME_TURNTABLE_CONTROL: Final[str] = "turntable_control_node"


# =============================================================================
# Topic Names (code defaults)
# =============================================================================
TOPIC_TURNTABLE_ANGLE: Final[str] = "/turntable/angle_deg"
TOPIC_TURNTABLE_COMMAND: Final[str] = "/turntable/command"
TOPIC_TURNTABLE_LEVER: Final[str] = "/turntable/lever"
TOPIC_TURNTABLE_STATUS: Final[str] = "/turntable/status"


# =============================================================================
# Geometry
# =============================================================================
FULL_TURN_DEG: Final[float] = 360.0
HALF_TURN_DEG: Final[float] = 180.0


# =============================================================================
# Lever (normalized drive signal)
# =============================================================================
LEVER_MIN: Final[float] = 0.0
LEVER_MAX: Final[float] = 1.0
LEVER_NEUTRAL_DEFAULT: Final[float] = 0.5

# PID output is clamped to this range before mapping onto the lever
OUTPUT_MIN_DEFAULT: Final[float] = -1.0
OUTPUT_MAX_DEFAULT: Final[float] = 1.0


# =============================================================================
# Rotation control defaults (tuned on the yard turntable)
# =============================================================================
KP_DEFAULT: Final[float] = 0.05
KI_DEFAULT: Final[float] = 0.0
KD_DEFAULT: Final[float] = 0.01

CONVERGENCE_THRESHOLD_DEG_DEFAULT: Final[float] = 0.2

# Derivative term is skipped when dt is at or below this value
DT_EPSILON_S_DEFAULT: Final[float] = 1e-6

# 0.0 disables the per-task duration limit
MAX_TASK_DURATION_S_DEFAULT: Final[float] = 0.0

NEUTRAL_ON_CANCEL_DEFAULT: Final[bool] = False


# =============================================================================
# Node / selection defaults
# =============================================================================
TICK_HZ_DEFAULT: Final[float] = 30.0
STATUS_PUBLISH_HZ_DEFAULT: Final[float] = 2.0
SEARCH_DISTANCE_DEFAULT: Final[float] = 250.0


# =============================================================================
# Request status labels
# =============================================================================
REASON_OK: Final[str] = "ok"
REASON_NO_ACTUATOR: Final[str] = "no_actuator"
REASON_INVALID_SUBDIVISIONS: Final[str] = "invalid_subdivisions"
REASON_INVALID_DIRECTION: Final[str] = "invalid_direction"
REASON_INVALID_INDEX: Final[str] = "invalid_index"
REASON_INVALID_LEVER: Final[str] = "invalid_lever"
REASON_ACTUATOR_READ_FAILED: Final[str] = "actuator_read_failed"

CANCEL_SUPERSEDED: Final[str] = "superseded"
CANCEL_CALLER: Final[str] = "caller"
CANCEL_TIMEOUT: Final[str] = "timeout"
CANCEL_DETACHED: Final[str] = "detached"
CANCEL_MANUAL_LEVER: Final[str] = "manual_lever"
