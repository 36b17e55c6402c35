#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/models/control_config.py
----------------------------------------------------
Rotation control configuration for one turntable.

Everything the control loop consumes is in here and handed to the scheduler
explicitly; there is no process-wide settings object. Values come from code
defaults (`constants.py`) or the YAML params file via
`utils.param_loader.load_control_config()`.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from ..constants import (
    CONVERGENCE_THRESHOLD_DEG_DEFAULT,
    DT_EPSILON_S_DEFAULT,
    KD_DEFAULT,
    KI_DEFAULT,
    KP_DEFAULT,
    LEVER_MAX,
    LEVER_MIN,
    LEVER_NEUTRAL_DEFAULT,
    MAX_TASK_DURATION_S_DEFAULT,
    NEUTRAL_ON_CANCEL_DEFAULT,
    OUTPUT_MAX_DEFAULT,
    OUTPUT_MIN_DEFAULT,
)
from ..drivers.turntable_exceptions import TurntableConfigError, TurntableErrorContext


@dataclass(frozen=True)
class PidGains:
    kp: float = KP_DEFAULT
    ki: float = KI_DEFAULT
    kd: float = KD_DEFAULT


@dataclass(frozen=True)
class TurntableControlConfig:
    # PID gains (copied into every rotation task's fresh controller)
    gains: PidGains = field(default_factory=PidGains)

    # Task converges when |wrapped error| < threshold (deg)
    convergence_threshold_deg: float = CONVERGENCE_THRESHOLD_DEG_DEFAULT

    # Lever written on convergence (and on cancel when neutral_on_cancel)
    neutral_lever: float = LEVER_NEUTRAL_DEFAULT

    # PID output clamp before lever mapping: lever = neutral + clamped * 0.5
    output_min: float = OUTPUT_MIN_DEFAULT
    output_max: float = OUTPUT_MAX_DEFAULT

    # Derivative term skipped when dt <= dt_epsilon
    dt_epsilon_s: float = DT_EPSILON_S_DEFAULT

    # Cancelled tasks leave the lever at its last value unless this is set
    neutral_on_cancel: bool = NEUTRAL_ON_CANCEL_DEFAULT

    # Cancel a task after this much accumulated dt; 0.0 disables the limit
    max_task_duration_s: float = MAX_TASK_DURATION_S_DEFAULT

    def __post_init__(self) -> None:
        self.validate()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------
    def validate(self) -> None:
        for name in ("kp", "ki", "kd"):
            v = getattr(self.gains, name)
            if not math.isfinite(v):
                raise TurntableConfigError(
                    "PID gain must be finite",
                    context=TurntableErrorContext(operation="config", value=v, extra={"field": name}),
                )

        if not math.isfinite(self.convergence_threshold_deg) or self.convergence_threshold_deg <= 0.0:
            raise self._error("convergence_threshold_deg must be > 0", self.convergence_threshold_deg)

        if not (LEVER_MIN <= self.neutral_lever <= LEVER_MAX):
            raise self._error("neutral_lever must be within [0, 1]", self.neutral_lever)

        if not (math.isfinite(self.output_min) and math.isfinite(self.output_max)):
            raise self._error("output clamp bounds must be finite", f"{self.output_min}..{self.output_max}")
        if self.output_min >= self.output_max:
            raise self._error("output_min must be < output_max", f"{self.output_min}..{self.output_max}")

        if not math.isfinite(self.dt_epsilon_s) or self.dt_epsilon_s < 0.0:
            raise self._error("dt_epsilon_s must be >= 0", self.dt_epsilon_s)

        if not math.isfinite(self.max_task_duration_s) or self.max_task_duration_s < 0.0:
            raise self._error("max_task_duration_s must be >= 0", self.max_task_duration_s)

    @staticmethod
    def _error(message: str, value: Any) -> TurntableConfigError:
        return TurntableConfigError(message, context=TurntableErrorContext(operation="config", value=value))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    @property
    def duration_limited(self) -> bool:
        return self.max_task_duration_s > 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "PidGains",
    "TurntableControlConfig",
]
