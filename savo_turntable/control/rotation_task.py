#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control.rotation_task
=================================================

One closed-loop rotation toward a fixed target heading.

A task is driven by its owner calling `step(dt)` once per host tick. Each step:

1. reads the current angle from the actuator (fresh every tick)
2. error = delta_angle(target, current)
3. |error| < threshold  -> write neutral lever, CONVERGED
4. otherwise            -> PID on the wrapped error, clamp to [-1, 1],
                           lever = neutral + clamped * 0.5, write

State machine
-------------
RUNNING -> CONVERGED   lever forced neutral
RUNNING -> CANCELLED   lever left at its last value unless neutral was asked for

Terminal tasks ignore further `step()` calls and never write again.
"""

from __future__ import annotations

import math
from typing import Optional

from ..constants import CANCEL_TIMEOUT
from ..drivers.actuator import TurntableActuator, read_angle
from ..drivers.lever_driver import LeverDriver
from ..models.control_config import TurntableControlConfig
from ..models.rotation_status import RequestKind, TaskState, TaskStep
from ..utils.clamp import clamp_float
from .angle_model import delta_angle, normalize_angle
from .pid import PidController


class RotationTask:
    def __init__(
        self,
        *,
        task_id: int,
        kind: RequestKind,
        actuator: TurntableActuator,
        lever: LeverDriver,
        target_angle_deg: float,
        config: TurntableControlConfig,
        target_index: Optional[int] = None,
    ) -> None:
        self._task_id = int(task_id)
        self._kind = kind
        self._actuator = actuator
        self._lever = lever
        self._target_angle_deg = normalize_angle(target_angle_deg)
        self._target_index = target_index
        self._config = config

        # Fresh controller per task; reset so nothing carries over
        self._pid = PidController(config.gains, dt_epsilon=config.dt_epsilon_s)
        self._pid.reset()

        self._state = TaskState.RUNNING
        self._cancel_reason: Optional[str] = None
        self._elapsed_s = 0.0
        self._tick_count = 0
        self._last_step: Optional[TaskStep] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def task_id(self) -> int:
        return self._task_id

    @property
    def kind(self) -> RequestKind:
        return self._kind

    @property
    def target_angle_deg(self) -> float:
        return self._target_angle_deg

    @property
    def target_index(self) -> Optional[int]:
        return self._target_index

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is TaskState.RUNNING

    @property
    def lever(self) -> LeverDriver:
        return self._lever

    @property
    def pid(self) -> PidController:
        return self._pid

    @property
    def cancel_reason(self) -> Optional[str]:
        return self._cancel_reason

    @property
    def elapsed_s(self) -> float:
        return self._elapsed_s

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_step(self) -> Optional[TaskStep]:
        return self._last_step

    # -------------------------------------------------------------------------
    # Control loop body
    # -------------------------------------------------------------------------
    def step(self, dt: float) -> TaskStep:
        if self._state.terminal:
            return self._idle_step()

        cfg = self._config
        self._tick_count += 1
        if math.isfinite(dt) and dt > 0.0:
            self._elapsed_s += float(dt)

        if cfg.duration_limited and self._elapsed_s > cfg.max_task_duration_s:
            self.cancel(CANCEL_TIMEOUT, neutral=True)
            return self._last_step

        angle = read_angle(self._actuator)
        error = delta_angle(self._target_angle_deg, angle)

        if abs(error) < cfg.convergence_threshold_deg:
            written = self._lever.write(cfg.neutral_lever)
            self._state = TaskState.CONVERGED
            self._last_step = TaskStep(
                state=self._state,
                angle_deg=angle,
                error_deg=error,
                lever=written,
            )
            return self._last_step

        # PID sees the wrapped error: target expressed relative to the current angle
        output = self._pid.update(angle + error, angle, dt)
        clamped = clamp_float(output, cfg.output_min, cfg.output_max)
        written = self._lever.write(cfg.neutral_lever + clamped * 0.5)

        self._last_step = TaskStep(
            state=self._state,
            angle_deg=angle,
            error_deg=error,
            lever=written,
            output=output,
        )
        return self._last_step

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------
    def cancel(self, reason: str, *, neutral: bool = False) -> bool:
        """
        Stop the task. Returns False when it had already finished.

        `neutral=True` centers the lever as the last write of this task;
        otherwise the lever keeps whatever the last tick wrote.
        """
        if self._state.terminal:
            return False

        written = None
        if neutral and not self._lever.released:
            written = self._lever.write(self._config.neutral_lever)

        self._state = TaskState.CANCELLED
        self._cancel_reason = str(reason)

        prev = self._last_step
        self._last_step = TaskStep(
            state=self._state,
            angle_deg=prev.angle_deg if prev is not None else math.nan,
            error_deg=prev.error_deg if prev is not None else math.nan,
            lever=written,
        )
        return True

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _idle_step(self) -> TaskStep:
        prev = self._last_step
        return TaskStep(
            state=self._state,
            angle_deg=prev.angle_deg if prev is not None else math.nan,
            error_deg=prev.error_deg if prev is not None else math.nan,
            lever=None,
        )

    def __repr__(self) -> str:
        return (
            f"RotationTask(id={self._task_id}, kind={self._kind.value}, "
            f"target={self._target_angle_deg:.2f}, state={self._state.value})"
        )


__all__ = ["RotationTask"]
