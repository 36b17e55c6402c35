#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control.scheduler
=============================================

Purpose
-------
Owns at most one active rotation task per turntable and drives it from the
host's tick.

Requests
--------
- start_to_index(idx)              go to stop `idx`
- start_to_next_position(+1 | -1)  go to the neighbor stop of the current one
- start_flip()                     turn 180 degrees from the current heading
- set_manual_lever(value)          direct lever control (cancels any task)

Every request returns a `RequestResult`. A rejected request has no side effect:
validation and target resolution happen before the running task is touched.

Supersession
------------
Accepting a request cancels the running task synchronously, then transfers
the lever handle to the new task. The cancelled task's handle is released in
the transfer, so it can never write again; the new task's first write happens
on the next `tick()`. One tick writes the lever at most once.

Cancellation leaves the lever at its last value unless the config asks for
`neutral_on_cancel` (or the caller passes `neutral=True` to `cancel()`).
Convergence and timeout always center the lever.

Typical use
-----------
scheduler = RotationScheduler(table, TurntableControlConfig())
scheduler.start_to_index(2)
while scheduler.is_active():
    scheduler.tick(dt)
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Tuple

from ..constants import (
    CANCEL_CALLER,
    CANCEL_DETACHED,
    CANCEL_MANUAL_LEVER,
    CANCEL_SUPERSEDED,
    CANCEL_TIMEOUT,
    REASON_ACTUATOR_READ_FAILED,
    REASON_INVALID_DIRECTION,
    REASON_INVALID_INDEX,
    REASON_INVALID_LEVER,
    REASON_INVALID_SUBDIVISIONS,
    REASON_NO_ACTUATOR,
)
from ..drivers.actuator import TurntableActuator, read_angle, read_subdivisions
from ..drivers.lever_driver import LeverDriver
from ..drivers.turntable_exceptions import (
    ActuatorReadError,
    InvalidSubdivisionsError,
)
from ..models.control_config import TurntableControlConfig
from ..models.rotation_status import (
    RequestKind,
    RequestResult,
    RequestStatus,
    TaskState,
    TaskStep,
)
from ..models.telemetry import TurntableTelemetry
from ..utils.logging import LoggerAdapter, RateLimitedLogger, get_logger_adapter, log_event
from .angle_model import angle_for_index, flip_angle, index_for_angle, next_index
from .rotation_task import RotationTask

# (target_angle_deg, target_index or None)
_Resolution = Tuple[float, Optional[int]]


class _Rejected(Exception):
    """Internal signal: request validation failed with `reason`."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class RotationScheduler:
    def __init__(
        self,
        actuator: Optional[TurntableActuator] = None,
        config: Optional[TurntableControlConfig] = None,
        *,
        name: Optional[str] = None,
        logger=None,
    ) -> None:
        self._config = config if config is not None else TurntableControlConfig()
        self._name = name
        self._logger: LoggerAdapter = get_logger_adapter(logger, name="savo_turntable.scheduler")
        self._rl = RateLimitedLogger(self._logger, period_s=1.0)

        self._actuator: Optional[TurntableActuator] = None
        self._idle_lever: Optional[LeverDriver] = None
        self._task: Optional[RotationTask] = None
        self._last_task: Optional[RotationTask] = None
        self._next_task_id = 1

        if actuator is not None:
            self.attach(actuator)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def name(self) -> str:
        if self._name:
            return self._name
        if self._actuator is not None:
            return str(getattr(self._actuator, "name", "turntable"))
        return "turntable"

    @property
    def config(self) -> TurntableControlConfig:
        return self._config

    @property
    def actuator(self) -> Optional[TurntableActuator]:
        return self._actuator

    @property
    def active_task(self) -> Optional[RotationTask]:
        return self._task

    @property
    def last_task(self) -> Optional[RotationTask]:
        return self._last_task

    def is_active(self) -> bool:
        return self._task is not None and self._task.running

    # -------------------------------------------------------------------------
    # Actuator binding
    # -------------------------------------------------------------------------
    def attach(self, actuator: TurntableActuator) -> None:
        """Bind a turntable. Any previous binding is detached first."""
        if self._actuator is not None:
            self.detach()
        self._actuator = actuator
        self._idle_lever = LeverDriver(actuator, owner="scheduler", neutral=self._config.neutral_lever)
        self._event("actuator_attached")

    def detach(self) -> None:
        """Cancel any running task and drop the turntable binding."""
        if self._actuator is None:
            return
        self._cancel_active(CANCEL_DETACHED, neutral=self._config.neutral_on_cancel)
        if self._idle_lever is not None:
            self._idle_lever.release()
        self._event("actuator_detached")
        self._actuator = None
        self._idle_lever = None

    # -------------------------------------------------------------------------
    # Rotation requests
    # -------------------------------------------------------------------------
    def start_to_index(self, idx: int) -> RequestResult:
        def resolve(actuator: TurntableActuator) -> _Resolution:
            if isinstance(idx, bool) or not isinstance(idx, int):
                raise _Rejected(REASON_INVALID_INDEX)
            n = self._read_subdivisions(actuator)
            target_idx = idx % n
            return angle_for_index(target_idx, n), target_idx

        return self._start(RequestKind.INDEX, resolve)

    def start_to_next_position(self, direction: int) -> RequestResult:
        def resolve(actuator: TurntableActuator) -> _Resolution:
            if isinstance(direction, bool) or direction not in (1, -1):
                raise _Rejected(REASON_INVALID_DIRECTION)
            n = self._read_subdivisions(actuator)
            current_idx, _ = index_for_angle(self._read_angle(actuator), n)
            target_idx = next_index(current_idx, int(direction), n)
            return angle_for_index(target_idx, n), target_idx

        return self._start(RequestKind.NEXT_POSITION, resolve)

    def start_flip(self) -> RequestResult:
        def resolve(actuator: TurntableActuator) -> _Resolution:
            return flip_angle(self._read_angle(actuator)), None

        return self._start(RequestKind.FLIP, resolve)

    # -------------------------------------------------------------------------
    # Manual lever control
    # -------------------------------------------------------------------------
    def set_manual_lever(self, value: float) -> RequestResult:
        """
        Write the lever directly (operator slider). Cancels any running task.
        """
        kind = RequestKind.MANUAL_LEVER
        if self._actuator is None:
            return self._reject(kind, REASON_NO_ACTUATOR)
        if isinstance(value, bool):
            return self._reject(kind, REASON_INVALID_LEVER)
        try:
            v = float(value)
        except (TypeError, ValueError):
            return self._reject(kind, REASON_INVALID_LEVER)
        if not math.isfinite(v):
            return self._reject(kind, REASON_INVALID_LEVER)

        superseded = self._cancel_active(CANCEL_MANUAL_LEVER, neutral=False)
        written = self._idle_lever.write(v)
        self._rl.debug("manual_lever", f"[turntable:{self.name}] manual lever={written:.3f}")
        return RequestResult(
            status=RequestStatus.STARTED,
            kind=kind,
            superseded_task_id=superseded,
        )

    def center_lever(self) -> RequestResult:
        """Put the lever back to neutral (slider released)."""
        return self.set_manual_lever(self._config.neutral_lever)

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------
    def cancel(self, *, neutral: Optional[bool] = None) -> bool:
        """
        Stop the running task. Returns False when nothing was running.

        `neutral=None` follows `config.neutral_on_cancel`.
        """
        if neutral is None:
            neutral = self._config.neutral_on_cancel
        return self._cancel_active(CANCEL_CALLER, neutral=bool(neutral)) is not None

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------
    def tick(self, dt: float) -> Optional[TaskStep]:
        """
        Advance the running task by one host tick. Returns None when idle.
        """
        task = self._task
        if task is None:
            return None

        try:
            step = task.step(dt)
        except ActuatorReadError as e:
            # Skip this tick, keep the task; the next readout may be valid
            self._rl.warn("angle_read", f"[turntable:{self.name}] angle readout failed, tick skipped | {e}")
            return None

        lever_txt = f"{step.lever:.3f}" if step.lever is not None else "-"
        self._rl.debug(
            "tick",
            f"[turntable:{self.name}] task={task.task_id} angle={step.angle_deg:.2f} "
            f"err={step.error_deg:+.2f} lever={lever_txt}",
        )

        if step.state is TaskState.CONVERGED:
            self._event(
                "rotation_converged",
                task_id=task.task_id,
                target_deg=task.target_angle_deg,
                angle_deg=step.angle_deg,
                ticks=task.tick_count,
                elapsed_s=task.elapsed_s,
            )
            self._reclaim_lever(task)
        elif step.state is TaskState.CANCELLED:
            # Only the task itself cancels from inside step(): duration limit
            self._event(
                "rotation_timeout",
                level="WARN",
                task_id=task.task_id,
                reason=task.cancel_reason or CANCEL_TIMEOUT,
                target_deg=task.target_angle_deg,
                elapsed_s=task.elapsed_s,
            )
            self._reclaim_lever(task)

        return step

    # -------------------------------------------------------------------------
    # Telemetry
    # -------------------------------------------------------------------------
    def telemetry(self) -> Optional[TurntableTelemetry]:
        """Live readout of the bound turntable; None when nothing is attached."""
        actuator = self._actuator
        if actuator is None:
            return None

        n = read_subdivisions(actuator)
        angle = read_angle(actuator)
        idx, remainder = index_for_angle(angle, n)
        task = self._task if self._task is not None else self._last_task

        return TurntableTelemetry(
            name=self.name,
            angle_deg=angle,
            subdivisions=n,
            stop_index=idx,
            stop_remainder_deg=remainder,
            is_lined=abs(remainder) < self._config.convergence_threshold_deg,
            lever=float(actuator.get_lever()),
            task_state=task.state.value if task is not None else None,
            task_id=task.task_id if task is not None else None,
            target_angle_deg=task.target_angle_deg if task is not None else None,
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _start(self, kind: RequestKind, resolve: Callable[[TurntableActuator], _Resolution]) -> RequestResult:
        actuator = self._actuator
        if actuator is None:
            return self._reject(kind, REASON_NO_ACTUATOR)

        try:
            target_angle, target_index = resolve(actuator)
        except _Rejected as r:
            return self._reject(kind, r.reason)

        superseded = self._cancel_active(CANCEL_SUPERSEDED, neutral=self._config.neutral_on_cancel)

        task_id = self._next_task_id
        self._next_task_id += 1
        lever = self._idle_lever.transfer(f"rotation_task#{task_id}")
        self._idle_lever = None

        self._task = RotationTask(
            task_id=task_id,
            kind=kind,
            actuator=actuator,
            lever=lever,
            target_angle_deg=target_angle,
            config=self._config,
            target_index=target_index,
        )

        self._event(
            "rotation_started",
            task_id=task_id,
            request=kind.value,
            target_deg=self._task.target_angle_deg,
            target_index=target_index if target_index is not None else "-",
            superseded=superseded if superseded is not None else "-",
        )
        return RequestResult(
            status=RequestStatus.STARTED,
            kind=kind,
            task_id=task_id,
            target_angle_deg=self._task.target_angle_deg,
            target_index=target_index,
            superseded_task_id=superseded,
        )

    def _cancel_active(self, reason: str, *, neutral: bool) -> Optional[int]:
        """Cancel the running task (if any) and take the lever back. Returns its id."""
        task = self._task
        if task is None:
            return None

        cancelled = task.cancel(reason, neutral=neutral)
        self._reclaim_lever(task)
        if not cancelled:
            return None

        self._event("rotation_cancelled", task_id=task.task_id, reason=reason, neutral=neutral)
        return task.task_id

    def _reclaim_lever(self, task: RotationTask) -> None:
        self._idle_lever = task.lever.transfer("scheduler")
        self._last_task = task
        self._task = None

    def _read_subdivisions(self, actuator: TurntableActuator) -> int:
        try:
            return read_subdivisions(actuator)
        except InvalidSubdivisionsError as e:
            self._rl.warn("subdivisions", f"[turntable:{self.name}] {e}")
            raise _Rejected(REASON_INVALID_SUBDIVISIONS) from e

    def _read_angle(self, actuator: TurntableActuator) -> float:
        try:
            return read_angle(actuator)
        except ActuatorReadError as e:
            self._rl.warn("angle_read", f"[turntable:{self.name}] {e}")
            raise _Rejected(REASON_ACTUATOR_READ_FAILED) from e

    def _reject(self, kind: RequestKind, reason: str) -> RequestResult:
        self._event("request_rejected", level="WARN", request=kind.value, reason=reason)
        return RequestResult.rejected(kind, reason)

    def _event(self, event: str, *, level: str = "INFO", **details) -> None:
        log_event(self._logger, event, level=level, component=f"turntable:{self.name}", details=details or None)


__all__ = ["RotationScheduler"]
