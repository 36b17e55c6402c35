#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/models/rotation_status.py
-----------------------------------------------------
Status records exchanged between the rotation scheduler and its callers.

- TaskState      lifecycle of one rotation task
- RequestKind    which request produced a task
- RequestStatus  outcome of a request (STARTED / REJECTED)
- RequestResult  explicit request outcome returned to the caller
- TaskStep       what a single `step(dt)` did (for telemetry / tests)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import REASON_OK


class TaskState(str, Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self is not TaskState.RUNNING


class RequestKind(str, Enum):
    INDEX = "index"
    NEXT_POSITION = "next_position"
    FLIP = "flip"
    MANUAL_LEVER = "manual_lever"


class RequestStatus(str, Enum):
    STARTED = "started"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RequestResult:
    status: RequestStatus
    kind: RequestKind
    reason: str = REASON_OK
    task_id: Optional[int] = None
    target_angle_deg: Optional[float] = None
    target_index: Optional[int] = None
    superseded_task_id: Optional[int] = None

    @property
    def started(self) -> bool:
        return self.status is RequestStatus.STARTED

    @classmethod
    def rejected(cls, kind: RequestKind, reason: str) -> "RequestResult":
        return cls(status=RequestStatus.REJECTED, kind=kind, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "kind": self.kind.value,
            "reason": self.reason,
            "task_id": self.task_id,
            "target_angle_deg": self.target_angle_deg,
            "target_index": self.target_index,
            "superseded_task_id": self.superseded_task_id,
        }


@dataclass(frozen=True)
class TaskStep:
    state: TaskState
    angle_deg: float
    error_deg: float
    lever: Optional[float]      # None when nothing was written this tick
    output: float = 0.0         # raw PID output before clamping


__all__ = [
    "TaskState",
    "RequestKind",
    "RequestStatus",
    "RequestResult",
    "TaskStep",
]
