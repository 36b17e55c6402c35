#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/models/telemetry.py
-----------------------------------------------
Read-only snapshot of a turntable for status topics, the sim CLI and any
operator display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils.clamp import lerp


@dataclass(frozen=True)
class TurntableTelemetry:
    name: str
    angle_deg: float
    subdivisions: int
    stop_index: int
    stop_remainder_deg: float
    is_lined: bool
    lever: float
    task_state: Optional[str] = None
    task_id: Optional[int] = None
    target_angle_deg: Optional[float] = None

    @property
    def lever_percent(self) -> float:
        """Lever as a drive percentage: 0.0 -> -100 %, 0.5 -> 0 %, 1.0 -> +100 %."""
        return lerp(-100.0, 100.0, self.lever)

    @property
    def active(self) -> bool:
        return self.task_state == "running"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "angle_deg": self.angle_deg,
            "subdivisions": self.subdivisions,
            "stop_index": self.stop_index,
            "stop_remainder_deg": self.stop_remainder_deg,
            "is_lined": self.is_lined,
            "lever": self.lever,
            "lever_percent": self.lever_percent,
            "task_state": self.task_state,
            "task_id": self.task_id,
            "target_angle_deg": self.target_angle_deg,
        }

    def summary(self) -> str:
        target = f"{self.target_angle_deg:.1f}" if self.target_angle_deg is not None else "-"
        return (
            f"{self.name} angle={self.angle_deg:.1f}deg track={self.stop_index} "
            f"{'lined' if self.is_lined else 'not_lined'} speed={self.lever_percent:+.0f}% "
            f"task={self.task_state or 'idle'} target={target}"
        )


__all__ = ["TurntableTelemetry"]
