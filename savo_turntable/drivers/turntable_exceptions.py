#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/drivers/turntable_exceptions.py
-----------------------------------------------------------
Exception hierarchy for the turntable actuator path.

Purpose
- Standardize error handling for:
    * lever driver ownership / range checks
    * actuator readouts (angle, subdivisions)
    * control configuration validation
- Attach structured context to failures for logs and status topics

Design notes
- No ROS dependencies
- The rotation scheduler converts request-level failures into a
  `RequestResult(REJECTED, reason)`; exceptions escape only for misuse
  (e.g. writing through a released lever handle).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# =============================================================================
# Base exception + structured context
# =============================================================================
@dataclass(frozen=True)
class TurntableErrorContext:
    """
    Optional structured context attached to turntable exceptions.

    Common fields (examples):
    - actuator="yard_turntable"
    - operation="set_lever"
    - owner="rotation_task#3"
    - value=1.4
    """
    actuator: Optional[str] = None
    operation: Optional[str] = None
    owner: Optional[str] = None
    value: Optional[int | float | str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert context to a compact dict, excluding None values.
        """
        out: Dict[str, Any] = {}
        if self.actuator is not None:
            out["actuator"] = self.actuator
        if self.operation is not None:
            out["operation"] = self.operation
        if self.owner is not None:
            out["owner"] = self.owner
        if self.value is not None:
            out["value"] = self.value
        if self.extra:
            out["extra"] = dict(self.extra)
        return out

    def format_compact(self) -> str:
        parts = []
        if self.actuator is not None:
            parts.append(f"actuator={self.actuator}")
        if self.operation is not None:
            parts.append(f"op={self.operation}")
        if self.owner is not None:
            parts.append(f"owner={self.owner}")
        if self.value is not None:
            parts.append(f"value={self.value}")
        if self.extra:
            parts.append(f"extra={self.extra}")
        return ", ".join(parts)


class TurntableException(RuntimeError):
    """
    Base exception for all turntable control failures.

    Supports optional structured context and exception chaining.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[TurntableErrorContext] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.message = str(message)
        self.context = context
        self.cause = cause
        super().__init__(self.__str__())

        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.context is None:
            return self.message
        ctx = self.context.format_compact()
        if not ctx:
            return self.message
        return f"{self.message} [{ctx}]"

    def to_dict(self) -> Dict[str, Any]:
        """
        Structured representation suitable for logs/JSON status.
        """
        out: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
        }
        if self.context is not None:
            out["context"] = self.context.to_dict()
        if self.cause is not None:
            out["cause_type"] = self.cause.__class__.__name__
            out["cause_message"] = str(self.cause)
        return out


# =============================================================================
# Configuration / validation errors
# =============================================================================
class TurntableConfigError(TurntableException):
    """
    Invalid control configuration (gains, thresholds, lever range, etc.).
    """


class TurntableValidationError(TurntableException):
    """
    Invalid runtime input passed to a turntable API.
    """


class InvalidSubdivisionsError(TurntableValidationError):
    """
    Subdivision count is not a positive integer.
    """


class LeverRangeError(TurntableValidationError):
    """
    Lever value is not a finite number.
    """


# =============================================================================
# Actuator / ownership errors
# =============================================================================
class ActuatorReadError(TurntableException):
    """
    Actuator readout (angle / subdivisions / lever) failed or returned garbage.
    """


class LeverOwnershipError(TurntableException):
    """
    Lever write attempted through a handle that no longer owns the lever.
    """


__all__ = [
    "TurntableErrorContext",
    "TurntableException",
    "TurntableConfigError",
    "TurntableValidationError",
    "InvalidSubdivisionsError",
    "LeverRangeError",
    "ActuatorReadError",
    "LeverOwnershipError",
]
