#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/utils/logging.py
--------------------------------------------
Lightweight logging helpers for `savo_turntable`.

Provide a small abstraction layer so the rotation scheduler can log
consistently whether it runs:
- inside the ROS2 turntable node (`rclpy` logger available), or
- in plain Python (sim CLI, tests) with a stdlib logger

Typical usage
-------------
from savo_turntable.utils.logging import get_logger_adapter, log_event

logger = get_logger_adapter(self)   # self can be a ROS2 node
log_event(logger, "rotation_started", component="turntable", details={"target_deg": 90.0})
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


_LEVEL_DEBUG = "DEBUG"
_LEVEL_INFO = "INFO"
_LEVEL_WARN = "WARN"
_LEVEL_ERROR = "ERROR"

DEFAULT_LOGGER_NAME = "savo_turntable"


# =============================================================================
# Formatting helpers
# =============================================================================

def _safe_json(payload: Dict[str, Any]) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(payload)


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


# =============================================================================
# Stdlib logger setup
# =============================================================================

def _ensure_std_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Return a configured stdlib logger (idempotent).

    Handlers are only attached to the package root logger; child loggers
    (`savo_turntable.scheduler`) propagate to it.
    """
    logger = logging.getLogger(name)
    root_name = name.split(".", 1)[0]
    root = logging.getLogger(root_name)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logger


# =============================================================================
# Logger adapter (ROS2 logger or stdlib logger)
# =============================================================================

@dataclass
class LoggerAdapter:
    """
    Small adapter that hides whether the underlying logger is:
    - a ROS2 logger (rclpy node logger), or
    - a stdlib logging.Logger instance

    Methods match common ROS logger style: debug(), info(), warn(), error()
    """
    target: Any
    name: str = DEFAULT_LOGGER_NAME

    def __post_init__(self) -> None:
        if self.target is None:
            self.target = _ensure_std_logger(self.name)

    @property
    def is_std_logger(self) -> bool:
        return isinstance(self.target, logging.Logger)

    def debug(self, msg: Any) -> None:
        self.target.debug(str(msg))

    def info(self, msg: Any) -> None:
        self.target.info(str(msg))

    def warn(self, msg: Any) -> None:
        # stdlib spells it `warning`, rclpy spells it `warn`
        if self.is_std_logger:
            self.target.warning(str(msg))
        else:
            self.target.warn(str(msg))

    def error(self, msg: Any) -> None:
        self.target.error(str(msg))


def get_logger_adapter(source: Any = None, *, name: str = DEFAULT_LOGGER_NAME) -> LoggerAdapter:
    """
    Create a LoggerAdapter from a source object.

    Supported sources
    -----------------
    - ROS2 Node (`source.get_logger()`)
    - ROS2 logger directly
    - stdlib logging.Logger
    - LoggerAdapter (returned unchanged)
    - None (creates stdlib logger)
    """
    if isinstance(source, LoggerAdapter):
        return source

    if source is None:
        return LoggerAdapter(target=_ensure_std_logger(name), name=name)

    if hasattr(source, "get_logger") and callable(source.get_logger):
        return LoggerAdapter(target=source.get_logger(), name=name)

    return LoggerAdapter(target=source, name=name)


# =============================================================================
# Structured logging helpers
# =============================================================================

def format_kv(**kwargs: Any) -> str:
    """
    Format key=value pairs into a compact stable string.

    Example:
      format_kv(target_deg=90.0, subdivisions=4)
      -> "target_deg=90.000 subdivisions=4"
    """
    return " ".join(f"{k}={_format_value(v)}" for k, v in kwargs.items())


def format_event(
    event: str,
    *,
    level: str = _LEVEL_INFO,
    component: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Format a standardized event log line.

    Example output:
      [INFO] [turntable] rotation_started target_deg=90.000 request=index
    """
    lvl = str(level).upper()
    comp = f"[{component}] " if component else ""
    base = f"[{lvl}] {comp}{event}"
    if not details:
        return base
    if all(isinstance(k, str) for k in details.keys()):
        return f"{base} {format_kv(**details)}"
    return f"{base} details={_safe_json(details)}"


def log_event(
    logger: LoggerAdapter,
    event: str,
    *,
    level: str = _LEVEL_INFO,
    component: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Emit a standardized event message through the adapter.
    """
    msg = format_event(event, level=level, component=component, details=details)
    lvl = str(level).upper()
    if lvl == _LEVEL_DEBUG:
        logger.debug(msg)
    elif lvl in ("WARN", "WARNING"):
        logger.warn(msg)
    elif lvl == _LEVEL_ERROR:
        logger.error(msg)
    else:
        logger.info(msg)


def log_exception(
    logger: LoggerAdapter,
    exc: BaseException,
    *,
    message: str = "Unhandled exception",
    component: Optional[str] = None,
) -> None:
    """
    Emit a compact exception log message (without full traceback).
    """
    exc_text = f"{exc.__class__.__name__}: {exc}"
    if component:
        logger.error(f"[{component}] {message} | {exc_text}")
    else:
        logger.error(f"{message} | {exc_text}")


# =============================================================================
# Rate-limited logging helper
# =============================================================================

@dataclass
class RateLimitedLogger:
    """
    Simple per-key rate limiter for repeated messages.

    The rotation loop runs once per tick; per-tick telemetry goes through
    this so a 60 Hz host does not flood the log.

    Example
    -------
    rl = RateLimitedLogger(get_logger_adapter(), period_s=1.0)
    rl.debug("tick", "angle=12.0 lever=0.73")
    """
    logger: LoggerAdapter
    period_s: float = 1.0
    _last_emit_mono: Dict[str, float] = field(default_factory=dict)

    def _can_emit(self, key: str) -> bool:
        now = time.monotonic()
        last = self._last_emit_mono.get(str(key))
        if last is None or (now - last) >= max(0.0, float(self.period_s)):
            self._last_emit_mono[str(key)] = now
            return True
        return False

    def debug(self, key: str, msg: Any) -> bool:
        if self._can_emit(key):
            self.logger.debug(msg)
            return True
        return False

    def warn(self, key: str, msg: Any) -> bool:
        if self._can_emit(key):
            self.logger.warn(msg)
            return True
        return False


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LoggerAdapter",
    "RateLimitedLogger",
    "get_logger_adapter",
    "format_kv",
    "format_event",
    "log_event",
    "log_exception",
]
