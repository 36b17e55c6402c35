# -*- coding: utf-8 -*-
"""
Robot SAVO — savo_turntable/utils/__init__.py
---------------------------------------------
Utility package exports for `savo_turntable`.

Example
-------
    from savo_turntable.utils import clamp01, get_logger_adapter
    from savo_turntable.utils.param_loader import load_control_config   # imports models
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Clamp helpers
# -----------------------------------------------------------------------------
from .clamp import (
    clamp,
    clamp_float,
    clamp01,
    lerp,
)

# -----------------------------------------------------------------------------
# Logging helpers
# -----------------------------------------------------------------------------
from .logging import (
    LoggerAdapter,
    RateLimitedLogger,
    get_logger_adapter,
    format_kv,
    format_event,
    log_event,
    log_exception,
)

__all__ = [
    "clamp",
    "clamp_float",
    "clamp01",
    "lerp",
    "LoggerAdapter",
    "RateLimitedLogger",
    "get_logger_adapter",
    "format_kv",
    "format_event",
    "log_event",
    "log_exception",
]
