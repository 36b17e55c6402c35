# -*- coding: utf-8 -*-
"""
Robot SAVO — savo_turntable/__init__.py
---------------------------------------
Package root exports for `savo_turntable`.

This file provides:
- package version helpers
- centralized turntable defaults / constants

Design notes
------------
- Keep imports lightweight (no rclpy, no control core).
- Control, drivers and models are imported from their subpackages:
    from savo_turntable.control import RotationScheduler
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Version exports
# ---------------------------------------------------------------------------
from .version import (
    __version__,
    VERSION,
    get_version,
    get_package_version_info,
)

# ---------------------------------------------------------------------------
# Central defaults / constants (single source: constants.py)
# ---------------------------------------------------------------------------
from .constants import (
    PACKAGE_NAME,
    NODE_NAME_TURNTABLE_CONTROL,
    TOPIC_TURNTABLE_ANGLE,
    TOPIC_TURNTABLE_COMMAND,
    TOPIC_TURNTABLE_LEVER,
    TOPIC_TURNTABLE_STATUS,
    LEVER_NEUTRAL_DEFAULT,
    SEARCH_DISTANCE_DEFAULT,
)

__all__ = [
    "__version__",
    "VERSION",
    "get_version",
    "get_package_version_info",
    "PACKAGE_NAME",
    "NODE_NAME_TURNTABLE_CONTROL",
    "TOPIC_TURNTABLE_ANGLE",
    "TOPIC_TURNTABLE_COMMAND",
    "TOPIC_TURNTABLE_LEVER",
    "TOPIC_TURNTABLE_STATUS",
    "LEVER_NEUTRAL_DEFAULT",
    "SEARCH_DISTANCE_DEFAULT",
]
