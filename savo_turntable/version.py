#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/version.py
--------------------------------------
Version and package metadata helpers for the `savo_turntable` package.

Design notes
------------
- No ROS imports (safe in any environment).
- Semantic-version style fields exposed for tooling (`--version`, startup logs).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


# =============================================================================
# Semantic Version (edit here for releases)
# =============================================================================
VERSION_MAJOR: Final[int] = 0
VERSION_MINOR: Final[int] = 1
VERSION_PATCH: Final[int] = 0

PRERELEASE: Final[str] = ""


# =============================================================================
# Package Identity Metadata
# =============================================================================
PACKAGE_NAME: Final[str] = "savo_turntable"
ROBOT_NAME: Final[str] = "Robot Savo"
SUPPORTED_ROS_DISTRO: Final[str] = "jazzy"


def _build_version_string() -> str:
    base = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
    if PRERELEASE.strip():
        base += f"-{PRERELEASE.strip()}"
    return base


__version__: Final[str] = _build_version_string()
VERSION: Final[str] = __version__


@dataclass(frozen=True)
class PackageVersionInfo:
    package_name: str
    robot_name: str
    version: str
    ros_distro: str

    def to_dict(self) -> dict:
        return {
            "package_name": self.package_name,
            "robot_name": self.robot_name,
            "version": self.version,
            "ros_distro": self.ros_distro,
        }

    def banner(self) -> str:
        return (
            f"{self.robot_name} | {self.package_name} {self.version} "
            f"(ROS 2 {self.ros_distro})"
        )


def get_version() -> str:
    """Return package version string (SemVer-style)."""
    return VERSION


def get_package_version_info() -> PackageVersionInfo:
    return PackageVersionInfo(
        package_name=PACKAGE_NAME,
        robot_name=ROBOT_NAME,
        version=VERSION,
        ros_distro=SUPPORTED_ROS_DISTRO,
    )


__all__ = [
    "__version__",
    "VERSION",
    "PACKAGE_NAME",
    "ROBOT_NAME",
    "PackageVersionInfo",
    "get_version",
    "get_package_version_info",
]
