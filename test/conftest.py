# -*- coding: utf-8 -*-
"""Shared fixtures for the savo_turntable tests (pure Python, no ROS)."""

from __future__ import annotations

import pytest

from savo_turntable.control import RotationScheduler
from savo_turntable.drivers import SimulatedTurntable
from savo_turntable.models import TurntableControlConfig


@pytest.fixture
def table() -> SimulatedTurntable:
    return SimulatedTurntable(name="test_table", subdivisions=4, angle_deg=0.0, max_speed_deg_s=30.0)


@pytest.fixture
def config() -> TurntableControlConfig:
    return TurntableControlConfig()


@pytest.fixture
def scheduler(table, config) -> RotationScheduler:
    return RotationScheduler(table, config)

