# -*- coding: utf-8 -*-

import math

import pytest

from savo_turntable.drivers import (
    LeverDriver,
    LeverOwnershipError,
    LeverRangeError,
    SimulatedTurntable,
)


def test_write_clamps_into_lever_range(table):
    lever = LeverDriver(table)
    assert lever.write(1.5) == 1.0
    assert table.get_lever() == 1.0
    assert lever.write(-0.2) == 0.0
    assert table.get_lever() == 0.0
    assert lever.write_count == 2
    assert lever.last_written == 0.0


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_write_is_refused(table, bad):
    lever = LeverDriver(table)
    with pytest.raises(LeverRangeError):
        lever.write(bad)
    assert lever.write_count == 0
    assert table.get_history() == []


def test_center_writes_neutral(table):
    lever = LeverDriver(table, neutral=0.5)
    lever.write(0.9)
    assert lever.center() == 0.5
    assert table.get_lever() == 0.5


def test_transfer_releases_old_handle():
    table = SimulatedTurntable(name="yard")
    old = LeverDriver(table, owner="scheduler")
    new = old.transfer("rotation_task#1")

    assert old.released
    assert not new.released
    assert new.owner == "rotation_task#1"
    assert new.actuator is table

    with pytest.raises(LeverOwnershipError) as exc:
        old.write(0.7)
    assert exc.value.context.owner == "scheduler"
    assert exc.value.context.actuator == "yard"

    with pytest.raises(LeverOwnershipError):
        old.transfer("someone_else")

    new.write(0.7)
    assert table.get_lever() == pytest.approx(0.7)


def test_read_reports_actuator_value(table):
    lever = LeverDriver(table)
    table.set_lever(0.25)
    assert lever.read() == 0.25
