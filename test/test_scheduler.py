# -*- coding: utf-8 -*-

import logging
import math

import pytest

from savo_turntable.control import RotationScheduler
from savo_turntable.control.angle_model import delta_angle
from savo_turntable.drivers import ActuatorReadError, LeverOwnershipError, SimulatedTurntable, read_angle
from savo_turntable.models import (
    RequestKind,
    RequestStatus,
    TaskState,
    TurntableControlConfig,
)


class FixedTurntable:
    """Actuator stub with a fixed readout and recorded lever writes."""

    def __init__(self, *, angle=0.0, subdivisions=4):
        self.name = "fixed"
        self.angle = angle
        self.subdivisions = subdivisions
        self.lever = 0.5
        self.writes = []

    def get_angle(self):
        return self.angle

    def get_subdivisions(self):
        return self.subdivisions

    def get_lever(self):
        return self.lever

    def set_lever(self, value):
        self.lever = value
        self.writes.append(value)


DT = 0.02


def sim_at(angle, **kw):
    return SimulatedTurntable(name="sim", angle_deg=angle, **kw)


def run_closed_loop(scheduler, table, *, dt=DT, max_ticks=3000):
    """Tick + integrate until the scheduler goes idle. Returns ticks used."""
    ticks = 0
    while scheduler.is_active() and ticks < max_ticks:
        scheduler.tick(dt)
        table.advance(dt)
        ticks += 1
    return ticks


# -----------------------------------------------------------------------------
# Request resolution
# -----------------------------------------------------------------------------
def test_start_to_index_resolves_stop_heading(scheduler):
    result = scheduler.start_to_index(1)
    assert result.status is RequestStatus.STARTED
    assert result.kind is RequestKind.INDEX
    assert result.target_index == 1
    assert result.target_angle_deg == 90.0
    assert result.task_id == 1
    assert scheduler.is_active()


@pytest.mark.parametrize("idx, expected", [(0, 0), (3, 3), (4, 0), (5, 1), (-1, 3)])
def test_start_to_index_wraps(scheduler, idx, expected):
    assert scheduler.start_to_index(idx).target_index == expected


@pytest.mark.parametrize("bad", ["2", 1.5, True, None])
def test_start_to_index_rejects_non_integer(scheduler, bad):
    result = scheduler.start_to_index(bad)
    assert result.status is RequestStatus.REJECTED
    assert result.reason == "invalid_index"
    assert not scheduler.is_active()


def test_next_position_wraps_up_from_last_stop():
    scheduler = RotationScheduler(sim_at(270.0))
    result = scheduler.start_to_next_position(+1)
    assert result.target_index == 0
    assert result.target_angle_deg == 0.0


def test_next_position_wraps_down_from_first_stop():
    scheduler = RotationScheduler(sim_at(0.0))
    result = scheduler.start_to_next_position(-1)
    assert result.target_index == 3
    assert result.target_angle_deg == 270.0


def test_next_position_uses_nearest_stop_of_current_heading():
    scheduler = RotationScheduler(sim_at(268.0))
    assert scheduler.start_to_next_position(+1).target_index == 0
    scheduler = RotationScheduler(sim_at(95.0))
    assert scheduler.start_to_next_position(-1).target_index == 0


@pytest.mark.parametrize("bad", [0, 2, -2, True, "1"])
def test_next_position_rejects_bad_direction(scheduler, bad):
    result = scheduler.start_to_next_position(bad)
    assert result.status is RequestStatus.REJECTED
    assert result.reason == "invalid_direction"


@pytest.mark.parametrize("start, target", [(300.0, 120.0), (10.0, 190.0), (180.0, 0.0)])
def test_flip_targets_opposite_heading(start, target):
    scheduler = RotationScheduler(sim_at(start))
    result = scheduler.start_flip()
    assert result.started
    assert result.kind is RequestKind.FLIP
    assert result.target_index is None
    assert result.target_angle_deg == pytest.approx(target)


# -----------------------------------------------------------------------------
# Rejections
# -----------------------------------------------------------------------------
def test_no_actuator_rejects_every_request():
    scheduler = RotationScheduler()
    for result in (
        scheduler.start_to_index(1),
        scheduler.start_to_next_position(1),
        scheduler.start_flip(),
        scheduler.set_manual_lever(0.7),
    ):
        assert result.status is RequestStatus.REJECTED
        assert result.reason == "no_actuator"
        assert result.task_id is None
    assert not scheduler.is_active()
    assert scheduler.tick(DT) is None
    assert scheduler.telemetry() is None


@pytest.mark.parametrize("subdivisions", [0, -4, 2.5, "x"])
def test_invalid_subdivisions_rejected(subdivisions):
    table = FixedTurntable(subdivisions=subdivisions)
    scheduler = RotationScheduler(table)
    assert scheduler.start_to_index(1).reason == "invalid_subdivisions"
    assert scheduler.start_to_next_position(1).reason == "invalid_subdivisions"
    assert table.writes == []


def test_unreadable_angle_rejected():
    table = FixedTurntable(angle=math.nan)
    scheduler = RotationScheduler(table)
    assert scheduler.start_flip().reason == "actuator_read_failed"
    assert scheduler.start_to_next_position(1).reason == "actuator_read_failed"
    assert not scheduler.is_active()


@pytest.mark.parametrize("raw", [None, "north", object()])
def test_non_numeric_angle_is_a_read_failure(raw):
    table = FixedTurntable(angle=raw)
    with pytest.raises(ActuatorReadError) as exc_info:
        read_angle(table)
    assert isinstance(exc_info.value.cause, (TypeError, ValueError))

    scheduler = RotationScheduler(table)
    assert scheduler.start_flip().reason == "actuator_read_failed"
    assert scheduler.start_to_next_position(-1).reason == "actuator_read_failed"
    assert not scheduler.is_active()
    assert table.writes == []


def test_non_numeric_angle_skips_tick_and_keeps_task():
    table = FixedTurntable(angle=10.0)
    scheduler = RotationScheduler(table)
    scheduler.start_to_index(0)
    task = scheduler.active_task

    table.angle = None
    assert scheduler.tick(DT) is None
    assert scheduler.active_task is task
    assert task.state is TaskState.RUNNING
    assert table.writes == []
    with pytest.raises(ActuatorReadError):
        scheduler.telemetry()

    table.angle = 10.0
    assert scheduler.tick(DT).state is TaskState.RUNNING
    assert len(table.writes) == 1


def test_rejected_request_leaves_running_task_untouched(scheduler):
    first = scheduler.start_to_index(2)
    scheduler.tick(DT)
    task = scheduler.active_task

    result = scheduler.start_to_next_position(0)
    assert result.status is RequestStatus.REJECTED
    assert scheduler.active_task is task
    assert task.state is TaskState.RUNNING
    assert not task.lever.released
    assert task.task_id == first.task_id


# -----------------------------------------------------------------------------
# Supersession and lever ownership
# -----------------------------------------------------------------------------
def test_superseded_task_never_writes_again(table, scheduler):
    a = scheduler.start_to_index(1)
    for _ in range(5):
        scheduler.tick(DT)
        table.advance(DT)
    task_a = scheduler.active_task
    handle_a = task_a.lever
    writes_a = handle_a.write_count
    assert writes_a == 5

    b = scheduler.start_flip()
    assert b.superseded_task_id == a.task_id
    assert task_a.state is TaskState.CANCELLED
    assert task_a.cancel_reason == "superseded"
    assert handle_a.released

    table.reset_history()
    for _ in range(20):
        scheduler.tick(DT)
        table.advance(DT)

    task_b = scheduler.active_task or scheduler.last_task
    assert handle_a.write_count == writes_a
    assert len(table.get_history()) == task_b.lever.write_count
    with pytest.raises(LeverOwnershipError):
        handle_a.write(0.5)


def test_cancelled_task_leaves_lever_until_next_tick(table, scheduler):
    scheduler.start_to_index(1)       # 0 -> 90: full positive lever
    scheduler.tick(DT)
    assert table.get_lever() == 1.0

    scheduler.start_to_index(3)       # 0 -> 270: shortest path is negative
    assert table.get_lever() == 1.0
    scheduler.tick(DT)
    assert table.get_lever() < 0.5


def test_neutral_on_cancel_centers_superseded_lever(table):
    scheduler = RotationScheduler(table, TurntableControlConfig(neutral_on_cancel=True))
    scheduler.start_to_index(1)
    scheduler.tick(DT)
    scheduler.start_to_index(3)
    assert table.get_lever() == 0.5


def test_at_most_one_lever_write_per_tick(table, scheduler):
    scheduler.start_to_index(2)
    for _ in range(50):
        before = len(table.get_history())
        scheduler.tick(DT)
        table.advance(DT)
        assert len(table.get_history()) - before <= 1


# -----------------------------------------------------------------------------
# Cancel
# -----------------------------------------------------------------------------
def test_cancel_running_and_idle(table, scheduler):
    assert scheduler.cancel() is False

    scheduler.start_to_index(1)
    scheduler.tick(DT)
    last = table.get_lever()

    assert scheduler.cancel() is True
    assert not scheduler.is_active()
    assert scheduler.last_task.cancel_reason == "caller"
    assert table.get_lever() == last
    assert scheduler.tick(DT) is None


def test_cancel_neutral_override(table, scheduler):
    scheduler.start_to_index(1)
    scheduler.tick(DT)
    scheduler.cancel(neutral=True)
    assert table.get_lever() == 0.5


# -----------------------------------------------------------------------------
# Closed loop
# -----------------------------------------------------------------------------
@pytest.mark.parametrize(
    "start, request_fn, target",
    [
        (0.0, lambda s: s.start_to_index(1), 90.0),
        (10.0, lambda s: s.start_to_index(0), 0.0),
        (350.0, lambda s: s.start_to_index(0), 0.0),
        (300.0, lambda s: s.start_flip(), 120.0),
        (270.0, lambda s: s.start_to_next_position(+1), 0.0),
        (5.0, lambda s: s.start_to_next_position(-1), 270.0),
    ],
)
def test_converges_on_simulated_turntable(start, request_fn, target):
    table = sim_at(start, max_speed_deg_s=30.0)
    scheduler = RotationScheduler(table, TurntableControlConfig())
    assert request_fn(scheduler).started

    ticks = run_closed_loop(scheduler, table, max_ticks=3000)

    assert ticks < 3000
    assert not scheduler.is_active()
    assert scheduler.last_task.state is TaskState.CONVERGED
    assert table.get_lever() == 0.5
    assert abs(delta_angle(target, table.get_angle())) < 0.2


def test_wraparound_takes_short_way():
    table = sim_at(350.0)
    scheduler = RotationScheduler(table)
    scheduler.start_to_index(0)
    for _ in range(10):
        scheduler.tick(DT)
        table.advance(DT)
        angle = table.get_angle()
        assert angle >= 350.0 or angle < 20.0


def test_duration_limit_stops_unreachable_target():
    table = sim_at(0.0)
    table.stalled = True
    scheduler = RotationScheduler(table, TurntableControlConfig(max_task_duration_s=0.5))
    scheduler.start_to_index(2)

    ticks = run_closed_loop(scheduler, table, max_ticks=1000)
    assert ticks <= 27
    assert scheduler.last_task.state is TaskState.CANCELLED
    assert scheduler.last_task.cancel_reason == "timeout"
    assert table.get_lever() == 0.5


def test_unreachable_target_runs_until_cancelled_by_default():
    table = sim_at(0.0)
    table.stalled = True
    scheduler = RotationScheduler(table)
    scheduler.start_to_index(2)
    ticks = run_closed_loop(scheduler, table, max_ticks=500)
    assert ticks == 500
    assert scheduler.is_active()


def test_read_failure_skips_tick_and_keeps_task():
    table = sim_at(10.0)
    scheduler = RotationScheduler(table)
    scheduler.start_to_index(0)
    task = scheduler.active_task

    table.set_angle(math.nan)
    assert scheduler.tick(DT) is None
    assert scheduler.active_task is task

    table.set_angle(10.0)
    step = scheduler.tick(DT)
    assert step is not None
    assert step.state is TaskState.RUNNING


# -----------------------------------------------------------------------------
# Manual lever
# -----------------------------------------------------------------------------
def test_manual_lever_cancels_task_and_writes(table, scheduler):
    started = scheduler.start_to_index(1)
    scheduler.tick(DT)

    result = scheduler.set_manual_lever(0.8)
    assert result.started
    assert result.kind is RequestKind.MANUAL_LEVER
    assert result.superseded_task_id == started.task_id
    assert scheduler.last_task.cancel_reason == "manual_lever"
    assert table.get_lever() == pytest.approx(0.8)
    assert not scheduler.is_active()
    assert scheduler.tick(DT) is None


def test_manual_lever_clamps_and_centers(table, scheduler):
    scheduler.set_manual_lever(1.7)
    assert table.get_lever() == 1.0
    scheduler.center_lever()
    assert table.get_lever() == 0.5


@pytest.mark.parametrize("bad", [math.nan, math.inf, "fast", None, True, False])
def test_manual_lever_rejects_garbage_without_side_effect(table, scheduler, bad):
    scheduler.start_to_index(1)
    result = scheduler.set_manual_lever(bad)
    assert result.status is RequestStatus.REJECTED
    assert result.reason == "invalid_lever"
    assert scheduler.is_active()


# -----------------------------------------------------------------------------
# Attach / detach, telemetry, logging
# -----------------------------------------------------------------------------
def test_detach_cancels_and_rejects_afterwards(scheduler):
    scheduler.start_to_index(1)
    task = scheduler.active_task
    scheduler.detach()
    assert task.state is TaskState.CANCELLED
    assert task.cancel_reason == "detached"
    assert scheduler.actuator is None
    assert scheduler.start_flip().reason == "no_actuator"


def test_attach_rebinds(table):
    scheduler = RotationScheduler()
    scheduler.attach(table)
    assert scheduler.name == "test_table"
    assert scheduler.start_to_index(1).started


def test_telemetry_snapshot():
    table = sim_at(93.0)
    scheduler = RotationScheduler(table)
    t = scheduler.telemetry()
    assert t.stop_index == 1
    assert t.stop_remainder_deg == pytest.approx(3.0)
    assert not t.is_lined
    assert t.lever_percent == pytest.approx(0.0)
    assert t.task_state is None

    scheduler.start_to_index(1)
    run_closed_loop(scheduler, table)
    t = scheduler.telemetry()
    assert t.is_lined
    assert t.task_state == "converged"
    assert t.target_angle_deg == 90.0
    assert t.to_dict()["stop_index"] == 1


def test_lifecycle_is_logged(scheduler, caplog):
    with caplog.at_level(logging.INFO, logger="savo_turntable"):
        scheduler.start_to_index(1)
        scheduler.start_to_next_position(7)
        scheduler.cancel()

    text = caplog.text
    assert "rotation_started" in text
    assert "request_rejected" in text
    assert "invalid_direction" in text
    assert "rotation_cancelled" in text
