# -*- coding: utf-8 -*-

import math

import pytest

from savo_turntable.control import RotationTask
from savo_turntable.drivers import ActuatorReadError, LeverDriver, SimulatedTurntable
from savo_turntable.models import PidGains, RequestKind, TaskState, TurntableControlConfig


def make_task(table, target, config=None):
    return RotationTask(
        task_id=1,
        kind=RequestKind.INDEX,
        actuator=table,
        lever=LeverDriver(table, owner="rotation_task#1"),
        target_angle_deg=target,
        config=config or TurntableControlConfig(),
    )


def test_first_step_drives_toward_target_along_shortest_path():
    # 10 deg -> 0 deg: decrease
    table = SimulatedTurntable(angle_deg=10.0)
    step = make_task(table, 0.0).step(0.02)
    assert step.state is TaskState.RUNNING
    assert step.error_deg == pytest.approx(-10.0)
    assert step.lever == pytest.approx(0.0)

    # 350 deg -> 0 deg: increase across the seam, not -350
    table = SimulatedTurntable(angle_deg=350.0)
    step = make_task(table, 0.0).step(0.02)
    assert step.error_deg == pytest.approx(10.0)
    assert step.lever == pytest.approx(1.0)


def test_lever_maps_clamped_output_around_neutral():
    # kp only, small error: output 0.05 * 4 = 0.2 -> lever 0.6
    config = TurntableControlConfig(gains=PidGains(kp=0.05, ki=0.0, kd=0.0))
    table = SimulatedTurntable(angle_deg=86.0)
    step = make_task(table, 90.0, config).step(0.02)
    assert step.output == pytest.approx(0.2)
    assert step.lever == pytest.approx(0.6)
    assert table.get_lever() == pytest.approx(0.6)


def test_converges_inside_threshold_with_neutral_lever():
    table = SimulatedTurntable(angle_deg=90.1)
    task = make_task(table, 90.0)
    table.set_lever(0.8)

    step = task.step(0.02)
    assert step.state is TaskState.CONVERGED
    assert task.state is TaskState.CONVERGED
    assert step.lever == 0.5
    assert table.get_lever() == 0.5


def test_terminal_task_never_writes_again():
    table = SimulatedTurntable(angle_deg=0.05)
    task = make_task(table, 0.0)
    task.step(0.02)
    writes = task.lever.write_count

    for _ in range(5):
        step = task.step(0.02)
        assert step.state is TaskState.CONVERGED
        assert step.lever is None
    assert task.lever.write_count == writes


def test_cancel_leaves_lever_by_default():
    table = SimulatedTurntable(angle_deg=0.0)
    task = make_task(table, 90.0)
    task.step(0.02)
    last = table.get_lever()

    assert task.cancel("caller") is True
    assert task.state is TaskState.CANCELLED
    assert task.cancel_reason == "caller"
    assert table.get_lever() == last
    assert task.cancel("again") is False

    before = task.lever.write_count
    task.step(0.02)
    assert task.lever.write_count == before


def test_cancel_with_neutral_centers_lever():
    table = SimulatedTurntable(angle_deg=0.0)
    task = make_task(table, 90.0)
    task.step(0.02)
    task.cancel("caller", neutral=True)
    assert table.get_lever() == 0.5


def test_zero_dt_is_handled_without_derivative():
    table = SimulatedTurntable(angle_deg=10.0)
    task = make_task(table, 0.0)
    step = task.step(0.0)
    # p only: 0.05 * -10 = -0.5 -> lever 0.25
    assert step.output == pytest.approx(-0.5)
    assert step.lever == pytest.approx(0.25)
    assert task.pid.last_result.dt_valid is False


def test_duration_limit_cancels_with_neutral_lever():
    config = TurntableControlConfig(max_task_duration_s=0.1)
    table = SimulatedTurntable(angle_deg=0.0)
    table.stalled = True
    task = make_task(table, 180.0, config)

    for _ in range(10):
        task.step(0.02)
        if task.state.terminal:
            break

    assert task.state is TaskState.CANCELLED
    assert task.cancel_reason == "timeout"
    assert 0.1 <= task.elapsed_s <= 0.14
    assert table.get_lever() == 0.5


def test_angle_read_failure_raises():
    table = SimulatedTurntable(angle_deg=0.0)
    task = make_task(table, 90.0)
    table.set_angle(math.nan)
    with pytest.raises(ActuatorReadError):
        task.step(0.02)
    assert task.state is TaskState.RUNNING


def test_target_is_canonicalized():
    table = SimulatedTurntable()
    assert make_task(table, -90.0).target_angle_deg == 270.0
    assert make_task(table, 360.0).target_angle_deg == 0.0
