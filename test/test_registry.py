# -*- coding: utf-8 -*-

import pytest

from savo_turntable.drivers import SimulatedTurntable, TurntableValidationError
from savo_turntable.registry import TurntableRegistry


@pytest.fixture
def registry():
    reg = TurntableRegistry()
    reg.register(SimulatedTurntable(name="yard"), (100.0, 50.0))
    reg.register(SimulatedTurntable(name="shed"), (400.0, 0.0))
    reg.register(SimulatedTurntable(name="depot"), (-60.0, 0.0))
    return reg


def test_register_uses_actuator_name(registry):
    assert registry.names() == ["yard", "shed", "depot"]
    assert len(registry) == 3
    assert "yard" in registry
    assert registry.get("yard").position == (100.0, 50.0)


def test_register_explicit_name_and_replace():
    reg = TurntableRegistry()
    table = SimulatedTurntable(name="sim")
    reg.register(table, [1, 2], name="north")
    reg.register(table, [3, 4], name="north")
    assert reg.names() == ["north"]
    assert reg.get("north").position == (3.0, 4.0)


@pytest.mark.parametrize("position", [(), (1.0, float("nan")), (float("inf"), 0.0)])
def test_register_rejects_bad_position(position):
    with pytest.raises(TurntableValidationError):
        TurntableRegistry().register(SimulatedTurntable(name="t"), position)


def test_register_rejects_empty_name():
    with pytest.raises(TurntableValidationError):
        TurntableRegistry().register(SimulatedTurntable(name="t"), (0.0, 0.0), name="  ")


def test_unregister(registry):
    assert registry.unregister("shed") is True
    assert registry.unregister("shed") is False
    assert registry.get("shed") is None
    assert [e.name for e in registry] == ["yard", "depot"]


def test_list_by_distance_is_sorted(registry):
    ranked = registry.list_by_distance((0.0, 0.0))
    assert [e.name for e, _ in ranked] == ["depot", "yard", "shed"]
    assert ranked[0][1] == pytest.approx(60.0)
    assert ranked[2][1] == pytest.approx(400.0)


def test_nearest_within_picks_closest_in_radius(registry):
    assert registry.nearest_within((0.0, 0.0)).name == "depot"
    assert registry.nearest_within((390.0, 0.0)).name == "shed"


def test_nearest_within_outside_radius(registry):
    assert registry.nearest_within((0.0, 1000.0)) is None
    assert registry.nearest_within((0.0, 0.0), max_distance=10.0) is None
    assert registry.nearest_within((-60.0, 0.0), max_distance=0.0).name == "depot"


def test_empty_registry():
    reg = TurntableRegistry()
    assert reg.nearest_within((0.0, 0.0)) is None
    assert reg.list_by_distance((0.0, 0.0)) == []


def test_dimension_mismatch_raises(registry):
    with pytest.raises(TurntableValidationError):
        registry.list_by_distance((0.0, 0.0, 0.0))
