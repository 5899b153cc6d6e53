"""
Tests for module/component resolution
"""
import pytest

from bloom.coaching import week1, week2, week5
from bloom.coaching.descriptors import (CATALOG, COMING_SOON_VIEW,
                                        ComponentDescriptor, ViewKind,
                                        find_component)
from bloom.coaching.exercises import Exercise
from bloom.coaching.registry import MODULE_REGISTRY, get_module, resolve


def _noop_complete(component_id, data):
    pass


def _noop_close():
    pass


@pytest.mark.parametrize("module_id", ["week7", "week0", "", "WEEK1", None, 3])
def test_unknown_module_is_coming_soon(module_id):
    view = resolve(module_id, {"id": "focus-memory-rituals"}, _noop_complete, _noop_close)

    assert view is COMING_SOON_VIEW
    assert view.kind == ViewKind.COMING_SOON
    assert view.actions == ("close",)


@pytest.mark.parametrize("module_id,label", [
    ("week1", "Week 1"),
    ("week2", "Week 2"),
    ("week3", "Week 3"),
    ("week4", "Week 4"),
    ("week5", "Week 5-6"),
    ("week6", "Week 5-6"),
])
def test_unknown_component_is_module_not_found(module_id, label):
    view = resolve(module_id, {"id": "no-such-exercise"}, _noop_complete, _noop_close)

    assert not isinstance(view, Exercise)
    assert view.kind == ViewKind.NOT_FOUND
    assert view.title == f"Component Not Found ({label})"
    assert view.component_id == "no-such-exercise"


@pytest.mark.parametrize("component", [None, {}, {"id": ""}, {"id": 42}, "focus-memory-rituals"])
def test_missing_component_id_is_not_found(component):
    view = resolve("week1", component, _noop_complete, _noop_close)

    assert view.kind == ViewKind.NOT_FOUND


def test_component_from_another_week_is_not_found():
    view = resolve("week2", {"id": "cortisol-breathwork"}, _noop_complete, _noop_close)

    assert view.kind == ViewKind.NOT_FOUND
    assert view.title == "Component Not Found (Week 2)"


def test_known_pair_resolves_to_a_fresh_exercise_each_time():
    first = resolve("week1", {"id": "cortisol-breathwork"}, _noop_complete, _noop_close)
    second = resolve("week1", {"id": "cortisol-breathwork"}, _noop_complete, _noop_close)

    assert isinstance(first, week1.CortisolResetBreathwork)
    assert isinstance(second, week1.CortisolResetBreathwork)
    assert first is not second
    assert first.phase == second.phase == "assessment"


def test_week5_and_week6_share_a_table():
    assert MODULE_REGISTRY["week5"] is MODULE_REGISTRY["week6"]
    exercise = resolve("week6", {"id": "habit-loop-mastery"}, _noop_complete, _noop_close)
    assert isinstance(exercise, week5.HabitLoopMastery)


def test_descriptor_objects_resolve_like_mappings():
    descriptor = find_component("week2", "thought-audit")
    assert isinstance(descriptor, ComponentDescriptor)

    exercise = resolve("week2", descriptor, _noop_complete, _noop_close)

    assert isinstance(exercise, week2.ThoughtAudit)


def test_every_catalog_entry_resolves_to_an_exercise():
    for descriptor in CATALOG:
        resolution = resolve(descriptor.module_id, descriptor, _noop_complete, _noop_close)
        assert isinstance(resolution, Exercise), descriptor.key
        assert resolution.component_id == descriptor.id


def test_every_registered_exercise_is_in_the_catalog():
    for module_id in ("week1", "week2", "week3", "week4", "week5"):
        module = get_module(module_id)
        for component_id in module.components:
            assert find_component(module_id, component_id) is not None, (module_id, component_id)


def test_get_module_rejects_non_strings():
    assert get_module(None) is None
    assert get_module(1) is None
    assert get_module("week4").week_number == 4
