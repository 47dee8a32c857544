"""Tests for separation-constrained slot placement."""

from __future__ import annotations

import itertools
from random import Random

import pytest

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.spawn import SpawnPlanner
from speaker_listener.domain.world import Slot, planar_distance
from speaker_listener.errors import PlacementFailure


def _slots() -> list[Slot]:
    return [Slot(index=i, position=(10.0 + i, 0.0, 10.0)) for i in range(3)]


class TestSpawnPlanner:
    def test_positions_respect_separation_and_bounds(self) -> None:
        config = EnvConfig()
        planner = SpawnPlanner(config)
        rng = Random(0)
        for _ in range(200):
            slots = _slots()
            result = planner.place(slots, rng)
            assert result.succeeded
            for slot in slots:
                x, y, z = slot.position
                assert -3.0 <= x <= 3.0
                assert -3.0 <= z <= 3.0
                assert y == config.button_y
            for a, b in itertools.combinations(slots, 2):
                assert planar_distance(a.position, b.position) >= config.min_button_separation

    def test_result_mirrors_slot_positions(self) -> None:
        slots = _slots()
        result = SpawnPlanner(EnvConfig()).place(slots, Random(1))
        assert result.positions == tuple(slot.position for slot in slots)

    def test_failed_slot_keeps_previous_position(self) -> None:
        config = EnvConfig(spawn_half_extents=(0.1, 0.1), placement_attempts=20)
        slots = _slots()
        previous = [slot.position for slot in slots]
        result = SpawnPlanner(config).place(slots, Random(0))
        assert result.failed_slots == (1, 2)
        assert not result.succeeded
        assert slots[0].position != previous[0]
        assert slots[1].position == previous[1]
        assert slots[2].position == previous[2]

    def test_strict_mode_raises(self) -> None:
        config = EnvConfig(spawn_half_extents=(0.1, 0.1), placement_attempts=20)
        with pytest.raises(PlacementFailure) as info:
            SpawnPlanner(config).place(_slots(), Random(0), strict=True)
        assert info.value.slot_index == 1
        assert info.value.attempts == 20

    def test_strict_failure_moves_no_slot(self) -> None:
        config = EnvConfig(spawn_half_extents=(0.1, 0.1), placement_attempts=20)
        slots = _slots()
        previous = [slot.position for slot in slots]
        with pytest.raises(PlacementFailure):
            SpawnPlanner(config).place(slots, Random(0), strict=True)
        assert [slot.position for slot in slots] == previous

    def test_zero_separation_always_places(self) -> None:
        config = EnvConfig(spawn_half_extents=(0.0, 0.0), min_button_separation=0.0)
        slots = _slots()
        result = SpawnPlanner(config).place(slots, Random(0))
        assert result.succeeded
        assert {slot.position for slot in slots} == {(0.0, config.button_y, 0.0)}
