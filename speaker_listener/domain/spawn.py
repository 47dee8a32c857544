"""Randomized, separation-constrained slot placement inside the spawn area."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from random import Random

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.world import Slot, Vec3, planar_distance
from speaker_listener.errors import PlacementFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementResult:
    """Positions written into the slot set by one ``place`` call."""

    positions: tuple[Vec3, ...]
    failed_slots: tuple[int, ...]

    @property
    def succeeded(self) -> bool:
        return not self.failed_slots


class SpawnPlanner:
    """Rejection-samples positions in a rectangle centered on ``spawn_center``."""

    def __init__(self, config: EnvConfig) -> None:
        self.config = config

    def _draw(self, rng: Random) -> Vec3:
        cx, cz = self.config.spawn_center
        hx, hz = self.config.spawn_half_extents
        return (
            cx + rng.uniform(-hx, hx),
            self.config.button_y,
            cz + rng.uniform(-hz, hz),
        )

    def place(self, slots: Sequence[Slot], rng: Random, *, strict: bool = False) -> PlacementResult:
        """Assign a new position to every slot.

        A slot whose attempts are all rejected keeps its previous position and
        is reported in ``failed_slots``; strict mode raises
        :exc:`PlacementFailure` instead and leaves every slot untouched.
        """
        placed: list[Vec3] = []
        drawn: dict[int, Vec3] = {}
        failed: list[int] = []
        for slot in slots:
            position = self._place_one(placed, rng)
            if position is None:
                if strict:
                    raise PlacementFailure(slot.index, self.config.placement_attempts)
                logger.warning(
                    "slot %d kept its previous position after %d placement attempts",
                    slot.index,
                    self.config.placement_attempts,
                )
                failed.append(slot.index)
                continue
            drawn[slot.index] = position
            placed.append(position)

        # Slots are only written once every draw is settled.
        for slot in slots:
            if slot.index in drawn:
                slot.position = drawn[slot.index]
        return PlacementResult(
            positions=tuple(slot.position for slot in slots),
            failed_slots=tuple(failed),
        )

    def _place_one(self, placed: Sequence[Vec3], rng: Random) -> Vec3 | None:
        for _ in range(self.config.placement_attempts):
            candidate = self._draw(rng)
            if all(
                planar_distance(candidate, other) >= self.config.min_button_separation
                for other in placed
            ):
                return candidate
        return None
