"""Throttled two-phase perception: direct queries plus a fallback angular sweep.

Geometry is a pure ground-plane model: each slot is a disc of
``button_radius`` and a ray hits the nearest disc it crosses within
``ray_distance``. The ray capability is injectable so an engine-backed
caster can replace :class:`DiscRayCaster` without touching scan semantics.

Cost per scan is bounded: at most one direct query per undetected slot,
plus ``EnvConfig.sweep_ray_count`` rays when the sweep runs.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from speaker_listener.config.constants import MIN_DIRECT_QUERY_DISTANCE
from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.world import Slot, Vec3, heading_vector

Point2 = tuple[float, float]


@dataclass(frozen=True)
class PerceptionRecord:
    """Per-slot detection. The default instance is the not-detected sentinel."""

    detected: bool = False
    color_index: int = 0
    shape_index: int = 0
    position: Vec3 = (0.0, 0.0, 0.0)

    @classmethod
    def from_slot(cls, slot: Slot) -> PerceptionRecord:
        return cls(
            detected=True,
            color_index=int(slot.color),
            shape_index=int(slot.shape),
            position=slot.position,
        )


NOT_DETECTED = PerceptionRecord()


@dataclass(frozen=True)
class RayHit:
    slot_index: int
    distance: float


class RayCaster(Protocol):
    def cast(
        self,
        origin: Point2,
        direction: Point2,
        max_distance: float,
        slots: Sequence[Slot],
    ) -> RayHit | None: ...


class DiscRayCaster:
    """Nearest ray/disc intersection on the x/z plane."""

    def __init__(self, radius: float) -> None:
        self.radius = radius

    def cast(
        self,
        origin: Point2,
        direction: Point2,
        max_distance: float,
        slots: Sequence[Slot],
    ) -> RayHit | None:
        norm = math.hypot(direction[0], direction[1])
        if norm == 0.0:
            return None
        dx, dz = direction[0] / norm, direction[1] / norm
        r2 = self.radius * self.radius
        best: RayHit | None = None
        for slot in slots:
            ox = slot.position[0] - origin[0]
            oz = slot.position[2] - origin[1]
            # A disc containing the ray origin is never hit.
            if ox * ox + oz * oz < r2:
                continue
            t_closest = ox * dx + oz * dz
            miss2 = ox * ox + oz * oz - t_closest * t_closest
            if miss2 > r2:
                continue
            t_enter = t_closest - math.sqrt(r2 - miss2)
            if t_enter < 0.0 or t_enter > max_distance:
                continue
            # Strict comparison keeps the lower slot index on exact ties.
            if best is None or t_enter < best.distance:
                best = RayHit(slot_index=slot.index, distance=t_enter)
        return best


@dataclass(frozen=True)
class ScanStats:
    """Bookkeeping for one scan invocation."""

    direct_queries: int
    sweep_queries: int
    direct_detections: int
    sweep_detections: int

    @property
    def swept(self) -> bool:
        return self.sweep_queries > 0

    @property
    def ray_queries(self) -> int:
        return self.direct_queries + self.sweep_queries


class PerceptionScanner:
    """Keeps the listener's per-slot perception records for one episode."""

    def __init__(self, config: EnvConfig, caster: RayCaster | None = None) -> None:
        self.config = config
        self.caster: RayCaster = caster or DiscRayCaster(config.button_radius)
        self._records: list[PerceptionRecord] = [NOT_DETECTED] * config.slot_count
        self._ticks_since_scan = 0
        self.total_ray_queries = 0
        self.scan_count = 0

    @property
    def records(self) -> tuple[PerceptionRecord, ...]:
        return tuple(self._records)

    @property
    def detected_count(self) -> int:
        return sum(1 for record in self._records if record.detected)

    def clear(self) -> None:
        """Wipe every record to not-detected and restart the cadence."""
        self._records = [NOT_DETECTED] * self.config.slot_count
        self._ticks_since_scan = 0
        self.total_ray_queries = 0
        self.scan_count = 0

    # -- query capability ---------------------------------------------------

    def direct_query(self, origin: Point2, target: Vec3, slots: Sequence[Slot]) -> RayHit | None:
        """Cast one bounded ray from ``origin`` straight at ``target``."""
        return self.caster.cast(
            origin,
            (target[0] - origin[0], target[2] - origin[1]),
            self.config.ray_distance,
            slots,
        )

    def sweep_query(
        self,
        origin: Point2,
        heading_deg: float,
        slots: Sequence[Slot],
    ) -> list[RayHit | None]:
        """Cast the fallback fan from ``-scan_half_angle`` to ``+scan_half_angle``."""
        hits: list[RayHit | None] = []
        for step in range(self.config.sweep_ray_count):
            angle = -self.config.scan_half_angle + step * self.config.horizontal_step
            hits.append(
                self.caster.cast(
                    origin,
                    heading_vector(heading_deg + angle),
                    self.config.ray_distance,
                    slots,
                )
            )
        return hits

    # -- scanning -----------------------------------------------------------

    def scan(self, origin: Point2, heading_deg: float, slots: Sequence[Slot]) -> ScanStats:
        """Run one scan: direct pass, then the sweep only if a slot is still missing.

        Detected records are never overwritten within an episode.
        """
        direct_queries = 0
        direct_detections = 0
        for slot in slots:
            if self._records[slot.index].detected:
                continue
            offset = math.hypot(slot.position[0] - origin[0], slot.position[2] - origin[1])
            if offset < MIN_DIRECT_QUERY_DISTANCE:
                continue
            direct_queries += 1
            hit = self.direct_query(origin, slot.position, slots)
            # A different slot in the way is an occlusion, not a detection.
            if hit is not None and hit.slot_index == slot.index:
                self._records[slot.index] = PerceptionRecord.from_slot(slot)
                direct_detections += 1

        sweep_queries = 0
        sweep_detections = 0
        if self.detected_count < self.config.slot_count:
            by_index = {slot.index: slot for slot in slots}
            credited: set[int] = set()
            hits = self.sweep_query(origin, heading_deg, slots)
            sweep_queries = len(hits)
            for hit in hits:
                if hit is None or hit.slot_index in credited:
                    continue
                if self._records[hit.slot_index].detected:
                    continue
                credited.add(hit.slot_index)
                self._records[hit.slot_index] = PerceptionRecord.from_slot(
                    by_index[hit.slot_index]
                )
                sweep_detections += 1

        stats = ScanStats(
            direct_queries=direct_queries,
            sweep_queries=sweep_queries,
            direct_detections=direct_detections,
            sweep_detections=sweep_detections,
        )
        self.total_ray_queries += stats.ray_queries
        self.scan_count += 1
        return stats

    def advance(
        self, origin: Point2, heading_deg: float, slots: Sequence[Slot]
    ) -> ScanStats | None:
        """Count one tick and scan when the cadence period is reached."""
        self._ticks_since_scan += 1
        if self._ticks_since_scan < self.config.scan_period_ticks:
            return None
        self._ticks_since_scan = 0
        return self.scan(origin, heading_deg, slots)
