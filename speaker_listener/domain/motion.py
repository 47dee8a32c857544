"""Default motion collaborator: kinematic integration of discrete movement commands.

The episode controller only depends on the :class:`MotionIntegrator`
protocol; any integrator returning an updated :class:`Pose` can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Protocol

from speaker_listener.config.types import MotionConfig
from speaker_listener.domain.world import heading_vector


class MoveCommand(IntEnum):
    NONE = 0
    FORWARD = 1
    BACKWARD = 2
    ROTATE_LEFT = 3
    ROTATE_RIGHT = 4


@dataclass(frozen=True)
class Pose:
    """Listener pose on the ground plane with last-tick velocities."""

    x: float = 0.0
    z: float = 0.0
    heading: float = 0.0
    forward_velocity: float = 0.0
    angular_velocity: float = 0.0
    """Degrees per second, positive toward +x."""

    @property
    def origin(self) -> tuple[float, float]:
        return (self.x, self.z)


class MotionIntegrator(Protocol):
    def start_pose(self) -> Pose: ...

    def step(self, pose: Pose, command: MoveCommand) -> Pose: ...


class KinematicIntegrator:
    """Constant-speed moves and turns over a fixed tick duration."""

    def __init__(self, config: MotionConfig | None = None) -> None:
        self.config = config or MotionConfig()

    def start_pose(self) -> Pose:
        x, z = self.config.start_position
        return Pose(x=x, z=z, heading=self.config.start_heading)

    def step(self, pose: Pose, command: MoveCommand) -> Pose:
        dt = self.config.tick_seconds
        if command in (MoveCommand.FORWARD, MoveCommand.BACKWARD):
            speed = self.config.move_speed
            if command == MoveCommand.BACKWARD:
                speed = -speed
            fx, fz = heading_vector(pose.heading)
            return replace(
                pose,
                x=pose.x + fx * speed * dt,
                z=pose.z + fz * speed * dt,
                forward_velocity=speed,
                angular_velocity=0.0,
            )
        if command in (MoveCommand.ROTATE_LEFT, MoveCommand.ROTATE_RIGHT):
            rate = self.config.rotate_speed
            if command == MoveCommand.ROTATE_LEFT:
                rate = -rate
            return replace(
                pose,
                heading=(pose.heading + rate * dt) % 360.0,
                forward_velocity=0.0,
                angular_velocity=rate,
            )
        return replace(pose, forward_velocity=0.0, angular_velocity=0.0)
