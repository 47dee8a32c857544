"""Domain layer: world model, rule oracle, placement, perception, channel, rewards."""

from speaker_listener.domain.channel import CommunicationChannel, clamp_token
from speaker_listener.domain.motion import KinematicIntegrator, MotionIntegrator, MoveCommand, Pose
from speaker_listener.domain.perception import (
    NOT_DETECTED,
    DiscRayCaster,
    PerceptionRecord,
    PerceptionScanner,
    RayCaster,
    RayHit,
    ScanStats,
)
from speaker_listener.domain.rewards import AgentRole, PressOutcome, RewardEngine, RewardLedger
from speaker_listener.domain.rules import (
    NO_CORRECT_SLOT,
    RuleOracle,
    RuleSample,
    resolve_correct_index,
)
from speaker_listener.domain.spawn import PlacementResult, SpawnPlanner
from speaker_listener.domain.world import Color, Rule, Shape, Slot, Vec3, planar_distance

__all__ = [
    "AgentRole",
    "Color",
    "CommunicationChannel",
    "DiscRayCaster",
    "KinematicIntegrator",
    "MotionIntegrator",
    "MoveCommand",
    "NOT_DETECTED",
    "NO_CORRECT_SLOT",
    "PerceptionRecord",
    "PerceptionScanner",
    "PlacementResult",
    "Pose",
    "PressOutcome",
    "RayCaster",
    "RayHit",
    "RewardEngine",
    "RewardLedger",
    "Rule",
    "RuleOracle",
    "RuleSample",
    "ScanStats",
    "Shape",
    "Slot",
    "SpawnPlanner",
    "Vec3",
    "clamp_token",
    "planar_distance",
    "resolve_correct_index",
]
