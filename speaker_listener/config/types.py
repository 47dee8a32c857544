"""Configuration dataclasses for the environment, motion model and batch runs.

All options are supplied once, validated in ``__post_init__`` and never
mutated afterwards. Components receive the config at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from speaker_listener.config.constants import (
    MAX_RESAMPLE_TRIES,
    PLACEMENT_ATTEMPTS,
    SILENCE_TOKEN,
    SLOT_COUNT,
    STEP_BUDGET,
    VOCAB_SIZE,
)
from speaker_listener.errors import ConfigurationError

__all__ = [
    "EnvConfig",
    "ListenerKind",
    "MotionConfig",
    "RunConfig",
    "SpeakerKind",
]


# ---------------------------------------------------------------------------
# Action-source selectors
# ---------------------------------------------------------------------------


class SpeakerKind(Enum):
    """Speaker action source used by batch runs."""

    RULE_ENCODING = "rule_encoding"
    RANDOM = "random"
    SILENT = "silent"


class ListenerKind(Enum):
    """Listener action source used by batch runs."""

    GREEDY = "greedy"
    RANDOM = "random"


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnvConfig:
    """Episode, perception, communication and reward parameters."""

    # Episode
    slot_count: int = SLOT_COUNT
    max_resample_tries: int = MAX_RESAMPLE_TRIES
    step_budget: int = STEP_BUDGET

    # Shared reward
    correct_reward: float = 1.0
    wrong_reward: float = -1.0
    step_penalty: float = -0.001
    miss_penalty: float = -0.01
    """Listener-only shaping penalty for an out-of-range press."""
    timeout_penalty: float = -1.0
    """Listener-only penalty when the step budget runs out."""

    # Communication
    vocab_size: int = VOCAB_SIZE
    silence_token: int = SILENCE_TOKEN
    speak_penalty: float = -0.0005

    # Press / perception
    press_distance: float = 2.0
    ray_distance: float = 20.0
    scan_half_angle: float = 90.0
    """Half-width of the fallback sweep fan, degrees."""
    horizontal_step: float = 20.0
    """Angular step between sweep rays, degrees."""
    scan_period_ticks: int = 5

    # Spawn area (ground plane is x/z)
    spawn_center: tuple[float, float] = (0.0, 0.0)
    spawn_half_extents: tuple[float, float] = (3.0, 3.0)
    min_button_separation: float = 1.5
    button_y: float = 0.5
    button_radius: float = 0.4
    """Disc radius used by ray intersection."""
    placement_attempts: int = PLACEMENT_ATTEMPTS

    def __post_init__(self) -> None:
        if self.slot_count != SLOT_COUNT:
            raise ConfigurationError(f"slot_count must be exactly {SLOT_COUNT}")
        if self.vocab_size <= 0:
            raise ConfigurationError("vocab_size must be >= 1")
        if not 0 <= self.silence_token < self.vocab_size:
            raise ConfigurationError("silence_token must be in [0, vocab_size)")
        if self.max_resample_tries < 1:
            raise ConfigurationError("max_resample_tries must be >= 1")
        if self.step_budget < 1:
            raise ConfigurationError("step_budget must be >= 1")
        if self.press_distance < 0.0:
            raise ConfigurationError("press_distance must be >= 0")
        if self.ray_distance <= 0.0:
            raise ConfigurationError("ray_distance must be > 0")
        if not 0.0 <= self.scan_half_angle <= 180.0:
            raise ConfigurationError("scan_half_angle must be in [0, 180]")
        if self.horizontal_step <= 0.0:
            raise ConfigurationError("horizontal_step must be > 0")
        if self.scan_period_ticks < 1:
            raise ConfigurationError("scan_period_ticks must be >= 1")
        if len(self.spawn_center) != 2 or len(self.spawn_half_extents) != 2:
            raise ConfigurationError("spawn_center and spawn_half_extents must be (x, z) pairs")
        if any(extent < 0.0 for extent in self.spawn_half_extents):
            raise ConfigurationError("spawn_half_extents must be >= 0")
        if self.min_button_separation < 0.0:
            raise ConfigurationError("min_button_separation must be >= 0")
        if self.button_radius <= 0.0:
            raise ConfigurationError("button_radius must be > 0")
        if self.placement_attempts < 1:
            raise ConfigurationError("placement_attempts must be >= 1")

    @property
    def sweep_ray_count(self) -> int:
        """Rays cast by one fallback sweep from -half_angle to +half_angle."""
        return int((2.0 * self.scan_half_angle) / self.horizontal_step + 1e-9) + 1


@dataclass(frozen=True)
class MotionConfig:
    """Kinematic parameters for the default motion integrator."""

    move_speed: float = 3.0
    rotate_speed: float = 120.0
    """Degrees per second."""
    tick_seconds: float = 0.2
    start_position: tuple[float, float] = (0.0, -4.0)
    start_heading: float = 0.0
    """Degrees; 0 faces +z, positive turns toward +x."""

    def __post_init__(self) -> None:
        if self.move_speed <= 0.0:
            raise ConfigurationError("move_speed must be > 0")
        if self.rotate_speed <= 0.0:
            raise ConfigurationError("rotate_speed must be > 0")
        if self.tick_seconds <= 0.0:
            raise ConfigurationError("tick_seconds must be > 0")
        if len(self.start_position) != 2:
            raise ConfigurationError("start_position must be an (x, z) pair")


@dataclass(frozen=True)
class RunConfig:
    """Batch-run parameters for ``run_episodes``."""

    n_episodes: int = 10
    seed: int = 0
    speaker: SpeakerKind = SpeakerKind.RULE_ENCODING
    listener: ListenerKind = ListenerKind.GREEDY
    env: EnvConfig = EnvConfig()
    motion: MotionConfig = MotionConfig()

    def __post_init__(self) -> None:
        if self.n_episodes < 1:
            raise ConfigurationError("n_episodes must be >= 1")
