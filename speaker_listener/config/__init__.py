"""Configuration layer: constants and typed config dataclasses."""

from speaker_listener.config.constants import (
    COLOR_NAMES,
    MAX_RESAMPLE_TRIES,
    PLACEMENT_ATTEMPTS,
    SHAPE_NAMES,
    SILENCE_TOKEN,
    SLOT_COUNT,
    STEP_BUDGET,
    VOCAB_SIZE,
)
from speaker_listener.config.types import (
    EnvConfig,
    ListenerKind,
    MotionConfig,
    RunConfig,
    SpeakerKind,
)

__all__ = [
    "COLOR_NAMES",
    "EnvConfig",
    "ListenerKind",
    "MAX_RESAMPLE_TRIES",
    "MotionConfig",
    "PLACEMENT_ATTEMPTS",
    "RunConfig",
    "SHAPE_NAMES",
    "SILENCE_TOKEN",
    "SLOT_COUNT",
    "STEP_BUDGET",
    "SpeakerKind",
    "VOCAB_SIZE",
]
