"""Fixed-size observation vectors handed to the policy/learning boundary.

Listener layout (``32 + vocab_size`` floats): for each of the 3 slots,
color one-hot(3), shape one-hot(3), detected(1), local direction x/z(2),
normalized distance(1), zero-filled when undetected; then normalized forward
and angular velocity(2); then the current token one-hot(vocab_size).

Speaker layout (``7 + vocab_size`` floats): target color one-hot(3), target
shape one-hot(3), require-no-red flag(1), previous token one-hot(vocab_size).
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from speaker_listener.config.constants import (
    LISTENER_OBS_BASE_SIZE,
    SLOT_FEATURE_SIZE,
    SPEAKER_OBS_BASE_SIZE,
)
from speaker_listener.config.types import EnvConfig, MotionConfig
from speaker_listener.domain.motion import Pose
from speaker_listener.domain.perception import PerceptionRecord
from speaker_listener.domain.world import Rule, to_local


def listener_observation_size(vocab_size: int) -> int:
    return LISTENER_OBS_BASE_SIZE + vocab_size


def speaker_observation_size(vocab_size: int) -> int:
    return SPEAKER_OBS_BASE_SIZE + vocab_size


def one_hot(size: int, index: int) -> np.ndarray:
    """Float32 one-hot vector; an out-of-range index yields all zeros."""
    out = np.zeros(size, dtype=np.float32)
    if 0 <= index < size:
        out[index] = 1.0
    return out


def slot_features(record: PerceptionRecord, pose: Pose, ray_distance: float) -> np.ndarray:
    """Ten features for one slot, relative to the listener's current pose."""
    if not record.detected:
        return np.zeros(SLOT_FEATURE_SIZE, dtype=np.float32)
    dx = record.position[0] - pose.x
    dz = record.position[2] - pose.z
    dist = math.hypot(dx, dz)
    if dist > 0.001:
        local_x, local_z = to_local((dx / dist, dz / dist), pose.heading)
    else:
        local_x, local_z = 0.0, 0.0
    return np.concatenate(
        [
            one_hot(3, record.color_index),
            one_hot(3, record.shape_index),
            np.array(
                [
                    1.0,
                    np.clip(local_x, -1.0, 1.0),
                    np.clip(local_z, -1.0, 1.0),
                    np.clip(dist / ray_distance, 0.0, 1.0),
                ],
                dtype=np.float32,
            ),
        ]
    )


def build_listener_observation(
    records: Sequence[PerceptionRecord],
    pose: Pose,
    token: int,
    config: EnvConfig,
    motion: MotionConfig,
) -> np.ndarray:
    parts = [slot_features(record, pose, config.ray_distance) for record in records]
    parts.append(
        np.array(
            [
                pose.forward_velocity / motion.move_speed,
                pose.angular_velocity / motion.rotate_speed,
            ],
            dtype=np.float32,
        )
    )
    parts.append(one_hot(config.vocab_size, token))
    return np.concatenate(parts).astype(np.float32, copy=False)


def build_speaker_observation(rule: Rule, token: int, vocab_size: int) -> np.ndarray:
    return np.concatenate(
        [
            one_hot(3, int(rule.target_color)),
            one_hot(3, int(rule.target_shape)),
            np.array([1.0 if rule.require_no_red else 0.0], dtype=np.float32),
            one_hot(vocab_size, token),
        ]
    ).astype(np.float32, copy=False)
