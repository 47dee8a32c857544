"""Centralized domain constants for the speaker/listener environment.

Defaults that appear across multiple modules are defined here. Consuming
modules should import from this module rather than defining their own
inline literals.
"""

from __future__ import annotations

SLOT_COUNT = 3
"""Number of candidate objects in every episode."""

COLOR_NAMES: tuple[str, ...] = ("red", "green", "blue")
"""Color vocabulary, indexed by ``Color`` value."""

SHAPE_NAMES: tuple[str, ...] = ("square", "circle", "triangle")
"""Shape vocabulary, indexed by ``Shape`` value."""

MAX_RESAMPLE_TRIES = 50
"""Rule/slot resampling attempts before accepting a degraded episode."""

PLACEMENT_ATTEMPTS = 200
"""Random position draws per slot before giving up on separation."""

STEP_BUDGET = 300
"""Ticks before an episode is forcibly terminated."""

VOCAB_SIZE = 8
"""Default number of discrete tokens on the communication channel."""

SILENCE_TOKEN = 0
"""Token value exempt from the speak penalty."""

RULE_CODE_COUNT = 18
"""Distinct rule codes; smaller vocabularies wrap codes and cannot be decoded exactly."""

MOVE_ACTION_COUNT = 5
"""none, forward, backward, rotate-left, rotate-right."""

PRESS_ACTION_COUNT = 4
"""none, press slot 0, press slot 1, press slot 2."""

SLOT_FEATURE_SIZE = 10
"""Per-slot listener features: color(3) + shape(3) + detected(1) + dir(2) + dist(1)."""

LISTENER_OBS_BASE_SIZE = SLOT_COUNT * SLOT_FEATURE_SIZE + 2
"""Listener observation size excluding the token one-hot."""

SPEAKER_OBS_BASE_SIZE = 7
"""Speaker observation size excluding the token one-hot."""

MIN_DIRECT_QUERY_DISTANCE = 0.1
"""Direct queries aimed at points closer than this are skipped."""
