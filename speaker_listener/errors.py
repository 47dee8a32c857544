"""Error taxonomy for the environment core.

Only ``ConfigurationError`` is fatal. Rule and placement exhaustion are
raised solely in strict mode; the episode controller degrades and logs
instead.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid configuration detected at construction time."""


class UnsatisfiableRuleError(RuntimeError):
    """Rule sampling exhausted its retry budget without a correct slot."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"no resolvable correct slot after {attempts} sampling attempts")
        self.attempts = attempts


class PlacementFailure(RuntimeError):
    """Separation-constrained placement exhausted its budget for a slot."""

    def __init__(self, slot_index: int, attempts: int) -> None:
        super().__init__(
            f"slot {slot_index} could not be placed with minimum separation "
            f"after {attempts} attempts"
        )
        self.slot_index = slot_index
        self.attempts = attempts


class EpisodeStateError(RuntimeError):
    """Operation invoked in a phase that does not allow it."""
