"""Rule sampling and correct-slot resolution.

The correct slot is the *first* slot (in index order) whose color and shape
both equal the rule's targets, unless ``require_no_red`` is set and any slot
is red, in which case no slot is correct (-1). Sampling retries until a
correct slot exists or the retry budget is spent.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from random import Random

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.world import Color, Rule, Shape
from speaker_listener.errors import UnsatisfiableRuleError

logger = logging.getLogger(__name__)

SlotProperties = tuple[Color, Shape]

NO_CORRECT_SLOT = -1


@dataclass(frozen=True)
class RuleSample:
    """Outcome of one sample-with-retry call."""

    properties: tuple[SlotProperties, ...]
    rule: Rule
    correct_index: int
    attempts: int

    @property
    def degraded(self) -> bool:
        """True when no slot satisfies the rule (unwinnable episode)."""
        return self.correct_index == NO_CORRECT_SLOT


def resolve_correct_index(properties: Sequence[SlotProperties], rule: Rule) -> int:
    """Return the first slot index satisfying ``rule``, or -1."""
    if rule.require_no_red and any(color == Color.RED for color, _ in properties):
        return NO_CORRECT_SLOT
    for index, (color, shape) in enumerate(properties):
        if color == rule.target_color and shape == rule.target_shape:
            return index
    return NO_CORRECT_SLOT


class RuleOracle:
    """Samples slot properties and the hidden rule."""

    def __init__(self, config: EnvConfig) -> None:
        self.config = config

    def sample(self, rng: Random) -> tuple[tuple[SlotProperties, ...], Rule]:
        """Draw slot properties and a rule independently and uniformly."""
        properties = tuple(
            (Color(rng.randrange(len(Color))), Shape(rng.randrange(len(Shape))))
            for _ in range(self.config.slot_count)
        )
        rule = Rule(
            target_color=Color(rng.randrange(len(Color))),
            target_shape=Shape(rng.randrange(len(Shape))),
            require_no_red=rng.random() < 0.5,
        )
        return properties, rule

    def sample_with_retry(self, rng: Random, *, strict: bool = False) -> RuleSample:
        """Resample until a correct slot exists, up to ``max_resample_tries``.

        When the budget is exhausted the last draw is kept and the episode is
        degraded (``correct_index == -1``). In strict mode
        :exc:`UnsatisfiableRuleError` is raised instead.
        """
        tries = self.config.max_resample_tries
        properties, rule = self.sample(rng)
        correct_index = resolve_correct_index(properties, rule)
        attempts = 1
        while correct_index == NO_CORRECT_SLOT and attempts < tries:
            attempts += 1
            properties, rule = self.sample(rng)
            correct_index = resolve_correct_index(properties, rule)

        if correct_index == NO_CORRECT_SLOT:
            if strict:
                raise UnsatisfiableRuleError(attempts)
            logger.warning(
                "rule sampling exhausted %d attempts; episode proceeds without a correct slot",
                attempts,
            )
        return RuleSample(
            properties=properties,
            rule=rule,
            correct_index=correct_index,
            attempts=attempts,
        )
