"""Tests for rule sampling and correct-slot resolution."""

from __future__ import annotations

import logging
from random import Random

import pytest

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.rules import (
    NO_CORRECT_SLOT,
    RuleOracle,
    SlotProperties,
    resolve_correct_index,
)
from speaker_listener.domain.world import Color, Rule, Shape
from speaker_listener.errors import UnsatisfiableRuleError

MIXED: tuple[SlotProperties, ...] = (
    (Color.RED, Shape.SQUARE),
    (Color.GREEN, Shape.CIRCLE),
    (Color.BLUE, Shape.TRIANGLE),
)


class _FixedOracle(RuleOracle):
    """Always draws the same unsatisfiable layout."""

    def sample(self, rng: Random) -> tuple[tuple[SlotProperties, ...], Rule]:
        return MIXED, Rule(Color.GREEN, Shape.SQUARE, require_no_red=False)


class TestResolveCorrectIndex:
    def test_matching_slot_is_correct(self) -> None:
        rule = Rule(Color.GREEN, Shape.CIRCLE, require_no_red=False)
        assert resolve_correct_index(MIXED, rule) == 1

    def test_require_no_red_with_red_present(self) -> None:
        rule = Rule(Color.GREEN, Shape.CIRCLE, require_no_red=True)
        assert resolve_correct_index(MIXED, rule) == NO_CORRECT_SLOT

    def test_require_no_red_without_red(self) -> None:
        properties = (
            (Color.BLUE, Shape.SQUARE),
            (Color.GREEN, Shape.CIRCLE),
            (Color.BLUE, Shape.TRIANGLE),
        )
        rule = Rule(Color.BLUE, Shape.TRIANGLE, require_no_red=True)
        assert resolve_correct_index(properties, rule) == 2

    def test_no_match(self) -> None:
        rule = Rule(Color.RED, Shape.TRIANGLE, require_no_red=False)
        assert resolve_correct_index(MIXED, rule) == NO_CORRECT_SLOT

    def test_first_match_wins_on_duplicates(self) -> None:
        properties = (
            (Color.BLUE, Shape.CIRCLE),
            (Color.GREEN, Shape.SQUARE),
            (Color.GREEN, Shape.SQUARE),
        )
        rule = Rule(Color.GREEN, Shape.SQUARE, require_no_red=False)
        assert resolve_correct_index(properties, rule) == 1


class TestRuleOracle:
    def test_sample_shapes(self) -> None:
        oracle = RuleOracle(EnvConfig())
        properties, rule = oracle.sample(Random(0))
        assert len(properties) == 3
        assert all(isinstance(c, Color) and isinstance(s, Shape) for c, s in properties)
        assert isinstance(rule.require_no_red, bool)

    def test_same_seed_same_draw(self) -> None:
        oracle = RuleOracle(EnvConfig())
        assert oracle.sample(Random(7)) == oracle.sample(Random(7))

    def test_retry_result_is_consistent(self) -> None:
        oracle = RuleOracle(EnvConfig())
        rng = Random(3)
        for _ in range(100):
            sample = oracle.sample_with_retry(rng)
            assert sample.correct_index == resolve_correct_index(sample.properties, sample.rule)
            assert 1 <= sample.attempts <= EnvConfig().max_resample_tries

    def test_degraded_episodes_are_rare(self) -> None:
        oracle = RuleOracle(EnvConfig())
        rng = Random(11)
        degraded = sum(oracle.sample_with_retry(rng).degraded for _ in range(500))
        assert degraded / 500 < 0.01

    def test_exhausted_budget_degrades(self, caplog: pytest.LogCaptureFixture) -> None:
        oracle = _FixedOracle(EnvConfig(max_resample_tries=4))
        with caplog.at_level(logging.WARNING, logger="speaker_listener.domain.rules"):
            sample = oracle.sample_with_retry(Random(0))
        assert sample.degraded
        assert sample.correct_index == NO_CORRECT_SLOT
        assert sample.attempts == 4
        assert "exhausted" in caplog.text

    def test_strict_mode_raises(self) -> None:
        oracle = _FixedOracle(EnvConfig(max_resample_tries=2))
        with pytest.raises(UnsatisfiableRuleError) as info:
            oracle.sample_with_retry(Random(0), strict=True)
        assert info.value.attempts == 2
