"""Tests for the episode state machine."""

from __future__ import annotations

from random import Random

import pytest

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.motion import MoveCommand, Pose
from speaker_listener.domain.rewards import AgentRole, PressOutcome
from speaker_listener.domain.world import Color, Rule, Shape
from speaker_listener.errors import EpisodeStateError
from speaker_listener.simulation.episode import (
    EpisodeController,
    ListenerAction,
    Phase,
    TerminationReason,
)

LISTENER = AgentRole.LISTENER
SPEAKER = AgentRole.SPEAKER


def _arranged(config: EnvConfig | None = None, pose: Pose | None = None) -> EpisodeController:
    """Reset, then pin a known layout: red square, green circle, blue triangle."""
    controller = EpisodeController(config, rng=Random(0))
    controller.reset()
    layout = (
        (Color.RED, Shape.SQUARE, -2.0),
        (Color.GREEN, Shape.CIRCLE, 0.0),
        (Color.BLUE, Shape.TRIANGLE, 2.0),
    )
    for slot, (color, shape, x) in zip(controller.slots, layout, strict=True):
        slot.color = color
        slot.shape = shape
        slot.position = (x, 0.5, 0.0)
    controller._rule = Rule(Color.GREEN, Shape.CIRCLE, require_no_red=False)
    if pose is not None:
        controller.pose = pose
    return controller


class TestLifecycle:
    def test_starts_idle(self) -> None:
        controller = EpisodeController(rng=Random(0))
        assert controller.phase is Phase.IDLE
        with pytest.raises(EpisodeStateError):
            controller.tick()
        with pytest.raises(EpisodeStateError):
            _ = controller.rule

    def test_reset_activates(self) -> None:
        controller = EpisodeController(rng=Random(0))
        controller.reset()
        assert controller.phase is Phase.ACTIVE
        assert controller.step_count == 0
        assert controller.token == controller.config.silence_token
        assert controller.episode_index == 0
        assert controller.correct_index in (-1, 0, 1, 2)
        assert controller.correct_index == controller.rule_sample.correct_index
        assert controller.scanner.scan_count == 1

    def test_same_seed_same_episode(self) -> None:
        a = EpisodeController(rng=Random(42))
        b = EpisodeController(rng=Random(42))
        a.reset()
        b.reset()
        assert a.rule == b.rule
        assert [s.position for s in a.slots] == [s.position for s in b.slots]

    def test_tick_after_termination_raises(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller.tick(ListenerAction(press=2))
        assert controller.phase is Phase.TERMINATED
        with pytest.raises(EpisodeStateError):
            controller.tick()

    def test_reset_after_termination(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller.tick(ListenerAction(press=2))
        controller.reset()
        assert controller.phase is Phase.ACTIVE
        assert controller.termination is None
        assert controller.pressed_slot is None
        assert controller.episode_index == 1
        assert controller.rewards.total(LISTENER) == 0.0


class TestPress:
    def test_correct_press_terminates_with_shared_reward(self) -> None:
        config = EnvConfig()
        controller = _arranged(config, Pose(x=0.0, z=-1.0))
        assert controller.correct_index == 1
        result = controller.tick(ListenerAction(press=2))
        assert result.press_outcome is PressOutcome.CORRECT
        assert result.termination is TerminationReason.CORRECT_PRESS
        assert result.done
        expected = config.step_penalty + config.correct_reward
        assert result.rewards[LISTENER] == pytest.approx(expected)
        assert result.rewards[SPEAKER] == pytest.approx(expected)
        assert controller.pressed_slot == 1

    @pytest.mark.parametrize(("slot", "x"), [(0, -2.0), (2, 2.0)])
    def test_wrong_press_terminates(self, slot: int, x: float) -> None:
        config = EnvConfig()
        controller = _arranged(config, Pose(x=x, z=-1.0))
        result = controller.tick(ListenerAction(press=slot + 1))
        assert result.press_outcome is PressOutcome.WRONG
        assert result.termination is TerminationReason.WRONG_PRESS
        assert result.done
        expected = config.step_penalty + config.wrong_reward
        assert result.rewards[SPEAKER] == pytest.approx(expected)
        assert result.rewards[LISTENER] == pytest.approx(expected)
        assert controller.pressed_slot == slot

    def test_out_of_range_press_continues(self) -> None:
        config = EnvConfig()
        controller = _arranged(config, Pose(x=0.0, z=-4.0))
        result = controller.tick(ListenerAction(press=2))
        assert result.press_outcome is PressOutcome.OUT_OF_RANGE
        assert result.phase is Phase.ACTIVE
        assert result.rewards[LISTENER] == pytest.approx(config.step_penalty + config.miss_penalty)
        assert result.rewards[SPEAKER] == pytest.approx(config.step_penalty)

    def test_require_no_red_makes_every_press_wrong(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller._rule = Rule(Color.GREEN, Shape.CIRCLE, require_no_red=True)
        assert controller.correct_index == -1
        result = controller.tick(ListenerAction(press=2))
        assert result.termination is TerminationReason.WRONG_PRESS

    def test_press_uses_slots_at_press_time(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller.slots[1].color = Color.BLUE
        controller.slots[2].color = Color.GREEN
        controller.slots[2].shape = Shape.CIRCLE
        assert controller.correct_index == 2
        result = controller.tick(ListenerAction(press=2))
        assert result.termination is TerminationReason.WRONG_PRESS


class TestTimeout:
    def test_budget_exhaustion_penalizes_listener(self) -> None:
        config = EnvConfig(step_budget=5)
        controller = _arranged(config)
        for _ in range(4):
            assert not controller.tick().done
        result = controller.tick()
        assert result.termination is TerminationReason.TIMEOUT
        assert result.step == 5
        assert controller.rewards.total(LISTENER) == pytest.approx(
            5 * config.step_penalty + config.timeout_penalty
        )
        assert controller.rewards.total(SPEAKER) == pytest.approx(5 * config.step_penalty)

    def test_press_on_last_tick_is_not_a_timeout(self) -> None:
        config = EnvConfig(step_budget=1)
        controller = _arranged(config, Pose(x=0.0, z=-1.0))
        result = controller.tick(ListenerAction(press=2))
        assert result.termination is TerminationReason.CORRECT_PRESS
        assert controller.rewards.total(LISTENER) == pytest.approx(
            config.step_penalty + config.correct_reward
        )


class TestTickOrder:
    def test_speaker_token_is_clamped_and_charged(self) -> None:
        config = EnvConfig()
        controller = _arranged(config)
        result = controller.tick(speaker_token=99)
        assert result.token == config.vocab_size - 1
        assert result.rewards[SPEAKER] == pytest.approx(config.step_penalty + config.speak_penalty)
        assert result.rewards[LISTENER] == pytest.approx(config.step_penalty + config.speak_penalty)

    def test_movement_applies_before_press(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-2.5))
        # 2.5 away before moving, 1.9 after one forward step.
        result = controller.tick(ListenerAction(move=MoveCommand.FORWARD, press=2))
        assert result.press_outcome is PressOutcome.CORRECT

    def test_invalid_press_index_is_ignored(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        result = controller.tick(ListenerAction(press=9))
        assert result.press_outcome is None
        assert result.phase is Phase.ACTIVE

    def test_periodic_scan(self) -> None:
        controller = _arranged(EnvConfig(scan_period_ticks=2))
        assert controller.tick().scan is None
        assert controller.tick().scan is not None
        assert controller.scanner.scan_count == 2


class TestHandles:
    def test_staged_requests_apply_once(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-4.0))
        controller.speaker.set_token(3)
        controller.listener.move(MoveCommand.FORWARD)
        result = controller.tick()
        assert result.token == 3
        assert controller.pose.z == pytest.approx(-3.4)
        # Nothing staged: the channel falls back to silence.
        assert controller.tick().token == controller.config.silence_token

    def test_staged_press(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller.listener.press(1)
        assert controller.tick().termination is TerminationReason.CORRECT_PRESS

    def test_explicit_arguments_override_staged(self) -> None:
        controller = _arranged(pose=Pose(x=0.0, z=-1.0))
        controller.listener.press(1)
        result = controller.tick(ListenerAction())
        assert result.press_outcome is None

    def test_read_views(self) -> None:
        controller = _arranged()
        assert controller.speaker.get_rule() == controller.rule
        assert controller.listener.get_token() == controller.token
        assert controller.listener.get_pose() is controller.pose
        assert len(controller.listener.get_perception()) == 3


class TestObservations:
    def test_sizes(self) -> None:
        controller = EpisodeController(EnvConfig(vocab_size=8), rng=Random(0))
        controller.reset()
        assert controller.listener_observation().shape == (40,)
        assert controller.speaker_observation().shape == (15,)


class TestListenerAction:
    def test_from_vector(self) -> None:
        action = ListenerAction.from_vector([1, 3])
        assert action.move is MoveCommand.FORWARD
        assert action.press_slot == 2

    def test_from_vector_rejects_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            ListenerAction.from_vector([1])
