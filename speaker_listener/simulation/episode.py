"""Episode state machine: reset, lock-step tick, and shared termination.

The controller is the sole owner of the rule, the slot set, the channel
token and the episode phase. Agents interact through narrow handles that
read perception/token data and stage requests; staged requests are applied
exactly once, in a fixed order, by the next :meth:`EpisodeController.tick`.

Tick order: step penalty, speaker token (speak penalty), listener movement,
listener press, step count, periodic scan, step-budget check.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from random import Random

import numpy as np

from speaker_listener.config.types import EnvConfig, MotionConfig
from speaker_listener.domain.channel import CommunicationChannel
from speaker_listener.domain.motion import KinematicIntegrator, MotionIntegrator, MoveCommand, Pose
from speaker_listener.domain.perception import (
    PerceptionRecord,
    PerceptionScanner,
    RayCaster,
    ScanStats,
)
from speaker_listener.domain.rewards import AgentRole, PressOutcome, RewardEngine
from speaker_listener.domain.rules import RuleOracle, RuleSample, resolve_correct_index
from speaker_listener.domain.spawn import PlacementResult, SpawnPlanner
from speaker_listener.domain.world import Rule, Slot, planar_distance
from speaker_listener.errors import EpisodeStateError
from speaker_listener.simulation.observations import (
    build_listener_observation,
    build_speaker_observation,
)

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    TERMINATED = "terminated"


class TerminationReason(Enum):
    CORRECT_PRESS = "correct_press"
    WRONG_PRESS = "wrong_press"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ListenerAction:
    """Discrete listener action: a movement branch and a press branch.

    ``press`` is 0 for no press, or ``slot + 1``.
    """

    move: MoveCommand = MoveCommand.NONE
    press: int = 0

    @property
    def press_slot(self) -> int | None:
        return self.press - 1 if self.press > 0 else None

    @classmethod
    def from_vector(cls, values: Sequence[int]) -> ListenerAction:
        """Build from a ``[move, press]`` discrete action vector."""
        if len(values) != 2:
            raise ValueError("listener action vector must have exactly 2 branches")
        return cls(move=MoveCommand(int(values[0])), press=int(values[1]))


@dataclass(frozen=True)
class TickResult:
    step: int
    rewards: dict[AgentRole, float]
    phase: Phase
    token: int
    press_outcome: PressOutcome | None = None
    termination: TerminationReason | None = None
    scan: ScanStats | None = None

    @property
    def done(self) -> bool:
        return self.phase is Phase.TERMINATED


class ListenerHandle:
    """Read/request view of the episode for the listener."""

    def __init__(self, controller: EpisodeController) -> None:
        self._controller = controller

    def get_perception(self) -> tuple[PerceptionRecord, ...]:
        return self._controller.scanner.records

    def get_token(self) -> int:
        return self._controller.channel.token

    def get_pose(self) -> Pose:
        return self._controller.pose

    def move(self, command: MoveCommand) -> None:
        self._controller._staged_move = MoveCommand(command)

    def press(self, slot_index: int) -> None:
        self._controller._staged_press = slot_index + 1


class SpeakerHandle:
    """Read/request view of the episode for the speaker."""

    def __init__(self, controller: EpisodeController) -> None:
        self._controller = controller

    def get_rule(self) -> Rule:
        return self._controller.rule

    def get_token(self) -> int:
        return self._controller.channel.token

    def set_token(self, token: int) -> None:
        self._controller._staged_token = int(token)


class EpisodeController:
    """Owns all episode state and applies both agents' actions once per tick."""

    def __init__(
        self,
        config: EnvConfig | None = None,
        motion_config: MotionConfig | None = None,
        *,
        integrator: MotionIntegrator | None = None,
        caster: RayCaster | None = None,
        rng: Random | None = None,
    ) -> None:
        self.config = config or EnvConfig()
        self.motion_config = motion_config or MotionConfig()
        self.integrator: MotionIntegrator = integrator or KinematicIntegrator(self.motion_config)
        self.rng = rng or Random()

        self.oracle = RuleOracle(self.config)
        self.planner = SpawnPlanner(self.config)
        self.scanner = PerceptionScanner(self.config, caster)
        self.rewards = RewardEngine(self.config)
        self.channel = CommunicationChannel(self.config, self.rewards)

        self.slots: list[Slot] = [Slot(index=i) for i in range(self.config.slot_count)]
        self._rule: Rule | None = None
        self.phase = Phase.IDLE
        self.step_count = 0
        self.episode_index = -1
        self.pose = self.integrator.start_pose()
        self.termination: TerminationReason | None = None
        self.pressed_slot: int | None = None
        self.rule_sample: RuleSample | None = None
        self.placement: PlacementResult | None = None

        self._staged_move = MoveCommand.NONE
        self._staged_press = 0
        self._staged_token: int | None = None

        self.listener = ListenerHandle(self)
        self.speaker = SpeakerHandle(self)

    # -- read-only views ----------------------------------------------------

    @property
    def rule(self) -> Rule:
        if self._rule is None:
            raise EpisodeStateError("no rule has been sampled; call reset() first")
        return self._rule

    @property
    def correct_index(self) -> int:
        """Derived on demand from the current slots and rule."""
        return resolve_correct_index([(s.color, s.shape) for s in self.slots], self.rule)

    @property
    def token(self) -> int:
        return self.channel.token

    def listener_observation(self) -> np.ndarray:
        return build_listener_observation(
            self.scanner.records,
            self.pose,
            self.channel.token,
            self.config,
            self.motion_config,
        )

    def speaker_observation(self) -> np.ndarray:
        return build_speaker_observation(self.rule, self.channel.token, self.config.vocab_size)

    # -- lifecycle ----------------------------------------------------------

    def reset(self) -> None:
        """Start a new episode from Idle or Terminated (or restart an Active one)."""
        sample = self.oracle.sample_with_retry(self.rng)
        for slot, (color, shape) in zip(self.slots, sample.properties, strict=True):
            slot.color = color
            slot.shape = shape
        self._rule = sample.rule
        self.rule_sample = sample
        self.placement = self.planner.place(self.slots, self.rng)

        self.rewards.reset()
        self.channel.reset()
        self.scanner.clear()
        self.pose = self.integrator.start_pose()
        self.step_count = 0
        self.termination = None
        self.pressed_slot = None
        self._clear_staged()
        self.episode_index += 1
        self.phase = Phase.ACTIVE

        self.scanner.scan(self.pose.origin, self.pose.heading, self.slots)
        logger.debug(
            "episode %d reset: rule=%s correct_index=%d rule_attempts=%d",
            self.episode_index,
            self._rule,
            sample.correct_index,
            sample.attempts,
        )

    def tick(
        self,
        listener_action: ListenerAction | None = None,
        speaker_token: int | None = None,
    ) -> TickResult:
        """Apply one lock-step round; explicit arguments override staged requests."""
        if self.phase is not Phase.ACTIVE:
            raise EpisodeStateError(
                f"tick() requires an active episode, phase is {self.phase.value}"
            )

        if listener_action is None:
            listener_action = ListenerAction(move=self._staged_move, press=self._staged_press)
        if speaker_token is None:
            speaker_token = (
                self._staged_token if self._staged_token is not None else self.config.silence_token
            )
        self._clear_staged()

        self.rewards.apply_step_penalty()
        self.channel.set_token(speaker_token)
        self.pose = self.integrator.step(self.pose, listener_action.move)

        outcome: PressOutcome | None = None
        slot_index = listener_action.press_slot
        if slot_index is not None and 0 <= slot_index < len(self.slots):
            outcome = self._press(slot_index)

        self.step_count += 1

        scan: ScanStats | None = None
        if self.phase is Phase.ACTIVE:
            scan = self.scanner.advance(self.pose.origin, self.pose.heading, self.slots)
            if self.step_count >= self.config.step_budget:
                self.rewards.apply_timeout_penalty()
                self._terminate(TerminationReason.TIMEOUT)

        return TickResult(
            step=self.step_count,
            rewards=self.rewards.drain(),
            phase=self.phase,
            token=self.channel.token,
            press_outcome=outcome,
            termination=self.termination,
            scan=scan,
        )

    # -- internals ----------------------------------------------------------

    def _press(self, slot_index: int) -> PressOutcome:
        listener_position = (self.pose.x, self.config.button_y, self.pose.z)
        distance = planar_distance(listener_position, self.slots[slot_index].position)
        outcome = self.rewards.resolve_press(slot_index, distance, self.correct_index)
        if outcome.terminal:
            self.pressed_slot = slot_index
            self._terminate(
                TerminationReason.CORRECT_PRESS
                if outcome is PressOutcome.CORRECT
                else TerminationReason.WRONG_PRESS
            )
        return outcome

    def _terminate(self, reason: TerminationReason) -> None:
        self.phase = Phase.TERMINATED
        self.termination = reason
        logger.debug(
            "episode %d terminated at step %d: %s",
            self.episode_index,
            self.step_count,
            reason.value,
        )

    def _clear_staged(self) -> None:
        self._staged_move = MoveCommand.NONE
        self._staged_press = 0
        self._staged_token = None
