"""Interchangeable action sources at the policy boundary.

A learning system, a scripted baseline, or a replayed/manual action stream
all plug in through the same ``act`` signature. None of these live inside
the episode core; the controller only ever sees the resulting actions.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from random import Random
from typing import Protocol

import numpy as np

from speaker_listener.config.constants import PRESS_ACTION_COUNT
from speaker_listener.domain.motion import MoveCommand
from speaker_listener.domain.world import Color, Rule, Shape, to_local
from speaker_listener.simulation.episode import ListenerAction, ListenerHandle, SpeakerHandle


class SpeakerPolicy(Protocol):
    def act(self, observation: np.ndarray, handle: SpeakerHandle) -> int: ...


class ListenerPolicy(Protocol):
    def act(self, observation: np.ndarray, handle: ListenerHandle) -> ListenerAction: ...


# ---------------------------------------------------------------------------
# Rule encoding shared by the scripted speaker and listener
# ---------------------------------------------------------------------------


def encode_rule(rule: Rule, vocab_size: int) -> int:
    """``color*6 + shape*2 + require_no_red``, wrapped into the vocabulary."""
    code = int(rule.target_color) * 6 + int(rule.target_shape) * 2 + int(rule.require_no_red)
    return code % vocab_size


def decode_rule(token: int) -> Rule:
    """Inverse of :func:`encode_rule`; exact only when ``vocab_size >= 18``."""
    return Rule(
        target_color=Color((token // 6) % 3),
        target_shape=Shape((token % 6) // 2),
        require_no_red=bool(token % 2),
    )


# ---------------------------------------------------------------------------
# Speakers
# ---------------------------------------------------------------------------


class RuleEncodingSpeaker:
    def __init__(self, vocab_size: int) -> None:
        self.vocab_size = vocab_size

    def act(self, observation: np.ndarray, handle: SpeakerHandle) -> int:
        return encode_rule(handle.get_rule(), self.vocab_size)


class RandomSpeaker:
    def __init__(self, vocab_size: int, rng: Random | None = None) -> None:
        self.vocab_size = vocab_size
        self.rng = rng or Random()

    def act(self, observation: np.ndarray, handle: SpeakerHandle) -> int:
        return self.rng.randrange(self.vocab_size)


class SilentSpeaker:
    def __init__(self, silence_token: int = 0) -> None:
        self.silence_token = silence_token

    def act(self, observation: np.ndarray, handle: SpeakerHandle) -> int:
        return self.silence_token


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------


class RandomListener:
    def __init__(self, rng: Random | None = None, press_probability: float = 0.05) -> None:
        self.rng = rng or Random()
        self.press_probability = press_probability

    def act(self, observation: np.ndarray, handle: ListenerHandle) -> ListenerAction:
        move = MoveCommand(self.rng.randrange(len(MoveCommand)))
        press = 0
        if self.rng.random() < self.press_probability:
            press = self.rng.randrange(1, PRESS_ACTION_COUNT)
        return ListenerAction(move=move, press=press)


class GreedyListener:
    """Decodes the rule token, turns toward the matching detected slot and presses.

    Idles while the channel is silent and rotates in place while no detected
    slot matches the decoded rule.
    """

    def __init__(
        self,
        press_distance: float,
        silence_token: int = 0,
        turn_tolerance: float = 15.0,
    ) -> None:
        self.press_distance = press_distance
        self.silence_token = silence_token
        self.turn_tolerance = turn_tolerance

    def act(self, observation: np.ndarray, handle: ListenerHandle) -> ListenerAction:
        token = handle.get_token()
        if token == self.silence_token:
            return ListenerAction()
        rule = decode_rule(token)
        records = handle.get_perception()
        target = next(
            (
                index
                for index, record in enumerate(records)
                if record.detected
                and record.color_index == int(rule.target_color)
                and record.shape_index == int(rule.target_shape)
            ),
            None,
        )
        if target is None:
            return ListenerAction(move=MoveCommand.ROTATE_RIGHT)

        pose = handle.get_pose()
        dx = records[target].position[0] - pose.x
        dz = records[target].position[2] - pose.z
        distance = math.hypot(dx, dz)
        if distance <= self.press_distance:
            return ListenerAction(press=target + 1)

        local_x, local_z = to_local((dx / distance, dz / distance), pose.heading)
        bearing = math.degrees(math.atan2(local_x, local_z))
        if bearing > self.turn_tolerance:
            return ListenerAction(move=MoveCommand.ROTATE_RIGHT)
        if bearing < -self.turn_tolerance:
            return ListenerAction(move=MoveCommand.ROTATE_LEFT)
        return ListenerAction(move=MoveCommand.FORWARD)


class ScriptedListener:
    """Replays a fixed action stream, then idles. Stands in for manual control."""

    def __init__(self, actions: Iterable[ListenerAction]) -> None:
        self._actions = list(actions)
        self._cursor = 0

    def act(self, observation: np.ndarray, handle: ListenerHandle) -> ListenerAction:
        if self._cursor >= len(self._actions):
            return ListenerAction()
        action = self._actions[self._cursor]
        self._cursor += 1
        return action
