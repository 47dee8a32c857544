"""Shared reward shaping for the speaker and listener.

Per tick, in order: the step penalty (both agents), the speak penalty (both
agents, when the channel triggers it), then any press outcome. Only an
in-range press resolves against the correct slot and ends the episode; an
out-of-range press is a listener-only shaping penalty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from speaker_listener.config.types import EnvConfig


class AgentRole(Enum):
    SPEAKER = "speaker"
    LISTENER = "listener"


class PressOutcome(Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    OUT_OF_RANGE = "out_of_range"

    @property
    def terminal(self) -> bool:
        return self is not PressOutcome.OUT_OF_RANGE


@dataclass
class RewardLedger:
    """Reward accumulator for one agent."""

    total: float = 0.0
    pending: float = 0.0
    """Reward accrued since the last ``drain``."""
    history: list[float] = field(default_factory=list)

    def add(self, amount: float) -> None:
        self.total += amount
        self.pending += amount

    def drain(self) -> float:
        """Return and clear the reward accrued since the last drain."""
        amount = self.pending
        self.history.append(amount)
        self.pending = 0.0
        return amount


class RewardEngine:
    def __init__(self, config: EnvConfig) -> None:
        self.config = config
        self.ledgers: dict[AgentRole, RewardLedger] = {role: RewardLedger() for role in AgentRole}

    def reset(self) -> None:
        self.ledgers = {role: RewardLedger() for role in AgentRole}

    def total(self, role: AgentRole) -> float:
        return self.ledgers[role].total

    def add_shared(self, amount: float) -> None:
        for ledger in self.ledgers.values():
            ledger.add(amount)

    def apply_step_penalty(self) -> None:
        self.add_shared(self.config.step_penalty)

    def apply_speak_penalty(self) -> None:
        self.add_shared(self.config.speak_penalty)

    def resolve_press(self, slot_index: int, distance: float, correct_index: int) -> PressOutcome:
        """Score a press attempt made from ``distance`` away from the slot."""
        if distance > self.config.press_distance:
            self.ledgers[AgentRole.LISTENER].add(self.config.miss_penalty)
            return PressOutcome.OUT_OF_RANGE
        if slot_index == correct_index:
            self.add_shared(self.config.correct_reward)
            return PressOutcome.CORRECT
        self.add_shared(self.config.wrong_reward)
        return PressOutcome.WRONG

    def apply_timeout_penalty(self) -> None:
        self.ledgers[AgentRole.LISTENER].add(self.config.timeout_penalty)

    def drain(self) -> dict[AgentRole, float]:
        """Per-agent reward accrued this tick."""
        return {role: ledger.drain() for role, ledger in self.ledgers.items()}
