"""Single-slot discrete communication channel."""

from __future__ import annotations

from speaker_listener.config.types import EnvConfig
from speaker_listener.domain.rewards import RewardEngine


def clamp_token(value: int, vocab_size: int) -> int:
    return max(0, min(vocab_size - 1, int(value)))


class CommunicationChannel:
    """Holds the current token; last write wins, nothing is buffered.

    Every write of a non-silent token charges the speak penalty to both
    agents, even when the token is unchanged from the previous tick.
    """

    def __init__(self, config: EnvConfig, rewards: RewardEngine) -> None:
        self.config = config
        self.rewards = rewards
        self._token = config.silence_token

    @property
    def token(self) -> int:
        return self._token

    @property
    def silent(self) -> bool:
        return self._token == self.config.silence_token

    def reset(self) -> None:
        self._token = self.config.silence_token

    def set_token(self, value: int) -> int:
        self._token = clamp_token(value, self.config.vocab_size)
        if self._token != self.config.silence_token:
            self.rewards.apply_speak_penalty()
        return self._token
