"""Simulation layer: episode state machine, observations, action sources, batch runs."""

from speaker_listener.simulation.engine import (
    EpisodeResult,
    play_episode,
    run_episodes,
    summarize_results,
)
from speaker_listener.simulation.episode import (
    EpisodeController,
    ListenerAction,
    ListenerHandle,
    Phase,
    SpeakerHandle,
    TerminationReason,
    TickResult,
)
from speaker_listener.simulation.observations import (
    build_listener_observation,
    build_speaker_observation,
    listener_observation_size,
    speaker_observation_size,
)

__all__ = [
    "EpisodeController",
    "EpisodeResult",
    "ListenerAction",
    "ListenerHandle",
    "Phase",
    "SpeakerHandle",
    "TerminationReason",
    "TickResult",
    "build_listener_observation",
    "build_speaker_observation",
    "listener_observation_size",
    "play_episode",
    "run_episodes",
    "speaker_observation_size",
    "summarize_results",
]
