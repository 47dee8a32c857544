"""Batch episode runner with Parquet persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from random import Random

import pyarrow as pa
import pyarrow.parquet as pq

from speaker_listener.config.constants import RULE_CODE_COUNT
from speaker_listener.config.types import ListenerKind, RunConfig, SpeakerKind
from speaker_listener.domain.rewards import AgentRole
from speaker_listener.errors import EpisodeStateError
from speaker_listener.io.paths import (
    episode_log_path,
    episode_render_path,
    logs_dir,
    run_summary_path,
)
from speaker_listener.io.schemas import (
    EPISODE_LOG_SCHEMA,
    EPISODE_LOG_SCHEMA_VERSION,
    SUMMARY_OUTCOMES,
)
from speaker_listener.simulation.episode import EpisodeController
from speaker_listener.simulation.policies import (
    GreedyListener,
    ListenerPolicy,
    RandomListener,
    RandomSpeaker,
    RuleEncodingSpeaker,
    SilentSpeaker,
    SpeakerPolicy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EpisodeResult:
    """Outcome and bookkeeping for one played episode."""

    episode_id: str
    seed: int
    steps: int
    termination_reason: str
    correct_index: int
    pressed_slot: int | None
    speaker_return: float
    listener_return: float
    target_color: str
    target_shape: str
    require_no_red: bool
    rule_attempts: int
    degraded_rule: bool
    placement_failures: int
    scan_count: int
    ray_queries: int
    slots_detected: int

    @property
    def success(self) -> bool:
        return self.termination_reason == "correct_press"

    def to_row(self) -> dict[str, object]:
        return {
            "schema_version": EPISODE_LOG_SCHEMA_VERSION,
            "episode_id": self.episode_id,
            "seed": self.seed,
            "steps": self.steps,
            "termination_reason": self.termination_reason,
            "correct_index": self.correct_index,
            "pressed_slot": self.pressed_slot,
            "speaker_return": self.speaker_return,
            "listener_return": self.listener_return,
            "target_color": self.target_color,
            "target_shape": self.target_shape,
            "require_no_red": self.require_no_red,
            "rule_attempts": self.rule_attempts,
            "degraded_rule": self.degraded_rule,
            "placement_failures": self.placement_failures,
            "scan_count": self.scan_count,
            "ray_queries": self.ray_queries,
            "slots_detected": self.slots_detected,
        }


def build_speaker(kind: SpeakerKind, config: RunConfig, rng: Random) -> SpeakerPolicy:
    if kind is SpeakerKind.RULE_ENCODING:
        return RuleEncodingSpeaker(config.env.vocab_size)
    if kind is SpeakerKind.RANDOM:
        return RandomSpeaker(config.env.vocab_size, rng)
    return SilentSpeaker(config.env.silence_token)


def build_listener(kind: ListenerKind, config: RunConfig, rng: Random) -> ListenerPolicy:
    if kind is ListenerKind.GREEDY:
        return GreedyListener(config.env.press_distance, config.env.silence_token)
    return RandomListener(rng)


def play_episode(
    controller: EpisodeController,
    speaker: SpeakerPolicy,
    listener: ListenerPolicy,
) -> None:
    """Reset ``controller`` and tick until the episode terminates.

    Both policies decide from the observations taken before the tick, so the
    listener sees the speaker's token one tick after it is written.
    """
    controller.reset()
    while True:
        token = speaker.act(controller.speaker_observation(), controller.speaker)
        action = listener.act(controller.listener_observation(), controller.listener)
        if controller.tick(action, token).done:
            return


def _collect_result(controller: EpisodeController, episode_id: str, seed: int) -> EpisodeResult:
    sample = controller.rule_sample
    placement = controller.placement
    if sample is None or placement is None or controller.termination is None:
        raise EpisodeStateError("episode has not been played to termination")
    rule = controller.rule
    return EpisodeResult(
        episode_id=episode_id,
        seed=seed,
        steps=controller.step_count,
        termination_reason=controller.termination.value,
        correct_index=controller.correct_index,
        pressed_slot=controller.pressed_slot,
        speaker_return=controller.rewards.total(AgentRole.SPEAKER),
        listener_return=controller.rewards.total(AgentRole.LISTENER),
        target_color=rule.target_color.label,
        target_shape=rule.target_shape.label,
        require_no_red=rule.require_no_red,
        rule_attempts=sample.attempts,
        degraded_rule=sample.degraded,
        placement_failures=len(placement.failed_slots),
        scan_count=controller.scanner.scan_count,
        ray_queries=controller.scanner.total_ray_queries,
        slots_detected=controller.scanner.detected_count,
    )


def summarize_results(results: list[EpisodeResult]) -> dict[str, object]:
    """Aggregate outcome counts and mean returns for a batch."""
    n = len(results)
    counts = {
        outcome: sum(1 for r in results if r.termination_reason == outcome)
        for outcome in SUMMARY_OUTCOMES
    }
    summary: dict[str, object] = {"episodes": n, **counts}
    summary["success_rate"] = (counts["correct_press"] / n) if n else None
    summary["degraded_rules"] = sum(1 for r in results if r.degraded_rule)
    summary["placement_failures"] = sum(r.placement_failures for r in results)
    summary["mean_steps"] = (sum(r.steps for r in results) / n) if n else None
    summary["mean_listener_return"] = (sum(r.listener_return for r in results) / n) if n else None
    summary["mean_speaker_return"] = (sum(r.speaker_return for r in results) / n) if n else None
    return summary


def run_episodes(
    config: RunConfig,
    out_dir: Path | None = None,
    *,
    render: bool = False,
) -> list[EpisodeResult]:
    """Play ``config.n_episodes`` seeded episodes and optionally persist them.

    Episode ``i`` uses seed ``config.seed + i`` for the environment, so any
    single episode can be replayed in isolation. With ``out_dir`` set, the
    episode log is written to ``logs/episode_log.parquet`` and a JSON summary
    next to it; ``render`` additionally writes the first episode's start
    layout under ``renders/``.
    """
    if render and out_dir is None:
        raise ValueError("render requires out_dir")
    if (
        config.speaker is SpeakerKind.RULE_ENCODING
        and config.listener is ListenerKind.GREEDY
        and config.env.vocab_size < RULE_CODE_COUNT
    ):
        logger.warning(
            "vocab_size=%d wraps rule codes; the greedy listener will misread some rules "
            "(use at least %d)",
            config.env.vocab_size,
            RULE_CODE_COUNT,
        )
    render_dir = Path(out_dir) if render and out_dir is not None else None

    policy_rng = Random(config.seed)
    speaker = build_speaker(config.speaker, config, policy_rng)
    listener = build_listener(config.listener, config, policy_rng)

    results: list[EpisodeResult] = []
    for i in range(config.n_episodes):
        seed = config.seed + i
        episode_id = f"ep{i:04d}_s{seed}"
        controller = EpisodeController(config.env, config.motion, rng=Random(seed))
        if render_dir is not None and i == 0:
            from speaker_listener.viz.render import render_episode_layout

            controller.reset()
            render_episode_layout(controller, episode_render_path(render_dir, episode_id))
            # Replay from the same seed so the rendered layout is the one played.
            controller = EpisodeController(config.env, config.motion, rng=Random(seed))
        play_episode(controller, speaker, listener)
        results.append(_collect_result(controller, episode_id, seed))
        if (i + 1) % 100 == 0:
            logger.info("played %d/%d episodes", i + 1, config.n_episodes)

    if out_dir is not None:
        out_dir = Path(out_dir)
        logs_dir(out_dir).mkdir(parents=True, exist_ok=True)
        table = pa.Table.from_pylist([r.to_row() for r in results], schema=EPISODE_LOG_SCHEMA)
        pq.write_table(table, episode_log_path(out_dir))
        run_summary_path(out_dir).write_text(
            json.dumps(summarize_results(results), ensure_ascii=False, indent=2)
        )
    return results
