"""CLI entrypoint for batch episode runs.

This module owns CLI argument parsing and config resolution. All episode
logic lives in ``speaker_listener.simulation``.

Resolution order is CLI flag > JSON config file > built-in default. The
config file may carry run keys at top level plus optional ``env`` and
``motion`` objects whose keys are ``EnvConfig`` / ``MotionConfig`` fields.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import fields
from pathlib import Path

from speaker_listener.config.constants import RULE_CODE_COUNT
from speaker_listener.config.types import (
    EnvConfig,
    ListenerKind,
    MotionConfig,
    RunConfig,
    SpeakerKind,
)
from speaker_listener.simulation.engine import run_episodes, summarize_results

# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        return int(raw)
    raise ValueError(f"{key} must be an integer value")


def _coerce_str(raw: object, key: str) -> str:
    """Coerce raw value to str; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a string-coercible value")
    if isinstance(raw, (str, Path, int, float)):
        return str(raw)
    raise ValueError(f"{key} must be a string-coercible value")


def _coerce_bool(raw: object, key: str) -> bool:
    """Coerce raw value to bool with strict string-check."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{key} must be a boolean value")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_str(cli_val: str | None, key: str, file_cfg: dict[str, object], default: str) -> str:
    return _coerce_str(_get_val(cli_val, key, file_cfg, default), key)


def _get_bool(cli_val: bool | None, key: str, file_cfg: dict[str, object], default: bool) -> bool:
    return _coerce_bool(_get_val(cli_val, key, file_cfg, default), key)


def _parse_speaker(raw: str) -> SpeakerKind:
    try:
        return SpeakerKind(raw)
    except ValueError as exc:
        valid = ", ".join(kind.value for kind in SpeakerKind)
        raise ValueError(f"speaker must be one of {valid}") from exc


def _parse_listener(raw: str) -> ListenerKind:
    try:
        return ListenerKind(raw)
    except ValueError as exc:
        valid = ", ".join(kind.value for kind in ListenerKind)
        raise ValueError(f"listener must be one of {valid}") from exc


def _section_kwargs(section: object, cls: type, label: str) -> dict[str, object]:
    """Validate a config-file section against a dataclass's field names.

    JSON lists are converted to tuples for pair-valued fields.
    """
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{label} must be a JSON object")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"unknown {label} keys: {', '.join(unknown)}")
    return {
        key: tuple(value) if isinstance(value, list) else value for key, value in section.items()
    }


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Run speaker/listener episodes")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--n-episodes", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out-dir", type=Path, default=None)
    parser.add_argument(
        "--vocab-size",
        type=int,
        default=None,
        help=(
            "Channel vocabulary size. The greedy listener decodes the rule-encoding "
            f"speaker exactly only when this is at least {RULE_CODE_COUNT}"
        ),
    )
    parser.add_argument("--step-budget", type=int, default=None)
    parser.add_argument(
        "--speaker",
        type=str,
        choices=[kind.value for kind in SpeakerKind],
        default=None,
    )
    parser.add_argument(
        "--listener",
        type=str,
        choices=[kind.value for kind in ListenerKind],
        default=None,
    )
    parser.add_argument(
        "--render",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write a layout PNG of the first episode",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


def build_run_config(args: argparse.Namespace, file_cfg: dict[str, object]) -> RunConfig:
    """Resolve a ``RunConfig`` from parsed CLI args and config-file values."""
    env_kwargs = _section_kwargs(file_cfg.get("env"), EnvConfig, "env")
    motion_kwargs = _section_kwargs(file_cfg.get("motion"), MotionConfig, "motion")
    if args.vocab_size is not None:
        env_kwargs["vocab_size"] = args.vocab_size
    if args.step_budget is not None:
        env_kwargs["step_budget"] = args.step_budget

    return RunConfig(
        n_episodes=_get_int(args.n_episodes, "n_episodes", file_cfg, 10),
        seed=_get_int(args.seed, "seed", file_cfg, 0),
        speaker=_parse_speaker(
            _get_str(args.speaker, "speaker", file_cfg, SpeakerKind.RULE_ENCODING.value)
        ),
        listener=_parse_listener(
            _get_str(args.listener, "listener", file_cfg, ListenerKind.GREEDY.value)
        ),
        env=EnvConfig(**env_kwargs),  # type: ignore[arg-type]
        motion=MotionConfig(**motion_kwargs),  # type: ignore[arg-type]
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for batch runs.

    Supports ``--config path/to/config.json`` for reproducibility; prints a
    JSON summary of the run to stdout.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")
        if not isinstance(file_cfg, dict):
            parser.error(f"Config file must contain a JSON object: {args.config}")

    try:
        run_config = build_run_config(args, file_cfg)
        out_dir = Path(_get_str(args.out_dir, "out_dir", file_cfg, "data"))
        render = _get_bool(args.render, "render", file_cfg, False)
    except (ValueError, TypeError) as exc:
        parser.error(str(exc))

    results = run_episodes(run_config, out_dir, render=render)
    summary = {
        "speaker": run_config.speaker.value,
        "listener": run_config.listener.value,
        "vocab_size": run_config.env.vocab_size,
        **summarize_results(results),
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
