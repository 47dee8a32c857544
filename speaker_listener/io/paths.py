"""Path construction helpers for episode-run output directories."""

from __future__ import annotations

from pathlib import Path


def logs_dir(out_dir: Path) -> Path:
    """Return path to the logs subdirectory within an output directory."""
    return out_dir / "logs"


def renders_dir(out_dir: Path) -> Path:
    """Return path to the layout-render subdirectory within an output directory."""
    return out_dir / "renders"


def episode_log_path(out_dir: Path) -> Path:
    """Return path to the per-episode Parquet log."""
    return logs_dir(out_dir) / "episode_log.parquet"


def run_summary_path(out_dir: Path) -> Path:
    """Return path to the run summary JSON file."""
    return logs_dir(out_dir) / "run_summary.json"


def episode_render_path(out_dir: Path, episode_id: str) -> Path:
    """Return path to one episode's layout PNG."""
    return renders_dir(out_dir) / f"{episode_id}.png"
