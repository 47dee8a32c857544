"""Experiments layer: CLI-driven batch runs."""

from speaker_listener.experiments.run import build_run_config, main

__all__ = ["build_run_config", "main"]
