"""Visualization layer: one-way layout renders."""

from speaker_listener.viz.render import render_episode_layout

__all__ = ["render_episode_layout"]
