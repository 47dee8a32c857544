"""Top-down layout render of one episode.

Read-only: consumes slot state, the listener pose, perception records and
the correct index, and never writes back into the controller.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Rectangle, Wedge  # noqa: E402

from speaker_listener.domain.world import Color, Shape, heading_vector  # noqa: E402
from speaker_listener.simulation.episode import EpisodeController  # noqa: E402

SLOT_COLORS: dict[Color, str] = {
    Color.RED: "#d62728",
    Color.GREEN: "#2ca02c",
    Color.BLUE: "#1f77b4",
}
SLOT_MARKERS: dict[Shape, str] = {
    Shape.SQUARE: "s",
    Shape.CIRCLE: "o",
    Shape.TRIANGLE: "^",
}
CORRECT_HIGHLIGHT_COLOR = "#ffbf00"
FAN_COLOR = "#17becf"


def render_episode_layout(
    controller: EpisodeController,
    output_path: Path,
    title: str | None = None,
) -> Path:
    """Write a PNG of the current episode layout and return its path."""
    config = controller.config
    cx, cz = config.spawn_center
    hx, hz = config.spawn_half_extents
    pose = controller.pose
    correct = controller.correct_index
    records = controller.scanner.records

    fig, ax = plt.subplots(figsize=(6, 6))
    try:
        ax.add_patch(
            Rectangle(
                (cx - hx, cz - hz),
                2 * hx,
                2 * hz,
                fill=False,
                linestyle="--",
                edgecolor="#7f7f7f",
            )
        )
        # Matplotlib measures angles counter-clockwise from +x; headings are
        # clockwise from +z.
        center_angle = 90.0 - pose.heading
        ax.add_patch(
            Wedge(
                (pose.x, pose.z),
                config.ray_distance,
                center_angle - config.scan_half_angle,
                center_angle + config.scan_half_angle,
                alpha=0.08,
                color=FAN_COLOR,
            )
        )

        for slot in controller.slots:
            x, _, z = slot.position
            if slot.index == correct:
                ax.scatter(x, z, s=700, color=CORRECT_HIGHLIGHT_COLOR, alpha=0.5, zorder=2)
            ax.scatter(
                x,
                z,
                s=260,
                marker=SLOT_MARKERS[slot.shape],
                color=SLOT_COLORS[slot.color],
                edgecolors="black" if records[slot.index].detected else "none",
                linewidths=1.5,
                zorder=3,
            )
            ax.annotate(str(slot.index), (x, z), textcoords="offset points", xytext=(9, 9))

        fx, fz = _heading_arrow(pose.heading)
        ax.arrow(pose.x, pose.z, fx, fz, width=0.06, color="black", zorder=4)

        rule = controller.rule
        heading = title or (
            f"rule: {rule.target_color.label} {rule.target_shape.label}"
            f"{' (no red)' if rule.require_no_red else ''} | correct={correct}"
        )
        ax.set_title(heading)
        margin = 1.0
        ax.set_xlim(min(cx - hx, pose.x) - margin, max(cx + hx, pose.x) + margin)
        ax.set_ylim(min(cz - hz, pose.z) - margin, max(cz + hz, pose.z) + margin)
        ax.set_aspect("equal")
        ax.set_xlabel("x")
        ax.set_ylabel("z")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=100, bbox_inches="tight")
    finally:
        plt.close(fig)
    return output_path


def _heading_arrow(heading: float, length: float = 0.6) -> tuple[float, float]:
    hx, hz = heading_vector(heading)
    return hx * length, hz * length
