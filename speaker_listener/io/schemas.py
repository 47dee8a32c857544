"""Parquet schema definitions for episode-run artifacts.

Every module that reads or writes episode logs works against the column
contracts defined here.
"""

from __future__ import annotations

import pyarrow as pa

EPISODE_LOG_SCHEMA_VERSION = 1

EPISODE_LOG_SCHEMA = pa.schema(
    [
        ("schema_version", pa.int64()),
        ("episode_id", pa.string()),
        ("seed", pa.int64()),
        ("steps", pa.int64()),
        ("termination_reason", pa.string()),
        ("correct_index", pa.int64()),
        ("pressed_slot", pa.int64()),
        ("speaker_return", pa.float64()),
        ("listener_return", pa.float64()),
        ("target_color", pa.string()),
        ("target_shape", pa.string()),
        ("require_no_red", pa.bool_()),
        ("rule_attempts", pa.int64()),
        ("degraded_rule", pa.bool_()),
        ("placement_failures", pa.int64()),
        ("scan_count", pa.int64()),
        ("ray_queries", pa.int64()),
        ("slots_detected", pa.int64()),
    ]
)

# Outcome labels counted by run summaries, in reporting order.
SUMMARY_OUTCOMES = ["correct_press", "wrong_press", "timeout"]
