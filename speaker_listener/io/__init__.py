"""I/O layer: Arrow schemas and output path conventions."""

from speaker_listener.io.paths import episode_log_path, run_summary_path
from speaker_listener.io.schemas import EPISODE_LOG_SCHEMA, EPISODE_LOG_SCHEMA_VERSION

__all__ = [
    "EPISODE_LOG_SCHEMA",
    "EPISODE_LOG_SCHEMA_VERSION",
    "episode_log_path",
    "run_summary_path",
]
