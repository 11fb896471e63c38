"""Configuration for pyiotop.

Behavior is fixed: there are no command-line flags and no config file. The
only override is the log file location, read from ``PYIOTOP_LOG_FILE``.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from pyiotop.models import DISPLAY_BUDGET
from pyiotop.rates import SAMPLE_INTERVAL

LOG_FILE_ENV = "PYIOTOP_LOG_FILE"


def _default_log_path() -> Path:
    override = os.environ.get(LOG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    state_home = os.environ.get("XDG_STATE_HOME") or Path.home() / ".local" / "state"
    return Path(state_home) / "pyiotop" / "pyiotop.log"


@dataclass(slots=True, frozen=True)
class Config:
    """Fixed runtime settings."""

    sample_interval: float = SAMPLE_INTERVAL  # Seconds between ticks
    row_limit: int = DISPLAY_BUDGET
    files_preview: int = 3  # Open files shown per table row
    log_path: Path = field(default_factory=_default_log_path)
    log_max_bytes: int = 1024 * 1024
    log_backup_count: int = 2
