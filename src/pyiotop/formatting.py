"""Formatting helpers for the process table."""

from collections.abc import Sequence
from dataclasses import dataclass

from pyiotop.models import RateSample

_UNITS = ("B", "KB", "MB", "GB", "TB")

FILES_PLACEHOLDER = "-"


@dataclass(slots=True, frozen=True)
class DisplayRow:
    """One rendered row of the process table."""

    pid: str
    name: str
    cpu: str
    mem: str
    read: str
    write: str
    files: str


def humanize_bytes(value: float) -> str:
    """
    Format a byte count with a binary unit suffix.

    The value is divided by 1024 while it reaches 1024 and a larger unit
    remains, so exactly 1024 bytes is "1.00 KB".

    Examples:
        0 -> "0.00 B"
        1536 -> "1.50 KB"
        1073741824 -> "1.00 GB"
    """
    size = float(value)
    unit = 0
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:.2f} {_UNITS[unit]}"


def format_percent(value: float) -> str:
    """Format a utilization percentage with one decimal."""
    return f"{value:.1f}"


def files_preview(paths: Sequence[str], limit: int = 3) -> str:
    """Join at most ``limit`` open file paths for the table column."""
    if not paths:
        return FILES_PLACEHOLDER
    preview = ", ".join(paths[:limit])
    if len(paths) > limit:
        preview += ", …"
    return preview


def build_row(sample: RateSample, files_limit: int = 3) -> DisplayRow:
    """Build the display strings for one ranked process."""
    return DisplayRow(
        pid=str(sample.pid),
        name=sample.name,
        cpu=format_percent(sample.cpu_percent),
        mem=format_percent(sample.memory_percent),
        read=f"{humanize_bytes(sample.read_rate)}/s",
        write=f"{humanize_bytes(sample.write_rate)}/s",
        files=files_preview(sample.open_files, files_limit),
    )
