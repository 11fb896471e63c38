"""Data models for pyiotop."""

from dataclasses import dataclass, field
from enum import Enum

# Maximum number of rows rendered in the process table.
DISPLAY_BUDGET = 20


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable snapshot of one process's raw metrics at one tick."""

    pid: int
    name: str
    read_bytes: int  # Cumulative, lifetime total
    write_bytes: int  # Cumulative, lifetime total
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float
    open_files: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class RateSample:
    """A ProcessSample enriched with I/O throughput derived across ticks."""

    sample: ProcessSample
    read_rate: float = 0.0  # Bytes per second
    write_rate: float = 0.0  # Bytes per second

    @property
    def pid(self) -> int:
        return self.sample.pid

    @property
    def name(self) -> str:
        return self.sample.name

    @property
    def cpu_percent(self) -> float:
        return self.sample.cpu_percent

    @property
    def memory_percent(self) -> float:
        return self.sample.memory_percent

    @property
    def open_files(self) -> tuple[str, ...]:
        return self.sample.open_files


class SortKey(Enum):
    """Sort keys for the process table. All keys sort descending."""

    CPU = "cpu"
    READ = "read"
    WRITE = "write"

    @property
    def label(self) -> str:
        """Column heading the key sorts on."""
        return {
            SortKey.CPU: "CPU%",
            SortKey.READ: "Read/s",
            SortKey.WRITE: "Write/s",
        }[self]


@dataclass(slots=True, frozen=True)
class Batch:
    """Everything the metrics provider reports for one tick."""

    cpu_percent: float  # System-wide
    memory_percent: float  # System-wide
    samples: list[ProcessSample] = field(default_factory=list)
