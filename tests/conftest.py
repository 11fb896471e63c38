"""Shared test fixtures for pyiotop."""

from collections.abc import Iterable

import pytest
import structlog

from pyiotop.models import Batch, ProcessSample
from pyiotop.monitor import CollectionError


def make_sample(
    pid: int = 100,
    name: str | None = None,
    read_bytes: int = 0,
    write_bytes: int = 0,
    cpu_percent: float = 0.0,
    memory_percent: float = 0.0,
    open_files: Iterable[str] = (),
) -> ProcessSample:
    """Create a ProcessSample for testing."""
    return ProcessSample(
        pid=pid,
        name=name if name is not None else f"proc{pid}",
        read_bytes=read_bytes,
        write_bytes=write_bytes,
        cpu_percent=cpu_percent,
        memory_percent=memory_percent,
        open_files=tuple(open_files),
    )


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Discard log events so test output stays clean."""
    structlog.configure(
        processors=[],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


class FakeMonitor:
    """
    Metrics provider returning scripted batches.

    Each entry of ``script`` is either a list of samples or an exception
    instance to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, script: list) -> None:
        self._script = list(script)
        self.calls = 0

    def collect(self) -> Batch:
        step = self._script[min(self.calls, len(self._script) - 1)]
        self.calls += 1
        if isinstance(step, Exception):
            raise step
        return Batch(
            cpu_percent=12.5,
            memory_percent=42.0,
            samples=list(step),
        )


@pytest.fixture
def two_ticks() -> list[list[ProcessSample]]:
    """Two batches of the same three processes, one second apart."""
    first = [
        make_sample(1, "alpha", read_bytes=1000, write_bytes=0, cpu_percent=5.0),
        make_sample(2, "beta", read_bytes=0, write_bytes=4096, cpu_percent=50.0),
        make_sample(3, "gamma", read_bytes=10, write_bytes=10, cpu_percent=1.0),
    ]
    second = [
        make_sample(1, "alpha", read_bytes=3048, write_bytes=0, cpu_percent=5.0),
        make_sample(2, "beta", read_bytes=0, write_bytes=5120, cpu_percent=50.0),
        make_sample(3, "gamma", read_bytes=10, write_bytes=10, cpu_percent=1.0),
    ]
    return [first, second]


@pytest.fixture
def failing_monitor() -> FakeMonitor:
    """Monitor that succeeds once and then fails every tick."""
    return FakeMonitor(
        [
            [make_sample(1, "alpha", cpu_percent=3.0)],
            CollectionError("boom"),
        ]
    )
