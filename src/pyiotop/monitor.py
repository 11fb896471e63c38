"""Process metrics provider for pyiotop, backed by psutil."""

import psutil
import structlog

from pyiotop.models import Batch, ProcessSample

log = structlog.get_logger()

# Attributes fetched per process in one pass
PROCESS_ATTRS = [
    "pid",
    "name",
    "io_counters",
    "cpu_percent",
    "memory_percent",
    "open_files",
]

# Fields whose absence drops the process from the batch
REQUIRED_ATTRS = ("name", "io_counters", "cpu_percent", "memory_percent")


class PyiotopError(Exception):
    """Base class for pyiotop errors."""


class CollectionError(PyiotopError):
    """The process table could not be enumerated for this tick."""


class MonitorUnavailableError(PyiotopError):
    """The host cannot provide the metrics the dashboard needs."""


class ProcessMonitor:
    """
    Collect per-process CPU, memory and I/O counters using psutil.

    Processes that vanish mid-enumeration, are zombies, or deny access to a
    required field are left out of the batch. Only a failure to enumerate
    processes at all is reported, as CollectionError.
    """

    def __init__(self) -> None:
        """
        Initialize the ProcessMonitor.

        Raises:
            MonitorUnavailableError: psutil has no per-process I/O counters
                on this platform.
        """
        if not hasattr(psutil.Process, "io_counters"):
            raise MonitorUnavailableError(
                "per-process I/O counters are not supported on this platform"
            )
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent()

    def collect(self) -> Batch:
        """
        Collect one batch of process samples plus system-wide usage.

        Raises:
            CollectionError: The process table or system usage could not be read.
        """
        try:
            cpu_percent = psutil.cpu_percent()
            memory_percent = psutil.virtual_memory().percent
            samples = self._collect_processes()
        except (psutil.Error, OSError) as exc:
            raise CollectionError(f"cannot enumerate processes: {exc}") from exc

        return Batch(
            cpu_percent=cpu_percent,
            memory_percent=memory_percent,
            samples=samples,
        )

    def _collect_processes(self) -> list[ProcessSample]:
        """
        Collect samples of all readable processes.

        psutil.process_iter() skips processes that exit while iterating and
        fills fields it may not read with None.
        """
        samples: list[ProcessSample] = []

        for proc in psutil.process_iter(attrs=PROCESS_ATTRS, ad_value=None):
            try:
                sample = self._build_sample(proc.info)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            if sample is not None:
                samples.append(sample)

        return samples

    @staticmethod
    def _build_sample(info: dict) -> ProcessSample | None:
        """Turn one process_iter() info dict into a sample, or None if incomplete."""
        missing = [attr for attr in REQUIRED_ATTRS if info.get(attr) is None]
        if missing:
            log.debug("process_skipped", pid=info.get("pid"), missing=missing)
            return None

        io = info["io_counters"]
        # Open files are optional: unreadable means none shown
        open_files = info.get("open_files") or []

        return ProcessSample(
            pid=info["pid"],
            name=info["name"],
            read_bytes=io.read_bytes,
            write_bytes=io.write_bytes,
            cpu_percent=float(info["cpu_percent"]),
            memory_percent=float(info["memory_percent"]),
            open_files=tuple(f.path for f in open_files if f.path),
        )
