"""I/O throughput derivation from successive cumulative counters."""

from collections.abc import Iterable, Mapping, Sequence

from pyiotop.models import ProcessSample, RateSample

# Fixed spacing between two batches, in seconds. Deltas are per interval.
SAMPLE_INTERVAL = 1.0


def index_by_pid(samples: Iterable[ProcessSample]) -> dict[int, ProcessSample]:
    """Key a batch by process identity for lookup on the next tick."""
    return {sample.pid: sample for sample in samples}


def _delta(current: int, previous: int) -> int:
    # Counter resets (pid reuse, provider under-reporting) clamp to zero
    return max(0, current - previous)


def derive(
    current: Sequence[ProcessSample],
    previous: Mapping[int, ProcessSample],
) -> list[RateSample]:
    """
    Derive per-process read/write rates for the current batch.

    Each sample is matched to the previous batch by pid, never by position.
    The rate is the clamped counter delta over one sampling interval. A
    process without a predecessor gets a rate of 0 rather than its lifetime
    total. The result preserves the order of ``current``.

    Args:
        current: This tick's samples.
        previous: Last tick's samples keyed by pid. May be empty.

    Returns:
        One RateSample per entry in ``current``.
    """
    derived: list[RateSample] = []
    for sample in current:
        before = previous.get(sample.pid)
        if before is None:
            derived.append(RateSample(sample))
            continue

        derived.append(
            RateSample(
                sample,
                read_rate=float(_delta(sample.read_bytes, before.read_bytes)),
                write_rate=float(_delta(sample.write_bytes, before.write_bytes)),
            )
        )
    return derived
