"""Ordering of rate samples for display."""

from collections.abc import Callable, Sequence

from pyiotop.models import RateSample, SortKey

_KEY_FUNCS: dict[SortKey, Callable[[RateSample], float]] = {
    SortKey.CPU: lambda s: s.cpu_percent,
    SortKey.READ: lambda s: s.read_rate,
    SortKey.WRITE: lambda s: s.write_rate,
}


def rank(samples: Sequence[RateSample], key: SortKey, limit: int) -> list[RateSample]:
    """
    Sort samples descending by ``key`` and keep the first ``limit``.

    The sort is stable, so processes with equal values keep their input order
    and do not swap places between ticks. Truncation happens after sorting.
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    # sorted() with reverse=True is still stable for equal keys
    ordered = sorted(samples, key=_KEY_FUNCS[key], reverse=True)
    return ordered[:limit]
