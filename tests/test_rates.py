"""Tests for I/O rate derivation."""

import pytest

from pyiotop.rates import derive, index_by_pid

from conftest import make_sample


class TestDerive:
    """Tests for derive()."""

    def test_rate_is_counter_delta(self):
        """Rate equals the growth of the cumulative counter."""
        previous = index_by_pid([make_sample(1, read_bytes=1000, write_bytes=200)])
        current = [make_sample(1, read_bytes=1500, write_bytes=700)]

        [rated] = derive(current, previous)

        assert rated.read_rate == 500
        assert rated.write_rate == 500

    def test_negative_delta_clamps_to_zero(self):
        """A counter that went backwards yields 0, not a negative rate."""
        previous = index_by_pid([make_sample(1, read_bytes=1000, write_bytes=1000)])
        current = [make_sample(1, read_bytes=800, write_bytes=1200)]

        [rated] = derive(current, previous)

        assert rated.read_rate == 0
        assert rated.write_rate == 200

    @pytest.mark.parametrize(
        ("before", "after", "expected"),
        [(1000, 800, 0), (1000, 1500, 500), (0, 0, 0), (5, 5, 0)],
    )
    def test_rate_non_negative(self, before, after, expected):
        """Derived rate is max(0, after - before)."""
        previous = index_by_pid([make_sample(9, read_bytes=before)])
        [rated] = derive([make_sample(9, read_bytes=after)], previous)
        assert rated.read_rate == expected

    def test_first_tick_rates_are_zero(self):
        """Without a previous batch every rate is 0, whatever the totals."""
        current = [
            make_sample(1, read_bytes=10**9, write_bytes=10**6),
            make_sample(2, read_bytes=42, write_bytes=0),
        ]

        rated = derive(current, {})

        assert [(r.read_rate, r.write_rate) for r in rated] == [(0, 0), (0, 0)]

    def test_new_process_rate_is_zero_not_lifetime_total(self):
        """A process missing from the previous batch starts at 0."""
        previous = index_by_pid([make_sample(1, read_bytes=100)])
        current = [make_sample(1, read_bytes=150), make_sample(2, read_bytes=5000)]

        rated = derive(current, previous)

        assert rated[0].read_rate == 50
        assert rated[1].read_rate == 0

    def test_matching_survives_reordering(self):
        """Processes are matched by pid, not by position."""
        previous = index_by_pid(
            [
                make_sample(10, read_bytes=0),
                make_sample(11, read_bytes=0),
                make_sample(12, read_bytes=0),
                make_sample(13, read_bytes=1000),
            ]
        )
        current = [
            make_sample(13, read_bytes=3000),
            make_sample(10, read_bytes=1),
            make_sample(11, read_bytes=2),
            make_sample(12, read_bytes=3),
        ]

        rated = derive(current, previous)

        assert rated[0].pid == 13
        assert rated[0].read_rate == 2000

    def test_preserves_current_order(self):
        """Output order follows the current batch."""
        current = [make_sample(pid) for pid in (5, 3, 9, 1)]
        assert [r.pid for r in derive(current, {})] == [5, 3, 9, 1]

    def test_empty_current(self):
        """An empty batch derives to an empty list."""
        assert derive([], index_by_pid([make_sample(1)])) == []

    def test_does_not_mutate_inputs(self):
        """derive() is pure."""
        previous = index_by_pid([make_sample(1, read_bytes=10)])
        snapshot = dict(previous)
        current = [make_sample(1, read_bytes=20)]

        derive(current, previous)

        assert previous == snapshot
        assert current == [make_sample(1, read_bytes=20)]


def test_index_by_pid():
    """index_by_pid keys samples by identity."""
    samples = [make_sample(3), make_sample(1)]
    indexed = index_by_pid(samples)
    assert set(indexed) == {1, 3}
    assert indexed[3] is samples[0]
