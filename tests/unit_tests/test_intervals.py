"""Tests for precursor m/z interval construction.

Tests cover:
1. Merging of overlapping tolerance windows
2. Clamping at zero
3. Coverage and disjointness for random inputs
4. Window edges that round down still fall inside their interval
"""

import numpy as np
import pytest

from specsimfast.search.intervals import Interval, build_mz_intervals


class TestBuildIntervals:
    """Test interval merging."""

    def test_example_merge(self):
        """Close precursors merge, distant ones start a new interval."""
        intervals = build_mz_intervals([100.0, 100.05, 200.0], tol_mz=0.1)

        assert len(intervals) == 2
        assert intervals[0].left == pytest.approx(99.9)
        assert intervals[0].right == pytest.approx(100.15)
        assert intervals[1].left == pytest.approx(199.9)
        assert intervals[1].right == pytest.approx(200.1)

    def test_empty_input(self):
        assert build_mz_intervals([], tol_mz=0.5) == []

    def test_single_value(self):
        intervals = build_mz_intervals([500.0], tol_mz=0.5)
        assert len(intervals) == 1
        assert intervals[0].left == 499.5
        assert intervals[0].right == np.nextafter(500.5, np.inf)

    def test_unsorted_input(self):
        """Input order does not matter."""
        intervals = build_mz_intervals([200.0, 100.05, 100.0], tol_mz=0.1)
        assert len(intervals) == 2
        assert intervals[0].left == pytest.approx(99.9)

    def test_clamped_at_zero(self):
        """Lower borders never go negative."""
        intervals = build_mz_intervals([0.2, 50.0], tol_mz=0.5)
        assert intervals[0].left == 0.0
        assert intervals[0].right == pytest.approx(0.7)
        assert intervals[1].left == pytest.approx(49.5)

    def test_touching_windows_merge(self):
        """Windows sharing a border point end up in one interval."""
        intervals = build_mz_intervals([100.0, 101.0], tol_mz=0.5)
        assert len(intervals) == 1
        assert intervals[0].contains(100.5)

    def test_separated_windows_not_merged(self):
        intervals = build_mz_intervals([100.0, 101.01], tol_mz=0.5)
        assert len(intervals) == 2
        assert intervals[0].right <= intervals[1].left

    def test_chain_merge(self):
        """Each value overlaps only its neighbour; all merge into one."""
        intervals = build_mz_intervals([100.0, 100.8, 101.6, 102.4], tol_mz=0.5)
        assert len(intervals) == 1
        assert intervals[0].left == pytest.approx(99.5)
        assert intervals[0].right == pytest.approx(102.9)

    def test_duplicates(self):
        intervals = build_mz_intervals([300.0, 300.0, 300.0], tol_mz=0.2)
        assert len(intervals) == 1

    def test_random_coverage_and_disjointness(self):
        """Every window is covered; intervals are sorted and disjoint."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            values = rng.uniform(0.0, 2000.0, size=rng.integers(1, 200))
            tol = float(rng.uniform(0.01, 5.0))
            intervals = build_mz_intervals(values, tol)

            for first, second in zip(intervals, intervals[1:]):
                assert first.left < first.right
                assert first.right <= second.left

            for value in values:
                covering = [iv for iv in intervals
                            if iv.left <= max(0.0, value - tol) and value + tol <= iv.right]
                assert len(covering) == 1


class TestIntervalMembership:
    """Test Interval.contains."""

    def test_half_open(self):
        interval = Interval(10.0, 20.0)
        assert interval.contains(10.0)
        assert interval.contains(19.999)
        assert not interval.contains(20.0)
        assert not interval.contains(9.999)

    def test_width(self):
        assert Interval(10.0, 12.5).width == pytest.approx(2.5)

    def test_right_border_is_mutable(self):
        interval = Interval(1.0, 2.0)
        interval.right = 3.0
        assert interval.contains(2.5)


class TestRoundedWindowEdges:
    """The rounded window edge fl(mz + tol) is always inside the interval."""

    def test_edge_rounded_down(self):
        """A candidate at fl(100.37 + 0.3) passes the exact check and must be fetched."""
        precursor_mz, tol = 100.37, 0.3
        edge = precursor_mz + tol
        assert abs(precursor_mz - edge) < tol

        intervals = build_mz_intervals([precursor_mz], tol)
        assert intervals[0].contains(edge)

    def test_edges_within_tolerance_always_covered(self):
        rng = np.random.default_rng(23)
        for _ in range(2000):
            precursor_mz = float(rng.uniform(100.0, 2000.0))
            tol = float(rng.choice([0.01, 0.02, 0.3, 0.5, 1.0, 10.0]))
            edge = precursor_mz + tol
            intervals = build_mz_intervals([precursor_mz], tol)
            if abs(precursor_mz - edge) < tol:
                assert intervals[0].contains(edge)

    def test_first_float_beyond_edge_excluded(self):
        """The next float past the edge fails the exact check, so it may be left out."""
        precursor_mz, tol = 100.37, 0.3
        beyond = np.nextafter(np.nextafter(precursor_mz + tol, np.inf), np.inf)
        intervals = build_mz_intervals([precursor_mz], tol)
        assert not intervals[0].contains(beyond)
        assert not abs(precursor_mz - beyond) < tol
