"""
Tests for equal-interval binning and bin edge persistence.

Covers:
- Edge fitting over the positive range
- Scoring rules: zero, absent, boundaries, clamping
- Degenerate and single-value distributions
- EdgeStore JSON round trip
"""

import json
import math

import numpy as np
import pandas as pd
import pytest

from hazard_index.exceptions import DegenerateDistributionError
from hazard_index.scoring.binning import N_BINS, BinEdges, IntervalBinner
from hazard_index.scoring.edges import EdgeStore


# ============================================================================
# BIN EDGES
# ============================================================================

class TestBinEdges:
    """Test the BinEdges dataclass."""

    def test_requires_six_edges(self):
        """Five intervals need exactly six boundaries."""
        with pytest.raises(ValueError, match="Expected 6 edges"):
            BinEdges((0.0, 1.0, 2.0))

    def test_rejects_decreasing_edges(self):
        with pytest.raises(ValueError, match="non-decreasing"):
            BinEdges((0.0, 2.0, 1.0, 3.0, 4.0, 5.0))

    def test_fixed_edges(self):
        """Fixed edges over [0, 100] are 20 wide."""
        edges = BinEdges.fixed(0, 100, "flood")
        assert edges.edges == (0.0, 20.0, 40.0, 60.0, 80.0, 100.0)
        assert edges.width == 20.0
        assert edges.hazard == "flood"
        assert not edges.degenerate

    def test_intervals(self):
        edges = BinEdges.fixed(10, 60)
        intervals = edges.intervals()
        assert len(intervals) == N_BINS
        assert intervals[0] == (1, 10.0, 20.0)
        assert intervals[-1] == (5, 50.0, 60.0)

    def test_dict_round_trip(self):
        edges = BinEdges((0.0,) * 6, "slr", degenerate=True)
        restored = BinEdges.from_dict(edges.to_dict())
        assert restored == edges


# ============================================================================
# FITTING
# ============================================================================

class TestIntervalBinnerFit:
    """Test edge fitting."""

    def test_equal_width_over_positive_range(self):
        """Zero is ignored; edges span [min, max] of the positive values."""
        binner = IntervalBinner()
        edges = binner.fit([0, 10, 20, 30, 40, 50], "heat")

        assert edges.minimum == 10.0
        assert edges.maximum == 50.0
        widths = np.diff(edges.edges)
        assert np.allclose(widths, 8.0)
        assert edges.hazard == "heat"

    def test_absent_values_ignored(self):
        binner = IntervalBinner()
        edges = binner.fit([np.nan, None, pd.NA, 5.0, 15.0])
        assert edges.minimum == 5.0
        assert edges.maximum == 15.0

    def test_negative_values_rejected(self):
        binner = IntervalBinner()
        with pytest.raises(ValueError, match="Negative"):
            binner.fit([1.0, -2.0, 3.0])

    def test_non_numeric_values_rejected(self):
        """Unparseable entries are errors, not absent values."""
        binner = IntervalBinner()
        with pytest.raises(ValueError, match=r"1 non-numeric value\(s\)") as exc_info:
            binner.fit([5.0, "n/a", None, 15.0], "heat")
        assert "n/a" in str(exc_info.value)

    def test_numeric_strings_accepted(self):
        edges = IntervalBinner().fit(["5", "15"])
        assert edges.minimum == 5.0
        assert edges.maximum == 15.0

    def test_all_zero_gives_degenerate_edges(self, caplog):
        """No positive value: degenerate edges and a warning."""
        binner = IntervalBinner()
        with caplog.at_level("WARNING"):
            edges = binner.fit([0, 0, 0], "slr")

        assert edges.degenerate
        assert edges.edges == (0.0,) * 6
        assert "No values above zero" in caplog.text

    def test_all_zero_strict_raises(self):
        binner = IntervalBinner(strict=True)
        with pytest.raises(DegenerateDistributionError) as exc_info:
            binner.fit([0, 0], "slr")
        assert exc_info.value.hazard == "slr"
        assert exc_info.value.n_values == 2

    def test_empty_distribution_is_degenerate(self):
        edges = IntervalBinner().fit([], "precip")
        assert edges.degenerate

    def test_single_distinct_value(self):
        """min == max collapses every interval to one point."""
        edges = IntervalBinner().fit([0, 7, 7, 7])
        assert edges.edges == (7.0,) * 6
        assert not edges.degenerate


# ============================================================================
# SCORING
# ============================================================================

class TestIntervalBinnerScore:
    """Test scoring against fitted edges."""

    @pytest.fixture
    def edges(self):
        """Edges 10, 18, 26, 34, 42, 50."""
        return IntervalBinner().fit([0, 10, 20, 30, 40, 50])

    def test_zero_scores_zero(self, edges):
        assert IntervalBinner().score(0, edges) == 0
        assert IntervalBinner().score(0.0, edges) == 0

    def test_absent_stays_absent(self, edges):
        binner = IntervalBinner()
        assert binner.score(None, edges) is None
        assert binner.score(math.nan, edges) is None
        assert binner.score(pd.NA, edges) is None

    def test_minimum_scores_one(self, edges):
        assert IntervalBinner().score(10, edges) == 1

    def test_maximum_scores_five(self, edges):
        assert IntervalBinner().score(50, edges) == 5

    def test_boundary_belongs_to_lower_bin(self, edges):
        """Upper bounds are inclusive."""
        binner = IntervalBinner()
        assert binner.score(18, edges) == 1
        assert binner.score(18.01, edges) == 2
        assert binner.score(34, edges) == 3
        assert binner.score(34.01, edges) == 4

    def test_between_zero_and_minimum_scores_one(self, edges):
        assert IntervalBinner().score(0.5, edges) == 1

    def test_above_maximum_clamps_to_five(self, edges):
        """Historical values beyond the projected range get the top score."""
        assert IntervalBinner().score(500, edges) == 5

    def test_negative_value_rejected(self, edges):
        with pytest.raises(ValueError):
            IntervalBinner().score(-1, edges)

    def test_monotonic(self, edges):
        """Larger raw values never score lower."""
        binner = IntervalBinner()
        values = np.linspace(0, 70, 141)
        scores = [binner.score(v, edges) for v in values]
        assert all(a <= b for a, b in zip(scores, scores[1:]))
        assert set(scores) == {0, 1, 2, 3, 4, 5}

    def test_degenerate_edges(self):
        """Zero still scores 0; anything positive scored later clamps to 5."""
        binner = IntervalBinner()
        edges = binner.fit([0, 0, 0])
        assert binner.score(0, edges) == 0
        assert binner.score(3, edges) == 5

    def test_single_value_edges(self):
        binner = IntervalBinner()
        edges = binner.fit([7, 7])
        assert binner.score(7, edges) == 1
        assert binner.score(3, edges) == 1
        assert binner.score(8, edges) == 5

    def test_score_series(self, edges):
        """Series scoring keeps the index and uses nullable integers."""
        values = pd.Series([0.0, 10.0, np.nan, 50.0], index=["a", "b", "c", "d"], name="heat_days")
        scores = IntervalBinner().score_series(values, edges)

        assert str(scores.dtype) == "Int64"
        assert list(scores.index) == ["a", "b", "c", "d"]
        assert scores["a"] == 0
        assert scores["b"] == 1
        assert pd.isna(scores["c"])
        assert scores["d"] == 5


# ============================================================================
# EDGE STORE
# ============================================================================

class TestEdgeStore:
    """Test JSON persistence of edges."""

    def test_save_and_load(self, tmp_path):
        store = EdgeStore(tmp_path / "edges.json")
        heat = IntervalBinner().fit([3, 9, 27], "heat")
        store.save(heat)

        assert "heat" in store
        assert store.names() == ["heat"]
        assert store.load("heat") == heat

    def test_save_keeps_other_hazards(self, tmp_path):
        store = EdgeStore(tmp_path / "edges.json")
        store.save(BinEdges.fixed(0, 10, "heat"))
        store.save(BinEdges.fixed(0, 5, "precip"))

        loaded = store.load_all()
        assert set(loaded) == {"heat", "precip"}

        with open(tmp_path / "edges.json") as f:
            data = json.load(f)
        assert data["precip"]["edges"] == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]

    def test_explicit_name(self, tmp_path):
        store = EdgeStore(tmp_path / "edges.json")
        store.save(BinEdges.fixed(0, 10), "custom")
        assert store.names() == ["custom"]

    def test_unnamed_edges_rejected(self, tmp_path):
        store = EdgeStore(tmp_path / "edges.json")
        with pytest.raises(ValueError, match="hazard name"):
            store.save(BinEdges.fixed(0, 10))

    def test_load_missing_hazard(self, tmp_path):
        store = EdgeStore(tmp_path / "edges.json")
        store.save(BinEdges.fixed(0, 10, "heat"))
        with pytest.raises(KeyError, match="Available: heat"):
            store.load("slr")

    def test_missing_file_is_empty(self, tmp_path):
        store = EdgeStore(tmp_path / "nothing.json")
        assert store.names() == []
        assert store.load_all() == {}
        assert "heat" not in store
