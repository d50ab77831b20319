"""Tests for the district occupancy index and distribution statistics."""

import numpy as np
import pytest

from grave_map.core.distribution import occupancy_grid, summarize_distribution
from grave_map.core.occupancy import DistrictOccupancy, as_lookup


class TestDistrictOccupancy:
    """Test the occupancy mapping."""

    def test_missing_district_is_zero(self):
        occupancy = DistrictOccupancy({"1_1": 2})
        assert occupancy["4_4"] == 0
        assert occupancy.get("4_4") == 0
        assert occupancy.count_at(1, 1) == 2
        assert "4_4" not in occupancy

    def test_from_rows_skips_unplaced(self):
        occupancy = DistrictOccupancy.from_rows([(1, 2, 3), (None, 4, 1), (0, 0, 5)])
        assert dict(occupancy) == {"1_2": 3, "0_0": 5}
        assert occupancy.total == 8
        assert len(occupancy) == 2

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            DistrictOccupancy({"1_1": -1})

    def test_increment(self):
        occupancy = DistrictOccupancy()
        assert occupancy.increment(3, 4) == 1
        assert occupancy.increment(3, 4) == 2
        assert occupancy["3_4"] == 2

    def test_copy_is_independent(self):
        occupancy = DistrictOccupancy({"1_1": 1})
        snapshot = occupancy.copy()
        occupancy.increment(1, 1)
        assert snapshot["1_1"] == 1
        assert occupancy["1_1"] == 2


class TestAsLookup:
    def test_none_is_empty(self):
        assert as_lookup(None)("0_0") == 0

    def test_plain_dict(self):
        lookup = as_lookup({"0_0": 3})
        assert lookup("0_0") == 3
        assert lookup("1_0") == 0

    def test_callable(self):
        assert as_lookup(lambda key: 7)("9_9") == 7

    def test_unsupported_source(self):
        with pytest.raises(TypeError):
            as_lookup(42)


class TestDistribution:
    """Test grid rasterization and summary statistics."""

    def test_grid_is_indexed_by_row(self):
        grid = occupancy_grid(DistrictOccupancy({"1_2": 3}), 4)
        assert grid.shape == (4, 4)
        assert grid[2, 1] == 3
        assert grid.sum() == 3

    def test_out_of_range_keys_ignored(self):
        grid = occupancy_grid(DistrictOccupancy({"1_2": 3, "20_1": 9}), 4)
        assert grid.sum() == 3

    def test_summary(self):
        summary = summarize_distribution(DistrictOccupancy({"1_2": 3, "0_0": 1}), 4)
        assert summary.grid_size == 4
        assert summary.total == 4
        assert summary.occupied_districts == 2
        assert summary.max_count == 3
        assert summary.mean == pytest.approx(0.25)
        assert summary.std == pytest.approx(0.75)

    def test_empty_summary(self):
        summary = summarize_distribution(DistrictOccupancy(), 16)
        assert summary.total == 0
        assert summary.max_count == 0
        assert summary.as_dict()["occupied_districts"] == 0
        assert np.isclose(summary.std, 0.0)
