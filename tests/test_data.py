"""
Tests for series storage and extents.
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from scatterscale.chart.data_manager import (
    LimitLine,
    SeriesDataManager,
    interpolate_at,
    to_timestamp_ms,
)


class TestSeriesDataManager:
    """Test series loading and validation."""

    def test_single_series_default_name(self):
        data = SeriesDataManager([0, 1, 2], [3, 4, 5])
        assert data.names == ["Series 1"]
        assert data.num_series == 1

    def test_multiple_series(self):
        data = SeriesDataManager([[0, 1], [2, 3, 4]], [[1, 2], [3, 4, 5]], ["a", "b"])
        assert data.names == ["a", "b"]
        x, y = data.get_series("b")
        assert x.tolist() == [2, 3, 4]
        assert x.dtype == np.float64

    def test_from_samples(self):
        data = SeriesDataManager.from_samples({"a": [(0, 1), (1, 2)], "b": [(5, 0)]})
        assert data.names == ["a", "b"]
        assert data.get_extent("b").x_min == 5

    def test_split_samples(self):
        samples = {"a": [(0, 1), (1, 2)], "b": [(5, 0)]}
        xs, ys, names = SeriesDataManager.split_samples(samples)
        assert xs == [[0, 1], [5]]
        assert ys == [[1, 2], [0]]
        assert names == ["a", "b"]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            SeriesDataManager([0, 1, 2], [1, 2])

    def test_duplicate_names(self):
        with pytest.raises(ValueError):
            SeriesDataManager([[0], [1]], [[0], [1]], ["a", "a"])

    def test_mixed_timestamp_flags(self):
        with pytest.raises(ValueError):
            SeriesDataManager([[0], [1]], [[0], [1]], ["a", "b"], x_is_timestamp=[True, False])

    def test_unknown_series(self):
        data = SeriesDataManager([0, 1], [0, 1], "a")
        with pytest.raises(ValueError):
            data.get_series("b")

    def test_unsorted_input_is_sorted(self):
        data = SeriesDataManager([2, 0, 1], [20, 0, 10], "a")
        x, y = data.get_series("a")
        assert x.tolist() == [0, 1, 2]
        assert y.tolist() == [0, 10, 20]

    def test_input_not_modified(self):
        x = np.array([2.0, 0.0, 1.0])
        SeriesDataManager(x, np.zeros(3))
        assert x.tolist() == [2.0, 0.0, 1.0]

    def test_extent_skips_non_finite(self):
        data = SeriesDataManager([0, 1, 2, 3], [1, np.nan, np.inf, -1], "a")
        extent = data.get_extent("a")
        assert (extent.x_min, extent.x_max) == (0, 3)
        assert (extent.y_min, extent.y_max) == (-1, 1)

    def test_empty_series_extent(self):
        data = SeriesDataManager([], [], "a")
        assert data.get_extent("a").is_empty
        assert data.get_global_extent().is_empty

    def test_global_extent(self):
        data = SeriesDataManager([[0, 1], [5, 6]], [[1, 2], [-3, 0]], ["a", "b"])
        extent = data.get_global_extent()
        assert (extent.x_min, extent.x_max, extent.y_min, extent.y_max) == (0, 6, -3, 2)

    def test_limits(self):
        data = SeriesDataManager(
            [0, 1],
            [0, 1],
            limits=[5, {"value": -2, "name": "low", "color": "blue"}, LimitLine(9, "hi")],
        )
        assert [limit.name for limit in data.limits] == ["limit1", "low", "hi"]
        assert data.get_limits_extent() == (-2, 9)

    def test_y_extent_in_range_includes_edges(self):
        data = SeriesDataManager([0, 10, 20], [0, 100, 0], "a")
        assert data.get_y_extent_in_range(5, 8, "a") == (50, 80)
        assert data.get_y_extent_in_range(5, 15, "a") == (50, 100)

    def test_y_extent_outside_series(self):
        data = SeriesDataManager([0, 10], [0, 100], "a")
        assert data.get_y_extent_in_range(20, 30, "a") == (None, None)


class TestTimestamps:
    """Test timestamp conversion."""

    def test_datetimes(self):
        data = SeriesDataManager(
            [datetime(1970, 1, 1, 0, 0, 1), datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)],
            [1, 2],
            x_is_timestamp=True,
        )
        x, _ = data.get_series("Series 1")
        assert x.tolist() == [1000, 2000]
        assert data.x_is_timestamp

    def test_datetime64(self):
        values = np.array(["1970-01-01T00:00:00.500"], dtype="datetime64[ms]")
        assert to_timestamp_ms(values).tolist() == [500]

    def test_numbers_pass_through(self):
        assert to_timestamp_ms([1, 2.5]).tolist() == [1, 2.5]


class TestInterpolation:
    def test_between_samples(self):
        x = np.array([0.0, 10.0])
        assert interpolate_at(x, np.array([0.0, 100.0]), 2.5) == 25

    def test_on_sample_or_outside(self):
        x = np.array([0.0, 10.0])
        y = np.array([0.0, 100.0])
        assert interpolate_at(x, y, 0.0) is None
        assert interpolate_at(x, y, -1.0) is None
        assert interpolate_at(x, y, 11.0) is None
