"""
Tests for segment geometry and value/pixel conversion.
"""

import numpy as np
import pytest

from scatterscale.axis.linear_range import build_linear_range
from scatterscale.axis.segments import AxisPoint, RangeSegment
from scatterscale.chart.coordinate_manager import (
    CoordinateMapper,
    build_axis,
    build_geometry,
    pixel_to_value,
    round_pixel,
    value_to_pixel,
)


class TestGeometry:
    """Test pixel allocation over weighted segments."""

    def test_even_split(self):
        geometry = build_geometry(build_linear_range(0, 100, 5), 500)
        assert [g.length for g in geometry] == [100.0] * 5
        assert all(g.scale == pytest.approx(5.0) for g in geometry)

    def test_lengths_sum_to_pixel_length(self):
        for vmin, vmax in [(3, 97), (-7.3, 12.9), (0.001, 0.0093)]:
            geometry = build_geometry(build_linear_range(vmin, vmax, 5), 437)
            assert sum(g.length for g in geometry) == pytest.approx(437)

    def test_truncated_segments_get_proportional_length(self):
        geometry = build_geometry(build_linear_range(3, 97, 5), 570)
        # Total weight 2 * 0.85 + 4 = 5.7
        assert geometry[0].length == pytest.approx(85)
        assert geometry[1].length == pytest.approx(100)

    def test_sentinel_has_no_geometry(self):
        assert build_geometry(AxisPoint(1.0, ("1",)), 100) == ()

    def test_zero_size_segment_is_programming_error(self):
        point = AxisPoint(1.0, ("1",))
        with pytest.raises(AssertionError):
            build_geometry([RangeSegment(point, point, 0.0)], 100)


class TestMapping:
    """Test value/pixel conversion."""

    @pytest.fixture
    def axis(self):
        return build_axis(build_linear_range(0, 100, 5), 500)

    def test_value_to_pixel(self, axis):
        assert value_to_pixel(30, axis) == pytest.approx(150)
        assert value_to_pixel(0, axis) == pytest.approx(0)
        assert value_to_pixel(100, axis) == pytest.approx(500)

    def test_pixel_to_value(self, axis):
        assert pixel_to_value(150, axis) == pytest.approx(30)

    def test_out_of_range_pixels_clamp(self, axis):
        assert pixel_to_value(-10, axis) == 0
        assert pixel_to_value(600, axis) == 100

    def test_out_of_range_values_extrapolate(self, axis):
        assert value_to_pixel(120, axis) == pytest.approx(600)
        assert value_to_pixel(-20, axis) == pytest.approx(-100)

    def test_round_trip(self):
        axis = build_axis(build_linear_range(3, 97, 5), 333)
        mapper = CoordinateMapper(axis)
        one_pixel = (97 - 3) / 333
        for value in np.linspace(3, 97, 101):
            back = mapper.pixel_to_value(mapper.value_to_pixel(value))
            assert abs(back - value) <= one_pixel

    def test_vectorised_matches_scalar(self):
        axis = build_axis(build_linear_range(3, 97, 5), 333)
        mapper = CoordinateMapper(axis)
        values = np.linspace(-10, 110, 57)
        pixels = mapper.values_to_pixels(values)
        assert pixels == pytest.approx([mapper.value_to_pixel(v) for v in values])
        probes = np.linspace(-20, 350, 41)
        assert mapper.pixels_to_values(probes) == pytest.approx(
            [mapper.pixel_to_value(p) for p in probes]
        )

    def test_single_point_axis_maps_to_midpoint(self):
        axis = build_axis(AxisPoint(42.0, ("42",)), 300)
        assert value_to_pixel(42.0, axis) == 150
        assert pixel_to_value(12, axis) == 42.0

    def test_empty_axis(self):
        axis = build_axis(AxisPoint(None, ()), 300)
        assert value_to_pixel(1.0, axis) is None
        assert pixel_to_value(1.0, axis) is None


class TestRoundPixel:
    def test_half_up(self):
        assert round_pixel(1.5) == 2
        assert round_pixel(-1.5) == -1
        assert round_pixel(2.49) == 2

    def test_missing(self):
        assert round_pixel(None) is None
        assert round_pixel(float("nan")) is None
