"""
Tests for chart configuration.
"""

import pytest
from pydantic import ValidationError

from scatterscale.chart.config import ChartConfig


class TestChartConfig:
    """Test configuration validation."""

    def test_defaults(self):
        config = ChartConfig()
        assert (config.width, config.height) == (500, 500)
        assert config.x_density == 5
        assert config.tooltip_radius == 10
        assert not config.only_integer

    @pytest.mark.parametrize(
        "field,value",
        [("width", 0), ("height", -5), ("x_density", 0), ("y_density", -1), ("tooltip_radius", -1)],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ChartConfig(**{field: value})

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            ChartConfig(colour="red")

    def test_frozen(self):
        config = ChartConfig()
        with pytest.raises(ValidationError):
            config.width = 10

    def test_resized(self):
        config = ChartConfig(width=100, height=50, x_density=3)
        resized = config.resized(200, 80)
        assert (resized.width, resized.height) == (200, 80)
        assert resized.x_density == 3
        assert config.width == 100

    def test_resized_validates(self):
        with pytest.raises(ValidationError):
            ChartConfig().resized(0, 10)
