"""
Pydantic configuration model for scatter charts.

Holds the pixel extents and axis options consumed by the range builders,
the decimator and the tooltip lookup.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CHART_WIDTH = 500
DEFAULT_CHART_HEIGHT = 500
DEFAULT_DENSITY = 5
DEFAULT_TOOLTIP_RADIUS = 10
DEFAULT_CACHE_MAX_SIZE = 10


class ChartConfig(BaseModel):
    """Plot area size and axis settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: int = Field(
        default=DEFAULT_CHART_WIDTH, ge=1, description="Plot area width in pixels"
    )
    height: int = Field(
        default=DEFAULT_CHART_HEIGHT, ge=1, description="Plot area height in pixels"
    )
    x_density: float = Field(
        default=DEFAULT_DENSITY, gt=0, description="Target tick count on the x axis"
    )
    y_density: float = Field(
        default=DEFAULT_DENSITY, gt=0, description="Target tick count on the y axis"
    )
    only_integer: bool = Field(
        default=False, description="Round the y axis bounds to whole numbers"
    )
    tooltip_radius: int = Field(
        default=DEFAULT_TOOLTIP_RADIUS,
        ge=0,
        description="Search radius in pixels for tooltip lookup",
    )
    cache_max_size: int = Field(
        default=DEFAULT_CACHE_MAX_SIZE,
        ge=1,
        description="Maximum number of cached decimation results",
    )

    def resized(self, width: int, height: int) -> "ChartConfig":
        """Return a copy with a new plot area size."""
        return self.model_validate({**self.model_dump(), "width": width, "height": height})
