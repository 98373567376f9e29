"""
scatterscale: axis and decimation engine for scatter and time-series charts.

Chooses readable tick boundaries for numeric and calendar spans, weights the
segments between them for pixel-accurate scaling, reduces dense series to a
handful of samples per pixel column and finds the point under the cursor.
"""

# Import from axis subpackage
from scatterscale.axis.linear_range import build_linear_range
from scatterscale.axis.segments import AxisPoint, RangeSegment
from scatterscale.axis.ticks import nice_step, pick_tick
from scatterscale.axis.time_range import CalendarStep, add_calendar_step, build_time_range

# Import from chart subpackage
from scatterscale.chart.config import ChartConfig
from scatterscale.chart.coordinate_manager import (
    Axis,
    CoordinateMapper,
    build_axis,
    build_geometry,
    pixel_to_value,
    value_to_pixel,
)
from scatterscale.chart.data_manager import LimitLine, SeriesDataManager
from scatterscale.chart.decimation import DecimatedPoint, DecimationManager, decimate
from scatterscale.chart.display_state import DisplayState, Domain
from scatterscale.chart.plot import ChartAxes, RenderResult, ScatterChart
from scatterscale.chart.tooltip import (
    DefaultTooltipFormatter,
    TooltipFormatter,
    TooltipFormatterRegistry,
    TooltipIndex,
)
from scatterscale.log import configure_logging

__all__ = [
    # Axis ranges
    "AxisPoint",
    "RangeSegment",
    "pick_tick",
    "nice_step",
    "build_linear_range",
    "CalendarStep",
    "add_calendar_step",
    "build_time_range",
    # Chart engine
    "ScatterChart",
    "ChartAxes",
    "RenderResult",
    "ChartConfig",
    "SeriesDataManager",
    "LimitLine",
    "Axis",
    "CoordinateMapper",
    "build_axis",
    "build_geometry",
    "value_to_pixel",
    "pixel_to_value",
    "DecimationManager",
    "DecimatedPoint",
    "decimate",
    "DisplayState",
    "Domain",
    "TooltipIndex",
    "TooltipFormatter",
    "TooltipFormatterRegistry",
    "DefaultTooltipFormatter",
    "configure_logging",
]
