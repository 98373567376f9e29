"""
Tick selection and weighted range building for numeric and calendar axes.
"""

from scatterscale.axis.linear_range import build_linear_range
from scatterscale.axis.segments import AxisPoint, AxisRange, RangeSegment
from scatterscale.axis.ticks import format_number, format_timestamp, nice_step, pick_tick
from scatterscale.axis.time_range import CalendarStep, add_calendar_step, build_time_range

__all__ = [
    "AxisPoint",
    "AxisRange",
    "RangeSegment",
    "pick_tick",
    "nice_step",
    "format_number",
    "format_timestamp",
    "build_linear_range",
    "CalendarStep",
    "add_calendar_step",
    "build_time_range",
]
