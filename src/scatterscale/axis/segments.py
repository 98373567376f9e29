from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class AxisPoint:
    """
    A boundary value on an axis together with its label lines.

    On its own an AxisPoint is also the degenerate-axis result: ``value=None``
    means there is no axis at all, any other value is a single-point axis.
    """

    value: Optional[float]
    label: Tuple[str, ...] = ()

    @property
    def is_tick(self) -> bool:
        return len(self.label) > 0


@dataclass(frozen=True)
class RangeSegment:
    """Interval between two adjacent axis points with its pixel allocation weight."""

    min: AxisPoint
    max: AxisPoint
    size: float
    weight: float = 1.0

    def contains(self, value: float) -> bool:
        return self.min.value <= value <= self.max.value


AxisRange = Union[List[RangeSegment], AxisPoint]


def is_degenerate(axis_range: AxisRange) -> bool:
    """True when a range builder returned a sentinel instead of segments."""
    return isinstance(axis_range, AxisPoint)


def segments_from_points(
    points: Sequence[AxisPoint],
    leading_step: Optional[float] = None,
    trailing_step: Optional[float] = None,
) -> List[RangeSegment]:
    """
    Join consecutive axis points into weighted segments.

    Parameters
    ----------
    points : Sequence[AxisPoint]
        Ordered axis points, at least two.
    leading_step : Optional[float], default=None
        Length of a full step at the lower edge when the first segment is
        truncated, None otherwise.
    trailing_step : Optional[float], default=None
        Length of a full step at the upper edge when the last segment is
        truncated, None otherwise.

    Returns
    -------
    List[RangeSegment]
        Contiguous segments. Truncated edges weigh the share of a full step
        they cover, interior segments weigh 1.
    """
    segments = []
    last = len(points) - 2
    for n in range(len(points) - 1):
        lower, upper = points[n], points[n + 1]
        size = upper.value - lower.value
        if n == 0 and leading_step is not None:
            weight = size / leading_step
        elif n == last and trailing_step is not None:
            weight = size / trailing_step
        else:
            weight = 1.0
        segments.append(RangeSegment(min=lower, max=upper, size=size, weight=weight))
    return segments


def axis_bounds(axis_range: AxisRange) -> Tuple[Optional[float], Optional[float]]:
    """Return the (min, max) values covered by a range or sentinel."""
    if is_degenerate(axis_range):
        return axis_range.value, axis_range.value
    return axis_range[0].min.value, axis_range[-1].max.value


def tick_points(axis_range: AxisRange) -> List[AxisPoint]:
    """All labelled points of a range, in order, without synthetic boundaries."""
    if is_degenerate(axis_range):
        return [axis_range] if axis_range.value is not None else []

    points = [axis_range[0].min] + [segment.max for segment in axis_range]
    return [point for point in points if point.is_tick]
