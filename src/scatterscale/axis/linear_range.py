import math
from typing import List, Optional

from loguru import logger

from .segments import (
    AxisPoint,
    AxisRange,
    RangeSegment,
    segments_from_points,
)
from .ticks import format_number, nice_step, step_decimals

# Relative slack when testing whether a value sits on the tick grid
GRID_TOLERANCE = 1e-9


def _tick(index: int, step: float, decimals: int) -> AxisPoint:
    value = round(index * step, decimals)
    if value == 0:
        value = 0.0
    return AxisPoint(value, (format_number(value),))


def build_linear_range(
    vmin: Optional[float],
    vmax: Optional[float],
    density: float,
    extended: bool = False,
    only_integer: bool = False,
) -> AxisRange:
    """
    Build weighted segments for a numeric axis.

    Parameters
    ----------
    vmin, vmax : Optional[float]
        Domain bounds. None means there is no data to show.
    density : float
        Target number of ticks across the axis.
    extended : bool, default=False
        If True, cover the full tick grid from the tick at or below ``vmin`` to
        the tick at or above ``vmax`` with unit weights. Otherwise the axis
        starts and ends exactly at the bounds and the partial segments at the
        edges are weighted by the share of a full step they cover.
    only_integer : bool, default=False
        Widen the bounds to whole numbers before choosing the step.

    Returns
    -------
    AxisRange
        Ordered list of RangeSegment, or an AxisPoint sentinel when the domain
        is empty (value None) or a single value.

    Raises
    ------
    ValueError
        If density is not positive.
    """
    if density <= 0:
        raise ValueError(f"Axis density must be positive, got {density}")

    if vmin is None or vmax is None:
        return AxisPoint(None, ())

    if only_integer:
        vmin = float(math.floor(vmin))
        vmax = float(math.ceil(vmax))

    if vmin == vmax:
        return AxisPoint(vmin, (format_number(vmin),))

    step = nice_step((vmax - vmin) / density)
    decimals = step_decimals(step)
    logger.debug(
        f"Linear range [{vmin}, {vmax}] density={density}: step={step}, extended={extended}"
    )

    if extended:
        first = math.floor(vmin / step + GRID_TOLERANCE)
        last = math.ceil(vmax / step - GRID_TOLERANCE)
        points = [_tick(k, step, decimals) for k in range(first, last + 1)]
        return segments_from_points(points)

    k = math.ceil(vmin / step - GRID_TOLERANCE)
    if _tick(k, step, decimals).value < vmin:
        k += 1

    ticks: List[AxisPoint] = []
    while True:
        tick = _tick(k, step, decimals)
        if tick.value > vmax:
            break
        ticks.append(tick)
        k += 1

    if not ticks:
        # No grid value falls inside the domain: a single partial segment
        segment = RangeSegment(
            min=AxisPoint(vmin, ()),
            max=AxisPoint(vmax, ()),
            size=vmax - vmin,
            weight=(vmax - vmin) / step,
        )
        return [segment]

    # Ticks within rounding noise of a bound are moved onto it
    slack = GRID_TOLERANCE * step
    if ticks[0].value - vmin <= slack:
        ticks[0] = AxisPoint(vmin, ticks[0].label)
    if vmax - ticks[-1].value <= slack:
        ticks[-1] = AxisPoint(vmax, ticks[-1].label)

    points = list(ticks)
    leading_step = None
    trailing_step = None
    if ticks[0].value > vmin:
        points.insert(0, AxisPoint(vmin, ()))
        leading_step = step
    if ticks[-1].value < vmax:
        points.append(AxisPoint(vmax, ()))
        trailing_step = step

    return segments_from_points(points, leading_step, trailing_step)
