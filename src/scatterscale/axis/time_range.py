import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from loguru import logger

from .segments import (
    AxisPoint,
    AxisRange,
    RangeSegment,
    segments_from_points,
)
from .ticks import (
    DAY_TICKS,
    EPOCH,
    HOUR_TICKS,
    LABEL_DATE,
    LABEL_DATETIME,
    LABEL_DATETIME_MS,
    MILLISECOND_TICKS,
    MINUTE_TICKS,
    MONTH_TICKS,
    SECOND_TICKS,
    WEEK_TICKS,
    YEAR_TICKS,
    decompose,
    format_timestamp,
    pick_tick,
    to_datetime,
)

# Unit durations in milliseconds; month and year are nominal
SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 28 * DAY
YEAR = 365 * DAY

# Instants representable by datetime, years 1 to 9999
_MS = timedelta(milliseconds=1)
TIMESTAMP_MIN = (datetime.min.replace(tzinfo=timezone.utc) - EPOCH) // _MS
TIMESTAMP_MAX = (datetime.max.replace(tzinfo=timezone.utc) - EPOCH) // _MS


@dataclass(frozen=True)
class CalendarStep:
    """Calendar increment, applied year first down to milliseconds."""

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0

    @property
    def label_granularity(self) -> str:
        """Label detail implied by the finest non-zero component."""
        if self.milliseconds:
            return LABEL_DATETIME_MS
        if self.hours or self.minutes or self.seconds:
            return LABEL_DATETIME
        return LABEL_DATE


def _compose(
    year: int,
    month_index: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
) -> int:
    """
    Build a UTC instant from calendar components that may overflow.

    ``month_index`` is zero based and may leave [0, 11]; days, hours and finer
    components roll over into the next unit the way a calendar does.

    Raises
    ------
    OverflowError
        If the instant falls outside years 1 to 9999.
    """
    carry_years, month_index = divmod(month_index, 12)
    try:
        base = datetime(year + carry_years, month_index + 1, 1, tzinfo=timezone.utc)
        moment = base + timedelta(
            days=day - 1,
            hours=hour,
            minutes=minute,
            seconds=second,
            milliseconds=millisecond,
        )
    except (ValueError, OverflowError) as e:
        raise OverflowError(
            f"Calendar instant in year {year + carry_years} is out of range"
        ) from e
    return (moment - EPOCH) // _MS


def add_calendar_step(instant_ms: int, step: CalendarStep, sign: int = 1) -> int:
    """
    Move an instant by a calendar step.

    Parameters
    ----------
    instant_ms : int
        UTC timestamp in milliseconds.
    step : CalendarStep
        Increment to apply.
    sign : int, default=1
        1 to move forward, -1 to move backward.

    Returns
    -------
    int
        The new instant. Month arithmetic keeps the day of month and lets it
        overflow into the following month (31 January + 1 month = 3 March in
        a common year).

    Raises
    ------
    OverflowError
        If the result falls outside the supported calendar.
    """
    moment = to_datetime(instant_ms)
    return _compose(
        moment.year + sign * step.years,
        moment.month - 1 + sign * step.months,
        moment.day + sign * step.days,
        moment.hour + sign * step.hours,
        moment.minute + sign * step.minutes,
        moment.second + sign * step.seconds,
        moment.microsecond // 1000 + sign * step.milliseconds,
    )


def _try_step(instant_ms: int, step: CalendarStep, sign: int = 1) -> Optional[int]:
    """add_calendar_step, or None when the result leaves the calendar."""
    try:
        return add_calendar_step(instant_ms, step, sign)
    except OverflowError:
        return None


def _ceil_multiple(value: int, factor: int) -> int:
    return int(math.ceil(value / factor) * factor)


def choose_calendar_step(
    vmin: int, vmax: int, density: float
) -> Tuple[Optional[int], CalendarStep]:
    """
    Select the calendar unit and step for a span, and the aligned start instant.

    Parameters
    ----------
    vmin, vmax : int
        Domain bounds in UTC milliseconds, ``vmin < vmax``.
    density : float
        Target number of ticks.

    Returns
    -------
    Tuple[Optional[int], CalendarStep]
        Aligned start instant and the step between ticks. The start is None
        when alignment would pass the end of the calendar.
    """
    raw = (vmax - vmin) / density
    origin = to_datetime(vmin)
    year, month_index, day = origin.year, origin.month - 1, origin.day
    hour, minute, second = origin.hour, origin.minute, origin.second
    millisecond = origin.microsecond // 1000

    # Drop components finer than the step
    if raw > SECOND:
        millisecond = 0
    if raw > MINUTE:
        second = 0
    if raw > HOUR:
        minute = 0
    if raw > DAY:
        hour = 0
    if raw > MONTH:
        day = 1
    if raw > YEAR:
        month_index = 0

    if raw < SECOND:
        tick = int(pick_tick(MILLISECOND_TICKS, raw))
        millisecond = _ceil_multiple(origin.microsecond // 1000, tick)
        step = CalendarStep(milliseconds=tick)
    elif raw < MINUTE:
        tick = int(pick_tick(SECOND_TICKS, raw / SECOND))
        second = _ceil_multiple(origin.second, tick)
        step = CalendarStep(seconds=tick)
    elif raw < HOUR:
        tick = int(pick_tick(MINUTE_TICKS, raw / MINUTE))
        minute = _ceil_multiple(origin.minute, tick)
        step = CalendarStep(minutes=tick)
    elif raw < DAY:
        tick = int(pick_tick(HOUR_TICKS, raw / HOUR))
        hour = _ceil_multiple(origin.hour, tick)
        step = CalendarStep(hours=tick)
    elif raw < WEEK:
        tick = int(pick_tick(DAY_TICKS, raw / DAY))
        step = CalendarStep(days=tick)
    elif raw < MONTH:
        tick = int(pick_tick(WEEK_TICKS, raw / WEEK))
        # Monday following the start date
        day = day - origin.weekday() + 7
        step = CalendarStep(days=tick * 7)
    elif raw < YEAR:
        tick = int(pick_tick(MONTH_TICKS, raw / MONTH))
        month_index = _ceil_multiple(origin.month - 1, tick)
        step = CalendarStep(months=tick)
    else:
        mantissa, exponent = decompose(raw / YEAR)
        factor = int(pick_tick(YEAR_TICKS, mantissa) * 10**exponent)
        year = _ceil_multiple(origin.year, factor)
        step = CalendarStep(years=factor)

    try:
        start = _compose(year, month_index, day, hour, minute, second, millisecond)
    except OverflowError:
        start = None
    logger.debug(f"Time range raw step {raw:.1f} ms -> {step}, start={start}")
    return start, step


def build_time_range(
    vmin: Optional[float], vmax: Optional[float], density: float
) -> AxisRange:
    """
    Build weighted segments for a calendar axis.

    Parameters
    ----------
    vmin, vmax : Optional[float]
        Domain bounds in UTC milliseconds, rounded to whole milliseconds.
        None means there is no data to show.
    density : float
        Target number of ticks across the axis.

    Returns
    -------
    AxisRange
        Ordered list of RangeSegment, or an AxisPoint sentinel when the domain
        is empty or a single instant. Partial segments at the edges are
        weighted by their share of the full calendar step next to them, so
        month and year steps of different lengths are weighted correctly.

    Raises
    ------
    ValueError
        If density is not positive.
    """
    if density <= 0:
        raise ValueError(f"Axis density must be positive, got {density}")

    if vmin is None or vmax is None:
        return AxisPoint(None, ())

    vmin = int(round(vmin))
    vmax = int(round(vmax))
    clamped = (
        min(max(vmin, TIMESTAMP_MIN), TIMESTAMP_MAX),
        min(max(vmax, TIMESTAMP_MIN), TIMESTAMP_MAX),
    )
    if clamped != (vmin, vmax):
        logger.warning(
            f"Time range [{vmin}, {vmax}] clamped to the calendar span {clamped}"
        )
        vmin, vmax = clamped
    if vmin == vmax:
        return AxisPoint(float(vmin), format_timestamp(vmin, LABEL_DATETIME_MS))

    start, step = choose_calendar_step(vmin, vmax, density)
    granularity = step.label_granularity

    # Stepping stops at the end of the calendar
    current = start
    while current is not None and current < vmin:
        current = _try_step(current, step)

    ticks: List[int] = []
    while current is not None and current <= vmax:
        ticks.append(current)
        current = _try_step(current, step)

    if not ticks:
        full_step = _full_step(vmin, step, 1)
        segment = RangeSegment(
            min=AxisPoint(float(vmin), ()),
            max=AxisPoint(float(vmax), ()),
            size=float(vmax - vmin),
            weight=(vmax - vmin) / full_step,
        )
        return [segment]

    points = [AxisPoint(float(t), format_timestamp(t, granularity)) for t in ticks]
    leading_step = None
    trailing_step = None
    if ticks[0] > vmin:
        points.insert(0, AxisPoint(float(vmin), ()))
        leading_step = _full_step(ticks[0], step, -1)
    if ticks[-1] != vmax:
        points.append(AxisPoint(float(vmax), ()))
        trailing_step = _full_step(ticks[-1], step, 1)

    return segments_from_points(points, leading_step, trailing_step)


def _nominal_length(step: CalendarStep) -> int:
    return (
        step.years * YEAR
        + step.months * MONTH
        + step.days * DAY
        + step.hours * HOUR
        + step.minutes * MINUTE
        + step.seconds * SECOND
        + step.milliseconds
    )


def _full_step(tick: int, step: CalendarStep, sign: int) -> float:
    """
    Elapsed time of the calendar step between a tick and its neighbour.

    When the neighbour in direction ``sign`` lies beyond the calendar, the
    step on the other side of the tick is measured instead, and failing that
    the nominal length of the step.
    """
    for direction in (sign, -sign):
        neighbour = _try_step(tick, step, direction)
        if neighbour is not None:
            return float(abs(neighbour - tick))
    return float(_nominal_length(step))
