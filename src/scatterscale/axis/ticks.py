import math
from datetime import datetime, timedelta, timezone
from typing import Sequence, Tuple

# Nice multipliers, applied at every power of ten
LINEAR_TICKS: Tuple[float, ...] = (1, 2, 2.5, 5, 10)

# Calendar multipliers per unit
MILLISECOND_TICKS: Tuple[int, ...] = (1, 2, 5, 10, 20, 50, 100, 200, 500)
SECOND_TICKS: Tuple[int, ...] = (1, 2, 5, 10, 15, 20, 30)
MINUTE_TICKS: Tuple[int, ...] = (1, 2, 5, 10, 20, 30)
HOUR_TICKS: Tuple[int, ...] = (1, 2, 4, 6, 8, 10, 12)
DAY_TICKS: Tuple[int, ...] = (1, 2, 4)
WEEK_TICKS: Tuple[int, ...] = (1, 2)
MONTH_TICKS: Tuple[int, ...] = (1, 2, 3, 4, 6)
YEAR_TICKS: Tuple[int, ...] = (1, 2, 5, 10)

# Label granularities for time axes
LABEL_DATE = "date"
LABEL_DATETIME = "datetime"
LABEL_DATETIME_MS = "datetime_ms"

# Beyond these exponents labels switch to exponential notation
LABEL_MAX_EXPONENT = 8
LABEL_MIN_EXPONENT = -6
LABEL_PRECISION = 5

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def pick_tick(candidates: Sequence[float], raw_step: float) -> float:
    """
    Pick the candidate closest to a raw step size.

    Ties are resolved in favour of the candidate listed first.

    Parameters
    ----------
    candidates : Sequence[float]
        Ordered candidate values.
    raw_step : float
        Step size to approximate.

    Returns
    -------
    float
        The selected candidate.
    """
    if len(candidates) == 0:
        raise ValueError("At least one tick candidate is required")

    best = candidates[0]
    best_diff = abs(best - raw_step)
    for candidate in candidates[1:]:
        diff = abs(candidate - raw_step)
        if diff < best_diff:
            best = candidate
            best_diff = diff
    return best


def decompose(value: float) -> Tuple[float, int]:
    """
    Split a number into base-10 mantissa and exponent.

    Parameters
    ----------
    value : float
        Finite number to decompose.

    Returns
    -------
    Tuple[float, int]
        Mantissa in [1, 10) (signed) and integer exponent. Zero maps to (0.0, 0).
    """
    mantissa, exponent = f"{value:.15e}".split("e")
    return float(mantissa), int(exponent)


def nice_step(raw_step: float) -> float:
    """Round a raw step to the nearest 1/2/2.5/5/10 multiple of its magnitude."""
    mantissa, exponent = decompose(raw_step)
    return pick_tick(LINEAR_TICKS, abs(mantissa)) * 10.0**exponent


def step_decimals(step: float) -> int:
    """Number of decimals needed to print multiples of a nice step exactly."""
    _, exponent = decompose(step)
    # 2.5 needs one digit more than its exponent
    return max(0, 1 - exponent)


def _plain(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(value)


def format_number(value: float) -> str:
    """Format a tick value for a linear axis label."""
    if not math.isfinite(value):
        return str(value)

    mantissa, exponent = decompose(value)
    if exponent > LABEL_MAX_EXPONENT or exponent < LABEL_MIN_EXPONENT:
        return f"{_plain(round(mantissa, LABEL_PRECISION))}e{exponent}"

    rounded = round(value, LABEL_PRECISION)
    if rounded == 0:
        rounded = 0.0
    return _plain(rounded)


def to_datetime(instant_ms: float) -> datetime:
    """Convert a millisecond UTC timestamp to an aware datetime."""
    return EPOCH + timedelta(milliseconds=instant_ms)


def format_timestamp(instant_ms: float, granularity: str = LABEL_DATE) -> Tuple[str, ...]:
    """
    Format a millisecond timestamp as label lines.

    Parameters
    ----------
    instant_ms : float
        UTC timestamp in milliseconds.
    granularity : str, default=LABEL_DATE
        One of LABEL_DATE, LABEL_DATETIME or LABEL_DATETIME_MS.

    Returns
    -------
    Tuple[str, ...]
        ``dd/mm/yyyy`` followed by ``HH:MM:SS`` or ``HH:MM:SS.mmm`` when requested.
    """
    moment = to_datetime(instant_ms)
    date_line = moment.strftime("%d/%m/%Y")

    if granularity == LABEL_DATETIME_MS:
        return (date_line, f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}")
    if granularity == LABEL_DATETIME:
        return (date_line, moment.strftime("%H:%M:%S"))
    return (date_line,)
