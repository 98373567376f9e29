from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

ArrayLike = Union[np.ndarray, Sequence[Any]]


@dataclass(frozen=True)
class Extent:
    """Finite bounds of a series; all None when it has no finite sample."""

    x_min: Optional[float] = None
    x_max: Optional[float] = None
    y_min: Optional[float] = None
    y_max: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.x_min is None

    def merge(self, other: "Extent") -> "Extent":
        """Return the smallest extent covering both extents."""

        def pick(a, b, fn):
            if a is None:
                return b
            if b is None:
                return a
            return fn(a, b)

        return Extent(
            x_min=pick(self.x_min, other.x_min, min),
            x_max=pick(self.x_max, other.x_max, max),
            y_min=pick(self.y_min, other.y_min, min),
            y_max=pick(self.y_max, other.y_max, max),
        )


@dataclass(frozen=True)
class LimitLine:
    """Horizontal reference line drawn across the plot at ``value``."""

    value: float
    name: str
    color: Optional[str] = None


def to_timestamp_ms(values: ArrayLike) -> np.ndarray:
    """
    Convert timestamps to float milliseconds since the UTC epoch.

    Accepts numbers (already milliseconds), ``datetime`` objects (naive ones
    are taken as UTC) and numpy ``datetime64`` values.
    """
    arr = np.asarray(values)
    if np.issubdtype(arr.dtype, np.datetime64):
        return arr.astype("datetime64[ms]").astype(np.int64).astype(np.float64)
    if arr.dtype == object:
        converted = []
        for value in arr.tolist():
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                converted.append(value.timestamp() * 1000.0)
            elif value is None:
                converted.append(np.nan)
            else:
                converted.append(float(value))
        return np.asarray(converted, dtype=np.float64)
    return arr.astype(np.float64)


class SeriesDataManager:
    """
    Manages series storage and extent bookkeeping for a chart.

    Series are kept as ascending float64 x arrays with matching y arrays.
    All series of a chart share the same kind of x axis: either plain numbers
    or millisecond timestamps. Optional horizontal limit lines widen the y
    extent.

    Input arrays are copied on load and never modified afterwards.
    """

    def __init__(
        self,
        x: Union[ArrayLike, List[ArrayLike]],
        y: Union[ArrayLike, List[ArrayLike]],
        name: Union[str, List[str], None] = None,
        x_is_timestamp: Union[bool, List[bool]] = False,
        limits: Optional[Sequence[Union[float, Dict[str, Any], LimitLine]]] = None,
    ):
        """
        Initialise the data manager.

        Parameters
        ----------
        x : Union[ArrayLike, List[ArrayLike]]
            X values of one series, or a list with one array per series.
            Timestamps may be given as milliseconds, datetimes or datetime64.
        y : Union[ArrayLike, List[ArrayLike]]
            Y values, matching the shape of ``x``.
        name : Union[str, List[str], None], default=None
            Series name(s). Missing names default to "Series 1", "Series 2", ...
        x_is_timestamp : Union[bool, List[bool]], default=False
            Whether x values are timestamps, for all series or per series.
            A chart cannot mix timestamp and numeric series.
        limits : Optional[Sequence], default=None
            Limit lines as values, dictionaries with ``value``/``name``/``color``
            keys, or LimitLine instances.

        Raises
        ------
        ValueError
            If x and y arrays have mismatched lengths, names are duplicated, or
            timestamp and numeric series are mixed.
        """
        if isinstance(x_is_timestamp, list):
            if len(set(x_is_timestamp)) > 1:
                raise ValueError(
                    "All series of a chart must share the same x format: timestamps or numbers"
                )
            x_is_timestamp = bool(x_is_timestamp[0]) if x_is_timestamp else False
        self.x_is_timestamp = x_is_timestamp
        self.x_arrays, self.y_arrays, self.names = self._standardize_inputs(x, y, name)

        if len(set(self.names)) != len(self.names):
            raise ValueError(f"Series names must be unique, got {self.names}")

        for i in range(len(self.names)):
            self._validate_core_data(i)

        self._extents = [self._compute_extent(i) for i in range(len(self.names))]
        self.limits: List[LimitLine] = self._standardize_limits(limits or [])

    @staticmethod
    def split_samples(
        series: Dict[str, Sequence[Tuple[Any, float]]],
    ) -> Tuple[List[List[Any]], List[List[float]], List[str]]:
        """Split a mapping of series name to ``(x, y)`` samples into per-series lists."""
        names = list(series.keys())
        xs = [[sample[0] for sample in series[n]] for n in names]
        ys = [[sample[1] for sample in series[n]] for n in names]
        return xs, ys, names

    @classmethod
    def from_samples(
        cls,
        series: Dict[str, Sequence[Tuple[Any, float]]],
        x_is_timestamp: bool = False,
        limits: Optional[Sequence[Union[float, Dict[str, Any], LimitLine]]] = None,
    ) -> "SeriesDataManager":
        """Build a manager from a mapping of series name to ``(x, y)`` samples."""
        xs, ys, names = cls.split_samples(series)
        return cls(xs, ys, names, x_is_timestamp=x_is_timestamp, limits=limits)

    def _standardize_inputs(
        self,
        x: Union[ArrayLike, List[ArrayLike]],
        y: Union[ArrayLike, List[ArrayLike]],
        name: Union[str, List[str], None],
    ) -> Tuple[List[np.ndarray], List[np.ndarray], List[str]]:
        """Standardize inputs to lists of float64 arrays and names."""
        multi = isinstance(x, list) and len(x) > 0 and np.ndim(x[0]) == 1
        x_list = list(x) if multi else [x]

        if multi:
            if not isinstance(y, list) or len(y) != len(x_list):
                raise ValueError(
                    f"Number of y arrays must match number of x arrays ({len(x_list)})"
                )
            y_list = list(y)
        else:
            y_list = [y]

        if self.x_is_timestamp:
            x_arrays = [to_timestamp_ms(arr) for arr in x_list]
        else:
            x_arrays = [np.array(arr, dtype=np.float64) for arr in x_list]
        y_arrays = [np.array(arr, dtype=np.float64) for arr in y_list]

        n_series = len(x_arrays)
        if isinstance(name, list):
            if len(name) != n_series:
                logger.warning(
                    f"Number of names ({len(name)}) doesn't match number of series ({n_series}). Using defaults."
                )
                names = [f"Series {i + 1}" for i in range(n_series)]
            else:
                names = [str(n) for n in name]
        elif name is not None and n_series == 1:
            names = [name]
        elif name is not None:
            names = [f"{name} {i + 1}" for i in range(n_series)]
        else:
            names = [f"Series {i + 1}" for i in range(n_series)]

        return x_arrays, y_arrays, names

    def _validate_core_data(self, idx: int) -> None:
        """
        Validate one series and sort it by x if needed.

        Raises
        ------
        ValueError
            If the x and y arrays have different lengths or are not 1-D.
        """
        x, y = self.x_arrays[idx], self.y_arrays[idx]
        if x.ndim != 1 or y.ndim != 1:
            raise ValueError(f"Series '{self.names[idx]}' must be one-dimensional")
        if len(x) != len(y):
            raise ValueError(
                f"X and Y arrays for series '{self.names[idx]}' must have the same length. Got x={len(x)}, y={len(y)}"
            )
        if len(x) == 0:
            logger.warning(f"Series '{self.names[idx]}' is empty.")
            return

        non_finite = ~(np.isfinite(x) & np.isfinite(y))
        if np.any(non_finite):
            logger.warning(
                f"Series '{self.names[idx]}' has {int(np.sum(non_finite))} non-finite samples; they will be skipped."
            )

        finite_x = x[np.isfinite(x)]
        if len(finite_x) > 1 and np.any(np.diff(finite_x) < 0):
            logger.warning(
                f"X values of series '{self.names[idx]}' are not ascending; sorting them."
            )
            order = np.argsort(x, kind="stable")
            self.x_arrays[idx] = x[order]
            self.y_arrays[idx] = y[order]

    def _standardize_limits(
        self, limits: Sequence[Union[float, Dict[str, Any], LimitLine]]
    ) -> List[LimitLine]:
        standardized = []
        count = 1
        for limit in limits:
            if isinstance(limit, LimitLine):
                standardized.append(limit)
                continue
            if isinstance(limit, dict):
                value = limit["value"]
                name = limit.get("name")
                color = limit.get("color")
            else:
                value, name, color = limit, None, None
            if not isinstance(name, str):
                name = f"limit{count}"
                count += 1
            standardized.append(LimitLine(value=float(value), name=name, color=color))
        return standardized

    def _compute_extent(self, idx: int) -> Extent:
        x, y = self.x_arrays[idx], self.y_arrays[idx]
        mask = np.isfinite(x) & np.isfinite(y)
        if not np.any(mask):
            return Extent()
        return Extent(
            x_min=float(np.min(x[mask])),
            x_max=float(np.max(x[mask])),
            y_min=float(np.min(y[mask])),
            y_max=float(np.max(y[mask])),
        )

    @property
    def num_series(self) -> int:
        """Get the number of series."""
        return len(self.names)

    def _index(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise ValueError(f"Unknown series '{name}'. Known series: {self.names}") from None

    def get_series(self, name: str) -> Tuple[np.ndarray, np.ndarray]:
        """Get the x and y arrays of a series."""
        idx = self._index(name)
        return self.x_arrays[idx], self.y_arrays[idx]

    def get_finite_series(self, name: str) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Get x, y and original indices of the finite samples of a series."""
        x, y = self.get_series(name)
        keep = np.flatnonzero(np.isfinite(x) & np.isfinite(y))
        return x[keep], y[keep], keep

    def get_extent(self, name: str) -> Extent:
        """Get the finite extent of a series."""
        return self._extents[self._index(name)]

    def get_global_extent(self) -> Extent:
        """Get the finite extent across all series."""
        extent = Extent()
        for series_extent in self._extents:
            extent = extent.merge(series_extent)
        return extent

    def get_limits_extent(self) -> Tuple[Optional[float], Optional[float]]:
        """Get the lowest and highest limit line values."""
        values = [limit.value for limit in self.limits if np.isfinite(limit.value)]
        if not values:
            return None, None
        return min(values), max(values)

    def get_y_extent_in_range(
        self, x_start: float, x_end: float, name: str
    ) -> Tuple[Optional[float], Optional[float]]:
        """
        Get the y extent of a series inside an x window.

        Includes the values interpolated at the window edges when the edges
        fall between two samples, so that a line crossing the window edge stays
        inside the y axis.

        Parameters
        ----------
        x_start, x_end : float
            Window bounds.
        name : str
            Series name.

        Returns
        -------
        Tuple[Optional[float], Optional[float]]
            Minimum and maximum y, or (None, None) when nothing is visible.
        """
        x, y, _ = self.get_finite_series(name)
        if len(x) == 0:
            return None, None

        candidates = []
        inside = (x >= x_start) & (x <= x_end)
        if np.any(inside):
            candidates.extend([float(np.min(y[inside])), float(np.max(y[inside]))])

        for edge in (x_start, x_end):
            y_edge = interpolate_at(x, y, edge)
            if y_edge is not None:
                candidates.append(y_edge)

        if not candidates:
            logger.debug(f"No data in range [{x_start}, {x_end}] for series '{name}'")
            return None, None
        return min(candidates), max(candidates)


def interpolate_at(x: np.ndarray, y: np.ndarray, x_value: float) -> Optional[float]:
    """
    Linearly interpolate y at ``x_value`` between the two samples straddling it.

    Returns None when ``x_value`` lies outside the series or exactly on a sample.
    """
    right = int(np.searchsorted(x, x_value, side="right"))
    left = right - 1
    if left < 0 or right >= len(x) or x[left] == x_value:
        return None
    return lerp(x[left], y[left], x[right], y[right], x_value)


def lerp(x0: float, y0: float, x1: float, y1: float, x_value: float) -> float:
    """Value at ``x_value`` on the line through (x0, y0) and (x1, y1)."""
    return float(y0 + (y1 - y0) * (x_value - x0) / (x1 - x0))
