from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple

import numpy as np
from loguru import logger
from numba import njit

from .coordinate_manager import Axis, CoordinateMapper, round_pixel
from .data_manager import lerp


@dataclass(frozen=True)
class DecimatedPoint:
    """
    A sample kept for display, with its pixel position.

    ``is_artifact`` marks a synthetic point interpolated at a truncated domain
    edge; such points carry no source ``index``.
    """

    x: float
    y: float
    pixel_x: int
    pixel_y: Optional[int]
    is_artifact: bool = False
    series_name: Optional[str] = None
    index: Optional[int] = None


@njit
def _compress_columns_numba(
    x: np.ndarray, y: np.ndarray, edges: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Numba-optimized single pass over a sorted series, one pixel column at a time.

    Parameters
    ----------
    x : np.ndarray
        Ascending x values.
    y : np.ndarray
        Y values.
    edges : np.ndarray
        Column boundaries in data units, ``n_columns + 1`` ascending values.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Indices of the kept samples and the column of each, in emission order:
        first sample, interior extremes in position order, last sample.
    """
    n_columns = len(edges) - 1
    kept = np.empty(4 * n_columns, dtype=np.int64)
    columns = np.empty(4 * n_columns, dtype=np.int64)
    count = 0
    i = 0
    n = len(x)

    for col in range(n_columns):
        lower = edges[col]
        upper = edges[col + 1]
        start = -1
        end = -1
        min_pos = -1
        max_pos = -1

        while i < n:
            xi = x[i]
            if xi > upper:
                break
            if xi >= lower:
                if start == -1:
                    start = i
                    min_pos = i
                    max_pos = i
                else:
                    if y[i] < y[min_pos]:
                        min_pos = i
                    if y[i] > y[max_pos]:
                        max_pos = i
                end = i
            i += 1

        if start == -1:
            continue

        kept[count] = start
        columns[count] = col
        count += 1

        if end == start:
            continue

        first = min_pos if min_pos < max_pos else max_pos
        second = max_pos if min_pos < max_pos else min_pos
        if start < first < end:
            kept[count] = first
            columns[count] = col
            count += 1
        if second != first and start < second < end:
            kept[count] = second
            columns[count] = col
            count += 1

        kept[count] = end
        columns[count] = col
        count += 1

    return kept[:count], columns[:count]


def column_edges(x_axis: Axis, pixel_width: int) -> np.ndarray:
    """
    Data-value boundaries of the pixel columns ``0 .. pixel_width - 1``.

    The first and last edges are pinned to the axis bounds so that samples on
    the domain edges always land in the first and last columns.
    """
    mapper = CoordinateMapper(x_axis)
    edges = mapper.pixels_to_values(np.arange(pixel_width + 1, dtype=np.float64))
    vmin, vmax = x_axis.bounds
    edges[0] = vmin
    edges[-1] = vmax
    return edges


class DecimationManager:
    """
    Reduces series to at most four samples per pixel column.

    Each non-empty column keeps its first and last samples and, when they lie
    strictly inside the column, its lowest and highest samples, so peaks and
    troughs survive any amount of decimation. Results are cached per view.
    """

    # Cache and performance constants
    CACHE_MAX_SIZE = 10

    def __init__(self, cache_max_size: int = CACHE_MAX_SIZE):
        """
        Initialise the decimation manager.

        Parameters
        ----------
        cache_max_size : int, default=CACHE_MAX_SIZE
            Maximum number of cached decimation results.
        """
        self._cache: Dict[Tuple, List[DecimatedPoint]] = {}
        self._cache_max_size = cache_max_size

    def _get_cache_key(
        self,
        data_id: Hashable,
        x_axis: Axis,
        pixel_width: int,
        y_axis: Optional[Axis],
    ) -> Tuple:
        """Generate cache key for decimated data."""
        y_key = None if y_axis is None else y_axis.range_key
        return (data_id, x_axis.range_key, pixel_width, y_key)

    def _manage_cache_size(self) -> None:
        """Remove oldest cache entry if cache is full."""
        if len(self._cache) >= self._cache_max_size:
            # Remove oldest entry (simple FIFO)
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]

    def clear_cache(self) -> None:
        """Clear the decimation cache."""
        self._cache.clear()

    def decimate(
        self,
        x: np.ndarray,
        y: np.ndarray,
        x_axis: Axis,
        pixel_width: int,
        y_axis: Optional[Axis] = None,
        series_name: Optional[str] = None,
        data_id: Optional[Hashable] = None,
    ) -> List[DecimatedPoint]:
        """
        Decimate a series for display on ``x_axis``.

        Parameters
        ----------
        x : np.ndarray
            Ascending x values.
        y : np.ndarray
            Y values. Samples where x or y is not finite are skipped.
        x_axis : Axis
            Horizontal axis the series is displayed on.
        pixel_width : int
            Number of pixel columns.
        y_axis : Optional[Axis], default=None
            Vertical axis used to fill ``pixel_y``. Left None when omitted.
        series_name : Optional[str], default=None
            Name stored on every emitted point.
        data_id : Optional[Hashable], default=None
            Identifier of the series data. Results are cached only when given.

        Returns
        -------
        List[DecimatedPoint]
            Kept samples in ascending x order, plus interpolated artifact points
            at the domain edges when the view cuts through the series.
            At most ``4 * pixel_width + 2`` points.
        """
        cache_key = None
        if data_id is not None:
            cache_key = self._get_cache_key(data_id, x_axis, pixel_width, y_axis)
            if cache_key in self._cache:
                logger.debug(f"Using cached decimation for key: {cache_key}")
                return self._cache[cache_key]

        result = self._decimate(x, y, x_axis, pixel_width, y_axis, series_name)

        if cache_key is not None:
            self._manage_cache_size()
            self._cache[cache_key] = result
        return result

    def _decimate(
        self,
        x: np.ndarray,
        y: np.ndarray,
        x_axis: Axis,
        pixel_width: int,
        y_axis: Optional[Axis],
        series_name: Optional[str],
    ) -> List[DecimatedPoint]:
        """Uncached decimation; returns at most ``4 * pixel_width + 2`` points."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        keep = np.flatnonzero(np.isfinite(x) & np.isfinite(y))
        if len(keep) < len(x):
            logger.debug(f"Skipping {len(x) - len(keep)} non-finite samples")
        x_fin = np.ascontiguousarray(x[keep])
        y_fin = np.ascontiguousarray(y[keep])

        vmin, vmax = x_axis.bounds
        if len(x_fin) == 0 or vmin is None or pixel_width < 1:
            return []

        y_mapper = CoordinateMapper(y_axis) if y_axis is not None else None

        def pixel_y(value: float) -> Optional[int]:
            if y_mapper is None:
                return None
            return round_pixel(y_mapper.value_to_pixel(value))

        if x_axis.is_degenerate:
            # Single-point axis: show the sample sitting on it, centered
            hits = np.flatnonzero(x_fin == vmin)
            if len(hits) == 0:
                return []
            j = int(hits[0])
            return [
                DecimatedPoint(
                    x=float(x_fin[j]),
                    y=float(y_fin[j]),
                    pixel_x=round_pixel(pixel_width / 2),
                    pixel_y=pixel_y(float(y_fin[j])),
                    series_name=series_name,
                    index=int(keep[j]),
                )
            ]

        edges = column_edges(x_axis, pixel_width)
        kept, columns = _compress_columns_numba(x_fin, y_fin, edges)
        points = [
            DecimatedPoint(
                x=float(x_fin[j]),
                y=float(y_fin[j]),
                pixel_x=int(col),
                pixel_y=pixel_y(float(y_fin[j])),
                series_name=series_name,
                index=int(keep[j]),
            )
            for j, col in zip(kept.tolist(), columns.tolist())
        ]

        # Last sample at or before each domain edge, and first at or after
        before_min = int(np.searchsorted(x_fin, vmin, side="right")) - 1
        after_max = int(np.searchsorted(x_fin, vmax, side="left"))
        cuts_min = before_min >= 0 and x_fin[before_min] < vmin
        cuts_max = after_max < len(x_fin) and x_fin[after_max] > vmax

        def artifact(x_value: float, j0: int, j1: int, column: int) -> DecimatedPoint:
            y_value = lerp(x_fin[j0], y_fin[j0], x_fin[j1], y_fin[j1], x_value)
            return DecimatedPoint(
                x=float(x_value),
                y=y_value,
                pixel_x=column,
                pixel_y=pixel_y(y_value),
                is_artifact=True,
                series_name=series_name,
            )

        if points:
            if cuts_min:
                points.insert(0, artifact(vmin, before_min, int(kept[0]), 0))
            if cuts_max:
                points.append(artifact(vmax, int(kept[-1]), after_max, pixel_width - 1))
        elif cuts_min and cuts_max:
            # View lies entirely between two samples
            points = [
                artifact(vmin, before_min, after_max, 0),
                artifact(vmax, before_min, after_max, pixel_width - 1),
            ]

        logger.debug(
            f"Decimated series '{series_name}': {len(x_fin)} samples -> {len(points)} points over {pixel_width} columns"
        )
        return points


def decimate(
    x: np.ndarray,
    y: np.ndarray,
    x_axis: Axis,
    pixel_width: int,
    y_axis: Optional[Axis] = None,
    series_name: Optional[str] = None,
) -> List[DecimatedPoint]:
    """Decimate a series without caching. See DecimationManager.decimate."""
    return DecimationManager().decimate(
        x, y, x_axis, pixel_width, y_axis=y_axis, series_name=series_name
    )
