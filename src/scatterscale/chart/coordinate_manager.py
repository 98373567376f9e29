from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from ..axis.segments import AxisRange, axis_bounds, is_degenerate


@dataclass(frozen=True)
class SegmentGeometry:
    """Pixel length of a segment and its pixels-per-unit scale."""

    length: float
    scale: float


@dataclass(frozen=True)
class Axis:
    """
    Segments of one axis together with their pixel geometry.

    Immutable for the duration of a render pass and replaced on every
    recompute.
    """

    range: AxisRange
    geometry: Tuple[SegmentGeometry, ...]
    pixel_length: float
    is_timestamp: bool = False

    @property
    def is_degenerate(self) -> bool:
        return is_degenerate(self.range)

    @property
    def bounds(self) -> Tuple[Optional[float], Optional[float]]:
        return axis_bounds(self.range)

    @property
    def range_key(self) -> Tuple:
        """Hashable summary of the segments and pixel length, for cache keys."""
        if self.is_degenerate:
            return (self.range.value, self.pixel_length)
        return tuple(
            (s.min.value, s.max.value, s.weight) for s in self.range
        ) + (self.pixel_length,)


def build_geometry(axis_range: AxisRange, pixel_length: float) -> Tuple[SegmentGeometry, ...]:
    """
    Distribute a pixel length over segments in proportion to their weights.

    Parameters
    ----------
    axis_range : AxisRange
        Segments from a range builder. A sentinel yields no geometry.
    pixel_length : float
        Total pixel length of the axis.

    Returns
    -------
    Tuple[SegmentGeometry, ...]
        One entry per segment; lengths sum to ``pixel_length``.
    """
    if is_degenerate(axis_range):
        return ()

    total_weight = sum(segment.weight for segment in axis_range)
    geometry = []
    for segment in axis_range:
        assert segment.size > 0, f"Zero-size segment {segment} reached scaling"
        length = pixel_length * segment.weight / total_weight
        geometry.append(SegmentGeometry(length=length, scale=length / segment.size))
    return tuple(geometry)


def build_axis(axis_range: AxisRange, pixel_length: float, is_timestamp: bool = False) -> Axis:
    """Bundle a range with the geometry for a given pixel length."""
    return Axis(
        range=axis_range,
        geometry=build_geometry(axis_range, pixel_length),
        pixel_length=float(pixel_length),
        is_timestamp=is_timestamp,
    )


class CoordinateMapper:
    """
    Converts between data values and pixel offsets along one axis.

    Centralises all coordinate conversion logic so decimation, tooltips and
    renderers agree on where a value lands.
    """

    def __init__(self, axis: Axis):
        """
        Initialise the coordinate mapper.

        Parameters
        ----------
        axis : Axis
            Axis with segments and geometry.
        """
        self.axis = axis
        if axis.is_degenerate:
            self._starts = np.array([], dtype=np.float64)
            self._offsets = np.array([0.0], dtype=np.float64)
            self._scales = np.array([], dtype=np.float64)
            return

        self._starts = np.array([s.min.value for s in axis.range], dtype=np.float64)
        self._scales = np.array([g.scale for g in axis.geometry], dtype=np.float64)
        # Cumulative pixel offsets, one more entry than segments
        self._offsets = np.concatenate(
            ([0.0], np.cumsum([g.length for g in axis.geometry]))
        )
        self._vmin, self._vmax = axis.bounds

    def _segment_for_value(self, value: float) -> int:
        index = int(np.searchsorted(self._starts, value, side="right")) - 1
        return min(max(index, 0), len(self._starts) - 1)

    def value_to_pixel(self, value: float) -> Optional[float]:
        """
        Convert a data value to a pixel offset from the axis origin.

        Values outside the axis are extrapolated from the nearest edge segment.
        A single-point axis maps every value to its midpoint; an empty axis
        returns None.
        """
        if self.axis.is_degenerate:
            if self.axis.range.value is None:
                return None
            return self.axis.pixel_length / 2

        index = self._segment_for_value(value)
        return float(
            self._offsets[index] + (value - self._starts[index]) * self._scales[index]
        )

    def pixel_to_value(self, pixel: float) -> Optional[float]:
        """
        Convert a pixel offset to a data value.

        Pixels outside the axis clamp to the first or last axis value.
        """
        if self.axis.is_degenerate:
            return self.axis.range.value

        if pixel <= 0:
            return self._vmin
        if pixel >= self._offsets[-1]:
            return self._vmax

        index = int(np.searchsorted(self._offsets, pixel, side="right")) - 1
        index = min(index, len(self._starts) - 1)
        return float(
            self._starts[index] + (pixel - self._offsets[index]) / self._scales[index]
        )

    def values_to_pixels(self, values: np.ndarray) -> np.ndarray:
        """Vectorised value_to_pixel for arrays of values."""
        values = np.asarray(values, dtype=np.float64)
        if self.axis.is_degenerate:
            fill = np.nan if self.axis.range.value is None else self.axis.pixel_length / 2
            return np.full(values.shape, fill, dtype=np.float64)

        index = np.searchsorted(self._starts, values, side="right") - 1
        index = np.clip(index, 0, len(self._starts) - 1)
        return self._offsets[index] + (values - self._starts[index]) * self._scales[index]

    def pixels_to_values(self, pixels: np.ndarray) -> np.ndarray:
        """Vectorised pixel_to_value for arrays of pixel offsets."""
        pixels = np.asarray(pixels, dtype=np.float64)
        if self.axis.is_degenerate:
            fill = np.nan if self.axis.range.value is None else self.axis.range.value
            return np.full(pixels.shape, fill, dtype=np.float64)

        clipped = np.clip(pixels, 0.0, self._offsets[-1])
        index = np.searchsorted(self._offsets, clipped, side="right") - 1
        index = np.clip(index, 0, len(self._starts) - 1)
        values = self._starts[index] + (clipped - self._offsets[index]) / self._scales[index]
        values[pixels <= 0] = self._vmin
        values[pixels >= self._offsets[-1]] = self._vmax
        return values


def value_to_pixel(value: float, axis: Axis) -> Optional[float]:
    """Convert a data value to a pixel offset on ``axis``."""
    return CoordinateMapper(axis).value_to_pixel(value)


def pixel_to_value(pixel: float, axis: Axis) -> Optional[float]:
    """Convert a pixel offset on ``axis`` to a data value."""
    return CoordinateMapper(axis).pixel_to_value(pixel)


def round_pixel(pixel: Optional[Union[float, np.floating]]) -> Optional[int]:
    """Round a pixel offset half up to the integer grid, None for missing offsets."""
    if pixel is None or not np.isfinite(pixel):
        return None
    return int(np.floor(pixel + 0.5))
