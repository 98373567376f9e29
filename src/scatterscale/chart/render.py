from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np
from loguru import logger
from matplotlib.ticker import FixedFormatter, FixedLocator

from ..axis.segments import tick_points
from .coordinate_manager import Axis, CoordinateMapper
from .data_manager import LimitLine
from .plot import RenderResult, ScatterChart


def _ticks(axis: Axis) -> Tuple[List[float], List[str]]:
    """Pixel positions and label text of the ticks of an axis."""
    mapper = CoordinateMapper(axis)
    positions, labels = [], []
    for point in tick_points(axis.range):
        positions.append(mapper.value_to_pixel(point.value))
        labels.append("\n".join(point.label))
    return positions, labels


class MatplotlibRenderer:
    """
    Draws a render pass onto matplotlib axes.

    Everything is drawn in pixel space: the weighted axis segments make the
    value-to-pixel mapping piecewise linear, so the computed ticks are placed
    with fixed locators rather than letting matplotlib scale the data.
    """

    DEFAULT_LINE_WIDTH = 1.0
    DEFAULT_MARKER_SIZE = 9.0
    DEFAULT_LIMIT_STYLE = "--"
    DEFAULT_LIMIT_COLOR = "red"

    def __init__(
        self,
        line_width: float = DEFAULT_LINE_WIDTH,
        marker_size: float = DEFAULT_MARKER_SIZE,
        show_markers: bool = True,
        series_colors: Optional[Dict[str, str]] = None,
    ):
        self.line_width = line_width
        self.marker_size = marker_size
        self.show_markers = show_markers
        self.series_colors = series_colors or {}

        self.fig: Optional[mpl.figure.Figure] = None
        self.ax: Optional[mpl.axes.Axes] = None

    def draw(
        self,
        result: RenderResult,
        limits: Sequence[LimitLine] = (),
        ax: Optional[mpl.axes.Axes] = None,
    ) -> mpl.axes.Axes:
        """
        Draw series, limit lines and ticks of a render pass.

        Parameters
        ----------
        result : RenderResult
            Output of ScatterChart.render.
        limits : Sequence[LimitLine], default=()
            Horizontal limit lines to draw across the plot.
        ax : Optional[mpl.axes.Axes], default=None
            Target axes. A new figure is created when None.

        Returns
        -------
        mpl.axes.Axes
            The axes drawn on.
        """
        if ax is None:
            self.fig, ax = plt.subplots(figsize=(10, 5))
        else:
            self.fig = ax.figure
        self.ax = ax
        ax.clear()

        x_axis, y_axis = result.axes.x, result.axes.y
        x_mapper = CoordinateMapper(x_axis)
        y_mapper = CoordinateMapper(y_axis)

        for name, points in result.points.items():
            if not points:
                logger.debug(f"Series '{name}' has nothing in view")
                continue
            px = x_mapper.values_to_pixels(np.array([p.x for p in points]))
            py = y_mapper.values_to_pixels(np.array([p.y for p in points]))
            color = self.series_colors.get(name)
            (line,) = ax.plot(px, py, linewidth=self.line_width, color=color, label=name)
            if self.show_markers:
                real = np.array([not p.is_artifact for p in points])
                ax.scatter(
                    px[real], py[real], s=self.marker_size, color=line.get_color()
                )

        for limit in limits:
            py = y_mapper.value_to_pixel(limit.value)
            if py is None:
                continue
            ax.axhline(
                py,
                linestyle=self.DEFAULT_LIMIT_STYLE,
                color=limit.color or self.DEFAULT_LIMIT_COLOR,
                linewidth=self.line_width,
                label=limit.name,
            )

        positions, labels = _ticks(x_axis)
        ax.xaxis.set_major_locator(FixedLocator(positions))
        ax.xaxis.set_major_formatter(FixedFormatter(labels))
        positions, labels = _ticks(y_axis)
        ax.yaxis.set_major_locator(FixedLocator(positions))
        ax.yaxis.set_major_formatter(FixedFormatter(labels))

        ax.set_xlim(0, x_axis.pixel_length)
        ax.set_ylim(0, y_axis.pixel_length)
        if result.points:
            ax.legend(loc="upper right")
        return ax

    def draw_chart(
        self, chart: ScatterChart, ax: Optional[mpl.axes.Axes] = None
    ) -> mpl.axes.Axes:
        """Render ``chart`` if needed and draw its latest pass."""
        result = chart.result or chart.render()
        return self.draw(result, chart.data.limits, ax=ax)

    def save(self, filepath: str) -> None:
        """
        Save the drawn figure to a file.

        Parameters
        ----------
        filepath : str
            Path to save the plot image.
        """
        if self.fig is None or self.ax is None:
            raise RuntimeError("Nothing has been drawn yet.")
        self.fig.savefig(filepath)
        logger.info(f"Plot saved to {filepath}")
