import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from ..axis.linear_range import build_linear_range
from ..axis.ticks import decompose
from ..axis.time_range import build_time_range
from .config import ChartConfig
from .coordinate_manager import Axis, CoordinateMapper, build_axis
from .data_manager import ArrayLike, LimitLine, SeriesDataManager
from .decimation import DecimatedPoint, DecimationManager
from .display_state import DisplayState, Domain, Task, ViewRequest
from .tooltip import DefaultTooltipFormatter, TooltipFormatter, TooltipFormatterRegistry, TooltipIndex

# Numeric zoom windows narrower than this, in mantissa units, are refused
MIN_ZOOM_MANTISSA_SPAN = 1e-6
# Timestamp zoom windows narrower than this collapse to a single instant
MIN_TIMESTAMP_SPAN_MS = 1


@dataclass(frozen=True)
class ChartAxes:
    """Horizontal and vertical axes of one render pass."""

    x: Axis
    y: Axis


@dataclass(frozen=True)
class RenderResult:
    """Everything a drawing layer needs to paint one pass."""

    axes: ChartAxes
    points: Dict[str, List[DecimatedPoint]]
    tooltip_index: TooltipIndex
    domain: Optional[Domain] = None


class ScatterChart:
    """
    Scatter/time-series chart engine: axes, decimation, zoom and tooltips.

    Uses separate managers for series data, decimation and display state.
    A render pass builds both axes for the current zoom window, decimates every
    series to the plot width and indexes the displayed points for tooltip
    lookup. Zoom and resize requests are deferred to the next scheduler tick
    and coalesced, so only the latest request of a burst is computed.
    """

    def __init__(
        self,
        x: Union[ArrayLike, List[ArrayLike]],
        y: Union[ArrayLike, List[ArrayLike]],
        name: Union[str, List[str], None] = None,
        x_is_timestamp: Union[bool, List[bool]] = False,
        limits: Optional[Sequence[Union[float, Dict[str, Any], LimitLine]]] = None,
        config: Optional[ChartConfig] = None,
        post: Optional[Callable[[Task], None]] = None,
        on_render: Optional[Callable[[RenderResult], None]] = None,
        **overrides: Any,
    ):
        """
        Initialize the chart with series data.

        Parameters
        ----------
        x : Union[ArrayLike, List[ArrayLike]]
            X values of one series or a list of arrays, one per series.
        y : Union[ArrayLike, List[ArrayLike]]
            Y values matching ``x``.
        name : Union[str, List[str], None], default=None
            Series name(s).
        x_is_timestamp : Union[bool, List[bool]], default=False
            Whether x values are millisecond UTC timestamps.
        limits : Optional[Sequence], default=None
            Horizontal limit lines, see SeriesDataManager.
        config : Optional[ChartConfig], default=None
            Plot size and axis options. Defaults to ChartConfig().
        post : Optional[Callable[[Task], None]], default=None
            Scheduler hook used to defer recomputes, e.g. ``loop.call_soon``.
            When None, deferred work runs on ``run_pending()``.
        on_render : Optional[Callable[[RenderResult], None]], default=None
            Called after every completed render pass.
        **overrides
            ChartConfig fields overriding ``config``, e.g. ``width=800``.
        """
        base = config or ChartConfig()
        self.config = ChartConfig.model_validate({**base.model_dump(), **overrides})

        self.data = SeriesDataManager(x, y, name, x_is_timestamp, limits)
        self.decimator = DecimationManager(self.config.cache_max_size)
        self.state = DisplayState(post)
        self.state.bind(self._handle_request)
        self.formatters = TooltipFormatterRegistry(
            DefaultTooltipFormatter(self.data.x_is_timestamp)
        )
        self.on_render = on_render

        self.axes: Optional[ChartAxes] = None
        self.result: Optional[RenderResult] = None

    @classmethod
    def from_samples(
        cls,
        series: Dict[str, Sequence[Tuple[Any, float]]],
        x_is_timestamp: bool = False,
        limits: Optional[Sequence[Union[float, Dict[str, Any], LimitLine]]] = None,
        **kwargs: Any,
    ) -> "ScatterChart":
        """Build a chart from a mapping of series name to ``(x, y)`` samples."""
        xs, ys, names = SeriesDataManager.split_samples(series)
        return cls(xs, ys, names, x_is_timestamp=x_is_timestamp, limits=limits, **kwargs)

    @property
    def is_busy(self) -> bool:
        """True while a deferred recompute is pending or running."""
        return self.state.busy

    def _normalize_domain(self, domain: Optional[Domain]) -> Optional[Domain]:
        """Fill open bounds from the data range; None for auto or inverted windows."""
        if domain is None or domain.is_auto:
            return None
        extent = self.data.get_global_extent()
        domain = Domain(
            domain.min if domain.min is not None else extent.x_min,
            domain.max if domain.max is not None else extent.x_max,
        )
        if domain.min is None or domain.max is None:
            return None
        if not domain.is_valid:
            logger.warning(f"Ignoring inverted zoom window {domain}; using full data range")
            return None
        return domain

    def _zoom_bounds(self, domain: Domain) -> Optional[Tuple[float, float]]:
        """
        Apply the minimum zoom span to a window.

        Returns None when the window is too narrow to display.
        """
        x_min, x_max = domain.min, domain.max

        if self.data.x_is_timestamp:
            if x_max - x_min < MIN_TIMESTAMP_SPAN_MS:
                x_min = x_max
            return x_min, x_max

        min_mantissa, min_exponent = decompose(x_min)
        max_mantissa, max_exponent = decompose(x_max)
        if (
            min_exponent == max_exponent
            and max_mantissa - min_mantissa < MIN_ZOOM_MANTISSA_SPAN
        ):
            return None
        return x_min, x_max

    def compute_axes(self, domain: Optional[Domain] = None) -> Optional[ChartAxes]:
        """
        Build both axes for a zoom window.

        Parameters
        ----------
        domain : Optional[Domain], default=None
            X window to show. None, or an inverted window, shows all data.

        Returns
        -------
        Optional[ChartAxes]
            The axes, or None when the window is too narrow to zoom into.
        """
        domain = self._normalize_domain(domain)
        extent = self.data.get_global_extent()

        if domain is None:
            x_min, x_max = extent.x_min, extent.x_max
            y_min, y_max = extent.y_min, extent.y_max
        else:
            bounds = self._zoom_bounds(domain)
            if bounds is None:
                logger.info(f"Zoom window {domain} is too narrow; keeping current view")
                return None
            x_min, x_max = bounds
            y_min, y_max = None, None
            for name in self.data.names:
                lo, hi = self.data.get_y_extent_in_range(x_min, x_max, name)
                if lo is not None and (y_min is None or lo < y_min):
                    y_min = lo
                if hi is not None and (y_max is None or hi > y_max):
                    y_max = hi

        limit_min, limit_max = self.data.get_limits_extent()
        if limit_min is not None:
            y_min = limit_min if y_min is None else min(y_min, limit_min)
            y_max = limit_max if y_max is None else max(y_max, limit_max)

        if self.config.only_integer and y_min is not None:
            y_min = math.floor(y_min)
            y_max = math.ceil(y_max)

        if self.data.x_is_timestamp:
            x_range = build_time_range(
                None if x_min is None else round(x_min),
                None if x_max is None else round(x_max),
                self.config.x_density,
            )
        else:
            x_range = build_linear_range(x_min, x_max, self.config.x_density)
        y_range = build_linear_range(
            y_min,
            y_max,
            self.config.y_density,
            extended=True,
            only_integer=self.config.only_integer,
        )

        logger.debug(f"compute_axes: x=[{x_min}, {x_max}] y=[{y_min}, {y_max}]")
        return ChartAxes(
            x=build_axis(x_range, self.config.width, self.data.x_is_timestamp),
            y=build_axis(y_range, self.config.height),
        )

    def render(self, domain: Optional[Domain] = None) -> Optional[RenderResult]:
        """
        Run a full render pass synchronously.

        Parameters
        ----------
        domain : Optional[Domain], default=None
            New zoom window. None keeps the current one.

        Returns
        -------
        Optional[RenderResult]
            The new pass, or the previous one when the window was refused.
        """
        if domain is None:
            domain = self.state.domain
        domain = self._normalize_domain(domain)

        axes = self.compute_axes(domain)
        if axes is None:
            return self.result
        self.state.set_domain(domain)

        points: Dict[str, List[DecimatedPoint]] = {}
        all_points: List[DecimatedPoint] = []
        for name in self.data.names:
            x, y = self.data.get_series(name)
            decimated = self.decimator.decimate(
                x,
                y,
                axes.x,
                self.config.width,
                y_axis=axes.y,
                series_name=name,
                data_id=name,
            )
            points[name] = decimated
            all_points.extend(decimated)

        self.axes = axes
        self.result = RenderResult(
            axes=axes,
            points=points,
            tooltip_index=TooltipIndex.build(all_points),
            domain=domain,
        )
        logger.info(
            f"Render complete: {sum(len(p) for p in points.values())} points across {self.data.num_series} series"
        )
        if self.on_render is not None:
            self.on_render(self.result)
        return self.result

    def _next_request(self, **changes: Any) -> ViewRequest:
        base = self.state.pending or ViewRequest(
            domain=self.state.domain,
            width=self.config.width,
            height=self.config.height,
        )
        return dataclasses.replace(base, **changes)

    def _handle_request(self, request: ViewRequest) -> None:
        if (request.width, request.height) != (self.config.width, self.config.height):
            logger.info(
                f"Resizing plot area from {self.config.width}x{self.config.height} to {request.width}x{request.height}"
            )
            self.config = self.config.resized(request.width, request.height)
        if request.reset:
            self.state.set_domain(None)
            self.render()
        else:
            self.render(request.domain)

    def request_zoom(self, vmin: Optional[float], vmax: Optional[float]) -> None:
        """Zoom the x axis to ``[vmin, vmax]`` on the next scheduler tick."""
        self.state.request(self._next_request(domain=Domain(vmin, vmax), reset=False))

    def request_resize(self, width: int, height: int) -> None:
        """Change the plot area size on the next scheduler tick."""
        self.state.request(self._next_request(width=width, height=height))

    def request_render(self) -> None:
        """Recompute the current view on the next scheduler tick."""
        self.state.request(self._next_request())

    def run_pending(self) -> int:
        """Run deferred work queued on the internal scheduler."""
        return self.state.run_pending()

    def zoom_to_pixels(self, start_px: float, end_px: float) -> None:
        """
        Zoom to a horizontal pixel selection.

        The selection may be given in either direction. Empty selections and
        single-point x axes are ignored.
        """
        if self.axes is None or self.axes.x.is_degenerate:
            logger.warning("X axis cannot be zoomed in its current state.")
            return
        if start_px == end_px:
            return

        mapper = CoordinateMapper(self.axes.x)
        lo, hi = sorted((start_px, end_px))
        self.request_zoom(mapper.pixel_to_value(lo), mapper.pixel_to_value(hi))

    def home(self) -> None:
        """Return to the full data range."""
        self.decimator.clear_cache()
        self.state.request(self._next_request(domain=None, reset=True))

    def _axis(self, axis: str) -> Axis:
        if axis not in ("x", "y"):
            raise ValueError(f"Unknown axis '{axis}'. Use 'x' or 'y'.")
        if self.axes is None:
            self.render()
        return self.axes.x if axis == "x" else self.axes.y

    def map_value_to_pixel(self, value: float, axis: str = "x") -> Optional[float]:
        """Convert a data value to a pixel offset along ``axis``."""
        return CoordinateMapper(self._axis(axis)).value_to_pixel(value)

    def map_pixel_to_value(self, pixel: float, axis: str = "x") -> Optional[float]:
        """Convert a pixel offset along ``axis`` to a data value."""
        return CoordinateMapper(self._axis(axis)).pixel_to_value(pixel)

    def query_tooltip(
        self, x: float, y: float, radius: Optional[int] = None
    ) -> Optional[DecimatedPoint]:
        """
        Find the displayed point nearest to a pixel position.

        Parameters
        ----------
        x, y : float
            Pixel offsets from the plot origin (left, bottom).
        radius : Optional[int], default=None
            Search radius. Defaults to ``config.tooltip_radius``.
        """
        if self.result is None:
            return None
        if radius is None:
            radius = self.config.tooltip_radius
        return self.result.tooltip_index.query(x, y, radius)

    def set_tooltip_formatter(self, series_name: str, formatter: TooltipFormatter) -> None:
        """Use ``formatter`` for tooltips of one series."""
        self.data.get_series(series_name)
        self.formatters.register(series_name, formatter)

    def tooltip_lines(self, point: DecimatedPoint) -> List[str]:
        """Text lines of the tooltip for a displayed point."""
        return self.formatters.format(point)
