from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from loguru import logger

from ..axis.ticks import LABEL_DATETIME_MS, format_number, format_timestamp
from .coordinate_manager import round_pixel
from .decimation import DecimatedPoint


class TooltipIndex:
    """
    Pixel-keyed lookup of displayed points for hover tooltips.

    Points are stored under their rounded ``(pixel_x, pixel_y)`` cell. When two
    points share a cell the one indexed last wins. Artifact points and points
    without a vertical pixel position are not indexed.
    """

    def __init__(self):
        self._cells: Dict[int, Dict[int, DecimatedPoint]] = {}

    def __len__(self) -> int:
        return sum(len(column) for column in self._cells.values())

    @classmethod
    def build(cls, points: Iterable[DecimatedPoint]) -> "TooltipIndex":
        """Index decimated points by their pixel cell."""
        index = cls()
        for point in points:
            index.add(point)
        return index

    def add(self, point: DecimatedPoint) -> None:
        if point.is_artifact or point.pixel_y is None:
            return
        self._cells.setdefault(point.pixel_x, {})[point.pixel_y] = point

    def _get(self, x: int, y: int) -> Optional[DecimatedPoint]:
        column = self._cells.get(x)
        if column is None:
            return None
        return column.get(y)

    def query(self, x: float, y: float, radius: int) -> Optional[DecimatedPoint]:
        """
        Find the point at or near a pixel position.

        The exact cell is tried first. The search then walks outwards: at step
        ``s`` it moves ``s + 1`` cells vertically, then ``s + 1`` cells
        horizontally, checking every cell it enters, and reverses direction
        before the next step. The walk starts upwards and to the left.

        Parameters
        ----------
        x, y : float
            Pixel position, rounded to the nearest cell.
        radius : int
            Number of walk steps.

        Returns
        -------
        Optional[DecimatedPoint]
            The first point met, or None when the walk finds nothing.
        """
        cx = round_pixel(x)
        cy = round_pixel(y)
        if cx is None or cy is None:
            return None

        found = self._get(cx, cy)
        if found is not None:
            return found

        for dx, dy in walk_offsets(radius):
            found = self._get(cx + dx, cy + dy)
            if found is not None:
                return found
        return None


class TooltipFormatter(Protocol):
    """Turns a hovered point into the text lines of its tooltip."""

    def format(self, point: DecimatedPoint) -> List[str]: ...


class DefaultTooltipFormatter:
    """Series name followed by the x and y values."""

    def __init__(self, x_is_timestamp: bool = False):
        self.x_is_timestamp = x_is_timestamp

    def format(self, point: DecimatedPoint) -> List[str]:
        if self.x_is_timestamp:
            x_text = " ".join(format_timestamp(int(round(point.x)), LABEL_DATETIME_MS))
        else:
            x_text = format_number(point.x)
        lines = [] if point.series_name is None else [point.series_name]
        lines.extend([f"x: {x_text}", f"y: {format_number(point.y)}"])
        return lines


class TooltipFormatterRegistry:
    """Tooltip formatters by series name, with a fallback for the rest."""

    def __init__(self, default: Optional[TooltipFormatter] = None):
        self._formatters: Dict[str, TooltipFormatter] = {}
        self.default: TooltipFormatter = default or DefaultTooltipFormatter()

    def register(self, series_name: str, formatter: TooltipFormatter) -> None:
        logger.debug(f"Registered tooltip formatter for series '{series_name}'")
        self._formatters[series_name] = formatter

    def unregister(self, series_name: str) -> None:
        self._formatters.pop(series_name, None)

    def resolve(self, series_name: Optional[str]) -> TooltipFormatter:
        if series_name is None:
            return self.default
        return self._formatters.get(series_name, self.default)

    def format(self, point: DecimatedPoint) -> List[str]:
        return self.resolve(point.series_name).format(point)


def walk_offsets(radius: int) -> List[Tuple[int, int]]:
    """Cell offsets visited by TooltipIndex.query after the exact cell, in order."""
    offsets = []
    dx = dy = 0
    direction = -1
    for step in range(radius + 1):
        for _ in range(step + 1):
            dy += direction
            offsets.append((dx, dy))
        for _ in range(step + 1):
            dx += direction
            offsets.append((dx, dy))
        direction = -direction
    return offsets
