"""
Chart engine components: coordinate mapping, decimation, tooltips and the
ScatterChart that ties them together. The matplotlib renderer lives in
``scatterscale.chart.render`` and is imported on demand.
"""

from scatterscale.chart.config import ChartConfig
from scatterscale.chart.coordinate_manager import Axis, CoordinateMapper
from scatterscale.chart.data_manager import SeriesDataManager
from scatterscale.chart.decimation import DecimationManager
from scatterscale.chart.display_state import DisplayState, Domain
from scatterscale.chart.plot import ScatterChart
from scatterscale.chart.tooltip import TooltipIndex

__all__ = [
    "ScatterChart",
    "ChartConfig",
    "SeriesDataManager",
    "Axis",
    "CoordinateMapper",
    "DecimationManager",
    "DisplayState",
    "Domain",
    "TooltipIndex",
]
