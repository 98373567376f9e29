"""
Tests for the matplotlib drawing adapter.
"""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from scatterscale.axis.segments import tick_points  # noqa: E402
from scatterscale.chart.plot import ScatterChart  # noqa: E402
from scatterscale.chart.render import MatplotlibRenderer  # noqa: E402


@pytest.fixture
def chart():
    x = np.linspace(3, 97, 500)
    return ScatterChart(x, np.cos(x / 10), name="c", limits=[0.5], width=200, height=100)


class TestMatplotlibRenderer:
    """Test drawing in pixel space."""

    def test_draw_chart(self, chart):
        renderer = MatplotlibRenderer()
        ax = renderer.draw_chart(chart)
        assert ax.get_xlim() == (0, 200)
        assert ax.get_ylim() == (0, 100)
        x_ticks = ax.xaxis.get_major_locator().locs
        assert len(x_ticks) == len(tick_points(chart.result.axes.x.range))
        plt.close(renderer.fig)

    def test_limit_lines_drawn(self, chart):
        renderer = MatplotlibRenderer()
        ax = renderer.draw_chart(chart)
        labels = [line.get_label() for line in ax.get_lines()]
        assert "limit1" in labels
        assert "c" in labels
        plt.close(renderer.fig)

    def test_draw_on_existing_axes(self, chart):
        fig, ax = plt.subplots()
        renderer = MatplotlibRenderer(show_markers=False)
        assert renderer.draw(chart.render(), ax=ax) is ax
        assert renderer.fig is fig
        plt.close(fig)

    def test_save(self, chart, tmp_path):
        renderer = MatplotlibRenderer()
        renderer.draw_chart(chart)
        path = tmp_path / "chart.png"
        renderer.save(str(path))
        assert path.exists()
        plt.close(renderer.fig)

    def test_save_before_draw(self):
        with pytest.raises(RuntimeError):
            MatplotlibRenderer().save("unused.png")
