import io
from typing import List, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")  # headless backend for servers

from matplotlib.collections import LineCollection
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle

Point = Tuple[float, float]

_VALIGN = "baseline"


class Canvas:
    """
    Pixel drawing surface backed by a matplotlib figure.

    The axes fill the whole figure with data limits equal to the pixel size, so
    every coordinate passed in is a pixel (origin top-left, y down). Each draw
    call gets the next z-order, which keeps painter's-algorithm ordering.
    """

    def __init__(self, width: int = 800, height: int = 600, dpi: int = 100):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi, facecolor="white")
        self.ax = self.figure.add_axes((0, 0, 1, 1))
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_axis_off()
        self._path: List[List[Point]] = []
        self._z = 0

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def _points(self, px: float) -> float:
        # line widths and font sizes are given in pixels
        return px * 72.0 / self.dpi

    def move_to(self, x: float, y: float) -> None:
        self._path.append([(x, y)])

    def line_to(self, x: float, y: float) -> None:
        if not self._path:
            self.move_to(x, y)
            return
        self._path[-1].append((x, y))

    def stroke(self, color: str, width: float = 1.0) -> None:
        path, self._path = self._path, []
        self.draw_polylines(path, color, width)

    def draw_polylines(self, polylines: Sequence[Sequence[Point]], color: str, width: float = 1.0) -> None:
        lines = [list(p) for p in polylines if len(p) >= 2]
        if not lines:
            return
        collection = LineCollection(
            lines,
            colors=color,
            linewidths=self._points(width),
            capstyle="round",
            joinstyle="round",
            zorder=self._next_z(),
        )
        self.ax.add_collection(collection, autolim=False)

    def stroke_curve(self, curve, color: str, width: float = 3.0) -> None:
        """Draw a RenderedCurve; single-point segments become dots."""
        self.draw_polylines(curve.segments, color, width)
        for segment in curve.segments:
            if len(segment) == 1:
                self.fill_circle(segment[0][0], segment[0][1], width / 2, color)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        self.ax.add_patch(Rectangle((x, y), w, h, facecolor=color, edgecolor="none", zorder=self._next_z()))

    def fill_circle(self, cx: float, cy: float, r: float, color: str) -> None:
        self.ax.add_patch(Circle((cx, cy), r, facecolor=color, edgecolor="none", zorder=self._next_z()))

    def text(self, x: float, y: float, s: str, align: str = "left", color: str = "#000000", size: float = 12) -> None:
        self.ax.text(
            x,
            y,
            s,
            ha=align,
            va=_VALIGN,
            color=color,
            fontsize=self._points(size),
            fontfamily="sans-serif",
            zorder=self._next_z(),
        )

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.figure.savefig(buf, format="png", dpi=self.dpi, facecolor=self.figure.get_facecolor())
        buf.seek(0)
        return buf.read()
