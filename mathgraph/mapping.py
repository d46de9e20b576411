from dataclasses import dataclass
from typing import Tuple

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_PADDING = 40


@dataclass(frozen=True)
class Viewport:
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    padding: int = DEFAULT_PADDING

    def __post_init__(self) -> None:
        if self.xmin >= self.xmax:
            raise ValueError(f"xmin ({self.xmin}) must be < xmax ({self.xmax})")
        if self.ymin >= self.ymax:
            raise ValueError(f"ymin ({self.ymin}) must be < ymax ({self.ymax})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas size must be positive, got {self.width}x{self.height}")
        if not (0 <= self.padding < min(self.width, self.height) / 2):
            raise ValueError(f"padding {self.padding} does not fit a {self.width}x{self.height} canvas")

    @property
    def x_range(self) -> float:
        return self.xmax - self.xmin

    @property
    def y_range(self) -> float:
        return self.ymax - self.ymin

    @property
    def graph_width(self) -> int:
        return self.width - 2 * self.padding

    @property
    def graph_height(self) -> int:
        return self.height - 2 * self.padding

    def contains(self, x: float, y: float) -> bool:
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax


class CoordinateMapper:
    """
    Affine map between math space and pixel space (origin top-left, y down).

    With ``aspect_corrected=False`` each axis is scaled on its own so the plot
    area shows exactly ``[xmin, xmax] x [ymin, ymax]``. With
    ``aspect_corrected=True`` both axes share ``min(sx, sy)`` pixels per unit
    and the shorter axis is centred, so circles stay circular.
    """

    def __init__(self, viewport: Viewport, aspect_corrected: bool = False):
        self.viewport = viewport
        self.aspect_corrected = aspect_corrected

        sx = viewport.graph_width / viewport.x_range
        sy = viewport.graph_height / viewport.y_range
        if aspect_corrected:
            sx = sy = min(sx, sy)
            self.x_offset = (viewport.graph_width - viewport.x_range * sx) / 2
            self.y_offset = (viewport.graph_height - viewport.y_range * sy) / 2
        else:
            self.x_offset = 0.0
            self.y_offset = 0.0
        self.x_scale = sx
        self.y_scale = sy

    def x_to_pixel(self, x):
        vp = self.viewport
        return vp.padding + self.x_offset + (x - vp.xmin) * self.x_scale

    def y_to_pixel(self, y):
        vp = self.viewport
        return vp.height - vp.padding - self.y_offset - (y - vp.ymin) * self.y_scale

    def to_pixel(self, x: float, y: float) -> Tuple[float, float]:
        return self.x_to_pixel(x), self.y_to_pixel(y)

    def to_math(self, px: float, py: float) -> Tuple[float, float]:
        vp = self.viewport
        x = vp.xmin + (px - vp.padding - self.x_offset) / self.x_scale
        y = vp.ymin + (vp.height - vp.padding - self.y_offset - py) / self.y_scale
        return x, y

    @property
    def plot_rect(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) of the math window in pixels."""
        vp = self.viewport
        return (
            self.x_to_pixel(vp.xmin),
            self.y_to_pixel(vp.ymax),
            self.x_to_pixel(vp.xmax),
            self.y_to_pixel(vp.ymin),
        )
