import math
from dataclasses import dataclass
from typing import List

from .canvas import Canvas
from .mapping import CoordinateMapper

PLOT_BACKGROUND = "#F7F7F7"
MINOR_COLOR = "#bfbfbf"
MAJOR_COLOR = "#a6a6a6"
AXIS_COLOR = "#000000"
LABEL_COLOR = "#404040"

MINOR_WIDTH = 0.5
MAJOR_WIDTH = 1.0
AXIS_WIDTH = 2.0
LABEL_SIZE = 12
TICK_LENGTH = 5


@dataclass(frozen=True)
class TickSpacing:
    major: float
    minor: float


# (upper bound of the axis range, major, minor)
_SPACING_TABLE = (
    (2, 0.2, 0.1),
    (5, 1, 0.2),
    (20, 2, 0.5),
    (50, 10, 2),
    (100, 20, 5),
)


def tick_spacing(axis_range: float) -> TickSpacing:
    for bound, major, minor in _SPACING_TABLE:
        if axis_range <= bound:
            return TickSpacing(major, minor)
    return TickSpacing(math.ceil(axis_range / 10), math.ceil(axis_range / 50))


def tick_values(lo: float, hi: float, step: float) -> List[float]:
    """Multiples of ``step`` inside ``[lo, hi]``, computed by index to avoid drift."""
    eps = step * 1e-9
    values = []
    i = math.floor(lo / step)
    while i * step <= hi + eps:
        v = round(i * step, 10)
        if v >= lo - eps:
            values.append(v)
        i += 1
    return values


def format_tick_label(v: float) -> str:
    if abs(v) < 1e-10:
        return "0"
    if abs(v) > 1000 or abs(v) < 0.01:
        return f"{v:.1e}"
    if abs(v) < 1:
        return f"{v:.1f}"
    return f"{round(v, 10):g}"


def draw_grid(canvas: Canvas, mapper: CoordinateMapper) -> None:
    vp = mapper.viewport
    left, top, right, bottom = mapper.plot_rect
    x_ticks = tick_spacing(vp.x_range)
    y_ticks = tick_spacing(vp.y_range)

    canvas.fill_rect(left, top, right - left, bottom - top, PLOT_BACKGROUND)

    for spacing, color, width in (
        (lambda t: t.minor, MINOR_COLOR, MINOR_WIDTH),
        (lambda t: t.major, MAJOR_COLOR, MAJOR_WIDTH),
    ):
        for x in tick_values(vp.xmin, vp.xmax, spacing(x_ticks)):
            px = mapper.x_to_pixel(x)
            canvas.move_to(px, top)
            canvas.line_to(px, bottom)
        for y in tick_values(vp.ymin, vp.ymax, spacing(y_ticks)):
            py = mapper.y_to_pixel(y)
            canvas.move_to(left, py)
            canvas.line_to(right, py)
        canvas.stroke(color, width)

    if vp.ymin <= 0 <= vp.ymax:
        y0 = mapper.y_to_pixel(0)
        canvas.move_to(left, y0)
        canvas.line_to(right, y0)
    if vp.xmin <= 0 <= vp.xmax:
        x0 = mapper.x_to_pixel(0)
        canvas.move_to(x0, top)
        canvas.line_to(x0, bottom)
    canvas.stroke(AXIS_COLOR, AXIS_WIDTH)

    for x in tick_values(vp.xmin, vp.xmax, x_ticks.major):
        px = mapper.x_to_pixel(x)
        canvas.text(px, bottom + 20, format_tick_label(x), align="center", color=LABEL_COLOR, size=LABEL_SIZE)
        canvas.move_to(px, bottom)
        canvas.line_to(px, bottom + TICK_LENGTH)
    for y in tick_values(vp.ymin, vp.ymax, y_ticks.major):
        py = mapper.y_to_pixel(y)
        canvas.text(left - 10, py + 4, format_tick_label(y), align="right", color=LABEL_COLOR, size=LABEL_SIZE)
        canvas.move_to(left - TICK_LENGTH, py)
        canvas.line_to(left, py)
    canvas.stroke(LABEL_COLOR, MAJOR_WIDTH)
