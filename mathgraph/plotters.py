"""
Curve plotters.

Every plotter is stateless and returns a RenderedCurve in pixel space. A failed
evaluation only breaks the path at that sample; ``RenderFailure`` is raised
when the expression cannot be compiled or when no sample at all evaluates.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .classifier import EquationForm
from .engine import CompiledExpression, compile_expression
from .errors import EvaluationError, RenderFailure
from .extractor import CircleParams, ConicParams, ShapeParams
from .mapping import CoordinateMapper, Viewport

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Segment = Tuple[Point, Point]

DEFAULT_RESOLUTION = 500
MIN_RESOLUTION = 100
MAX_RESOLUTION = 1000

# a jump larger than this fraction of the dependent axis range starts a new path
DISCONTINUITY_FRACTION = 0.1

THETA_STEP = 0.01
HYPERBOLA_T_LIMIT = 3.0
HYPERBOLA_T_STEP = 0.01

MIN_CONTOUR_CELLS = 50
MAX_CONTOUR_CELLS = 300


@dataclass
class RenderedCurve:
    segments: List[List[Point]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.segments)

    def points(self) -> List[Point]:
        return [p for segment in self.segments for p in segment]


class Pen:
    """Move-to / line-to state machine that collects polylines."""

    def __init__(self):
        self.curve = RenderedCurve()
        self._down = False

    def move_to(self, px: float, py: float) -> None:
        self.curve.segments.append([(px, py)])
        self._down = True

    def line_to(self, px: float, py: float) -> None:
        if not self._down:
            self.move_to(px, py)
            return
        self.curve.segments[-1].append((px, py))

    def lift(self) -> None:
        self._down = False


def _compile(expression: str, variables: Sequence[str]) -> CompiledExpression:
    try:
        return compile_expression(expression, variables)
    except EvaluationError as e:
        raise RenderFailure(str(e)) from e


# ---------------------------------------------------------------------------
# Direct sampling: y = f(x) and x = f(y)
# ---------------------------------------------------------------------------

def plot_explicit(
    expression: str,
    viewport: Viewport,
    mapper: CoordinateMapper,
    vertical: bool = False,
    resolution: int = DEFAULT_RESOLUTION,
    jump_fraction: float = DISCONTINUITY_FRACTION,
) -> RenderedCurve:
    var = "y" if vertical else "x"
    f = _compile(expression, (var,))

    if vertical:
        lo, hi, dlo, dhi = viewport.ymin, viewport.ymax, viewport.xmin, viewport.xmax
    else:
        lo, hi, dlo, dhi = viewport.xmin, viewport.xmax, viewport.ymin, viewport.ymax
    step = (hi - lo) / resolution
    max_jump = jump_fraction * (dhi - dlo)

    pen = Pen()
    previous = None
    failures = 0
    samples = resolution + 1
    for i in range(samples):
        t = lo + i * step
        try:
            value = f(**{var: t})
        except EvaluationError:
            failures += 1
            value = math.nan

        if not (math.isfinite(value) and dlo <= value <= dhi):
            pen.lift()
            previous = None
            continue

        px, py = mapper.to_pixel(value, t) if vertical else mapper.to_pixel(t, value)
        if previous is None or abs(value - previous) > max_jump:
            pen.move_to(px, py)
        else:
            pen.line_to(px, py)
        previous = value

    if failures == samples:
        raise RenderFailure(f"{expression!r} could not be evaluated anywhere in the window")
    logger.debug("sampled %r: %d segments, %d failed samples", expression, len(pen.curve), failures)
    return pen.curve


# ---------------------------------------------------------------------------
# Parametric conics
# ---------------------------------------------------------------------------

def _trace(pen: Pen, points: Iterable[Point], viewport: Viewport, mapper: CoordinateMapper) -> None:
    for x, y in points:
        if viewport.contains(x, y):
            pen.line_to(*mapper.to_pixel(x, y))
        else:
            pen.lift()


def _angles() -> List[float]:
    n = int(2 * math.pi / THETA_STEP)
    return [i * THETA_STEP for i in range(n + 1)] + [2 * math.pi]


def plot_circle(params: CircleParams, viewport: Viewport, mapper: CoordinateMapper) -> RenderedCurve:
    pen = Pen()
    points = ((params.h + params.r * math.cos(t), params.k + params.r * math.sin(t)) for t in _angles())
    _trace(pen, points, viewport, mapper)
    return pen.curve


def plot_ellipse(params: ConicParams, viewport: Viewport, mapper: CoordinateMapper) -> RenderedCurve:
    rx, ry = (params.a, params.b) if params.horizontal else (params.b, params.a)
    pen = Pen()
    points = ((params.h + rx * math.cos(t), params.k + ry * math.sin(t)) for t in _angles())
    _trace(pen, points, viewport, mapper)
    return pen.curve


def plot_hyperbola(params: ConicParams, viewport: Viewport, mapper: CoordinateMapper) -> RenderedCurve:
    n = int(round(2 * HYPERBOLA_T_LIMIT / HYPERBOLA_T_STEP))
    ts = [-HYPERBOLA_T_LIMIT + i * HYPERBOLA_T_STEP for i in range(n + 1)]

    pen = Pen()
    for branch in (1, -1):
        if params.horizontal:
            points = ((params.h + branch * params.a * math.cosh(t), params.k + params.b * math.sinh(t)) for t in ts)
        else:
            points = ((params.h + params.b * math.sinh(t), params.k + branch * params.a * math.cosh(t)) for t in ts)
        _trace(pen, points, viewport, mapper)
        pen.lift()
    return pen.curve


_CONIC_PLOTTERS = {
    EquationForm.CIRCLE: plot_circle,
    EquationForm.ELLIPSE: plot_ellipse,
    EquationForm.HYPERBOLA: plot_hyperbola,
}


def plot_conic(form: EquationForm, params: ShapeParams, viewport: Viewport, mapper: CoordinateMapper) -> RenderedCurve:
    try:
        plotter = _CONIC_PLOTTERS[form]
    except KeyError:
        raise RenderFailure(f"{form.name} is not a conic form") from None
    return plotter(params, viewport, mapper)


# ---------------------------------------------------------------------------
# Marching squares for implicit relations
# ---------------------------------------------------------------------------

def contour_grid_shape(resolution: int, width: float, height: float) -> Tuple[int, int]:
    """(columns, rows) of contour cells, bounded so evaluation counts stay sane."""
    cols = min(max(resolution // 2, MIN_CONTOUR_CELLS), MAX_CONTOUR_CELLS)
    rows = max(1, int(round(cols * height / width)))
    return cols, min(rows, MAX_CONTOUR_CELLS)


def _crossing(p1: Point, p2: Point, v1: float, v2: float) -> Point:
    t = abs(v1) / (abs(v1) + abs(v2))
    return p1[0] + t * (p2[0] - p1[0]), p1[1] + t * (p2[1] - p1[1])


def cell_crossings(corners: Sequence[Tuple[float, float, float]]) -> List[Tuple[int, Point]]:
    """
    Zero crossings on the edges of one cell.

    ``corners`` are ``(x, y, value)`` for bottom-left, bottom-right, top-right and
    top-left. Edge ``k`` joins corner ``k`` and corner ``k + 1``, so the edges
    are 0 bottom, 1 right, 2 top, 3 left.
    """
    crossings = []
    for edge in range(4):
        x1, y1, v1 = corners[edge]
        x2, y2, v2 = corners[(edge + 1) % 4]
        if not (math.isfinite(v1) and math.isfinite(v2)):
            continue
        if (v1 > 0) != (v2 > 0):
            crossings.append((edge, _crossing((x1, y1), (x2, y2), v1, v2)))
    return crossings


def connect_crossings(crossings: Sequence[Tuple[int, Point]], center_value: float) -> List[Segment]:
    """Pair crossing points; with four of them the centre sign settles the saddle."""
    points = [p for _, p in crossings]
    if len(points) == 2:
        return [(points[0], points[1])]
    if len(points) == 4:
        if center_value > 0:
            return [(points[0], points[1]), (points[2], points[3])]
        return [(points[0], points[3]), (points[1], points[2])]
    return []


def marching_squares(
    values: np.ndarray,
    xs: Sequence[float],
    ys: Sequence[float],
    center: Optional[Callable[[float, float], float]] = None,
) -> List[Segment]:
    """
    Segments approximating the zero set of a sampled field.

    ``values[j, i]`` is the field at ``(xs[i], ys[j])``; non-finite values never
    take part in a sign change. ``center`` evaluates the field at a cell centre
    for saddle cells and defaults to the mean of the four corners.
    """
    values = np.asarray(values, dtype=float)
    finite = np.isfinite(values)
    positive = values > 0

    # cells whose finite corners disagree in sign
    quads = (np.s_[:-1, :-1], np.s_[:-1, 1:], np.s_[1:, 1:], np.s_[1:, :-1])
    any_pos = np.zeros((values.shape[0] - 1, values.shape[1] - 1), dtype=bool)
    any_neg = np.zeros_like(any_pos)
    for q in quads:
        any_pos |= finite[q] & positive[q]
        any_neg |= finite[q] & ~positive[q]
    candidates = np.argwhere(any_pos & any_neg)

    segments = []
    for j, i in candidates:
        corners = (
            (xs[i], ys[j], values[j, i]),
            (xs[i + 1], ys[j], values[j, i + 1]),
            (xs[i + 1], ys[j + 1], values[j + 1, i + 1]),
            (xs[i], ys[j + 1], values[j + 1, i]),
        )
        crossings = cell_crossings(corners)
        if len(crossings) == 4:
            cx = (xs[i] + xs[i + 1]) / 2
            cy = (ys[j] + ys[j + 1]) / 2
            c = center(cx, cy) if center is not None else math.nan
            if not math.isfinite(c):
                c = sum(v for _, _, v in corners) / 4
            segments.extend(connect_crossings(crossings, c))
        else:
            segments.extend(connect_crossings(crossings, 0.0))
    return segments


def sample_field(f: CompiledExpression, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Field values on the grid; failed or non-finite points become +inf."""
    gx, gy = np.meshgrid(xs, ys)
    try:
        values = f.evaluate_grid(x=gx, y=gy)
    except EvaluationError:
        logger.debug("vectorised evaluation of %r failed, sampling point by point", f.source)
        values = np.empty(gx.shape)
        for idx in np.ndindex(gx.shape):
            try:
                values[idx] = f(x=gx[idx], y=gy[idx])
            except EvaluationError:
                values[idx] = math.inf
    values[~np.isfinite(values)] = math.inf
    return values


def plot_implicit(
    expression: str,
    viewport: Viewport,
    mapper: CoordinateMapper,
    resolution: int = DEFAULT_RESOLUTION,
) -> RenderedCurve:
    """Contour ``expression = 0`` where ``expression`` is in x and y."""
    f = _compile(expression, ("x", "y"))
    cols, rows = contour_grid_shape(resolution, viewport.graph_width, viewport.graph_height)
    xs = np.linspace(viewport.xmin, viewport.xmax, cols + 1)
    ys = np.linspace(viewport.ymin, viewport.ymax, rows + 1)

    values = sample_field(f, xs, ys)
    if not np.isfinite(values).any():
        raise RenderFailure(f"{expression!r} could not be evaluated anywhere in the window")

    def center(x: float, y: float) -> float:
        try:
            return f(x=x, y=y)
        except EvaluationError:
            return math.nan

    pen = Pen()
    segments = marching_squares(values, xs, ys, center=center)
    for a, b in segments:
        pen.move_to(*mapper.to_pixel(*a))
        pen.line_to(*mapper.to_pixel(*b))
        pen.lift()
    logger.debug("contoured %r on a %dx%d grid: %d segments", expression, cols, rows, len(segments))
    return pen.curve
