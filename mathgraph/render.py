"""
Graph request -> canvas pipeline.

normalize -> classify -> extract (conics) -> map + grid -> plot -> canvas.
Everything is built fresh per request; nothing is shared between renders.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from matplotlib.colors import is_color_like

from .canvas import Canvas
from .classifier import CONIC_FORMS, EquationForm, classify, explicit_rhs, zero_form
from .errors import RenderFailure
from .extractor import ShapeParams, extract_params
from .grid import draw_grid
from .mapping import CoordinateMapper, Viewport
from .normalizer import has_y_prefix, normalize_equation
from .plotters import (
    DEFAULT_RESOLUTION,
    MAX_RESOLUTION,
    MIN_RESOLUTION,
    RenderedCurve,
    plot_conic,
    plot_explicit,
    plot_implicit,
)

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#C2185B"
CANVAS_BACKGROUND = "#F7F7F7"
CURVE_WIDTH = 3

# xmin, xmax, ymin, ymax per graph mode
MODE_WINDOWS: Dict[str, Tuple[float, float, float, float]] = {
    "polynomial": (-10.0, 10.0, -10.0, 10.0),
    "conic": (-10.0, 10.0, -10.0, 10.0),
    "trig": (-2 * math.pi, 2 * math.pi, -5.0, 5.0),
}


@dataclass(frozen=True)
class GraphRequest:
    equation: str
    xmin: float = -10.0
    xmax: float = 10.0
    ymin: float = -10.0
    ymax: float = 10.0
    color: str = DEFAULT_COLOR
    resolution: int = DEFAULT_RESOLUTION

    def __post_init__(self) -> None:
        if not self.equation or not self.equation.strip():
            raise ValueError("equation must not be empty")
        for name in ("xmin", "xmax", "ymin", "ymax"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite, got {getattr(self, name)}")
        if self.xmin >= self.xmax:
            raise ValueError(f"xmin ({self.xmin}) must be < xmax ({self.xmax})")
        if self.ymin >= self.ymax:
            raise ValueError(f"ymin ({self.ymin}) must be < ymax ({self.ymax})")
        if not (MIN_RESOLUTION <= self.resolution <= MAX_RESOLUTION):
            raise ValueError(f"resolution must be in [{MIN_RESOLUTION}, {MAX_RESOLUTION}], got {self.resolution}")
        if not is_color_like(self.color):
            raise ValueError(f"unknown color {self.color!r}")

    @classmethod
    def for_mode(cls, mode: str, equation: str, **overrides) -> "GraphRequest":
        """Request with the window defaults of ``mode``; ``None`` overrides are ignored."""
        if mode not in MODE_WINDOWS:
            raise ValueError(f"unknown graph mode {mode!r}")
        xmin, xmax, ymin, ymax = MODE_WINDOWS[mode]
        values = dict(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax, color=DEFAULT_COLOR, resolution=DEFAULT_RESOLUTION)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(equation=equation, **values)

    def viewport(self) -> Viewport:
        return Viewport(self.xmin, self.xmax, self.ymin, self.ymax)


@dataclass
class GraphResult:
    canvas: Canvas
    equation: str
    normalized: str
    form: EquationForm
    params: Optional[ShapeParams] = None

    @property
    def used_default(self) -> bool:
        return bool(self.params is not None and self.params.used_default)

    def to_png(self) -> bytes:
        return self.canvas.to_png()


def _plot(
    form: EquationForm,
    normalized: str,
    params: Optional[ShapeParams],
    request: GraphRequest,
    viewport: Viewport,
    mapper: CoordinateMapper,
) -> RenderedCurve:
    if form is EquationForm.EXPLICIT_Y:
        return plot_explicit(explicit_rhs(normalized), viewport, mapper, resolution=request.resolution)
    if form is EquationForm.EXPLICIT_X:
        return plot_explicit(explicit_rhs(normalized), viewport, mapper, vertical=True, resolution=request.resolution)
    if form in CONIC_FORMS:
        return plot_conic(form, params, viewport, mapper)
    return plot_implicit(zero_form(normalized), viewport, mapper, resolution=request.resolution)


def render_graph(request: GraphRequest, mode: Optional[str] = None) -> GraphResult:
    stripped = mode == "polynomial" and has_y_prefix(request.equation)
    normalized = normalize_equation(request.equation, strip_y_prefix=stripped)
    if stripped:
        # the stripped prefix named the dependent variable
        normalized = "y=" + normalized
    elif "=" not in normalized:
        # F(x, y) alone means F = 0, anything else is y = F(x)
        normalized = normalized + "=0" if "y" in normalized else "y=" + normalized
    if normalized.count("=") > 1:
        raise RenderFailure(f"Expected a single '=' in {request.equation!r}")

    form = classify(normalized)
    params = extract_params(normalized, form)
    if params is not None and params.used_default:
        logger.warning("Drawing %s with default parameters for %r", form.name, request.equation)

    viewport = request.viewport()
    # conics share one scale on both axes so circles stay round
    mapper = CoordinateMapper(viewport, aspect_corrected=form in CONIC_FORMS)

    canvas = Canvas(viewport.width, viewport.height)
    canvas.fill_rect(0, 0, viewport.width, viewport.height, CANVAS_BACKGROUND)
    draw_grid(canvas, mapper)

    curve = _plot(form, normalized, params, request, viewport, mapper)
    canvas.stroke_curve(curve, request.color, CURVE_WIDTH)
    logger.info("Rendered %r as %s (%d segments)", request.equation, form.name, len(curve))

    return GraphResult(canvas=canvas, equation=request.equation, normalized=normalized, form=form, params=params)
