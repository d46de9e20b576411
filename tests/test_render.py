import io
import math

import pytest
from PIL import Image

from mathgraph.classifier import EquationForm, explicit_rhs
from mathgraph.errors import RenderFailure
from mathgraph.mapping import CoordinateMapper
from mathgraph.plotters import plot_explicit
from mathgraph.render import DEFAULT_COLOR, GraphRequest, render_graph


def test_parabola_end_to_end():
    request = GraphRequest("y = x^2", resolution=500)
    result = render_graph(request)
    assert result.form is EquationForm.EXPLICIT_Y
    assert result.normalized == "y=x**2"
    assert result.params is None

    viewport = request.viewport()
    mapper = CoordinateMapper(viewport)
    curve = plot_explicit(explicit_rhs(result.normalized), viewport, mapper, resolution=request.resolution)
    points = curve.points()
    for x, y in [(0, 0), (1, 1), (-1, 1), (3, 9)]:
        px, py = mapper.to_pixel(x, y)
        assert min(math.hypot(px - qx, py - qy) for qx, qy in points) < 1.0

    # clipped: nothing is drawn above ymax
    top = mapper.y_to_pixel(viewport.ymax)
    assert all(qy >= top - 1e-9 for _, qy in points)


def test_png_has_canvas_size():
    png = render_graph(GraphRequest("y = sin(x)")).to_png()
    assert png.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(png)).size == (800, 600)


def test_curve_is_drawn_in_request_colour():
    png = render_graph(GraphRequest("y = 0", color="#2196F3")).to_png()
    image = Image.open(io.BytesIO(png)).convert("RGB")
    pixels = [image.getpixel((400, y)) for y in range(295, 306)]
    expected = (0x21, 0x96, 0xF3)
    assert any(all(abs(c - e) <= 8 for c, e in zip(pixel, expected)) for pixel in pixels)


def test_conic_request():
    result = render_graph(GraphRequest.for_mode("conic", "x^2/9 + y^2/4 = 1"), mode="conic")
    assert result.form is EquationForm.ELLIPSE
    assert (result.params.a, result.params.b) == (3.0, 2.0)
    assert not result.used_default


def test_circle_request():
    result = render_graph(GraphRequest("(x-2)^2 + (y+3)^2 = 16"))
    assert result.form is EquationForm.CIRCLE
    assert (result.params.h, result.params.k, result.params.r) == (2.0, -3.0, 4.0)


def test_polynomial_mode_strips_prefix():
    result = render_graph(GraphRequest.for_mode("polynomial", "y = x^3 - 2x + 1"), mode="polynomial")
    assert result.normalized == "y=x**3-2*x+1"
    assert result.form is EquationForm.EXPLICIT_Y


def test_bare_expression_in_x_is_a_function():
    result = render_graph(GraphRequest("x^2 - 4"))
    assert result.normalized == "y=x**2-4"


def test_bare_expression_in_x_and_y_is_a_relation():
    result = render_graph(GraphRequest("x^2 + y^2 - 4"))
    assert result.normalized == "x**2+y**2-4=0"
    assert result.form is EquationForm.IMPLICIT


def test_implicit_relation_renders():
    result = render_graph(GraphRequest("x^3 + y^3 = 6xy"))
    assert result.form is EquationForm.IMPLICIT
    assert result.to_png()


def test_unrecognised_conic_falls_back_to_contouring():
    result = render_graph(GraphRequest("2x^2 + 8y^2 = 8"))
    assert result.form is EquationForm.IMPLICIT


def test_vertical_function_renders():
    assert render_graph(GraphRequest("x = y^2 - 3")).form is EquationForm.EXPLICIT_X


@pytest.mark.parametrize("equation", ["y = foo(x)", "x = y = 1", "y = x +* 2", "y = x + y"])
def test_render_failure(equation):
    with pytest.raises(RenderFailure):
        render_graph(GraphRequest(equation))


@pytest.mark.parametrize("equation", ["y = x + y", "Y = y^2", "y = x = 2"])
def test_polynomial_prefix_keeps_y_as_the_dependent_variable(equation):
    with pytest.raises(RenderFailure):
        render_graph(GraphRequest.for_mode("polynomial", equation), mode="polynomial")


def test_polynomial_without_prefix_is_still_a_relation():
    result = render_graph(GraphRequest.for_mode("polynomial", "x^2 + y^2 - 4"), mode="polynomial")
    assert result.normalized == "x**2+y**2-4=0"


def test_bracketed_circle_renders_with_its_radius():
    result = render_graph(GraphRequest("(x^2) + (y^2) = 25"))
    assert result.form is EquationForm.CIRCLE
    assert result.params.r == pytest.approx(5.0)
    assert not result.used_default


def test_upper_case_variables_render():
    result = render_graph(GraphRequest.for_mode("trig", "Y = sin(X)"), mode="trig")
    assert result.form is EquationForm.EXPLICIT_Y
    assert result.normalized == "y=sin(x)"


def test_trig_defaults():
    request = GraphRequest.for_mode("trig", "y = sin(x)")
    assert (request.xmin, request.xmax) == (pytest.approx(-2 * math.pi), pytest.approx(2 * math.pi))
    assert (request.ymin, request.ymax) == (-5.0, 5.0)
    assert request.color == DEFAULT_COLOR
    assert request.resolution == 500


def test_for_mode_ignores_missing_overrides():
    request = GraphRequest.for_mode("polynomial", "y = x", xmin=None, xmax=4, color="#4CAF50")
    assert (request.xmin, request.xmax) == (-10.0, 4)
    assert request.color == "#4CAF50"


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(equation="y = x", resolution=50),
        dict(equation="y = x", resolution=1001),
        dict(equation="y = x", color="not-a-colour"),
        dict(equation="y = x", xmin=3, xmax=3),
        dict(equation="y = x", ymin=1, ymax=-1),
        dict(equation="   "),
        dict(equation="y = x", xmin=float("nan")),
        dict(equation="y = x", ymax=float("nan")),
        dict(equation="y = x", xmax=float("inf")),
    ],
)
def test_invalid_requests(kwargs):
    with pytest.raises(ValueError):
        GraphRequest(**kwargs)


def test_unknown_mode():
    with pytest.raises(ValueError):
        GraphRequest.for_mode("spiral", "r = t")
