import pytest

from mathgraph.canvas import Canvas
from mathgraph.grid import TickSpacing, draw_grid, format_tick_label, tick_spacing, tick_values
from mathgraph.mapping import CoordinateMapper, Viewport


@pytest.mark.parametrize(
    "axis_range, expected",
    [
        (1, TickSpacing(0.2, 0.1)),
        (2, TickSpacing(0.2, 0.1)),
        (4, TickSpacing(1, 0.2)),
        (20, TickSpacing(2, 0.5)),
        (40, TickSpacing(10, 2)),
        (100, TickSpacing(20, 5)),
        (1000, TickSpacing(100, 20)),
        (101, TickSpacing(11, 3)),
    ],
)
def test_tick_spacing_table(axis_range, expected):
    assert tick_spacing(axis_range) == expected


@pytest.mark.parametrize("axis_range", [1, 2, 3, 5, 10, 20, 30, 50, 75, 100, 250, 1000, 12345])
def test_tick_spacing_density(axis_range):
    spacing = tick_spacing(axis_range)
    assert spacing.major >= spacing.minor > 0
    assert 3 <= axis_range / spacing.major <= 25


def test_tick_values_integer_step():
    assert tick_values(-10, 10, 2) == [-10, -8, -6, -4, -2, 0, 2, 4, 6, 8, 10]


def test_tick_values_fractional_step_has_no_drift():
    values = tick_values(-1, 1, 0.2)
    assert len(values) == 11
    assert 0.6 in values
    assert values[0] == pytest.approx(-1)
    assert values[-1] == pytest.approx(1)


def test_tick_values_start_inside_range():
    assert tick_values(-2 * 3.14159, 2 * 3.14159, 2) == [-6, -4, -2, 0, 2, 4, 6]


@pytest.mark.parametrize(
    "value, label",
    [
        (0, "0"),
        (-0.0, "0"),
        (1e-12, "0"),
        (0.5, "0.5"),
        (-0.4, "-0.4"),
        (2, "2"),
        (2.5, "2.5"),
        (-10, "-10"),
        (1000, "1000"),
        (5000, "5.0e+03"),
        (0.005, "5.0e-03"),
    ],
)
def test_format_tick_label(value, label):
    assert format_tick_label(value) == label


def _render_grid(viewport):
    canvas = Canvas(viewport.width, viewport.height)
    draw_grid(canvas, CoordinateMapper(viewport))
    return canvas


def test_draw_grid_labels_every_major_tick():
    canvas = _render_grid(Viewport(-10, 10, -10, 10))
    labels = [t.get_text() for t in canvas.ax.texts]
    assert len(labels) == 22
    assert labels.count("0") == 2
    assert "-10" in labels and "10" in labels


def test_draw_grid_skips_axes_outside_window():
    with_axes = _render_grid(Viewport(-10, 10, -10, 10))
    without_axes = _render_grid(Viewport(1, 5, 1, 5))
    assert len(with_axes.ax.collections) == 4
    assert len(without_axes.ax.collections) == 3
