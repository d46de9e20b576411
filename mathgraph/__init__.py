from .classifier import EquationForm, classify
from .engine import compile_expression, evaluate
from .errors import EvaluationError, MathGraphError, RenderFailure
from .extractor import CircleParams, ConicParams, extract_params
from .normalizer import format_equation, format_number, normalize_equation
from .render import GraphRequest, GraphResult, render_graph

__all__ = [
    "CircleParams",
    "ConicParams",
    "EquationForm",
    "EvaluationError",
    "GraphRequest",
    "GraphResult",
    "MathGraphError",
    "RenderFailure",
    "classify",
    "compile_expression",
    "evaluate",
    "extract_params",
    "format_equation",
    "format_number",
    "normalize_equation",
    "render_graph",
]
