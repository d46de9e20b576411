"""
Numeric expression engine.

Expressions are restricted to numbers, arithmetic operators, parentheses, the
bound variables and a fixed set of function and constant names. Anything else
is rejected before sympy ever sees it, so parsing never becomes a scripting hook.
"""

import logging
import re
from typing import Dict, Iterable, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    convert_xor,
)

from .errors import EvaluationError

logger = logging.getLogger(__name__)

FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "sqrt": sp.sqrt,
    "exp": sp.exp,
    "log": sp.log,
    "ln": sp.log,
    "abs": sp.Abs,
    "floor": sp.floor,
    "ceil": sp.ceiling,
}

CONSTANTS = {"pi": sp.pi, "e": sp.E}

TRANSFORMS = standard_transformations + (convert_xor,)

_ALLOWED_CHARS = re.compile(r"^[A-Za-z0-9_.+\-*/^(),\s]*$")
_IDENTIFIER = re.compile(r"[A-Za-z_]\w*")


def _validate(expr: str, variables: Tuple[str, ...]) -> None:
    if not expr or not expr.strip():
        raise EvaluationError("Empty expression")
    if not _ALLOWED_CHARS.match(expr):
        raise EvaluationError(f"Unsupported characters in expression: {expr!r}")
    for name in _IDENTIFIER.findall(expr):
        if name not in FUNCTIONS and name not in CONSTANTS and name not in variables:
            raise EvaluationError(f"Undefined symbol {name!r} in {expr!r}")


def _real(value):
    arr = np.asarray(value)
    if np.iscomplexobj(arr):
        # complex results only count where the imaginary part vanishes
        arr = np.where(np.isclose(arr.imag, 0.0), arr.real, np.nan)
    return arr.astype(float)


class CompiledExpression:
    """A parsed expression bound to an ordered tuple of variable names."""

    def __init__(self, source: str, expr: sp.Expr, variables: Tuple[str, ...]):
        self.source = source
        self.expr = expr
        self.variables = variables
        self._func = sp.lambdify([sp.Symbol(v) for v in variables], expr, modules="numpy")

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r}, variables={self.variables})"

    def _arguments(self, bindings: Dict[str, object]):
        missing = [v for v in self.variables if v not in bindings]
        if missing:
            raise EvaluationError(f"Missing bindings for {', '.join(missing)}")
        return [bindings[v] for v in self.variables]

    def __call__(self, **bindings: float) -> float:
        args = [np.float64(v) for v in self._arguments(bindings)]
        try:
            with np.errstate(all="ignore"):
                value = self._func(*args)
            result = _real(value)
        except Exception as e:
            raise EvaluationError(f"Cannot evaluate {self.source!r} at {bindings}: {e}") from e
        if result.ndim != 0:
            raise EvaluationError(f"{self.source!r} did not evaluate to a number")
        return float(result)

    def evaluate_grid(self, **arrays: np.ndarray) -> np.ndarray:
        """Evaluate over broadcastable numpy arrays; NaN marks out-of-domain points."""
        args = [np.asarray(a, dtype=float) for a in self._arguments(arrays)]
        shape = np.broadcast_shapes(*(a.shape for a in args))
        try:
            with np.errstate(all="ignore"):
                value = self._func(*args)
            result = _real(value)
        except Exception as e:
            raise EvaluationError(f"Cannot evaluate {self.source!r} on a grid: {e}") from e
        return np.broadcast_to(result, shape).copy()


def compile_expression(expr: str, variables: Iterable[str] = ("x",)) -> CompiledExpression:
    variables = tuple(variables)
    _validate(expr, variables)

    local_dict = {v: sp.Symbol(v) for v in variables}
    local_dict.update(FUNCTIONS)
    local_dict.update(CONSTANTS)
    try:
        parsed = parse_expr(expr, local_dict=local_dict, transformations=TRANSFORMS)
    except Exception as e:
        raise EvaluationError(f"Cannot parse {expr!r}: {e}") from e

    if not isinstance(parsed, sp.Expr):
        raise EvaluationError(f"{expr!r} is not a numeric expression")
    unknown = {s.name for s in parsed.free_symbols} - set(variables)
    if unknown:
        raise EvaluationError(f"Undefined symbols {sorted(unknown)} in {expr!r}")

    logger.debug("compiled %r as %s", expr, parsed)
    return CompiledExpression(expr, parsed, variables)


def evaluate(expr: str, bindings: Dict[str, float]) -> float:
    return compile_expression(expr, tuple(bindings))(**bindings)
