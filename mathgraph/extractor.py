"""
Shape parameter extraction for the conic forms.

Extraction never raises. Each form tries its anchored pattern (explicit or
implicit unit denominators) on each bracket variant of the text, then a
looser search for the denominators, and finally falls back to a fixed
default with ``used_default=True`` so a render always has something to draw.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Union

from .classifier import (
    NUM,
    EquationForm,
    match_circle,
    match_ellipse,
    match_hyperbola,
    variants,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircleParams:
    h: float
    k: float
    r: float
    used_default: bool = False


@dataclass(frozen=True)
class ConicParams:
    h: float
    k: float
    a: float
    b: float
    horizontal: bool = True
    used_default: bool = False


ShapeParams = Union[CircleParams, ConicParams]

DEFAULT_CIRCLE = CircleParams(h=0.0, k=0.0, r=1.0, used_default=True)
DEFAULT_ELLIPSE = ConicParams(h=0.0, k=0.0, a=4.0, b=3.0, horizontal=True, used_default=True)
DEFAULT_HYPERBOLA = ConicParams(h=0.0, k=0.0, a=1.0, b=1.0, horizontal=True, used_default=True)


def _offset(value: Optional[str]) -> float:
    # (x-2) carries "-2" and means a centre at +2
    return -float(value) if value else 0.0


def _denominator(value: Optional[str]) -> float:
    if not value:
        return 1.0
    d = float(value)
    return d if d > 0 else 1.0


def _loose_denominator(text: str, var: str) -> Optional[str]:
    # tolerates extra brackets, e.g. (x**2)/9 or x**2/(9)
    m = re.search(rf"{var}\)?\*\*2\)?/\(?({NUM})\)?", text)
    return m.group(1) if m else None


def _loose_sign_of(text: str, var: str) -> bool:
    m = re.search(rf"(^|[+-])\(*{var}\)?\*\*2", text)
    return m is not None and m.group(1) != "-"


def _first_match(matcher, normalized: str):
    for text in variants(normalized):
        found = matcher(text)
        if found is not None:
            return found
    return None


def _circle(normalized: str) -> CircleParams:
    m = _first_match(match_circle, normalized)
    if m is not None:
        rhs = float(m.group("rhs"))
        if rhs > 0:
            return CircleParams(h=_offset(m.group("x_off")), k=_offset(m.group("y_off")), r=math.sqrt(rhs))
    logger.warning("Could not read circle parameters from %r, using default", normalized)
    return DEFAULT_CIRCLE


def _ellipse_from(dx: float, dy: float, h: float, k: float) -> ConicParams:
    horizontal = dx >= dy
    major, minor = (dx, dy) if horizontal else (dy, dx)
    return ConicParams(h=h, k=k, a=math.sqrt(major), b=math.sqrt(minor), horizontal=horizontal)


def _ellipse(normalized: str) -> ConicParams:
    m = _first_match(match_ellipse, normalized)
    if m is not None:
        return _ellipse_from(
            _denominator(m.group("x_den")),
            _denominator(m.group("y_den")),
            _offset(m.group("x_off")),
            _offset(m.group("y_off")),
        )

    dx = _loose_denominator(normalized, "x")
    dy = _loose_denominator(normalized, "y")
    if dx is not None or dy is not None:
        return _ellipse_from(_denominator(dx), _denominator(dy), 0.0, 0.0)

    logger.warning("Could not read ellipse parameters from %r, using default", normalized)
    return DEFAULT_ELLIPSE


def _hyperbola(normalized: str) -> ConicParams:
    found = _first_match(match_hyperbola, normalized)
    if found is not None:
        m, horizontal = found
        positive, negative = ("x", "y") if horizontal else ("y", "x")
        return ConicParams(
            h=_offset(m.group("x_off")),
            k=_offset(m.group("y_off")),
            a=math.sqrt(_denominator(m.group(f"{positive}_den"))),
            b=math.sqrt(_denominator(m.group(f"{negative}_den"))),
            horizontal=horizontal,
        )

    dx = _loose_denominator(normalized, "x")
    dy = _loose_denominator(normalized, "y")
    if dx is not None or dy is not None:
        horizontal = _loose_sign_of(normalized, "x")
        positive, negative = (dx, dy) if horizontal else (dy, dx)
        return ConicParams(
            h=0.0,
            k=0.0,
            a=math.sqrt(_denominator(positive)),
            b=math.sqrt(_denominator(negative)),
            horizontal=horizontal,
        )

    logger.warning("Could not read hyperbola parameters from %r, using default", normalized)
    return DEFAULT_HYPERBOLA


_EXTRACTORS = {
    EquationForm.CIRCLE: _circle,
    EquationForm.ELLIPSE: _ellipse,
    EquationForm.HYPERBOLA: _hyperbola,
}


def extract_params(normalized: str, form: EquationForm) -> Optional[ShapeParams]:
    """Shape parameters for a conic form; ``None`` for the other forms."""
    extractor = _EXTRACTORS.get(form)
    if extractor is None:
        return None
    return extractor(normalized)
