"""
Equation classification.

Rules are an ordered, immutable table of ``(name, predicate, form)`` entries
evaluated top to bottom against the normalized text, then with redundant
brackets unwrapped, then with every bracket stripped. The first rule that matches decides the form;
anything unmatched is ``IMPLICIT`` and goes to the contour plotter.
"""

import enum
import logging
import re
from typing import Callable, Optional, Tuple

from .errors import RenderFailure
from .normalizer import strip_parentheses

logger = logging.getLogger(__name__)

NUM = r"\d+(?:\.\d+)?"


class EquationForm(enum.Enum):
    EXPLICIT_Y = "explicit_y"
    EXPLICIT_X = "explicit_x"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    HYPERBOLA = "hyperbola"
    IMPLICIT = "implicit"


CONIC_FORMS = frozenset({EquationForm.CIRCLE, EquationForm.ELLIPSE, EquationForm.HYPERBOLA})


def _square(var: str) -> str:
    # x**2 or (x-h)**2, offset captured as "<var>_off"
    return rf"(?:\({var}(?P<{var}_off>[+-]{NUM})\)|{var})\*\*2"


def _term(var: str) -> str:
    return _square(var) + rf"(?:/(?P<{var}_den>{NUM}))?"


_UNIT_RHS = r"=1(?:\.0+)?$"

CIRCLE_PATTERNS = (
    re.compile(rf"^{_square('x')}\+{_square('y')}=(?P<rhs>{NUM})$"),
    re.compile(rf"^{_square('y')}\+{_square('x')}=(?P<rhs>{NUM})$"),
)

ELLIPSE_PATTERNS = (
    re.compile(rf"^{_term('x')}\+{_term('y')}{_UNIT_RHS}"),
    re.compile(rf"^{_term('y')}\+{_term('x')}{_UNIT_RHS}"),
)

# (pattern, horizontal): the positive term names the transverse axis
HYPERBOLA_PATTERNS = (
    (re.compile(rf"^{_term('x')}-{_term('y')}{_UNIT_RHS}"), True),
    (re.compile(rf"^{_term('y')}-{_term('x')}{_UNIT_RHS}"), False),
)


def match_circle(text: str) -> Optional[re.Match]:
    for pattern in CIRCLE_PATTERNS:
        m = pattern.match(text)
        if m:
            return m
    return None


def match_ellipse(text: str) -> Optional[re.Match]:
    for pattern in ELLIPSE_PATTERNS:
        m = pattern.match(text)
        if m:
            return m
    return None


def match_hyperbola(text: str) -> Optional[Tuple[re.Match, bool]]:
    for pattern, horizontal in HYPERBOLA_PATTERNS:
        m = pattern.match(text)
        if m:
            return m, horizontal
    return None


def _is_circle(text: str) -> bool:
    m = match_circle(text)
    if m is None:
        return False
    # a bare x**2+y**2=1 is left to the ellipse rule
    has_offset = m.group("x_off") is not None or m.group("y_off") is not None
    return has_offset or float(m.group("rhs")) != 1.0


RULES: Tuple[Tuple[str, Callable[[str], bool], EquationForm], ...] = (
    ("explicit-y", lambda s: s.startswith("y="), EquationForm.EXPLICIT_Y),
    ("explicit-x", lambda s: s.startswith("x="), EquationForm.EXPLICIT_X),
    ("circle", _is_circle, EquationForm.CIRCLE),
    ("ellipse", lambda s: match_ellipse(s) is not None, EquationForm.ELLIPSE),
    ("hyperbola", lambda s: match_hyperbola(s) is not None, EquationForm.HYPERBOLA),
)


_WRAPPED_SQUARE = re.compile(rf"\(((?:\([xy][+-]{NUM}\)|[xy])\*\*2)\)")
_WRAPPED_NUM = re.compile(rf"\(({NUM})\)")


def unwrap_terms(text: str) -> str:
    """Drop brackets around whole squared terms and bare numbers: ``((x-1)**2)/(9)`` becomes ``(x-1)**2/9``."""
    previous = None
    while previous != text:
        previous = text
        text = _WRAPPED_NUM.sub(r"\1", _WRAPPED_SQUARE.sub(r"\1", text))
    return text


def variants(normalized: str) -> Tuple[str, ...]:
    # most faithful first; stripping every bracket loses centre offsets
    return (normalized, unwrap_terms(normalized), strip_parentheses(normalized))


def classify(normalized: str) -> EquationForm:
    candidates = variants(normalized)
    for name, predicate, form in RULES:
        if any(predicate(text) for text in candidates):
            logger.debug("%r classified as %s by rule %s", normalized, form.name, name)
            return form
    logger.debug("%r classified as IMPLICIT", normalized)
    return EquationForm.IMPLICIT


def split_equation(normalized: str) -> Tuple[str, str]:
    parts = normalized.split("=")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise RenderFailure(f"Expected exactly one '=' with two sides in {normalized!r}")
    return parts[0], parts[1]


def explicit_rhs(normalized: str) -> str:
    """Right-hand side of ``y=...`` or ``x=...``."""
    return split_equation(normalized)[1]


def zero_form(normalized: str) -> str:
    """Rearrange ``lhs=rhs`` as ``lhs-(rhs)`` so the curve is its zero set."""
    lhs, rhs = split_equation(normalized)
    return f"{lhs}-({rhs})"
