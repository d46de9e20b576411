import re
from typing import List, Tuple

from .engine import CONSTANTS, FUNCTIONS

_Y_PREFIX = re.compile(r"^\s*y\s*=\s*", re.IGNORECASE)
_TOKENS = re.compile(r"(\d+(?:\.\d*)?|\.\d+)|([A-Za-z]+)|(.)")

# longest names first so "asin" wins over "sin"
_NAMES = sorted(list(FUNCTIONS) + list(CONSTANTS), key=len, reverse=True)

# token kinds after which an operand may be juxtaposed
_LEFT = {"num", "var", "close"}
_RIGHT = {"num", "var", "func", "open"}


def _split_letters(run: str) -> List[Tuple[str, str]]:
    tokens = []
    i = 0
    while i < len(run):
        for name in _NAMES:
            if run.startswith(name, i):
                tokens.append(("func" if name in FUNCTIONS else "var", name))
                i += len(name)
                break
        else:
            # X and Y are the plotting variables whatever the case
            letter = run[i].lower() if run[i] in "XY" else run[i]
            tokens.append(("var", letter))
            i += 1
    return tokens


def _tokenize(s: str) -> List[Tuple[str, str]]:
    tokens = []
    for number, letters, other in _TOKENS.findall(s):
        if number:
            tokens.append(("num", number))
        elif letters:
            tokens.extend(_split_letters(letters))
        elif other == "(":
            tokens.append(("open", other))
        elif other == ")":
            tokens.append(("close", other))
        else:
            tokens.append(("op", other))
    return tokens


def has_y_prefix(raw: str) -> bool:
    return bool(raw) and _Y_PREFIX.match(raw) is not None


def normalize_equation(raw: str, strip_y_prefix: bool = False) -> str:
    """Rewrite user text as canonical infix: no whitespace, ``**`` powers, explicit ``*``."""
    s = raw or ""
    if strip_y_prefix:
        s = _Y_PREFIX.sub("", s)
    s = re.sub(r"\s+", "", s)
    s = s.replace("^", "**")
    s = s.replace("−", "-").replace("×", "*").replace("÷", "/")

    out = []
    prev = None
    for kind, text in _tokenize(s):
        if prev in _LEFT and kind in _RIGHT:
            out.append("*")
        out.append(text)
        prev = kind
    return "".join(out)


def strip_parentheses(text: str) -> str:
    return text.replace("(", "").replace(")", "")


def format_equation(equation: str) -> str:
    """Human-readable form for embeds: ``x**2*y`` becomes ``x^2y``."""
    s = re.sub(r"\s+", "", equation)
    s = s.replace("**", "^").replace("*", "")
    s = re.sub(r"([+\-/=])", r" \1 ", s)
    return re.sub(r"\s+", " ", s).strip()


def format_number(num: float) -> str:
    text = f"{num:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
