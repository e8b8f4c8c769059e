"""
knotcanvas.normalizer
=====================
Formula Text Normalizer.

Turns loosely formatted pasted text into exactly three per-axis expression
strings. The work is an ordered list of pure string rules:

1. Text rules (whole input): typographic symbols to ASCII.
2. Line split: trimmed, non-empty physical lines.
3. Line rules (per line, in order): implicit multiplication,
   keep-after-last-'=', axis label stripping.

Lines left empty by the line rules are discarded before axis assignment.
"""

import re
from typing import Callable, List, NamedTuple, Tuple

from .errors import EmptyInputError

Rule = Callable[[str], str]

DEFAULT_AXIS_VALUE = "0"

_SYMBOLS = (
    ("×", "*"),   # multiplication sign
    ("·", "*"),   # middle dot
    ("⋅", "*"),   # dot operator
    ("÷", "/"),   # division sign
    ("−", "-"),   # minus sign
    ("π", "pi"),  # greek small letter pi
)

# A digit run that does not continue an identifier or a decimal, directly
# followed by a letter or '('. Scientific literals (1e5, 2.5E-3) are left alone.
_IMPLICIT_MUL = re.compile(
    r"(?<![A-Za-z_\d.])(\d+(?:\.\d+)?)(?![eE][+-]?\d)(?=[A-Za-z(])"
)

_AXIS_LABEL = re.compile(
    r"""^[xyz]                     # axis letter
        (?:_?\d+|[₀-₉]+)?  # optional index: x1, x_2, x₃
        \s*
        (?:\(\s*t\s*\)\s*[:=]?|[:=])  # '(t)' with optional separator, or a bare separator
        \s*""",
    re.IGNORECASE | re.VERBOSE,
)


class AxisFormulas(NamedTuple):
    """Normalized expression strings, one per axis."""
    x: str
    y: str
    z: str


def replace_symbols(text: str) -> str:
    """'2×t', '1÷t', 'π' -> '2*t', '1/t', 'pi'."""
    for symbol, ascii_text in _SYMBOLS:
        text = text.replace(symbol, ascii_text)
    return text


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty physical lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def expand_implicit_multiplication(line: str) -> str:
    """'2t' -> '2*t', '3(t+1)' -> '3*(t+1)', '0.5sin(t)' -> '0.5*sin(t)'."""
    return _IMPLICIT_MUL.sub(r"\1*", line)


def keep_after_last_equals(line: str) -> str:
    """'X(t) = sin(t)' -> 'sin(t)'."""
    if "=" in line:
        return line.rsplit("=", 1)[1].strip()
    return line


def strip_axis_label(line: str) -> str:
    """'x: cos(t)', 'Y(t) cos(t)', 'z₂ = t' -> the expression alone."""
    return _AXIS_LABEL.sub("", line, count=1).strip()


TEXT_RULES: Tuple[Rule, ...] = (replace_symbols,)

LINE_RULES: Tuple[Rule, ...] = (
    expand_implicit_multiplication,
    keep_after_last_equals,
    strip_axis_label,
)


def normalize_lines(raw_text: str) -> List[str]:
    """Runs the whole pipeline and returns the surviving expression lines."""
    text = raw_text or ""
    for rule in TEXT_RULES:
        text = rule(text)

    lines = []
    for line in split_lines(text):
        for rule in LINE_RULES:
            line = rule(line)
        if line:
            lines.append(line)
    return lines


def normalize(raw_text: str) -> AxisFormulas:
    """
    Converts pasted text into (x, y, z) expressions.

    With three or more lines the first three are used in order. Two lines
    give x and y with z = '0'; one line gives x with y = z = '0'.

    Raises:
        EmptyInputError: If no formula line survives.
    """
    lines = normalize_lines(raw_text)
    if not lines:
        raise EmptyInputError()

    padded = lines[:3] + [DEFAULT_AXIS_VALUE] * (3 - len(lines[:3]))
    return AxisFormulas(*padded)
