"""
knotcanvas.domain
=================
Domain Detector.

Suggests a sampling interval [t_min, t_max] from the shape of the formulas.
The heuristics are an ordered rule list; the first rule that matches wins:

1. Trigonometric  -> [0, 2*pi]  (periodic, likely a closed curve)
2. Exponential    -> [0, 5]     (keeps growth from blowing up)
3. Affine in t    -> [0, 10]    (straight lines need room)
4. Anything else  -> [0, 2*pi]

A suggestion is advisory. It is only applied to an interval the user has not
touched (see is_untouched_interval).
"""

import re
from typing import Callable, NamedTuple, Optional, Sequence, Tuple

from .config import DEFAULT_T_MIN, DEFAULT_T_MAX


class DomainSuggestion(NamedTuple):
    t_min: str
    t_max: str
    reason: str


_NUM = r"(?:\d+(?:\.\d*)?|\.\d+)"
_TERM = rf"(?:{_NUM}\s*\*?\s*t|t(?:\s*[*/]\s*{_NUM})?|{_NUM})"
_AFFINE = re.compile(rf"^\s*[+-]?\s*{_TERM}(?:\s*[+-]\s*{_TERM})*\s*$")

_TRIG_TOKENS = ("sin", "cos", "tan")
_EXP_TOKENS = ("exp", "pow", "^")


def _has_trig(text: str, formulas: Sequence[str]) -> bool:
    return any(token in text for token in _TRIG_TOKENS)


def _has_exponential(text: str, formulas: Sequence[str]) -> bool:
    return any(token in text for token in _EXP_TOKENS)


def _is_affine(text: str, formulas: Sequence[str]) -> bool:
    return all(_AFFINE.match(f.lower()) for f in formulas)


Predicate = Callable[[str, Sequence[str]], bool]

DOMAIN_RULES: Tuple[Tuple[Predicate, DomainSuggestion], ...] = (
    (_has_trig, DomainSuggestion("0", "2*pi", "trigonometric formulas: one full period closes the curve")),
    (_has_exponential, DomainSuggestion("0", "5", "exponential growth: short interval avoids overflow")),
    (_is_affine, DomainSuggestion("0", "10", "affine formulas: straight line needs a longer interval")),
)

FALLBACK = DomainSuggestion(DEFAULT_T_MIN, DEFAULT_T_MAX, "no pattern recognized: default interval")


def detect(formula_x: str, formula_y: str, formula_z: str) -> DomainSuggestion:
    """Suggests an interval for the formula triple."""
    formulas = (formula_x or "", formula_y or "", formula_z or "")
    text = ", ".join(formulas).lower()
    for predicate, suggestion in DOMAIN_RULES:
        if predicate(text, formulas):
            return suggestion
    return FALLBACK


def is_untouched_interval(t_min: str, t_max: str) -> bool:
    """True while the interval fields still hold the default (or nothing)."""
    lo = (t_min or "").strip()
    hi = (t_max or "").strip()
    return lo in ("", DEFAULT_T_MIN) and hi in ("", DEFAULT_T_MAX)


def suggest(formula_x: str, formula_y: str, formula_z: str,
            t_min: str, t_max: str) -> Optional[DomainSuggestion]:
    """detect() for an untouched interval, None when the user customized it."""
    if not is_untouched_interval(t_min, t_max):
        return None
    return detect(formula_x, formula_y, formula_z)
