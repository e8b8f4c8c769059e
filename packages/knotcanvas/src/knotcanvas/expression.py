"""
knotcanvas.expression
=====================
Expression Evaluator.

Compiles a single textual math expression with SymPy and evaluates it
numerically against a set of variable bindings.

Philosophy:
    Parsing is symbolic (SymPy), evaluation is numeric (lambdify + NumPy).
    Evaluation runs on complex inputs so that sqrt(-1), log(-1) or e^(i*pi)
    stay well defined; a complex result is reduced to its real part.
"""

import logging
import math
import re
from collections import OrderedDict
from typing import Iterable, Mapping, Optional

import numpy as np
import sympy as sp
from sympy import Symbol
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import parse_expr, standard_transformations, convert_xor

from . import config
from .errors import FormulaError, InvalidIntervalError

logger = logging.getLogger(__name__)

# Names available while sampling a curve: t is the variable, the rest are constants.
CURVE_VARIABLES = ("t",)
CURVE_CONSTANTS = {"i": sp.I, "e": sp.E, "pi": sp.pi}

# Interval bounds must not depend on the curve parameter.
INTERVAL_CONSTANTS = {"e": sp.E, "pi": sp.pi}

# Spellings users paste in that SymPy does not know under that name.
FUNCTION_ALIASES = {
    "abs": sp.Abs,
    "ln": sp.log,
    "log10": lambda x: sp.log(x, 10),
    "log2": lambda x: sp.log(x, 2),
    "pow": sp.Pow,
    "cbrt": sp.cbrt,
}

_TRANSFORMATIONS = standard_transformations + (convert_xor,)

# The only names parse_expr may resolve besides the scope's local names: the
# number and symbol constructors its transformations emit, and the supported
# functions. Anything else is read as an unknown symbol or function.
_PARSER_NAMES = (
    "Integer", "Float", "Rational", "Symbol", "Function", "factorial", "factorial2",
    "sin", "cos", "tan", "cot", "sec", "csc",
    "asin", "acos", "atan", "atan2",
    "sinh", "cosh", "tanh", "asinh", "acosh", "atanh",
    "exp", "log", "sqrt", "floor", "ceiling", "sign", "Abs",
)
PARSER_GLOBALS = {name: getattr(sp, name) for name in _PARSER_NAMES}

_FORBIDDEN = re.compile(r"__|\.\s*[A-Za-z_]|[;\[\]{}'\"`\\@$#!]|\b(?:lambda|import)\b")


def _undefined(*args):
    return math.nan


class CompiledExpression:
    """
    A parsed expression bound to an ordered tuple of variable names.

    Attributes:
        source (str): The expression text as given.
        expr (sp.Expr): The symbolic form.
        variables (tuple): Variable names expected in the bindings.
    """
    def __init__(self, source: str, expr: sp.Expr, variables: tuple):
        self.source = source
        self.expr = expr
        self.variables = variables
        if expr.has(sp.zoo, sp.nan):
            # SymPy folded part of it to an undefined value (1/0, log(0)); NumPy cannot print those
            self._func = _undefined
        else:
            symbols = [Symbol(name) for name in variables]
            self._func = sp.lambdify(symbols, expr, modules="numpy")

    def evaluate(self, bindings: Optional[Mapping[str, float]] = None) -> float:
        """
        Evaluates numerically and returns the real part of the result.

        Extra names in `bindings` are ignored. NaN and infinities are returned
        as-is; rejecting them is up to the caller.
        """
        value = self.evaluate_complex(bindings)
        if value.imag != 0.0 and not math.isnan(value.imag):
            logger.debug(f"Complex result detected for '{self.source}': {value}, using real part {value.real}")
        return value.real

    def evaluate_complex(self, bindings: Optional[Mapping[str, float]] = None) -> complex:
        """Evaluates numerically without reducing the result to its real part."""
        bindings = bindings or {}
        missing = [name for name in self.variables if name not in bindings]
        if missing:
            raise FormulaError(f"No value bound for {', '.join(missing)}", expression=self.source)

        try:
            raw = self._call([np.complex128(bindings[name]) for name in self.variables])
        except TypeError:
            # Some NumPy ufuncs (floor, mod, ...) only accept real input
            try:
                raw = self._call([np.float64(complex(bindings[name]).real) for name in self.variables])
            except TypeError as exc:
                raise FormulaError(str(exc), expression=self.source) from exc

        try:
            return complex(raw)
        except (TypeError, ValueError) as exc:
            raise FormulaError(f"Expression does not evaluate to a number ({raw!r})",
                               expression=self.source) from exc

    def _call(self, args):
        try:
            with np.errstate(all="ignore"):
                return self._func(*args)
        except TypeError:
            raise
        except Exception as exc:
            raise FormulaError(str(exc) or exc.__class__.__name__, expression=self.source) from exc

    def __repr__(self):
        return f"CompiledExpression({self.source!r}, variables={self.variables})"


class ExpressionEvaluator:
    """
    Compiles expressions in a fixed scope and evaluates them.

    Compiled forms are cached per (expression, variables, constants) so that
    repeated sampling of the same formula parses it once. The cache keeps the
    `cache_size` most recently used forms.
    """
    def __init__(self, cache_size: int = config.EXPRESSION_CACHE_SIZE):
        if cache_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {cache_size}")
        self.cache_size = cache_size
        self._cache: "OrderedDict[tuple, CompiledExpression]" = OrderedDict()

    def compile(self, expression: str, variables: Iterable[str] = CURVE_VARIABLES,
                constants: Mapping[str, sp.Expr] = None) -> CompiledExpression:
        """
        Args:
            expression: Expression text, e.g. 'sin(t) + 2*sin(2*t)'. '^' is power.
            variables: Names supplied at evaluation time.
            constants: Names bound once at compile time. Defaults to CURVE_CONSTANTS.

        Raises:
            FormulaError: On rejected text, syntax errors, unknown names or
                          non-numeric expressions.
        """
        if constants is None:
            constants = CURVE_CONSTANTS
        variables = tuple(variables)
        key = (expression, variables, tuple(sorted(constants)))
        compiled = self._cache.get(key)
        if compiled is not None:
            self._cache.move_to_end(key)
            return compiled

        expr = self._parse(expression, variables, constants)
        try:
            compiled = CompiledExpression(expression, expr, variables)
        except Exception as exc:
            raise FormulaError(f"Cannot compile '{expression}': {exc}", expression=expression) from exc
        self._cache[key] = compiled
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return compiled

    def evaluate(self, expression: str, bindings: Mapping[str, float] = None,
                 constants: Mapping[str, sp.Expr] = None) -> float:
        """Compiles `expression` with the names of `bindings` as variables and evaluates it."""
        bindings = dict(bindings or {})
        if constants is None:
            constants = CURVE_CONSTANTS
        variables = tuple(name for name in bindings if name not in constants)
        return self.compile(expression, variables, constants).evaluate(bindings)

    def evaluate_bound(self, expression) -> float:
        """
        Evaluates an interval expression ('0', '2*pi', 'e^2') to a float.
        Only e and pi are bound; t and i are unavailable.

        Raises:
            InvalidIntervalError: If the bound is not a finite real number.
        """
        if isinstance(expression, (int, float)) and not isinstance(expression, bool):
            value = float(expression)
        else:
            try:
                value = self.compile(str(expression), (), INTERVAL_CONSTANTS).evaluate({})
            except FormulaError as exc:
                raise InvalidIntervalError(f"Invalid interval bound '{expression}': {exc.message}") from exc
        if not math.isfinite(value):
            raise InvalidIntervalError(f"Interval bound '{expression}' is not a finite number")
        return value

    def _parse(self, expression: str, variables: tuple, constants: Mapping[str, sp.Expr]) -> sp.Expr:
        text = (expression or "").strip()
        if not text:
            raise FormulaError("Expression is empty", expression=expression)
        if _FORBIDDEN.search(text):
            raise FormulaError("Expression contains unsupported characters or syntax", expression=expression)

        local_dict = dict(FUNCTION_ALIASES)
        local_dict.update(constants)
        local_dict.update({name: Symbol(name) for name in variables})

        try:
            expr = parse_expr(text, local_dict=local_dict, global_dict=dict(PARSER_GLOBALS),
                              transformations=_TRANSFORMATIONS)
        except Exception as exc:
            raise FormulaError(f"Cannot parse '{text}': {exc}", expression=expression) from exc

        if not isinstance(expr, sp.Expr):
            raise FormulaError(f"'{text}' is not a numeric expression", expression=expression)

        unknown = sorted(str(s) for s in expr.free_symbols if s.name not in variables)
        if unknown:
            raise FormulaError(f"Undefined symbol: {', '.join(unknown)}", expression=expression)

        functions = sorted({f.func.__name__ for f in expr.atoms(AppliedUndef)})
        if functions:
            raise FormulaError(f"Undefined function: {', '.join(functions)}", expression=expression)

        return expr
