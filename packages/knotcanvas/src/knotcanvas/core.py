"""
knotcanvas.core
===============
The Analytic Core of the KnotCanvas engine.

This module defines the fundamental curve primitives:
1. Point: An evaluated, immutable point in 3D space.
2. ParametricCurve: A formula triple r(t) = (x(t), y(t), z(t)).

Philosophy:
    Formulas are held symbolically (SymPy). Numerical evaluation happens
    only when a point is requested, one parameter value at a time.
"""

from typing import NamedTuple

import sympy as sp
from sympy import Matrix

from .errors import FormulaError
from .expression import ExpressionEvaluator, CURVE_VARIABLES, CURVE_CONSTANTS

AXES = ("x", "y", "z")


class Point(NamedTuple):
    """A point (x, y, z). Always finite in a produced sequence."""
    x: float
    y: float
    z: float


class ParametricCurve:
    """
    Represents a parametric space curve r(t).

    Attributes:
        formulas (tuple): The (x, y, z) expression strings.
        compiled (tuple): Compiled evaluators, one per axis.
        r_func (Matrix): The symbolic position vector r(t).
    """
    def __init__(self, formula_x: str, formula_y: str, formula_z: str,
                 evaluator: ExpressionEvaluator = None):
        """
        Args:
            formula_x, formula_y, formula_z: Expressions in t (with i, e, pi).
            evaluator: Compiler to use. A fresh ExpressionEvaluator if None.

        Raises:
            FormulaError: Annotated with the failing axis.
        """
        self.evaluator = evaluator or ExpressionEvaluator()
        self.formulas = (formula_x, formula_y, formula_z)

        compiled = []
        for axis, formula in zip(AXES, self.formulas):
            try:
                compiled.append(self.evaluator.compile(formula, CURVE_VARIABLES, CURVE_CONSTANTS))
            except FormulaError as exc:
                raise exc.with_context(axis=axis) from exc
        self.compiled = tuple(compiled)

        # Standard parametric variable
        self.t = sp.Symbol('t')
        self.r_func = Matrix([c.expr for c in self.compiled])

    def components_at(self, t: float):
        """
        Evaluates each axis at t. Yields (axis, value) pairs; values may be
        non-finite.
        """
        bindings = {"t": t}
        for axis, compiled in zip(AXES, self.compiled):
            try:
                yield axis, compiled.evaluate(bindings)
            except FormulaError as exc:
                raise exc.with_context(axis=axis) from exc

    def point_at(self, t: float) -> Point:
        """Evaluates r(t)."""
        return Point(*(value for _, value in self.components_at(t)))

    def __repr__(self):
        x, y, z = self.formulas
        return f"ParametricCurve(x={x!r}, y={y!r}, z={z!r})"
