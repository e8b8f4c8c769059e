"""
knotcanvas.sampler
==================
Curve Sampler.

Maps a formula triple, an interval and a sample count to an ordered point
sequence. Sampling is a pure function of its inputs: the same formulas,
count and interval always give the same points.

Note:
    The interval is validated before any formula is compiled, so a reversed
    interval is reported even when the formulas are also broken.
"""

import logging
import math
from typing import List, Tuple, Union

from .core import ParametricCurve, Point
from .errors import FormulaError, InvalidIntervalError, InvalidValueError
from .expression import ExpressionEvaluator

logger = logging.getLogger(__name__)

Bound = Union[str, float, int]


def resolve_interval(t_min: Bound, t_max: Bound, evaluator: ExpressionEvaluator = None) -> Tuple[float, float]:
    """
    Evaluates both interval expressions and checks t_min < t_max.

    Raises:
        InvalidIntervalError
    """
    evaluator = evaluator or ExpressionEvaluator()
    lo = evaluator.evaluate_bound(t_min)
    hi = evaluator.evaluate_bound(t_max)
    if lo >= hi:
        raise InvalidIntervalError(
            f"Invalid interval: t min ({t_min} = {lo:g}) must be less than t max ({t_max} = {hi:g})",
            t_min=lo, t_max=hi,
        )
    return lo, hi


def parameter_values(sample_count: int, t_min: float, t_max: float) -> List[float]:
    """
    t_k = t_min + (k / n) * (t_max - t_min) for k = 0..n.
    The endpoints are exactly t_min and t_max.
    """
    if sample_count < 1:
        raise ValueError(f"Sample count must be at least 1, got {sample_count}")
    span = t_max - t_min
    values = [t_min + (k / sample_count) * span for k in range(sample_count)]
    values.append(t_max)
    return values


def sample_curve(curve: ParametricCurve, sample_count: int, t_min: float, t_max: float) -> List[Point]:
    """
    Samples an already compiled curve over a resolved interval.

    Raises:
        InvalidValueError: On the first non-finite component; nothing is returned.
    """
    points = []
    for k, t in enumerate(parameter_values(sample_count, t_min, t_max)):
        components = []
        for axis, value in curve.components_at(t):
            if not math.isfinite(value):
                raise InvalidValueError(index=k, axis=axis, t=t, value=value)
            components.append(value)
        points.append(Point(*components))
    return points


def sample(formula_x: str, formula_y: str, formula_z: str, sample_count: int,
           t_min: Bound, t_max: Bound, evaluator: ExpressionEvaluator = None) -> List[Point]:
    """
    Produces sample_count + 1 points of r(t) over [t_min, t_max].

    Args:
        formula_x, formula_y, formula_z: Normalized axis expressions.
        sample_count: Number of segments n (>= 1).
        t_min, t_max: Interval bounds, as numbers or interval expressions ('2*pi').
        evaluator: Expression compiler. A fresh ExpressionEvaluator if None.

    Raises:
        InvalidIntervalError: Bad or reversed interval (checked first).
        ValueError: sample_count < 1.
        FormulaError: An axis failed to compile or evaluate.
        InvalidValueError: An axis produced NaN or an infinity.
    """
    evaluator = evaluator or ExpressionEvaluator()
    lo, hi = resolve_interval(t_min, t_max, evaluator)
    if sample_count < 1:
        raise ValueError(f"Sample count must be at least 1, got {sample_count}")

    curve = ParametricCurve(formula_x, formula_y, formula_z, evaluator=evaluator)
    return sample_curve(curve, sample_count, lo, hi)


def sample_strand(project, strand, evaluator: ExpressionEvaluator = None) -> List[Point]:
    """
    Samples one strand of a project with its effective interval and the
    project's sample count. Errors carry the strand id.
    """
    t_min, t_max = project.interval_for(strand)
    logger.debug(f"Sampling strand {strand.id} over [{t_min}, {t_max}] with {project.sample_count} samples")
    try:
        return sample(strand.formula_x, strand.formula_y, strand.formula_z,
                      project.sample_count, t_min, t_max, evaluator=evaluator)
    except FormulaError as exc:
        raise exc.with_context(strand_id=strand.id) from exc
    except InvalidValueError as exc:
        raise exc.with_context(strand_id=strand.id) from exc
