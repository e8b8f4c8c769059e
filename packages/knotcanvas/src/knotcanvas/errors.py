"""
knotcanvas.errors
=================
Error taxonomy shared by the engine.

Every failure the engine reports derives from KnotCanvasError, and its str()
is the one human-readable message shown to the user.
"""


class KnotCanvasError(ValueError):
    """Base class for all engine errors."""
    pass


class EmptyInputError(KnotCanvasError):
    """The normalizer found no usable formula line."""

    def __init__(self, message: str = "Please enter at least one formula (X(t), Y(t), Z(t))"):
        super().__init__(message)


class FormulaError(KnotCanvasError):
    """
    An expression failed to compile or evaluate.

    Attributes:
        message: The evaluator's message.
        expression: The offending expression text.
        axis: 'x', 'y' or 'z' when raised while sampling a curve.
        strand_id: Originating strand, when known.
    """
    def __init__(self, message: str, expression: str = None, axis: str = None, strand_id: int = None):
        self.message = message
        self.expression = expression
        self.axis = axis
        self.strand_id = strand_id
        super().__init__(message)

    def with_context(self, axis: str = None, strand_id: int = None) -> "FormulaError":
        """Returns a copy annotated with the originating axis / strand."""
        return FormulaError(
            self.message,
            expression=self.expression,
            axis=axis if axis is not None else self.axis,
            strand_id=strand_id if strand_id is not None else self.strand_id,
        )

    def __str__(self):
        where = []
        if self.strand_id is not None:
            where.append(f"strand {self.strand_id}")
        if self.axis is not None:
            where.append(f"{self.axis.upper()}(t)")
        prefix = f"Formula error in {', '.join(where)}" if where else "Formula error"
        return f"{prefix}: {self.message}"


class InvalidValueError(KnotCanvasError):
    """
    A sampled point has a non-finite component.

    Attributes:
        index: Sample index k (0-based).
        axis: Axis that produced the value.
        t: Parameter value at that sample.
        value: The offending value (nan or +/-inf).
    """
    def __init__(self, index: int, axis: str, t: float, value: float, strand_id: int = None):
        self.index = index
        self.axis = axis
        self.t = t
        self.value = value
        self.strand_id = strand_id
        super().__init__(index, axis, t, value)

    def with_context(self, strand_id: int) -> "InvalidValueError":
        return InvalidValueError(self.index, self.axis, self.t, self.value, strand_id=strand_id)

    def __str__(self):
        owner = f" in strand {self.strand_id}" if self.strand_id is not None else ""
        return (f"Formula produced an invalid value{owner}: "
                f"{self.axis.upper()}(t) = {self.value} at sample {self.index} (t = {self.t:g})")


class InvalidIntervalError(KnotCanvasError):
    """The sampling interval is empty, reversed, or does not evaluate to real bounds."""

    def __init__(self, message: str, t_min=None, t_max=None):
        self.t_min = t_min
        self.t_max = t_max
        super().__init__(message)


class MalformedProjectError(KnotCanvasError):
    """A project document decoded to zero strands."""
    pass
