"""
knotcanvas.config
=================
Central registry of defaults and global constants.

Exports:
    DEFAULT_SAMPLE_COUNT (int): Samples per strand for a new project.
    DEFAULT_TUBE_RADIUS (float): Tube radius for a new project.
    DEFAULT_T_MIN, DEFAULT_T_MAX (str): Interval expressions of an untouched domain.
    RADIAL_SEGMENTS (int): Tube cross-section resolution requested from the builder.
    STRAND_PALETTE (tuple): Colors handed out to new strands, in order.
    EXPRESSION_CACHE_SIZE (int): Compiled expressions kept per evaluator.
"""

DEFAULT_SAMPLE_COUNT: int = 300
DEFAULT_TUBE_RADIUS: float = 0.15
DEFAULT_T_MIN: str = "0"
DEFAULT_T_MAX: str = "2*pi"
DEFAULT_RENDER_MODE: str = "line"
DEFAULT_CLOSED: bool = True

RADIAL_SEGMENTS: int = 16

STRAND_PALETTE: tuple = (
    "#ff6b6b",
    "#4ecdc4",
    "#ffd93d",
    "#6c5ce7",
    "#a8e6cf",
    "#ff8b94",
)

# Compiled expressions kept by an ExpressionEvaluator
EXPRESSION_CACHE_SIZE: int = 256
