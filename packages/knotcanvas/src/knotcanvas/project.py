"""
Project Model (Strand Store)
============================
The aggregate the engine operates on: an ordered list of strands plus the
global rendering and sampling settings.

The Project is a plain value passed to every engine operation; there is no
module-level instance. Order of `strands` matters: it drives serialization
numbering.

Classes:
    RenderMode: 'line' or 'tube'.
    Strand: One parametric curve definition.
    Project: The strand sequence and global settings.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, List, Tuple

from . import config
from .domain import is_untouched_interval, suggest
from .errors import EmptyInputError
from .normalizer import normalize

logger = logging.getLogger(__name__)


class RenderMode(StrEnum):
    LINE = "line"
    TUBE = "tube"


PRESETS: Dict[str, Dict[str, str]] = {
    "trefoil": {
        "x": "sin(t) + 2*sin(2*t)",
        "y": "cos(t) - 2*cos(2*t)",
        "z": "-sin(3*t)",
    },
    "figure8": {
        "x": "(2 + cos(2*t)) * cos(3*t)",
        "y": "(2 + cos(2*t)) * sin(3*t)",
        "z": "sin(4*t)",
    },
    "cinquefoil": {
        "x": "sin(2*t) * (2 + cos(5*t))",
        "y": "cos(2*t) * (2 + cos(5*t))",
        "z": "sin(5*t)",
    },
    "torus53": {
        "x": "cos(3*t) * (2 + cos(5*t))",
        "y": "sin(3*t) * (2 + cos(5*t))",
        "z": "sin(5*t)",
    },
    "lissajous": {
        "x": "cos(3*t)",
        "y": "cos(4*t)",
        "z": "cos(7*t)",
    },
}

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def normalize_color(value: str) -> str:
    """'#ABC', 'aabbcc', '#AaBbCc' -> '#aabbcc'."""
    match = _HEX_COLOR.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid color '{value}', expected #rrggbb")
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


def preset_text(name: str) -> str:
    """The labeled three-line raw input of a preset."""
    formulas = PRESETS[name]
    return f"X(t) = {formulas['x']}\nY(t) = {formulas['y']}\nZ(t) = {formulas['z']}"


@dataclass
class Strand:
    """
    One parametric curve definition.

    `raw_input` is the source of truth; formula_x/y/z are derived from it by
    set_raw_input() and never edited directly.
    """
    id: int
    raw_input: str = ""
    formula_x: str = ""
    formula_y: str = ""
    formula_z: str = ""
    color: str = config.STRAND_PALETTE[0]
    visible: bool = True
    use_custom_interval: bool = False
    t_min: str = config.DEFAULT_T_MIN
    t_max: str = config.DEFAULT_T_MAX

    def __setattr__(self, name, value):
        if name == "color":
            value = normalize_color(value)
        super().__setattr__(name, value)

    @property
    def formulas(self) -> Tuple[str, str, str]:
        return self.formula_x, self.formula_y, self.formula_z

    def set_raw_input(self, raw_input: str) -> None:
        """
        Stores the text and recomputes the axis formulas.

        Raises:
            EmptyInputError: The text holds no formula. The raw text is kept
                             and the formulas are cleared.
        """
        self.raw_input = raw_input
        try:
            self.formula_x, self.formula_y, self.formula_z = normalize(raw_input)
        except EmptyInputError:
            self.formula_x = self.formula_y = self.formula_z = ""
            raise


@dataclass
class Project:
    """
    Holds the entire state of an open project.
    Pass this instance to the sampler, codec and scene update.
    """
    strands: List[Strand] = field(default_factory=list)

    render_mode: RenderMode = RenderMode(config.DEFAULT_RENDER_MODE)
    tube_radius: float = config.DEFAULT_TUBE_RADIUS
    sample_count: int = config.DEFAULT_SAMPLE_COUNT
    t_min: str = config.DEFAULT_T_MIN
    t_max: str = config.DEFAULT_T_MAX
    closed: bool = config.DEFAULT_CLOSED

    next_id: int = field(default=1, repr=False)

    def __setattr__(self, name, value):
        if name == "render_mode":
            value = RenderMode(value)
        elif name == "tube_radius":
            value = float(value)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"Tube radius must be positive, got {value}")
        elif name == "sample_count":
            if isinstance(value, bool) or int(value) != value or value < 1:
                raise ValueError(f"Sample count must be an integer >= 1, got {value}")
            value = int(value)
        super().__setattr__(name, value)

    @classmethod
    def new(cls, preset: str = "trefoil") -> "Project":
        """A fresh project holding one strand with the given preset."""
        project = cls()
        project.apply_preset(preset)
        return project

    # --- Strand store ---

    def add_strand(self, raw_input: str = None, color: str = None, detect_domain: bool = True) -> Strand:
        """
        Appends a strand with the next id and the next palette color.
        A strand without text starts from the trefoil preset.
        """
        palette = config.STRAND_PALETTE
        strand = Strand(id=self.next_id, color=color or palette[len(self.strands) % len(palette)])
        strand.set_raw_input(raw_input if raw_input is not None else preset_text("trefoil"))
        if detect_domain:
            self._detect_domain(strand)

        self.next_id += 1
        self.strands.append(strand)
        logger.debug(f"Added strand {strand.id}")
        return strand

    def remove_strand(self, strand_id: int) -> Strand:
        """Removes a strand. The last remaining strand cannot be removed."""
        strand = self.get_strand(strand_id)
        if len(self.strands) == 1:
            raise ValueError("A project must keep at least one strand")
        self.strands.remove(strand)
        logger.debug(f"Removed strand {strand_id}")
        return strand

    def get_strand(self, strand_id: int) -> Strand:
        for strand in self.strands:
            if strand.id == strand_id:
                return strand
        raise KeyError(f"No strand with id {strand_id}")

    def visible_strands(self) -> List[Strand]:
        return [s for s in self.strands if s.visible]

    def set_raw_input(self, strand_id: int, raw_input: str, detect_domain: bool = True) -> Strand:
        """
        Updates a strand's text and derived formulas.

        With detect_domain, an untouched strand interval receives the domain
        detector's suggestion when it differs from the default [0, 2*pi].
        """
        strand = self.get_strand(strand_id)
        strand.set_raw_input(raw_input)
        if detect_domain:
            self._detect_domain(strand)
        return strand

    def _detect_domain(self, strand: Strand) -> None:
        # Both the strand's own fields and the interval it is sampled over must be untouched
        if not is_untouched_interval(strand.t_min, strand.t_max):
            return
        suggestion = suggest(*strand.formulas, *self.interval_for(strand))
        if suggestion is None:
            return
        if (suggestion.t_min, suggestion.t_max) == (config.DEFAULT_T_MIN, config.DEFAULT_T_MAX):
            return
        strand.t_min = suggestion.t_min
        strand.t_max = suggestion.t_max
        strand.use_custom_interval = True
        logger.info(f"Strand {strand.id}: interval [{suggestion.t_min}, {suggestion.t_max}] ({suggestion.reason})")

    def interval_for(self, strand: Strand) -> Tuple[str, str]:
        """The interval expressions a strand is sampled over. Empty fields mean default."""
        if strand.use_custom_interval:
            t_min, t_max = strand.t_min, strand.t_max
        else:
            t_min, t_max = self.t_min, self.t_max
        return (t_min.strip() or config.DEFAULT_T_MIN), (t_max.strip() or config.DEFAULT_T_MAX)

    # --- Whole-sequence replacement ---

    def apply_preset(self, name: str) -> Strand:
        """Replaces all strands by a single strand holding the named preset."""
        if name not in PRESETS:
            raise KeyError(f"Unknown preset '{name}'")
        self.strands = []
        strand = self.add_strand(preset_text(name), color=config.STRAND_PALETTE[0])
        logger.info(f"Loaded preset: {name}")
        return strand

    def replace_with(self, other: "Project") -> None:
        """
        Takes over every strand and setting of `other` (used after a load).

        The incoming strands are renumbered from this project's next id, so
        an id never names two different strands over the project's lifetime.
        """
        for strand in other.strands:
            strand.id = self.next_id
            self.next_id += 1
        self.strands = list(other.strands)
        self.render_mode = other.render_mode
        self.tube_radius = other.tube_radius
        self.sample_count = other.sample_count
        self.t_min = other.t_min
        self.t_max = other.t_max
        self.closed = other.closed
        logger.info(f"Project replaced ({len(self.strands)} strands)")
