"""
knotcanvas.codec
================
Serialization Codec: Project <-> human-readable text document.

Document layout:

    # KnotCanvas project
    # format-version: 1

    [GLOBAL_SETTINGS]
    renderMode=tube
    tubeRadius=0.15
    samples=300
    tMin=0
    tMax=2*pi
    closed=true

    [STRAND_1]
    color=#ff6b6b
    visible=true
    useCustomInterval=false
    tMin=0
    tMax=2*pi
    formulas=
    X(t) = sin(t) + 2*sin(2*t)
    Y(t) = cos(t) - 2*cos(2*t)
    Z(t) = -sin(3*t)

Everything after 'formulas=' up to the next section header is the strand's
raw input, line by line. Unknown keys and sections are ignored so newer
documents still load.
"""

import logging
import re
from typing import Dict, List, Optional

from . import config
from .errors import EmptyInputError, MalformedProjectError
from .project import Project, RenderMode, Strand

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

GLOBAL_SECTION = "GLOBAL_SETTINGS"
FORMULAS_MARKER = "formulas"

_HEADER = re.compile(r"^\[\s*([A-Za-z][A-Za-z0-9_]*)\s*\]$|^(GLOBAL_SETTINGS|STRAND_\d+)$")
_STRAND = re.compile(r"^STRAND_(\d+)$")
_VERSION = re.compile(r"^#\s*format-version\s*:\s*(\d+)\s*$")

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _parse_bool(value: str) -> bool:
    text = value.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: '{value}'")


def _format_number(value: float) -> str:
    return repr(float(value)) if float(value) != int(value) else str(int(value))


def encode(project: Project) -> str:
    """Serializes the whole project. Strands are numbered from 1 in order."""
    lines = [
        "# KnotCanvas project",
        f"# format-version: {FORMAT_VERSION}",
        "",
        f"[{GLOBAL_SECTION}]",
        f"renderMode={project.render_mode.value}",
        f"tubeRadius={_format_number(project.tube_radius)}",
        f"samples={project.sample_count}",
        f"tMin={project.t_min}",
        f"tMax={project.t_max}",
        f"closed={_format_bool(project.closed)}",
        "",
    ]

    for number, strand in enumerate(project.strands, start=1):
        lines += [
            f"[STRAND_{number}]",
            f"color={strand.color}",
            f"visible={_format_bool(strand.visible)}",
            f"useCustomInterval={_format_bool(strand.use_custom_interval)}",
            f"tMin={strand.t_min}",
            f"tMax={strand.t_max}",
            f"{FORMULAS_MARKER}=",
        ]
        lines += strand.raw_input.splitlines()
        lines.append("")

    return "\n".join(lines) + "\n"


class _StrandSection:
    """Fields of one STRAND_n section while it is being read."""
    def __init__(self, number: int):
        self.number = number
        self.fields: Dict[str, str] = {}
        self.formula_lines: List[str] = []
        self.in_formulas = False


def _apply_global(project: Project, key: str, value: str) -> None:
    try:
        if key == "renderMode":
            project.render_mode = RenderMode(value.strip().lower())
        elif key == "tubeRadius":
            project.tube_radius = float(value)
        elif key == "samples":
            project.sample_count = int(value)
        elif key == "tMin":
            project.t_min = value.strip()
        elif key == "tMax":
            project.t_max = value.strip()
        elif key == "closed":
            project.closed = _parse_bool(value)
        else:
            logger.debug(f"Ignoring unknown global setting '{key}'")
    except ValueError as e:
        logger.warning(f"Ignoring invalid global setting {key}={value!r}: {e}")


def _build_strand(section: _StrandSection, strand_id: int) -> Strand:
    strand = Strand(id=strand_id, color=config.STRAND_PALETTE[(strand_id - 1) % len(config.STRAND_PALETTE)])
    for key, value in section.fields.items():
        try:
            if key == "color":
                strand.color = value
            elif key == "visible":
                strand.visible = _parse_bool(value)
            elif key == "useCustomInterval":
                strand.use_custom_interval = _parse_bool(value)
            elif key == "tMin":
                strand.t_min = value.strip()
            elif key == "tMax":
                strand.t_max = value.strip()
            else:
                logger.debug(f"STRAND_{section.number}: ignoring unknown key '{key}'")
        except ValueError as e:
            logger.warning(f"STRAND_{section.number}: ignoring invalid {key}={value!r}: {e}")

    try:
        strand.set_raw_input("\n".join(section.formula_lines))
    except EmptyInputError:
        logger.warning(f"STRAND_{section.number}: formula block holds no usable formula")
    return strand


def decode(text: str) -> Project:
    """
    Parses a project document into a new Project.

    Blank lines inside a formula block are part of the raw input, except
    trailing ones. A strand section is kept only if its formula block
    captured at least one non-blank line. The result replaces the caller's
    project as a whole.

    Raises:
        MalformedProjectError: If no strand could be committed.
    """
    project = Project()
    strands: List[Strand] = []
    section: Optional[str] = None
    current: Optional[_StrandSection] = None

    def commit():
        if current is None:
            return
        # The blank line closing the block is not part of the raw input
        while current.formula_lines and not current.formula_lines[-1].strip():
            current.formula_lines.pop()
        if not current.formula_lines:
            logger.warning(f"Dropping STRAND_{current.number}: no formulas")
            return
        strands.append(_build_strand(current, strand_id=len(strands) + 1))

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        header = _HEADER.match(line)
        if header:
            commit()
            section = header.group(1) or header.group(2)
            strand_header = _STRAND.match(section)
            current = _StrandSection(int(strand_header.group(1))) if strand_header else None
            if current is None and section != GLOBAL_SECTION:
                logger.debug(f"Line {lineno}: ignoring unknown section '{section}'")
            continue

        if not line:
            if current is not None and current.in_formulas:
                current.formula_lines.append(raw_line)
            continue

        if line.startswith("#"):
            version = _VERSION.match(line)
            if version and int(version.group(1)) > FORMAT_VERSION:
                logger.warning(f"Document format version {version.group(1)} is newer than "
                               f"{FORMAT_VERSION}; unknown content will be ignored")
            continue

        if current is not None and current.in_formulas:
            current.formula_lines.append(raw_line)
            continue

        key, sep, value = line.partition("=")
        if not sep:
            logger.debug(f"Line {lineno}: ignoring '{line}'")
            continue
        key = key.strip()

        if section == GLOBAL_SECTION:
            _apply_global(project, key, value)
        elif current is not None:
            if key == FORMULAS_MARKER:
                current.in_formulas = True
                if value.strip():
                    current.formula_lines.append(value)
            else:
                current.fields[key] = value

    commit()

    if not strands:
        raise MalformedProjectError("Invalid project file: no strands found")

    project.strands = strands
    project.next_id = len(strands) + 1
    logger.info(f"Decoded project with {len(strands)} strand(s)")
    return project
