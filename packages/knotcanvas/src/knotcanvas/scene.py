"""
knotcanvas.scene
================
Update pass: samples every strand of a Project and hands the points to the
external geometry builder, one strand at a time.

Ordering:
    Each strand's new renderable replaces its previous one as soon as that
    strand has been sampled. The first failure stops the pass: strands before
    it stay updated, strands after it keep their previous renderable.

Collaborators (owned by the caller):
    GeometryBuilder: points -> opaque renderable, and its disposal.
    SceneHost: accepts and removes renderables.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import RADIAL_SEGMENTS
from .core import Point
from .errors import EmptyInputError, KnotCanvasError
from .expression import ExpressionEvaluator
from .project import Project, RenderMode
from .sampler import sample_strand

logger = logging.getLogger(__name__)


class GeometryBuilder(Protocol):
    def build(self, points: Sequence[Point], mode: RenderMode, tube_radius: float,
              radial_segments: int, closed: bool, color: str = None) -> Any: ...

    def dispose(self, renderable: Any) -> None: ...


class SceneHost(Protocol):
    def add(self, renderable: Any) -> None: ...

    def remove(self, renderable: Any) -> None: ...


@dataclass
class UpdateReport:
    """Outcome of one update pass."""
    updated: List[int] = field(default_factory=list)
    hidden: List[int] = field(default_factory=list)
    failed_strand_id: Optional[int] = None
    error: Optional[KnotCanvasError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


def _discard(strand_id: int, rendered: Dict[int, Any], builder: GeometryBuilder, host: SceneHost) -> None:
    renderable = rendered.pop(strand_id, None)
    if renderable is not None:
        host.remove(renderable)
        builder.dispose(renderable)


def update_scene(project: Project, builder: GeometryBuilder, host: SceneHost,
                 rendered: Dict[int, Any], evaluator: ExpressionEvaluator = None) -> UpdateReport:
    """
    Rebuilds the renderables of all strands.

    Args:
        project: The project to render.
        builder: Turns point sequences into renderables.
        host: Scene the renderables live in.
        rendered: strand id -> current renderable. Updated in place.
        evaluator: Shared expression compiler (keeps compiled formulas between passes).

    Returns:
        UpdateReport. A failure is reported, not raised.
    """
    evaluator = evaluator or ExpressionEvaluator()
    report = UpdateReport()

    live_ids = {strand.id for strand in project.strands}
    for strand_id in [i for i in rendered if i not in live_ids]:
        _discard(strand_id, rendered, builder, host)

    for strand in project.strands:
        if not strand.visible:
            _discard(strand.id, rendered, builder, host)
            report.hidden.append(strand.id)
            continue

        try:
            if not any(strand.formulas):
                raise EmptyInputError()
            points = sample_strand(project, strand, evaluator)
        except KnotCanvasError as exc:
            report.failed_strand_id = strand.id
            report.error = exc
            logger.error(f"Update stopped at strand {strand.id}: {exc}")
            break

        _discard(strand.id, rendered, builder, host)
        renderable = builder.build(points, project.render_mode, project.tube_radius,
                                   RADIAL_SEGMENTS, project.closed, color=strand.color)
        host.add(renderable)
        rendered[strand.id] = renderable
        report.updated.append(strand.id)

    if report.ok:
        logger.info(f"Scene updated: {len(report.updated)} strand(s) drawn, {len(report.hidden)} hidden")
    return report
