"""
Tests for the scene update pass and the Plotly preview collaborators.
"""

import pytest

from knotcanvas.codec import decode, encode
from knotcanvas.config import RADIAL_SEGMENTS
from knotcanvas.errors import EmptyInputError, FormulaError, InvalidIntervalError
from knotcanvas.project import Project, RenderMode
from knotcanvas.scene import update_scene
from knotcanvas.viz import FigureSceneHost, PlotlyGeometryBuilder


class FakeBuilder:
    """Records builds and disposals; renderables are plain dicts."""
    def __init__(self):
        self.built = []
        self.disposed = []

    def build(self, points, mode, tube_radius, radial_segments, closed, color=None):
        renderable = {"points": list(points), "mode": mode, "radius": tube_radius,
                      "segments": radial_segments, "closed": closed, "color": color}
        self.built.append(renderable)
        return renderable

    def dispose(self, renderable):
        self.disposed.append(renderable)


class FakeHost:
    def __init__(self):
        self.items = []

    def add(self, renderable):
        self.items.append(renderable)

    def remove(self, renderable):
        self.items.remove(renderable)


@pytest.fixture
def project():
    project = Project.new()
    project.sample_count = 8
    return project


def _populate(project, builder, host):
    rendered = {}
    report = update_scene(project, builder, host, rendered)
    assert report.ok
    return rendered


class TestUpdateScene:

    def test_builds_every_visible_strand(self, project):
        project.add_strand("cos(t)\nsin(t)")
        builder, host, rendered = FakeBuilder(), FakeHost(), {}
        report = update_scene(project, builder, host, rendered)

        assert report.ok
        assert report.message is None
        assert report.updated == [1, 2]
        assert set(rendered) == {1, 2}
        assert host.items == [rendered[1], rendered[2]]
        assert len(rendered[1]["points"]) == 9

    def test_builder_receives_settings(self, project):
        project.render_mode = "tube"
        project.tube_radius = 0.25
        project.closed = False
        builder = FakeBuilder()
        update_scene(project, builder, FakeHost(), {})

        renderable = builder.built[0]
        assert renderable["mode"] is RenderMode.TUBE
        assert renderable["radius"] == 0.25
        assert renderable["segments"] == RADIAL_SEGMENTS
        assert renderable["closed"] is False
        assert renderable["color"] == project.strands[0].color

    def test_rebuild_replaces_previous(self, project):
        builder, host = FakeBuilder(), FakeHost()
        rendered = _populate(project, builder, host)
        old = rendered[1]

        update_scene(project, builder, host, rendered)
        assert builder.disposed == [old]
        assert host.items == [rendered[1]]
        assert rendered[1] is not old

    def test_hidden_strand_removed(self, project):
        second = project.add_strand("t")
        builder, host = FakeBuilder(), FakeHost()
        rendered = _populate(project, builder, host)
        old = rendered[second.id]

        second.visible = False
        report = update_scene(project, builder, host, rendered)
        assert report.ok
        assert report.hidden == [second.id]
        assert second.id not in rendered
        assert old in builder.disposed
        assert old not in host.items

    def test_removed_strand_discarded(self, project):
        second = project.add_strand("t")
        builder, host = FakeBuilder(), FakeHost()
        rendered = _populate(project, builder, host)
        old = rendered[second.id]

        project.remove_strand(second.id)
        update_scene(project, builder, host, rendered)
        assert set(rendered) == {1}
        assert old in builder.disposed
        assert host.items == [rendered[1]]


class TestUpdateFailures:
    """The first failing strand stops the pass."""

    def test_strands_before_failure_updated_after_failure_kept(self, project):
        second = project.add_strand("t\n2*t")
        third = project.add_strand("cos(t)\nsin(t)")
        builder, host = FakeBuilder(), FakeHost()
        rendered = _populate(project, builder, host)
        old = dict(rendered)

        project.set_raw_input(second.id, "foo(t)")
        report = update_scene(project, builder, host, rendered)

        assert not report.ok
        assert report.failed_strand_id == second.id
        assert isinstance(report.error, FormulaError)
        assert "foo" in report.message

        # First strand rebuilt
        assert rendered[1] is not old[1]
        assert old[1] in builder.disposed
        # Failing strand keeps its last good renderable
        assert rendered[second.id] is old[second.id]
        # Later strand untouched
        assert rendered[third.id] is old[third.id]
        assert report.updated == [1]
        assert len(host.items) == 3

    def test_loaded_failure_clears_replaced_strands(self, project):
        builder, host = FakeBuilder(), FakeHost()
        rendered = _populate(project, builder, host)
        old = rendered[1]

        other = Project.new()
        other.set_raw_input(1, "foo(t)")
        project.replace_with(decode(encode(other)))
        report = update_scene(project, builder, host, rendered)

        assert report.failed_strand_id == project.strands[0].id == 2
        assert old in builder.disposed
        assert host.items == []
        assert rendered == {}

    def test_invalid_value_reported(self, project):
        project.set_raw_input(1, "1/t", detect_domain=False)
        report = update_scene(project, FakeBuilder(), FakeHost(), {})
        assert report.failed_strand_id == 1
        assert "invalid value" in report.message

    def test_invalid_interval_reported(self, project):
        project.t_min, project.t_max = "5", "1"
        report = update_scene(project, FakeBuilder(), FakeHost(), {})
        assert isinstance(report.error, InvalidIntervalError)

    def test_strand_without_formulas(self, project):
        strand = project.strands[0]
        with pytest.raises(EmptyInputError):
            strand.set_raw_input("")
        report = update_scene(project, FakeBuilder(), FakeHost(), {})
        assert isinstance(report.error, EmptyInputError)
        assert report.failed_strand_id == strand.id

    def test_failure_is_logged(self, project, caplog):
        project.set_raw_input(1, "t + q", detect_domain=False)
        update_scene(project, FakeBuilder(), FakeHost(), {})
        assert "Update stopped at strand 1" in caplog.text


class TestPlotlyPreview:

    def test_one_trace_per_strand(self, project):
        builder, host, rendered = PlotlyGeometryBuilder(), FigureSceneHost(), {}
        update_scene(project, builder, host, rendered)
        update_scene(project, builder, host, rendered)

        assert len(host.fig.data) == 1
        assert host.uids == [rendered[1].uid]
        assert builder.live == {rendered[1].uid}

    def test_closed_curve_repeats_first_point(self, project):
        builder, host, rendered = PlotlyGeometryBuilder(), FigureSceneHost(), {}
        update_scene(project, builder, host, rendered)
        trace = host.fig.data[0]
        assert len(trace.x) == project.sample_count + 2
        assert trace.x[0] == trace.x[-1]

    def test_open_curve(self, project):
        project.closed = False
        builder, host, rendered = PlotlyGeometryBuilder(), FigureSceneHost(), {}
        update_scene(project, builder, host, rendered)
        assert len(host.fig.data[0].x) == project.sample_count + 1

    def test_tube_width_and_color(self, project):
        project.render_mode = "tube"
        project.tube_radius = 0.15
        builder, host, rendered = PlotlyGeometryBuilder(), FigureSceneHost(), {}
        update_scene(project, builder, host, rendered)
        line = host.fig.data[0].line
        assert line.width == pytest.approx(6.0)
        assert line.color == project.strands[0].color

    def test_hidden_strand_trace_removed(self, project):
        second = project.add_strand("t")
        builder, host, rendered = PlotlyGeometryBuilder(), FigureSceneHost(), {}
        update_scene(project, builder, host, rendered)
        assert len(host.fig.data) == 2

        second.visible = False
        update_scene(project, builder, host, rendered)
        assert host.uids == [rendered[1].uid]
