"""
Tests for saving and loading project files.
"""

import pytest

from knotcanvas.errors import MalformedProjectError
from knotcanvas.io import IOManager
from knotcanvas.project import Project, RenderMode


class TestIOManager:

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "knot.txt"
        source = Project.new("figure8")
        source.add_strand("2t\n3t")
        source.render_mode = "tube"
        IOManager.save_project(source, str(path))

        target = Project.new()
        IOManager.load_project(target, str(path))
        assert [s.raw_input for s in target.strands] == [s.raw_input for s in source.strands]
        assert target.render_mode is RenderMode.TUBE
        assert target.strands[1].t_max == "10"

    def test_loaded_strands_continue_ids(self, tmp_path):
        path = tmp_path / "knot.txt"
        source = Project.new()
        source.add_strand("t")
        IOManager.save_project(source, str(path))

        target = Project.new()
        target.add_strand("2*t")
        IOManager.load_project(target, str(path))
        assert [s.id for s in target.strands] == [3, 4]

    def test_file_is_utf8_with_unix_newlines(self, tmp_path):
        path = tmp_path / "knot.txt"
        project = Project.new()
        project.set_raw_input(1, "π·t\ncos(t)", detect_domain=False)
        IOManager.save_project(project, str(path))

        data = path.read_bytes()
        assert b"\r\n" not in data
        assert "π·t" in data.decode("utf-8")

    def test_load_missing_file(self, tmp_path):
        project = Project.new()
        with pytest.raises(FileNotFoundError):
            IOManager.load_project(project, str(tmp_path / "missing.txt"))

    def test_failed_load_leaves_project_unchanged(self, tmp_path):
        path = tmp_path / "broken.txt"
        path.write_text("[GLOBAL_SETTINGS]\nsamples=10\n", encoding="utf-8")
        project = Project.new("lissajous")
        before = [s.raw_input for s in project.strands]

        with pytest.raises(MalformedProjectError):
            IOManager.load_project(project, str(path))
        assert [s.raw_input for s in project.strands] == before
        assert project.sample_count == 300

    def test_save_to_missing_directory(self, tmp_path):
        with pytest.raises(OSError):
            IOManager.save_project(Project.new(), str(tmp_path / "nope" / "knot.txt"))
