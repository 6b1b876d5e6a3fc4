"""Unit tests for the source/artifact and build report models."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from bento.core.errors import BuildFailedError, MissingEntryError, TransformError
from bento.models.artifacts import Artifact, Entry, FileKind, SourceFile
from bento.models.build import BuildReport, BuildState, BuildWarning, WarningCategory


class TestSourceFile:

    def test_relative_path_is_posix(self, tmp_path):
        entry = Entry(name="admin", source_dir=tmp_path)
        source = SourceFile.from_entry(entry, tmp_path / "a" / "b.js")
        assert source.relative_path == "a/b.js"
        assert source.entry_name == "admin"
        assert source.path.is_absolute()

    def test_symlinked_file_keeps_link_location(self, tmp_path):
        (tmp_path / "vendor").mkdir()
        (tmp_path / "vendor/lib.js").write_text("var a;", encoding="utf-8")
        (tmp_path / "admin").mkdir()
        link = tmp_path / "admin/lib.js"
        try:
            os.symlink(Path("../vendor/lib.js"), link)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks are not supported here")

        source = SourceFile.from_entry(Entry(name="admin", source_dir=tmp_path / "admin"), link)

        assert source.relative_path == "lib.js"
        assert source.path == (tmp_path / "admin").resolve() / "lib.js"

    def test_path_outside_entry_is_rejected(self, tmp_path):
        entry = Entry(name="admin", source_dir=tmp_path / "admin")
        with pytest.raises(ValueError):
            SourceFile.from_entry(entry, tmp_path / "frontend" / "x.js")

    @pytest.mark.parametrize(
        ("rel", "base"),
        [("main.js", "main"), ("sub/theme.scss", "sub/theme"), ("a.b.css", "a.b"), ("noext", "noext")],
    )
    def test_base_name(self, rel, base):
        source = SourceFile(path=Path("/x") / rel, entry_name="e", relative_path=rel)
        assert source.base_name == base


class TestArtifact:

    def test_script_names(self):
        source = SourceFile(path=Path("/x/sub/app.js"), entry_name="e", relative_path="sub/app.js")
        artifact = Artifact.for_source(source, ".js")
        assert artifact.unminified == "sub/app.js"
        assert artifact.minified == "sub/app.min.js"

    def test_scss_maps_to_css(self):
        source = SourceFile(path=Path("/x/theme.scss"), entry_name="e", relative_path="theme.scss")
        artifact = Artifact.for_source(source, ".css")
        assert (artifact.unminified, artifact.minified) == ("theme.css", "theme.min.css")

    def test_manifest_value_shape(self):
        artifact = Artifact(unminified="a.css", minified="a.min.css")
        assert artifact.model_dump() == {"unminified": "a.css", "minified": "a.min.css"}

    def test_is_frozen(self):
        artifact = Artifact(unminified="a.css", minified="a.min.css")
        with pytest.raises(ValidationError):
            artifact.minified = "b"


class TestFileKind:

    def test_only_unsupported_is_not_processable(self):
        assert [k for k in FileKind if not k.is_processable] == [FileKind.UNSUPPORTED]


class TestBuildReport:

    def test_defaults(self):
        report = BuildReport(session_id="s")
        assert report.state == BuildState.IDLE
        assert not report.succeeded
        assert report.processed_count == 0

    def test_warnings_do_not_affect_success(self):
        report = BuildReport(session_id="s", state=BuildState.DONE)
        report.add_warning(WarningCategory.MISSING_ENTRY, "gone", entry="shared")
        assert report.succeeded

    def test_warnings_for(self):
        report = BuildReport(session_id="s")
        report.add_warning(WarningCategory.MISSING_ENTRY, "a")
        report.add_warning(WarningCategory.IO_FAILURE, "b")
        report.add_warning(WarningCategory.MISSING_ENTRY, "c")
        assert [w.message for w in report.warnings_for(WarningCategory.MISSING_ENTRY)] == ["a", "c"]

    def test_warning_is_frozen(self):
        warning = BuildWarning(category=WarningCategory.IO_FAILURE, message="x")
        with pytest.raises(ValidationError):
            warning.message = "y"


class TestErrors:

    def test_categories(self):
        assert MissingEntryError("x").category == WarningCategory.MISSING_ENTRY
        assert TransformError("sass", "x").category == WarningCategory.TRANSFORM_FAILURE

    def test_build_failed_message(self):
        exc = BuildFailedError("cleaning", "permission denied", path="/out")
        assert str(exc) == "Build failed during cleaning: permission denied (/out)"
        assert exc.stage == "cleaning"
        assert exc.report is None
