from pathlib import Path

from jacoco_changes.source_roots import resolve_source_roots


def test_relative_root_resolved_against_project_dir(tmp_path: Path):
    assert resolve_source_roots(tmp_path, ["src/main/java"]) == [tmp_path / "src" / "main" / "java"]


def test_absolute_root_used_as_is(tmp_path: Path):
    absolute = tmp_path / "generated"
    assert resolve_source_roots(Path("/elsewhere"), [str(absolute)]) == [absolute]


def test_missing_root_is_not_an_error(tmp_path: Path):
    roots = resolve_source_roots(tmp_path, ["does/not/exist", "src"])
    assert roots == [tmp_path / "does" / "not" / "exist", tmp_path / "src"]
