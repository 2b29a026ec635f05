from pathlib import Path
from unittest.mock import patch

import pytest

from jacoco_changes.config import ReportSettings
from jacoco_changes.generator import JacocoCliReport, ReportGenerationError, build_generator, matches_pattern
from jacoco_changes.models import OUTPUT_NAME, REPORT_TITLE, SENTINEL_PATTERN


def _classes(root: Path) -> Path:
    classes = root / "target" / "classes"
    for rel in ["a/A.class", "a/A$Inner.class", "a/B.class", "gen/Generated.class"]:
        path = classes / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\xca\xfe\xba\xbe")
    return classes


def _report(root: Path) -> JacocoCliReport:
    report = JacocoCliReport(
        classes_directory=_classes(root),
        source_roots=[root / "src" / "main" / "java"],
        jacoco_cli=root / "jacococli.jar",
    )
    report._output_directory = str(root / "site")
    report._data_file = str(root / "jacoco.exec")
    return report


def _names(paths: list[Path]) -> list[str]:
    return sorted(p.name for p in paths)


def test_report_identity():
    report = JacocoCliReport(Path("classes"), [], Path("cli.jar"))
    assert report.output_name == OUTPUT_NAME == "jacoco-changes/index"
    assert report.title == REPORT_TITLE == "JaCoCo Changes Test"


def test_empty_includes_select_everything(tmp_path: Path):
    report = _report(tmp_path)
    assert _names(report.select_class_files()) == ["A$Inner.class", "A.class", "B.class", "Generated.class"]


def test_sentinel_selects_nothing(tmp_path: Path):
    report = _report(tmp_path)
    report._includes = [SENTINEL_PATTERN]
    assert report.select_class_files() == []


def test_include_pattern_covers_inner_classes(tmp_path: Path):
    report = _report(tmp_path)
    report._includes = [str(Path("a") / "A*.class")]
    assert _names(report.select_class_files()) == ["A$Inner.class", "A.class"]


def test_excludes_applied_after_includes(tmp_path: Path):
    report = _report(tmp_path)
    report._excludes = ["gen/**"]
    assert _names(report.select_class_files()) == ["A$Inner.class", "A.class", "B.class"]


def test_include_pattern_stays_in_its_package(tmp_path: Path):
    report = _report(tmp_path)
    for rel in ["a/Alpha/X.class", "a/Api/Client.class"]:
        path = report.classes_directory / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\xca\xfe\xba\xbe")
    report._includes = [str(Path("a") / "A*.class")]
    assert _names(report.select_class_files()) == ["A$Inner.class", "A.class"]


def test_matches_pattern_segments():
    assert matches_pattern("a/A$Inner.class", "a/A*.class")
    assert not matches_pattern("a/Alpha/X.class", "a/A*.class")
    assert matches_pattern("a/Alpha/X.class", "a/**/*.class")
    assert matches_pattern("a/X.class", "a/**/*.class")
    assert matches_pattern("gen/deep/Generated.class", "**/Generated*.class")
    assert not matches_pattern("a/A.class", SENTINEL_PATTERN)


def test_execute_skip(tmp_path: Path):
    report = _report(tmp_path)
    report._skip = True
    with patch("jacoco_changes.generator.subprocess.run") as mock_run:
        assert report.execute() is False
    mock_run.assert_not_called()


def test_execute_without_data_file(tmp_path: Path):
    report = _report(tmp_path)
    with patch("jacoco_changes.generator.subprocess.run") as mock_run:
        assert report.execute() is False
    mock_run.assert_not_called()


@patch("jacoco_changes.generator.subprocess.run")
def test_execute_runs_jacococli(mock_run, make_proc, tmp_path: Path):
    mock_run.return_value = make_proc()
    report = _report(tmp_path)
    (tmp_path / "jacoco.exec").write_bytes(b"")
    report._includes = [str(Path("a") / "B*.class")]
    report._source_encoding = "ISO-8859-1"

    assert report.execute() is True
    cmd = mock_run.call_args.args[0]
    assert cmd[:5] == ["java", "-jar", str(tmp_path / "jacococli.jar"), "report", str(tmp_path / "jacoco.exec")]
    assert cmd[cmd.index("--classfiles") + 1].endswith("B.class")
    assert cmd.count("--classfiles") == 1
    assert cmd[cmd.index("--encoding") + 1] == "ISO-8859-1"
    assert cmd[cmd.index("--name") + 1] == REPORT_TITLE
    assert cmd[cmd.index("--html") + 1] == str(tmp_path / "site")
    assert (tmp_path / "site").is_dir()
    assert report.index_page == tmp_path / "site" / "index.html"


@patch("jacoco_changes.generator.subprocess.run")
def test_execute_report_failure_carries_stderr(mock_run, make_proc, tmp_path: Path):
    mock_run.return_value = make_proc(returncode=1, stderr="Unable to access jarfile")
    report = _report(tmp_path)
    with pytest.raises(ReportGenerationError, match="Unable to access jarfile"):
        report.execute_report()


def test_execute_report_java_missing(tmp_path: Path):
    report = _report(tmp_path)
    with patch("jacoco_changes.generator.subprocess.run", side_effect=FileNotFoundError("java")):
        with pytest.raises(ReportGenerationError):
            report.execute_report()


def test_build_generator_resolves_paths(tmp_path: Path):
    settings = ReportSettings(source_roots=["src/main/java", "/abs/generated"], java_binary="/opt/java/bin/java")
    report = build_generator(settings, tmp_path)
    assert report.classes_directory == tmp_path / "target" / "classes"
    assert report.jacoco_cli == tmp_path / "jacococli.jar"
    assert report.source_roots == [tmp_path / "src" / "main" / "java", Path("/abs/generated")]
    assert report.java_binary == "/opt/java/bin/java"
