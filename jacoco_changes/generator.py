"""JaCoCo report rendering through ``jacococli.jar``.

``JacocoCliReport`` owns its configuration the way the JaCoCo Maven report
goal does: private fields filled with defaults at construction and no
public setters. An empty include list means every class file is reported.
"""
from __future__ import annotations

import fnmatch
import logging
import subprocess
from pathlib import Path

from jacoco_changes.config import ReportSettings
from jacoco_changes.models import CLASS_SUFFIX, OUTPUT_NAME, REPORT_TITLE
from jacoco_changes.source_roots import resolve_source_roots


logger = logging.getLogger(__name__)

CLI_OUTPUT_ENCODING = "UTF-8"


class ReportGenerationError(RuntimeError):
    pass


def _split(path: str) -> list[str]:
    return [part for part in path.replace("\\", "/").split("/") if part]


def _match_segments(parts: list[str], pattern: list[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_segments(parts[i:], pattern[1:]) for i in range(len(parts) + 1))
    if not parts or not fnmatch.fnmatch(parts[0], head):
        return False
    return _match_segments(parts[1:], pattern[1:])


def matches_pattern(rel: str, pattern: str) -> bool:
    """Ant-style match: `*` stays within one path segment, `**` spans any number of them."""
    if not pattern:
        return False
    return _match_segments(_split(rel), _split(pattern))


def _matches_any(rel: str, patterns: list[str]) -> bool:
    return any(matches_pattern(rel, p) for p in patterns)


class JacocoCliReport:
    def __init__(
        self,
        classes_directory: Path,
        source_roots: list[Path],
        jacoco_cli: Path,
        java_binary: str = "java",
        title: str = REPORT_TITLE,
        output_name: str = OUTPUT_NAME,
    ) -> None:
        self.classes_directory = classes_directory
        self.source_roots = source_roots
        self.jacoco_cli = jacoco_cli
        self.java_binary = java_binary
        self.title = title
        self.output_name = output_name

        self._output_directory = "target/site/jacoco"
        self._data_file = "target/jacoco.exec"
        self._output_encoding = "UTF-8"
        self._source_encoding = "UTF-8"
        self._skip = False
        self._includes: list[str] = []
        self._excludes: list[str] = []

    @property
    def index_page(self) -> Path:
        return Path(self._output_directory) / "index.html"

    def can_generate_report(self) -> bool:
        if not Path(self._data_file).exists():
            logger.info("Skipping JaCoCo execution due to missing execution data file: %s", self._data_file)
            return False
        return True

    def execute(self) -> bool:
        if self._skip:
            logger.info("Skipping JaCoCo execution because property jacoco.skip is set.")
            return False
        if not self.can_generate_report():
            return False
        self.execute_report()
        return True

    def select_class_files(self) -> list[Path]:
        if not self.classes_directory.is_dir():
            return []

        selected: list[Path] = []
        for path in sorted(self.classes_directory.rglob(CLASS_SUFFIX)):
            if not path.is_file():
                continue
            rel = str(path.relative_to(self.classes_directory))
            if self._includes and not _matches_any(rel, self._includes):
                continue
            if _matches_any(rel, self._excludes):
                continue
            selected.append(path)
        return selected

    def build_command(self, class_files: list[Path]) -> list[str]:
        output = Path(self._output_directory)
        cmd = [self.java_binary, "-jar", str(self.jacoco_cli), "report", str(self._data_file)]
        for class_file in class_files:
            cmd.extend(["--classfiles", str(class_file)])
        for root in self.source_roots:
            cmd.extend(["--sourcefiles", str(root)])
        cmd.extend(
            [
                "--encoding",
                self._source_encoding,
                "--name",
                self.title,
                "--html",
                str(output),
                "--xml",
                str(output / "jacoco.xml"),
            ]
        )
        return cmd

    def execute_report(self) -> None:
        if self._output_encoding.upper() != CLI_OUTPUT_ENCODING:
            logger.warning(
                "jacococli always writes %s; ignoring output encoding %s",
                CLI_OUTPUT_ENCODING,
                self._output_encoding,
            )

        class_files = self.select_class_files()
        logger.info("Rendering %s for %d class file(s) into %s", self.output_name, len(class_files), self._output_directory)
        Path(self._output_directory).mkdir(parents=True, exist_ok=True)

        cmd = self.build_command(class_files)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ReportGenerationError(f"Could not start {self.java_binary}: {exc}") from exc

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise ReportGenerationError(
                f"jacococli report failed with exit code {proc.returncode}. {stderr or 'No diagnostic output.'}"
            )


def build_generator(settings: ReportSettings, project_dir: Path) -> JacocoCliReport:
    return JacocoCliReport(
        classes_directory=ReportSettings.resolve(settings.classes_directory, project_dir),
        source_roots=resolve_source_roots(project_dir, settings.source_roots),
        jacoco_cli=ReportSettings.resolve(settings.jacoco_cli, project_dir),
        java_binary=settings.java_binary,
    )
