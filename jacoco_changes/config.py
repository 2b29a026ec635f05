from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
import os
import yaml

from jacoco_changes.models import CLASS_SUFFIX, JAVA_SUFFIX, REPORT_DIRECTORY


CONFIG_FILE_NAME = ".jacoco-changes.yml"

DEFAULT_SETTINGS: dict[str, Any] = {
    "branch_name": "master",
    "vcs_binary": "git",
    "output_directory": f"target/site/{REPORT_DIRECTORY}",
    "data_file": "target/jacoco.exec",
    "output_encoding": "UTF-8",
    "source_encoding": "UTF-8",
    "excludes": [],
    "skip": False,
    "skip_when_no_changes": False,
    "source_roots": ["src/main/java"],
    "classes_directory": "target/classes",
    "source_suffix": JAVA_SUFFIX,
    "artifact_suffix": CLASS_SUFFIX,
    "jacoco_cli": "jacococli.jar",
    "java_binary": "java",
}

LIST_KEYS = {"excludes", "source_roots"}
BOOL_KEYS = {"skip", "skip_when_no_changes"}
TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class GenerationPolicy:
    skip_when_no_changes: bool = False


@dataclass
class ReportSettings:
    branch_name: str = DEFAULT_SETTINGS["branch_name"]
    vcs_binary: str = DEFAULT_SETTINGS["vcs_binary"]
    output_directory: str = DEFAULT_SETTINGS["output_directory"]
    data_file: str = DEFAULT_SETTINGS["data_file"]
    output_encoding: str = DEFAULT_SETTINGS["output_encoding"]
    source_encoding: str = DEFAULT_SETTINGS["source_encoding"]
    excludes: list[str] = field(default_factory=list)
    skip: bool = False
    skip_when_no_changes: bool = False
    source_roots: list[str] = field(default_factory=lambda: list(DEFAULT_SETTINGS["source_roots"]))
    classes_directory: str = DEFAULT_SETTINGS["classes_directory"]
    source_suffix: str = DEFAULT_SETTINGS["source_suffix"]
    artifact_suffix: str = DEFAULT_SETTINGS["artifact_suffix"]
    jacoco_cli: str = DEFAULT_SETTINGS["jacoco_cli"]
    java_binary: str = DEFAULT_SETTINGS["java_binary"]

    def policy(self) -> GenerationPolicy:
        return GenerationPolicy(skip_when_no_changes=self.skip_when_no_changes)

    @staticmethod
    def resolve(path: str, project_dir: Path) -> Path:
        """Resolve a configured path against the project directory unless it is absolute."""
        p = Path(path)
        if p.is_absolute():
            return p
        return project_dir / p


def load_env_file(path: Path) -> None:
    """Load simple KEY=VALUE pairs from a .env file without overriding existing env."""
    if not path.exists() or not path.is_file():
        return

    for raw in path.read_text(errors="ignore").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _coerce(key: str, value: Any) -> Any:
    if key in LIST_KEYS:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError(f"Config key '{key}' must be a list")
        return [str(x) for x in value]
    if key in BOOL_KEYS:
        if isinstance(value, str):
            return value.strip().lower() in TRUTHY
        return bool(value)
    if value is None:
        raise ValueError(f"Config key '{key}' must not be empty")
    return str(value)


def _apply_env(values: dict[str, Any]) -> None:
    skip = os.getenv("JACOCO_SKIP")
    if skip:
        values["skip"] = skip.strip().lower() in TRUTHY
    branch = os.getenv("JACOCO_CHANGES_BRANCH")
    if branch:
        values["branch_name"] = branch.strip()
    cli = os.getenv("JACOCO_CLI")
    if cli:
        values["jacoco_cli"] = cli.strip()


def load_settings(path: str | None, project_dir: Path) -> ReportSettings:
    config_path: Path | None = None
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    elif (project_dir / CONFIG_FILE_NAME).exists():
        config_path = project_dir / CONFIG_FILE_NAME

    values = {k: (list(v) if isinstance(v, list) else v) for k, v in DEFAULT_SETTINGS.items()}

    if config_path is not None:
        data = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")
        known = {f.name for f in fields(ReportSettings)}
        for key, value in data.items():
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            values[key] = _coerce(key, value)

    _apply_env(values)
    return ReportSettings(**values)
