from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from jacoco_changes.config import GenerationPolicy, ReportSettings
from jacoco_changes.git_scope import DiffExecutionError, list_changed_files
from jacoco_changes.includes import map_to_include_patterns
from jacoco_changes.injection import GeneratorAdapter
from jacoco_changes.models import ReportScope, RunResult, RunState
from jacoco_changes.policy import should_generate
from jacoco_changes.source_roots import resolve_source_roots


logger = logging.getLogger(__name__)

ChangeProvider = Callable[[str, str], Iterable[str]]
IncludeMapper = Callable[..., list[str]]


class ScopeComputationError(RuntimeError):
    pass


class ReportScopeController:
    """Scopes a JaCoCo report to the files changed against a baseline branch.

    The generator is reconfigured through ``GeneratorAdapter`` and then
    asked to run; its own failures propagate untouched.
    """

    def __init__(
        self,
        settings: ReportSettings,
        generator: Any,
        project_dir: Path,
        cwd: Path | None = None,
        change_provider: ChangeProvider = list_changed_files,
        include_mapper: IncludeMapper = map_to_include_patterns,
    ) -> None:
        self.settings = settings
        self.generator = generator
        self.project_dir = project_dir
        self.cwd = cwd or Path.cwd()
        self.change_provider = change_provider
        self.include_mapper = include_mapper
        self.adapter = GeneratorAdapter(generator)
        self.state = RunState.START
        self.history: list[RunState] = [RunState.START]

    def _enter(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)

    def compute_scope(self) -> ReportScope:
        branch = self.settings.branch_name
        try:
            changed = list(self.change_provider(branch, self.settings.vcs_binary))
        except DiffExecutionError as exc:
            raise ScopeComputationError(f"Could not determine files changed against '{branch}': {exc}") from exc

        roots = resolve_source_roots(self.project_dir, self.settings.source_roots)
        includes = self.include_mapper(
            changed,
            roots,
            self.cwd,
            source_suffix=self.settings.source_suffix,
            artifact_suffix=self.settings.artifact_suffix,
        )
        return ReportScope(includes=tuple(includes), excludes=tuple(self.settings.excludes))

    def should_generate(self, scope: ReportScope, policy: GenerationPolicy | None = None) -> bool:
        return should_generate(scope, policy or self.settings.policy())

    def apply_defaults(self) -> None:
        self.adapter.apply_defaults(
            output_directory=str(ReportSettings.resolve(self.settings.output_directory, self.project_dir)),
            data_file=str(ReportSettings.resolve(self.settings.data_file, self.project_dir)),
            settings=self.settings,
        )

    def apply_scope(self, scope: ReportScope) -> None:
        self.adapter.apply_scope(scope)

    def apply_configuration(self) -> ReportScope:
        self.apply_defaults()
        scope = self.compute_scope()
        self.apply_scope(scope)
        return scope

    def run(self) -> RunResult:
        self.state = RunState.START
        self.history = [RunState.START]

        self.apply_defaults()
        self._enter(RunState.DEFAULTS_APPLIED)

        if self.settings.skip:
            return self._skip("jacoco.skip is set")

        # No diff unless the generator would render.
        if not self.generator.can_generate_report():
            return self._skip("missing execution data file")

        try:
            scope = self.compute_scope()
        except ScopeComputationError:
            if self.settings.skip_when_no_changes:
                logger.error("Cannot decide whether anything changed; not generating a report")
            raise
        self._enter(RunState.SCOPE_COMPUTED)

        if not self.should_generate(scope):
            return self._skip("no changes", scope)

        self.apply_scope(scope)
        self._enter(RunState.CONFIGURATION_INJECTED)

        generated = bool(self.generator.execute())
        self._enter(RunState.DELEGATED)
        self._enter(RunState.DONE)
        return RunResult(scope=scope, generated=generated, states=list(self.history))

    def _skip(self, reason: str, scope: ReportScope | None = None) -> RunResult:
        logger.info("Skipping changed-files report: %s", reason)
        self._enter(RunState.SKIPPED)
        self._enter(RunState.DONE)
        return RunResult(scope=scope, generated=False, skip_reason=reason, states=list(self.history))
