from __future__ import annotations

import json
import logging
from pathlib import Path
import typer
import yaml

from jacoco_changes.config import ReportSettings, load_env_file, load_settings
from jacoco_changes.controller import ReportScopeController, ScopeComputationError
from jacoco_changes.generator import ReportGenerationError, build_generator
from jacoco_changes.injection import ConfigurationInjectionError

app = typer.Typer(help="jacoco-changes: JaCoCo coverage report for files changed against a branch")


@app.callback()
def main() -> None:
    """jacoco-changes command group."""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(project_dir: str, config: str | None, branch: str | None) -> tuple[Path, ReportSettings]:
    root = Path(project_dir).resolve()
    if not root.exists():
        typer.secho(f"Project directory does not exist: {root}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    load_env_file(Path.cwd() / ".env")
    load_env_file(root / ".env")

    try:
        settings = load_settings(config, root)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    if branch:
        settings.branch_name = branch
    return root, settings


@app.command()
def report(
    project_dir: str = typer.Option(".", help="Project base directory"),
    config: str | None = typer.Option(None, help="Config YAML path (defaults to <project-dir>/.jacoco-changes.yml)"),
    branch: str | None = typer.Option(None, help="Branch or commit to compare against"),
    skip: bool | None = typer.Option(None, "--skip/--no-skip", help="Skip report generation entirely"),
    skip_when_no_changes: bool | None = typer.Option(
        None,
        "--skip-when-no-changes/--report-when-no-changes",
        help="Do not render a report when no source file changed",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure_logging(verbose)
    root, settings = _load(project_dir, config, branch)
    if skip is not None:
        settings.skip = skip
    if skip_when_no_changes is not None:
        settings.skip_when_no_changes = skip_when_no_changes

    generator = build_generator(settings, root)
    controller = ReportScopeController(settings, generator, root)

    try:
        result = controller.run()
    except (ScopeComputationError, ConfigurationInjectionError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except ReportGenerationError as exc:
        typer.secho(f"Report generation failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if result.skip_reason:
        typer.echo(f"Skipped: {result.skip_reason}")
        return

    if not result.generated:
        typer.echo("No report generated (skipped by JaCoCo or missing execution data)")
        return

    changed = [p for p in result.scope.includes if p] if result.scope else []
    typer.echo(f"Include patterns={len(changed)} branch={settings.branch_name}")
    typer.secho(f"Wrote: {generator.index_page}", fg=typer.colors.GREEN)


@app.command()
def scope(
    project_dir: str = typer.Option(".", help="Project base directory"),
    config: str | None = typer.Option(None, help="Config YAML path (defaults to <project-dir>/.jacoco-changes.yml)"),
    branch: str | None = typer.Option(None, help="Branch or commit to compare against"),
    as_json: bool = typer.Option(False, "--json", help="Print the scope as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure_logging(verbose)
    root, settings = _load(project_dir, config, branch)

    controller = ReportScopeController(settings, build_generator(settings, root), root)
    try:
        computed = controller.compute_scope()
    except ScopeComputationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)

    if as_json:
        typer.echo(json.dumps(computed.to_dict(), indent=2))
        return

    if not computed.has_changes:
        typer.echo(f"No changed source files against {settings.branch_name}")
        return
    for pattern in computed.includes:
        typer.echo(pattern)


if __name__ == "__main__":
    app()
