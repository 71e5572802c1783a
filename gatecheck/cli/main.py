"""Main CLI Module - Command-line interface for gatecheck."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .. import __version__
from ..analyzers import build_default_registry
from ..config import RunConfig, load_config
from ..core.analyzer import Category
from ..core.baseline import generate_baseline, load_baseline, save_baseline
from ..core.codebase import CodebaseView
from ..core.engine import AnalysisEngine
from ..core.scorer import RunResult
from ..exceptions import GatecheckError
from ..logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)

EXIT_ERROR = 2


def get_score_color(score: float) -> str:
    """Get color for score value."""
    if score >= 80:
        return "green"
    elif score >= 70:
        return "yellow"
    elif score >= 60:
        return "orange1"
    else:
        return "red"


def _resolve(root: Path, path: str) -> Path:
    """Resolve a path from the configuration against the project root."""
    candidate = Path(path)
    return candidate if candidate.is_absolute() else root / candidate


def _load(path: str, config_file: Optional[str], ci: bool) -> RunConfig:
    overrides = {"ci_mode": True} if ci else None
    return load_config(config_file, project_root=path, overrides=overrides)


def _discover(root: Path, config: RunConfig, baseline_path: Path) -> CodebaseView:
    """Build the codebase view, leaving out the baseline file itself."""
    excluded = list(config.excluded_paths)
    baseline_path = baseline_path.resolve()
    if root in baseline_path.parents:
        excluded.append(baseline_path.relative_to(root).as_posix())
    return CodebaseView.discover(root, paths=config.paths, excluded_paths=excluded)


def _fail(error: GatecheckError) -> None:
    err_console.print(f"Error: {error}", style="red", markup=False)
    sys.exit(EXIT_ERROR)


@click.group()
@click.version_option(version=__version__, prog_name="gatecheck")
def cli():
    """gatecheck - Static analysis quality gate for CI pipelines."""
    load_dotenv(find_dotenv(usecwd=True))


@cli.command("analyze")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--config", "-c", "config_file", type=click.Path(), help="Configuration file")
@click.option("--analyzer", "-a", "analyzer_ids", multiple=True, help="Run only these analyzers")
@click.option("--category", type=click.Choice([c.value for c in Category]),
              help="Run only analyzers of this category")
@click.option("--ci", is_flag=True, help="Enable CI mode")
@click.option("--baseline/--no-baseline", "use_baseline", default=True,
              help="Suppress issues accepted in the baseline file")
@click.option("--baseline-file", type=click.Path(), help="Baseline file (default from configuration)")
@click.option("--format", "-f", "output_format", type=click.Choice(["console", "json"]),
              default="console", help="Output format")
@click.option("--output", "-o", type=click.Path(), help="Also write the JSON report to this file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write log records to this file")
def analyze(
    path: str,
    config_file: Optional[str],
    analyzer_ids: tuple,
    category: Optional[str],
    ci: bool,
    use_baseline: bool,
    baseline_file: Optional[str],
    output_format: str,
    output: Optional[str],
    verbose: bool,
    quiet: bool,
    log_file: Optional[str],
):
    """Analyze a project and exit non-zero if the quality gate fails.

    PATH is the project root (default: current directory).
    Exit codes: 0 passed, 1 failed, 2 configuration or baseline error.
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    root = Path(path).resolve()

    try:
        config = _load(path, config_file, ci)
        if not config.enabled:
            if output_format == "console":
                console.print("[yellow]gatecheck is disabled by configuration.[/yellow]")
            sys.exit(0)

        baseline_path = Path(baseline_file) if baseline_file else _resolve(root, config.baseline_file)
        baseline = load_baseline(baseline_path) if use_baseline else None

        engine = AnalysisEngine(build_default_registry(), config)
        view = _discover(root, config, baseline_path)
        only_category = Category(category) if category else None
        only_ids = list(analyzer_ids) or None

        if output_format == "console" and not quiet:
            console.print(Panel.fit(
                f"[bold blue]gatecheck[/bold blue]\n"
                f"Analyzing: [cyan]{root}[/cyan] ({len(view.files)} files)"
                + ("\n[dim]CI mode[/dim]" if config.ci_mode else ""),
                border_style="blue",
            ))
            result = _run_with_progress(engine, view, baseline, only_ids, only_category)
        else:
            result = engine.run(view, baseline=baseline, only_ids=only_ids, only_category=only_category)
    except GatecheckError as e:
        _fail(e)
        return

    report = result.to_dict()
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")

    if output_format == "json":
        click.echo(json.dumps(report, indent=2))
    else:
        _display_results(result)
        if output:
            console.print(f"\nReport written to [cyan]{output}[/cyan]")

    sys.exit(result.exit_code)


def _run_with_progress(engine, view, baseline, only_ids, only_category) -> RunResult:
    """Run the engine while showing a progress bar."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("[cyan]Running analyzers...", total=None)

        def on_analyzer_complete(completed: int, total: int, analyzer_id: str) -> None:
            progress.update(
                task,
                total=total,
                completed=completed,
                description=f"[cyan]Completed {analyzer_id} ({completed}/{total})",
            )

        return engine.run(
            view,
            baseline=baseline,
            only_ids=only_ids,
            only_category=only_category,
            progress_callback=on_analyzer_complete,
        )


@cli.command("baseline")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--config", "-c", "config_file", type=click.Path(), help="Configuration file")
@click.option("--output", "-o", type=click.Path(), help="Baseline file (default from configuration)")
@click.option("--merge", is_flag=True, help="Keep the entries of the existing baseline")
@click.option("--ci", is_flag=True, help="Only baseline analyzers that run in CI mode")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write log records to this file")
def baseline(
    path: str,
    config_file: Optional[str],
    output: Optional[str],
    merge: bool,
    ci: bool,
    verbose: bool,
    log_file: Optional[str],
):
    """Accept all current issues by writing them to a baseline file.

    PATH is the project root (default: current directory).
    """
    setup_logging(verbose=verbose, log_file=log_file)
    root = Path(path).resolve()

    try:
        config = _load(path, config_file, ci)
        baseline_path = Path(output) if output else _resolve(root, config.baseline_file)
        existing = load_baseline(baseline_path) if merge else None

        engine = AnalysisEngine(build_default_registry(), config)
        view = _discover(root, config, baseline_path)
        result = engine.run(view)

        new_baseline = generate_baseline(result.blocking_issues, existing=existing)
        save_baseline(new_baseline, baseline_path)
    except GatecheckError as e:
        _fail(e)
        return

    added = new_baseline.total_entries - (existing.total_entries if existing else 0)
    console.print(f"[green]Baseline written to[/green] [cyan]{baseline_path}[/cyan]")
    console.print(f"  Entries: {new_baseline.total_entries}" + (f" ({added} new)" if merge else ""))
    if result.failures:
        console.print(f"  [yellow]{len(result.failures)} analyzers failed; their issues are not in the baseline[/yellow]")


@cli.command("list-analyzers")
@click.option("--category", type=click.Choice([c.value for c in Category]), help="Filter by category")
def list_analyzers(category: Optional[str]):
    """List the available analyzers."""
    registry = build_default_registry()
    descriptors = registry.by_category(Category(category)) if category else registry.all()

    table = Table(title="Analyzers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("CI", justify="center")

    for descriptor in descriptors:
        severity = descriptor.default_severity
        table.add_row(
            descriptor.id,
            descriptor.name,
            descriptor.category.value,
            f"[{severity.color}]{severity.value.upper()}[/{severity.color}]",
            "[green]Yes[/green]" if descriptor.run_in_ci else "[dim]No[/dim]",
        )

    console.print(table)


@cli.command("config")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--config", "-c", "config_file", type=click.Path(), help="Configuration file")
def config(path: str, config_file: Optional[str]):
    """Show the resolved configuration of a project."""
    try:
        run_config = load_config(config_file, project_root=path)
    except GatecheckError as e:
        _fail(e)
        return

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key, value in run_config.to_dict().items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={'on' if v else 'off'}" for k, v in value.items())
        elif isinstance(value, list):
            value = ", ".join(value) or "-"
        elif value is None:
            value = "-"
        table.add_row(key, str(value))

    console.print(table)


def _display_results(result: RunResult):
    """Display analysis results in the terminal."""
    score_color = get_score_color(result.score)
    status_color = "green" if result.passed else "red"

    console.print(Panel.fit(
        f"[bold {score_color}]{result.score:.1f}[/bold {score_color}] / 100\n"
        f"Grade: [bold]{result.grade}[/bold]",
        title="Score",
        border_style=score_color,
    ))

    status = "PASSED" if result.passed else "FAILED"
    console.print(f"\nStatus: [{status_color}]{status}[/{status_color}] (fail on: {result.fail_on}"
                  + (f", threshold: {result.fail_threshold:g}" if result.fail_threshold is not None else "")
                  + ")")

    counts = result.severity_counts
    console.print(f"\n[bold]Blocking Issues:[/bold] {len(result.blocking_issues)}")
    console.print(f"  [red]Critical: {counts['critical']}[/red] | [orange1]High: {counts['high']}[/orange1] | "
                  f"[yellow]Medium: {counts['medium']}[/yellow] | [blue]Low: {counts['low']}[/blue]")
    if result.informational_issues:
        console.print(f"  [dim]Informational (not reported): {len(result.informational_issues)}[/dim]")
    if result.suppressed_count or result.inline_suppressed_count:
        console.print(f"  [dim]Suppressed: {result.suppressed_count} by baseline, "
                      f"{result.inline_suppressed_count} inline[/dim]")

    if result.blocking_issues:
        table = Table()
        table.add_column("Severity", width=10)
        table.add_column("Analyzer", style="cyan")
        table.add_column("Location")
        table.add_column("Message")

        for issue in result.blocking_issues:
            color = issue.severity.color
            location = f"{issue.path}:{issue.line}" if issue.line else issue.path
            table.add_row(
                f"[{color}]{issue.severity.value.upper()}[/{color}]",
                issue.analyzer_id,
                location,
                issue.message,
            )
        console.print(table)

    if result.failures:
        console.print("\n[bold yellow]Analyzer Failures:[/bold yellow]")
        for failure in result.failures:
            console.print(f"  {failure.analyzer_id}: {failure.error_type}: {failure.cause}")

    if result.incomplete:
        console.print(f"\n[bold yellow]Run incomplete:[/bold yellow] {result.incomplete.reason}")
        if result.incomplete.cancelled:
            console.print(f"  Cancelled: {', '.join(result.incomplete.cancelled)}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
