"""docpipe CLI interface.

Commands:
- run: Run tasks (default task from config when none given)
- list: Show every task, built-in and from the manifest
- pages: Regenerate the command reference pages
- sync: Convert the blog taxonomy files
- check: Validate inputs and the site build command
- init: Write a default docpipe.yaml

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from docpipe import __version__
from docpipe.config import DocpipeConfig, create_default_config, load_config
from docpipe.errors import (
    CyclicDependencyError,
    DocpipeError,
    MalformedSourceError,
    TaskActionError,
    UnknownTaskError,
)
from docpipe.utils.logging import configure_from_cli, get_logger

if TYPE_CHECKING:
    from docpipe.tasks.graph import RunContext

app = typer.Typer(
    name="docpipe",
    help="Documentation build pipeline: command reference, links, blog taxonomy",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: DocpipeConfig | None = None
_logger = get_logger()


def _get_config() -> DocpipeConfig:
    return _config if _config is not None else DocpipeConfig()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docpipe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log lines",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """docpipe - Documentation build pipeline.

    Regenerates the command reference, converts the blog taxonomy and builds
    the site.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _echo_report(rows: list[tuple[str, str, str]]) -> None:
    width = max(len(name) for name, _, _ in rows)
    typer.echo("\nBuild Time Report")
    typer.echo("-" * (width + 24))
    for name, status, duration in rows:
        typer.echo(f"{name:<{width}}  {status:<10}  {duration:>8}")


def _log_run_summary(context: "RunContext", status: str) -> None:
    """Log the outcome of a run with its task counts for JSON consumers."""
    failed = sum(1 for r in context.results if r.status.value == "failed")
    _logger.structured(
        logging.INFO,
        f"Run {status}: {len(context.results)} task(s)",
        status=status,
        tasks=len(context.results),
        failed=failed,
        duration_seconds=round(sum(r.duration_seconds for r in context.results), 2),
    )


# =============================================================================
# run command
# =============================================================================


@app.command()
def run(
    tasks: Annotated[
        list[str] | None,
        typer.Argument(help="Tasks to run (default task from config when omitted)"),
    ] = None,
    no_manifest: Annotated[
        bool,
        typer.Option(
            "--no-manifest",
            help="Don't register tasks from the sub-command manifest",
        ),
    ] = False,
    report: Annotated[
        bool,
        typer.Option(
            "--report/--no-report",
            help="Print the build time report",
        ),
    ] = True,
) -> None:
    """Run tasks and everything they depend on.

    Exit codes:
        0: Every task completed (or failed with continue-on-error)
        1: A task failed, or the task graph is invalid
    """
    from docpipe.pipeline import DocsPipeline
    from docpipe.tasks.graph import RunContext

    config = _get_config()
    pipeline = DocsPipeline(config)

    try:
        graph = pipeline.build_graph(include_manifest=not no_manifest)
    except MalformedSourceError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    targets = tasks or [config.tasks.default]
    context = RunContext()

    try:
        graph.run(targets, context)
    except (CyclicDependencyError, UnknownTaskError) as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except TaskActionError as e:
        _logger.error(str(e))
        if report and context.results:
            _echo_report(context.report())
        _log_run_summary(context, "failed")
        typer.echo("\n❌ Build FAILED (completed tasks keep their output)")
        raise typer.Exit(1)

    if report and context.results:
        _echo_report(context.report())
    for message in context.messages:
        _logger.warning(message)

    _log_run_summary(context, "succeeded")
    typer.echo("\n✅ Build succeeded")
    raise typer.Exit(0)


# =============================================================================
# list command
# =============================================================================


@app.command(name="list")
def list_tasks(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output tasks as JSON",
        ),
    ] = False,
) -> None:
    """Show every task with its dependencies and description."""
    from docpipe.pipeline import DocsPipeline

    try:
        graph = DocsPipeline(_get_config()).build_graph()
    except MalformedSourceError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    tasks = graph.tasks()

    if json_output:
        payload = [
            {
                "name": t.name,
                "depends_on": t.depends_on,
                "description": t.description,
                "source": t.source.value,
            }
            for t in tasks
        ]
        typer.echo(json.dumps(payload, indent=2))
        raise typer.Exit(0)

    width = max(len(t.name) for t in tasks)
    for task in tasks:
        depends = f"  (depends on: {', '.join(task.depends_on)})" if task.depends_on else ""
        marker = " [manifest]" if task.source.value == "manifest" else ""
        typer.echo(f"  {task.name:<{width}}  {task.description}{marker}{depends}")
    raise typer.Exit(0)


# =============================================================================
# pages / sync commands
# =============================================================================


@app.command()
def pages() -> None:
    """Regenerate the command reference pages (runs Clean first)."""
    from docpipe.pipeline import GENERATE_PAGES, DocsPipeline

    graph = DocsPipeline(_get_config()).build_graph(include_manifest=False)
    try:
        graph.run([GENERATE_PAGES])
    except DocpipeError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    typer.echo("📄 Command reference regenerated")
    raise typer.Exit(0)


@app.command()
def sync(
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Fail if any taxonomy file is malformed",
        ),
    ] = False,
) -> None:
    """Convert the blog taxonomy files for the content editor.

    Exit codes:
        0: Every present file converted
        1: A file was malformed (--strict)
        2: A file was malformed (without --strict)
    """
    from docpipe.models.taxonomy import SyncStatus
    from docpipe.pipeline import DocsPipeline

    pipeline = DocsPipeline(_get_config())

    try:
        results = pipeline.sync_taxonomy(strict=strict)
    except MalformedSourceError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    icons = {SyncStatus.WRITTEN: "✅", SyncStatus.SKIPPED: "⚠️ ", SyncStatus.FAILED: "❌"}
    for result in results:
        detail = f"{result.record_count} record(s)" if result.error is None else result.error
        typer.echo(f"  {icons[result.status]} {result.source.name} -> {result.output.name}: {detail}")

    if any(r.status == SyncStatus.FAILED for r in results):
        raise typer.Exit(2)
    raise typer.Exit(0)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
    skip_site: Annotated[
        bool,
        typer.Option(
            "--skip-site",
            help="Don't require the site build command",
        ),
    ] = False,
) -> None:
    """Validate pipeline inputs and the site build command.

    Exit codes:
        0: Everything available
        1: A required input or tool is missing
        2: Only optional inputs missing (warnings)
    """
    from docpipe.utils.preflight import PreflightChecker

    result = PreflightChecker().check_all(_get_config(), skip_site=skip_site)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo("\n🔍 Site inputs\n")
        for item in result.checks:
            status = "✅" if item.available else "❌"
            version_str = f" ({item.version})" if item.version else ""
            required_str = " [required]" if item.required else " [optional]"
            typer.echo(f"  {status} {item.name}{version_str}{required_str}")
            if item.available and item.path:
                typer.echo(f"     └─ {item.path}")
            elif not item.available:
                typer.echo(f"     └─ {item.message}")
        typer.echo()

    if result.errors:
        if not json_output:
            typer.echo("❌ Required inputs missing")
        raise typer.Exit(1)
    if result.warnings:
        if not json_output:
            typer.echo("⚠️  Ready, with WARNINGS (optional inputs missing)")
        raise typer.Exit(2)
    if not json_output:
        typer.echo("✅ Site is ready to build")
    raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Write a default docpipe.yaml in the current directory."""
    config_file = Path("docpipe.yaml")

    if config_file.exists() and not force:
        _logger.error(f"{config_file} already exists")
        _logger.info("Pass --force to replace it")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")
    typer.echo(f"\n✅ docpipe configuration initialized: {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
