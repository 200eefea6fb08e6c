"""Typer CLI entry point for fortscan."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fortscan import __version__
from fortscan.config import ScanConfig, load_config
from fortscan.exceptions import FortscanError
from fortscan.model import SourceFile, SourceSet
from fortscan.project import ProjectBuilder

app = typer.Typer(
    name="fortscan",
    help="fortscan — source discovery and module dependency resolution for Fortran projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

ProjectArg = Annotated[Path, typer.Argument(help="Project root directory")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Print every resolved file")]


def _error_exit(message: str, hint: str | None = None) -> NoReturn:
    """Print a styled error and exit."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
    raise typer.Exit(code=1)


def _configure(project: Path, verbose: bool) -> ScanConfig:
    if not project.is_dir():
        _error_exit(f"Project directory does not exist: {project}")
    try:
        config = load_config(project)
    except FortscanError as exc:
        _error_exit(str(exc), hint="Check .fortscan/config.toml.")
    if verbose:
        config.log_level = "DEBUG"
    return config


def _display(project_dir: Path, source: SourceFile) -> str:
    try:
        return str(source.path.relative_to(project_dir))
    except ValueError:
        return str(source.path)


@app.command()
def scan(
    project: ProjectArg = Path("."),
    verbose: VerboseOpt = False,
) -> None:
    """Scan and resolve a project, then show every source file."""
    config = _configure(project, verbose)
    builder = ProjectBuilder(config)
    try:
        sources = builder.build()
    except FortscanError as exc:
        _error_exit(str(exc))

    project_dir = config.project_dir.resolve()
    table = Table(
        title=f"fortscan v{__version__}: {config.name}",
        border_style="cyan",
        header_style="bold cyan",
    )
    table.add_column("File", style="bold")
    table.add_column("Kind")
    table.add_column("Scope")
    table.add_column("Provides")
    table.add_column("Depends on")

    for source in sources:
        table.add_row(
            _display(project_dir, source),
            source.unit_kind.value,
            source.scope.value,
            ", ".join(source.provided_units) or "[dim]-[/dim]",
            ", ".join(_display(project_dir, d) for d in sources.dependencies_of(source))
            or "[dim]-[/dim]",
        )

    console.print()
    console.print(table)
    console.print(f"\n[green]{len(sources)} source files[/green] written to {builder.snapshot_path}")


@app.command()
def order(
    project: ProjectArg = Path("."),
    verbose: VerboseOpt = False,
) -> None:
    """Print the build order, marking program entry points."""
    config = _configure(project, verbose)
    builder = ProjectBuilder(config)
    try:
        sources: SourceSet = builder.build(save=False)
        ordered = builder.order(sources)
    except FortscanError as exc:
        _error_exit(str(exc))

    project_dir = config.project_dir.resolve()
    for position, source in enumerate(ordered, start=1):
        line = f"{position:4d}  {escape(_display(project_dir, source))}"
        if source.executable_name:
            line += f"  [cyan]-> {source.executable_name}[/cyan]"
        console.print(line, highlight=False)
