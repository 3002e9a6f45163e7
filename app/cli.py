from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from adapters.filesystem.workflow_utils import layout_path_for
from app.config import AppSettings, load_settings
from app.layout_wiring import (
    build_layout_engine,
    build_layout_repository,
    build_workflow_repository,
)
from domain.models import TILE_KIND_FORK, TILE_KIND_NODE, Tile, WorkflowLayout

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _prepare(config_path: Path | None, log_level: str | None) -> AppSettings:
    try:
        settings = load_settings(config_path, log_level)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/] {exc}")
        raise typer.Exit(code=1) from exc
    _configure_logging(settings.log_level)
    return settings


@app.command("layout")
def layout_workflows(
    input_dir: Path | None = typer.Option(
        None, help="Directory with workflow JSON files. Defaults to paths.workflows_dir.",
    ),
    output_dir: Path | None = typer.Option(
        None, help="Directory to write layout files. Defaults to paths.layouts_dir.",
    ),
    config_path: Path | None = typer.Option(None, "--config", help="YAML settings file."),
    log_level: str | None = typer.Option(None, help="Override the configured log level."),
) -> None:
    settings = _prepare(config_path, log_level)
    source_dir = input_dir or settings.paths.workflows_dir
    target_dir = output_dir or settings.paths.layouts_dir

    workflow_repo = build_workflow_repository(settings)
    layout_repo = build_layout_repository(settings)
    engine = build_layout_engine(settings)

    try:
        pairs = workflow_repo.load_all_with_paths(source_dir)
    except ValueError as exc:
        console.print(f"[red]Failed to read workflows:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No workflow files found in {source_dir}[/]")
        raise typer.Exit(code=0)

    failures = 0
    for path, definition in pairs:
        try:
            layout = engine.build_layout(definition)
        except ValueError as exc:
            failures += 1
            console.print(f"[red]Layout failed for[/] {path}: {exc}")
            continue
        target_path = layout_path_for(path, target_dir)
        layout_repo.save(layout, target_path)
        logger.info("Laid out %s as %s", definition.workflow_id, target_path)
        console.print(f"[green]Wrote[/] {target_path}")

    if failures:
        raise typer.Exit(code=1)


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Workflow file to validate."),
    config_path: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _prepare(config_path, None)
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    try:
        definition = build_workflow_repository(settings).load_by_path(input_path)
        layout = build_layout_engine(settings).build_layout(definition)
    except ValueError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc

    matrix = layout.matrix
    console.print(
        f"[green]Valid workflow:[/] {input_path} "
        f"({matrix.num_columns} columns x {matrix.num_rows} rows)"
    )


@app.command("show")
def show(
    input_path: Path = typer.Argument(..., help="Workflow file to lay out and print."),
    config_path: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _prepare(config_path, None)
    try:
        definition = build_workflow_repository(settings).load_by_path(input_path)
        layout = build_layout_engine(settings).build_layout(definition)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Cannot lay out {input_path}:[/] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(render_layout_table(layout))


def render_layout_table(layout: WorkflowLayout) -> Table:
    matrix = layout.matrix
    table = Table(title=layout.workflow_id, show_lines=True)
    for col in range(matrix.num_columns):
        table.add_column(str(col), justify="center")
    for row in range(matrix.num_rows):
        table.add_row(*(_cell_text(column[row]) for column in matrix))
    return table


def _cell_text(tile: Tile) -> str:
    if tile.is_placeholder:
        return ""
    if tile.kind == TILE_KIND_FORK:
        return f"[bold magenta]{tile.tile_id}[/]"
    if tile.kind == TILE_KIND_NODE:
        return f"[bold]{tile.tile_id}[/]"
    return f"[dim]{tile.tile_id}[/]"


if __name__ == "__main__":
    app()
