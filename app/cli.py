from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from adapters.excalidraw.url_encoder import build_excalidraw_url, fits_url_limit
from adapters.filesystem.json_utils import load_json_value, unwrap_bundle
from adapters.filesystem.tool_catalog_repository import ToolCatalogLoadError
from app.config import AppSettings, load_settings
from app.wiring import (
    build_excalidraw_converter,
    build_excalidraw_repository,
    build_tool_catalog_repository,
    build_workflow_repository,
)
from domain.catalog import ToolCatalog
from domain.models import Workflow
from domain.services.cost_calculation import cost_breakdown, format_cost, total_cost
from domain.services.migrate_workflows import WorkflowLoadError, load_workflows

app = typer.Typer(no_args_is_help=True)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to a YAML config file.")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _settings(config: Optional[Path]) -> AppSettings:
    try:
        settings = load_settings(config)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    _configure_logging(settings.log_level)
    return settings


def _load_workflows(settings: AppSettings) -> list[Workflow]:
    try:
        return build_workflow_repository(settings).load()
    except WorkflowLoadError as exc:
        console.print(f"[red]Could not load workflows:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _load_catalog(settings: AppSettings) -> ToolCatalog:
    try:
        return build_tool_catalog_repository(settings).load()
    except ToolCatalogLoadError as exc:
        console.print(f"[red]Could not load tools:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _find_workflow(workflows: list[Workflow], workflow_id: str) -> Workflow:
    for workflow in workflows:
        if workflow.id == workflow_id:
            return workflow
    console.print(f"[red]Workflow not found:[/] {workflow_id}")
    raise typer.Exit(code=1)


@app.command("list")
def list_workflows(config: Optional[Path] = ConfigOption) -> None:
    settings = _settings(config)
    workflows = _load_workflows(settings)
    if not workflows:
        console.print(f"[yellow]No workflows found in {settings.storage.workflows_path}[/]")
        raise typer.Exit(code=0)
    catalog = _load_catalog(settings)

    table = Table(title="Workflows")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Steps", justify="right")
    table.add_column("Cost", justify="right")
    for workflow in workflows:
        table.add_row(
            workflow.id,
            workflow.name,
            workflow.status,
            str(len(workflow.steps)),
            format_cost(total_cost(workflow, catalog)),
        )
    console.print(table)


@app.command("cost")
def show_cost(
    workflow_id: str = typer.Argument(..., help="Workflow to price."),
    config: Optional[Path] = ConfigOption,
) -> None:
    settings = _settings(config)
    workflow = _find_workflow(_load_workflows(settings), workflow_id)
    catalog = _load_catalog(settings)
    breakdown = cost_breakdown(workflow, catalog)

    table = Table(title=workflow.name or workflow.id)
    table.add_column("Step")
    table.add_column("Cost", justify="right")
    for item in breakdown.per_step:
        table.add_row(item.title or item.step_id, format_cost(item.cost))
    table.add_section()
    table.add_row("[bold]Total[/]", f"[bold green]{format_cost(breakdown.total)}[/]")
    console.print(table)


@app.command("migrate")
def migrate(config: Optional[Path] = ConfigOption) -> None:
    settings = _settings(config)
    path = settings.storage.workflows_path
    if not path.exists():
        console.print(f"[yellow]No workflow file at {path}[/]")
        raise typer.Exit(code=0)
    repo = build_workflow_repository(settings)
    workflows = _load_workflows(settings)
    repo.save(workflows)
    console.print(f"[green]Migrated[/] {len(workflows)} workflows in {path}")


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Workflow file to validate.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        workflows = load_workflows(unwrap_bundle(load_json_value(input_path), "workflows"))
    except (orjson.JSONDecodeError, WorkflowLoadError) as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Valid workflow file:[/] {input_path} ({len(workflows)} workflows)")


@app.command("export")
def export(
    workflow_id: str = typer.Argument(..., help="Workflow to export."),
    output_dir: Optional[Path] = typer.Option(
        None, help="Directory for the .excalidraw scene (defaults to export.excalidraw_out_dir)."
    ),
    config: Optional[Path] = ConfigOption,
) -> None:
    settings = _settings(config)
    workflow = _find_workflow(_load_workflows(settings), workflow_id)
    catalog = _load_catalog(settings)
    document = build_excalidraw_converter(settings).convert(workflow, catalog)

    repo = build_excalidraw_repository(settings)
    target = repo.scene_path(output_dir or settings.export.excalidraw_out_dir, workflow.id)
    repo.save(document, target)
    console.print(f"[green]Wrote[/] {target}")

    url = build_excalidraw_url(settings.export.excalidraw_base_url, document.to_dict())
    if fits_url_limit(url, settings.export.excalidraw_max_url_length):
        console.print(url, soft_wrap=True)
    else:
        console.print(
            f"[yellow]Share URL is {len(url)} characters, longer than the configured limit "
            f"of {settings.export.excalidraw_max_url_length}; open the scene file instead.[/]"
        )


if __name__ == "__main__":
    app()
