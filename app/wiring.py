from __future__ import annotations

from collections.abc import Callable

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.tool_catalog_repository import FileSystemToolCatalogRepository
from adapters.filesystem.workflow_repository import FileSystemWorkflowRepository
from app.config import AppSettings
from domain.models import Workflow
from domain.ports.repositories import ToolCatalogRepository, WorkflowRepository
from domain.services.convert_workflow_to_excalidraw import WorkflowToExcalidrawConverter
from domain.services.workflow_canvas import WorkflowCanvas


def build_workflow_repository(settings: AppSettings) -> WorkflowRepository:
    return FileSystemWorkflowRepository(settings.storage.workflows_path)


def build_tool_catalog_repository(settings: AppSettings) -> ToolCatalogRepository:
    return FileSystemToolCatalogRepository(settings.storage.tools_path)


def build_excalidraw_converter(settings: AppSettings) -> WorkflowToExcalidrawConverter:
    return WorkflowToExcalidrawConverter(settings.canvas.to_layout_config())


def build_excalidraw_repository(settings: AppSettings) -> FileSystemExcalidrawRepository:
    return FileSystemExcalidrawRepository()


def build_canvas(
    settings: AppSettings,
    on_change: Callable[[list[Workflow]], None] | None = None,
) -> WorkflowCanvas:
    """Load workflows and tools and open an editing session that saves on every change."""
    workflow_repo = build_workflow_repository(settings)
    catalog = build_tool_catalog_repository(settings).load()
    return WorkflowCanvas(
        workflow_repo.load(),
        catalog,
        on_change or workflow_repo.save,
        layout=settings.canvas.to_layout_config(),
        hit_tolerance=settings.canvas.connection_hit_tolerance,
        default_view_size=settings.canvas.default_view_size(),
    )
