from __future__ import annotations

from dataclasses import dataclass

from domain.catalog import PaletteEntry, ToolCatalog
from domain.models import Point, Size, Workflow, WorkflowStep
from domain.services.connection_paths import (
    ConnectionView,
    connection_views,
    pending_connection_view,
)
from domain.services.cost_calculation import step_cost, tool_config_cost, total_cost
from domain.services.interaction import CanvasState, Connecting
from domain.services.step_layout import StepLayoutConfig, step_size
from domain.services.viewport import GridBackground, Viewport


@dataclass(frozen=True)
class PricingOption:
    pricing_model_id: str
    label: str
    unit: str


@dataclass(frozen=True)
class ToolRowView:
    tool_id: str
    name: str
    pricing_options: list[PricingOption]
    selected_pricing_model_id: str | None
    unit: str | None
    quantity: float
    cost: float | None

    @property
    def has_pricing_controls(self) -> bool:
        return bool(self.pricing_options)


@dataclass(frozen=True)
class StepView:
    step_id: str
    title: str
    position: Point
    size: Size
    cost: float
    tool_rows: list[ToolRowView]
    menu_open: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.tool_rows


@dataclass(frozen=True)
class CanvasScene:
    workflow_id: str
    workflow_name: str
    viewport: Viewport
    grid: GridBackground
    zoom_percent: int
    steps: list[StepView]
    connections: list[ConnectionView]
    pending_connection: ConnectionView | None
    total_cost: float
    palette: list[PaletteEntry]


def _tool_rows(step: WorkflowStep, catalog: ToolCatalog) -> list[ToolRowView]:
    rows: list[ToolRowView] = []
    for config in step.tools:
        tool = catalog.get(config.tool_id)
        if tool is None:
            continue
        options = [
            PricingOption(
                pricing_model_id=model.id,
                label=f"{model.action_name} ({model.price_per_unit:g}€)",
                unit=model.unit,
            )
            for model in tool.pricing_models
        ]
        model = tool.pricing_model(config.pricing_model_id)
        rows.append(
            ToolRowView(
                tool_id=tool.id,
                name=tool.name,
                pricing_options=options,
                selected_pricing_model_id=model.id if model else None,
                unit=model.unit if model else None,
                quantity=config.quantity,
                cost=tool_config_cost(config, catalog) if model else None,
            )
        )
    return rows


def build_step_views(
    workflow: Workflow,
    catalog: ToolCatalog,
    config: StepLayoutConfig,
    *,
    open_menu_step_id: str | None = None,
) -> list[StepView]:
    return [
        StepView(
            step_id=step.id,
            title=step.title,
            position=step.position,
            size=step_size(step, config, catalog),
            cost=step_cost(step, catalog),
            tool_rows=_tool_rows(step, catalog),
            menu_open=step.id == open_menu_step_id,
        )
        for step in workflow.steps
    ]


def build_scene(
    workflow: Workflow,
    catalog: ToolCatalog,
    state: CanvasState,
    config: StepLayoutConfig,
    *,
    open_menu_step_id: str | None = None,
) -> CanvasScene:
    pending = None
    if isinstance(state.mode, Connecting):
        pending = pending_connection_view(workflow, state.mode.source_id, state.mode.cursor, config)
    return CanvasScene(
        workflow_id=workflow.id,
        workflow_name=workflow.name,
        viewport=state.viewport,
        grid=state.viewport.grid_background(),
        zoom_percent=state.viewport.zoom_percent(),
        steps=build_step_views(workflow, catalog, config, open_menu_step_id=open_menu_step_id),
        connections=connection_views(workflow, config),
        pending_connection=pending,
        total_cost=total_cost(workflow, catalog),
        palette=catalog.palette_entries(),
    )
