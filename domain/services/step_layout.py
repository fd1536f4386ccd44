from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from domain.catalog import ToolCatalog
from domain.models import Point, Size, Workflow, WorkflowStep


@dataclass(frozen=True)
class StepLayoutConfig:
    width: float = 300.0
    header_height: float = 44.0
    anchor_offset_y: float = 40.0
    port_radius: float = 10.0
    min_body_height: float = 60.0
    max_body_height: float = 300.0
    priced_row_height: float = 84.0
    plain_row_height: float = 48.0
    body_padding: float = 16.0


@dataclass(frozen=True)
class OutputPortHit:
    step_id: str


@dataclass(frozen=True)
class InputPortHit:
    step_id: str


@dataclass(frozen=True)
class HeaderHit:
    step_id: str


@dataclass(frozen=True)
class BodyHit:
    step_id: str


StepHit = Union[OutputPortHit, InputPortHit, HeaderHit, BodyHit]


def body_height(
    step: WorkflowStep, config: StepLayoutConfig, catalog: ToolCatalog | None = None
) -> float:
    rows = 0.0
    for tool_config in step.tools:
        tool = catalog.get(tool_config.tool_id) if catalog is not None else None
        if catalog is not None and tool is None:
            continue
        priced = tool is None or tool.has_pricing_models
        rows += config.priced_row_height if priced else config.plain_row_height
    content = config.body_padding + rows
    return min(max(content, config.min_body_height), config.max_body_height)


def step_size(
    step: WorkflowStep, config: StepLayoutConfig, catalog: ToolCatalog | None = None
) -> Size:
    return Size(config.width, config.header_height + body_height(step, config, catalog))


def output_anchor(step: WorkflowStep, config: StepLayoutConfig) -> Point:
    return Point(step.position.x + config.width, step.position.y + config.anchor_offset_y)


def input_anchor(step: WorkflowStep, config: StepLayoutConfig) -> Point:
    return Point(step.position.x, step.position.y + config.anchor_offset_y)


def _within_radius(point: Point, center: Point, radius: float) -> bool:
    dx = point.x - center.x
    dy = point.y - center.y
    return dx * dx + dy * dy <= radius * radius


def hit_test(
    workflow: Workflow,
    point: Point,
    config: StepLayoutConfig,
    catalog: ToolCatalog | None = None,
) -> StepHit | None:
    """Find what lies under a world-space point.

    Steps drawn later sit on top. Ports extend past the step outline and take
    precedence over the header and body.
    """
    for step in reversed(workflow.steps):
        if _within_radius(point, output_anchor(step, config), config.port_radius):
            return OutputPortHit(step.id)
        if _within_radius(point, input_anchor(step, config), config.port_radius):
            return InputPortHit(step.id)
        size = step_size(step, config, catalog)
        left, top = step.position.x, step.position.y
        if not (left <= point.x <= left + size.width and top <= point.y <= top + size.height):
            continue
        if point.y <= top + config.header_height:
            return HeaderHit(step.id)
        return BodyHit(step.id)
    return None


def input_port_at(
    workflow: Workflow, point: Point, config: StepLayoutConfig
) -> str | None:
    for step in reversed(workflow.steps):
        if _within_radius(point, input_anchor(step, config), config.port_radius):
            return step.id
    return None
