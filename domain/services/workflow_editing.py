"""Immutable edit operations on workflows.

Every function returns a new ``Workflow`` when it commits a change and the
very same object when the request is ignored (unknown ids, duplicate edges,
self-loops, repeated attachments). Callers compare by identity to decide
whether a change has to be persisted.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence

from domain.catalog import ToolCatalog
from domain.models import Point, ToolConfig, Workflow, WorkflowStep, normalize_quantity

logger = logging.getLogger(__name__)

DEFAULT_STEP_TITLE = "Neue Phase"
# New steps are placed so that their centre sits on the requested point.
NEW_STEP_OFFSET = Point(150.0, 100.0)

IdFactory = Callable[[], str]


def new_id() -> str:
    return uuid.uuid4().hex


def _replace_step(workflow: Workflow, step: WorkflowStep) -> Workflow:
    return workflow.with_steps(
        step if existing.id == step.id else existing for existing in workflow.steps
    )


def add_step(
    workflow: Workflow,
    center: Point,
    *,
    step_id: str | None = None,
    title: str = DEFAULT_STEP_TITLE,
    id_factory: IdFactory = new_id,
) -> Workflow:
    resolved_id = step_id or id_factory()
    if workflow.has_step(resolved_id):
        logger.debug("Step id %s already exists in workflow %s", resolved_id, workflow.id)
        return workflow
    step = WorkflowStep(
        id=resolved_id,
        title=title,
        tools=[],
        position=Point(center.x - NEW_STEP_OFFSET.x, center.y - NEW_STEP_OFFSET.y),
        connections=[],
    )
    logger.debug("Adding step %s to workflow %s", resolved_id, workflow.id)
    return workflow.with_steps([*workflow.steps, step])


def delete_step(workflow: Workflow, step_id: str) -> Workflow:
    if not workflow.has_step(step_id):
        return workflow
    remaining: list[WorkflowStep] = []
    for step in workflow.steps:
        if step.id == step_id:
            continue
        if step_id in step.connections:
            step = step.model_copy(
                update={"connections": [target for target in step.connections if target != step_id]}
            )
        remaining.append(step)
    logger.debug("Deleted step %s from workflow %s", step_id, workflow.id)
    return workflow.with_steps(remaining)


def rename_step(workflow: Workflow, step_id: str, title: str) -> Workflow:
    step = workflow.get_step(step_id)
    if step is None or step.title == title:
        return workflow
    return _replace_step(workflow, step.model_copy(update={"title": title}))


def move_step(workflow: Workflow, step_id: str, position: Point) -> Workflow:
    step = workflow.get_step(step_id)
    if step is None or step.position == position:
        return workflow
    return _replace_step(workflow, step.model_copy(update={"position": position}))


def translate_step(workflow: Workflow, step_id: str, dx: float, dy: float) -> Workflow:
    step = workflow.get_step(step_id)
    if step is None:
        return workflow
    return move_step(workflow, step_id, Point(step.position.x + dx, step.position.y + dy))


def attach_tool(
    workflow: Workflow, step_id: str, tool_id: str, catalog: ToolCatalog
) -> Workflow:
    step = workflow.get_step(step_id)
    if step is None or not tool_id:
        return workflow
    if step.has_tool(tool_id):
        logger.debug("Tool %s already attached to step %s", tool_id, step_id)
        return workflow
    tool = catalog.get(tool_id)
    config = ToolConfig(
        tool_id=tool_id,
        quantity=1,
        pricing_model_id=tool.default_pricing_model_id() if tool else None,
    )
    return _replace_step(workflow, step.model_copy(update={"tools": [*step.tools, config]}))


def detach_tool(workflow: Workflow, step_id: str, tool_id: str) -> Workflow:
    step = workflow.get_step(step_id)
    if step is None or not step.has_tool(tool_id):
        return workflow
    tools = [config for config in step.tools if config.tool_id != tool_id]
    return _replace_step(workflow, step.model_copy(update={"tools": tools}))


def configure_tool(
    workflow: Workflow,
    step_id: str,
    tool_id: str,
    catalog: ToolCatalog,
    *,
    quantity: float | str | None = None,
    pricing_model_id: str | None = None,
) -> Workflow:
    step = workflow.get_step(step_id)
    config = step.tool_config(tool_id) if step else None
    if step is None or config is None:
        return workflow

    updates: dict[str, object] = {}
    if pricing_model_id is not None:
        tool = catalog.get(tool_id)
        if tool is not None and tool.pricing_model(pricing_model_id) is not None:
            updates["pricing_model_id"] = pricing_model_id
        else:
            logger.debug("Ignoring unknown pricing model %s for tool %s", pricing_model_id, tool_id)
    if quantity is not None:
        updates["quantity"] = normalize_quantity(quantity)

    updated = config.model_copy(update=updates)
    if updated == config:
        return workflow
    tools = [updated if item.tool_id == tool_id else item for item in step.tools]
    return _replace_step(workflow, step.model_copy(update={"tools": tools}))


def connect(workflow: Workflow, source_id: str, target_id: str) -> Workflow:
    if source_id == target_id:
        logger.debug("Ignoring self connection on step %s", source_id)
        return workflow
    source = workflow.get_step(source_id)
    if source is None or not workflow.has_step(target_id):
        return workflow
    if target_id in source.connections:
        return workflow
    logger.debug("Connecting %s -> %s in workflow %s", source_id, target_id, workflow.id)
    return _replace_step(
        workflow, source.model_copy(update={"connections": [*source.connections, target_id]})
    )


def disconnect(workflow: Workflow, source_id: str, target_id: str) -> Workflow:
    source = workflow.get_step(source_id)
    if source is None or target_id not in source.connections:
        return workflow
    connections = [target for target in source.connections if target != target_id]
    logger.debug("Disconnecting %s -> %s in workflow %s", source_id, target_id, workflow.id)
    return _replace_step(workflow, source.model_copy(update={"connections": connections}))


def create_workflow(
    name: str, *, workflow_id: str | None = None, id_factory: IdFactory = new_id
) -> Workflow:
    cleaned = name.strip()
    if not cleaned:
        msg = "Workflow name must not be empty"
        raise ValueError(msg)
    return Workflow(
        id=workflow_id or id_factory(),
        name=cleaned,
        description="",
        status="planning",
        steps=[],
    )


def replace_workflow(workflows: Sequence[Workflow], updated: Workflow) -> list[Workflow]:
    return [updated if workflow.id == updated.id else workflow for workflow in workflows]


def remove_workflow(workflows: Sequence[Workflow], workflow_id: str) -> list[Workflow]:
    return [workflow for workflow in workflows if workflow.id != workflow_id]
