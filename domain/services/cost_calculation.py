from __future__ import annotations

from dataclasses import dataclass

from domain.catalog import ToolCatalog
from domain.models import ToolConfig, Workflow, WorkflowStep


@dataclass(frozen=True)
class StepCost:
    step_id: str
    title: str
    cost: float


@dataclass(frozen=True)
class CostBreakdown:
    total: float
    per_step: list[StepCost]


def tool_config_cost(config: ToolConfig, catalog: ToolCatalog) -> float:
    model = catalog.resolve_pricing_model(config)
    if model is None:
        return 0.0
    return model.price_per_unit * config.quantity


def step_cost(step: WorkflowStep, catalog: ToolCatalog) -> float:
    return sum((tool_config_cost(config, catalog) for config in step.tools), 0.0)


def total_cost(workflow: Workflow, catalog: ToolCatalog) -> float:
    return sum((step_cost(step, catalog) for step in workflow.steps), 0.0)


def cost_breakdown(workflow: Workflow, catalog: ToolCatalog) -> CostBreakdown:
    per_step = [
        StepCost(step_id=step.id, title=step.title, cost=step_cost(step, catalog))
        for step in workflow.steps
    ]
    return CostBreakdown(total=sum((item.cost for item in per_step), 0.0), per_step=per_step)


def format_cost(value: float) -> str:
    return f"€{value:.2f}"
