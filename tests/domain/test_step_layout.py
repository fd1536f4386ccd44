from __future__ import annotations

from collections.abc import Callable

import pytest

from domain.catalog import ToolCatalog
from domain.models import Point, ToolConfig, Workflow, WorkflowStep
from domain.services.step_layout import (
    BodyHit,
    HeaderHit,
    InputPortHit,
    OutputPortHit,
    StepLayoutConfig,
    body_height,
    hit_test,
    input_anchor,
    input_port_at,
    output_anchor,
    step_size,
)

LAYOUT = StepLayoutConfig()


def test_anchors_sit_on_step_edges(step_factory: Callable[..., WorkflowStep]) -> None:
    step = step_factory("a", x=120, y=-60)

    assert output_anchor(step, LAYOUT) == Point(420, -20)
    assert input_anchor(step, LAYOUT) == Point(120, -20)


def test_body_height_depends_on_tool_rows(
    catalog: ToolCatalog, step_factory: Callable[..., WorkflowStep]
) -> None:
    empty = step_factory("a")
    mixed = step_factory(
        "b",
        tools=[
            ToolConfig(tool_id="printer", quantity=1, pricing_model_id="pla"),
            ToolConfig(tool_id="notes", quantity=1),
            ToolConfig(tool_id="ghost", quantity=1),
        ],
    )

    assert body_height(empty, LAYOUT, catalog) == LAYOUT.min_body_height
    assert body_height(mixed, LAYOUT, catalog) == 16 + 84 + 48
    assert step_size(mixed, LAYOUT, catalog).height == 44 + 16 + 84 + 48


def test_body_height_is_capped(step_factory: Callable[..., WorkflowStep]) -> None:
    crowded = step_factory(
        "a", tools=[ToolConfig(tool_id=f"tool-{idx}", quantity=1) for idx in range(10)]
    )

    assert body_height(crowded, LAYOUT) == LAYOUT.max_body_height


@pytest.mark.parametrize(
    ("point", "expected"),
    [
        (Point(300, 40), OutputPortHit("a")),
        (Point(305, 45), OutputPortHit("a")),
        (Point(0, 40), InputPortHit("a")),
        (Point(150, 10), HeaderHit("a")),
        (Point(150, 90), BodyHit("a")),
        (Point(150, 200), None),
        (Point(-50, 10), None),
    ],
)
def test_hit_test_regions(
    step_factory: Callable[..., WorkflowStep],
    workflow_factory: Callable[..., Workflow],
    point: Point,
    expected: object,
) -> None:
    workflow = workflow_factory(step_factory("a"))

    assert hit_test(workflow, point, LAYOUT) == expected


def test_topmost_step_wins(
    step_factory: Callable[..., WorkflowStep], workflow_factory: Callable[..., Workflow]
) -> None:
    workflow = workflow_factory(step_factory("under"), step_factory("over", x=100, y=0))

    assert hit_test(workflow, Point(150, 10), LAYOUT) == HeaderHit("over")
    assert hit_test(workflow, Point(50, 10), LAYOUT) == HeaderHit("under")


def test_input_port_lookup(two_step_workflow: Workflow) -> None:
    assert input_port_at(two_step_workflow, Point(505, 35), LAYOUT) == "b"
    assert input_port_at(two_step_workflow, Point(300, 40), LAYOUT) is None
