from __future__ import annotations

import pytest

from domain.models import Point, ToolConfig
from domain.services.migrate_workflows import (
    WorkflowLoadError,
    fallback_position,
    load_workflows,
    migrate_step,
    migrate_workflow_records,
)

LEGACY_RECORDS = [
    {
        "id": "w1",
        "name": "W",
        "steps": [
            {"id": "s1", "title": "A", "toolIds": ["t1", "t2"]},
            {"id": "s2", "title": "B", "toolIds": []},
        ],
    }
]


def test_legacy_records_are_upgraded() -> None:
    (workflow,) = load_workflows(LEGACY_RECORDS)

    first, second = workflow.steps
    assert first.tools == [
        ToolConfig(tool_id="t1", quantity=1),
        ToolConfig(tool_id="t2", quantity=1),
    ]
    assert first.position == Point(100, 100)
    assert first.connections == []
    assert second.tools == []
    assert second.position == Point(350, 200)
    assert workflow.description == ""
    assert workflow.status == "planning"


def test_migration_is_idempotent() -> None:
    once = migrate_workflow_records(LEGACY_RECORDS)
    twice = migrate_workflow_records(once)

    assert twice == once
    assert "toolIds" not in once[0]["steps"][0]


def test_migration_keeps_current_fields() -> None:
    raw = {
        "id": "s1",
        "tools": [{"toolId": "t1", "quantity": 3, "pricingModelId": "p"}],
        "position": {"x": 7, "y": 9},
        "connections": ["s2"],
    }

    assert migrate_step(raw, 4) == raw


def test_invalid_position_falls_back_by_index() -> None:
    step = migrate_step({"id": "s", "position": {"x": "left", "y": 1}}, 2)

    assert step["position"] == fallback_position(2) == {"x": 600.0, "y": 300.0}


def test_input_records_are_not_mutated() -> None:
    raw = {"id": "s", "toolIds": ["t"]}

    migrate_step(raw, 0)

    assert raw == {"id": "s", "toolIds": ["t"]}


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "w"},
        "workflows",
        [{"id": "w", "name": "W", "steps": {"s": {}}}],
        [{"id": "w", "name": "W", "steps": ["step"]}],
        [{"name": "no id", "steps": []}],
        [
            {
                "id": "w",
                "name": "W",
                "steps": [{"id": "s"}, {"id": "s"}],
            }
        ],
    ],
)
def test_malformed_payloads_raise_load_error(payload: object) -> None:
    with pytest.raises(WorkflowLoadError):
        load_workflows(payload)


def test_empty_list_loads_no_workflows() -> None:
    assert load_workflows([]) == []
