"""Upgrade stored workflow records to the current shape.

Older records kept a flat ``toolIds`` list per step and may lack layout data
(``position``/``connections``). Migration works on raw JSON records so it can
run before model validation, and running it twice changes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from domain.models import Workflow

logger = logging.getLogger(__name__)

LEGACY_TOOL_IDS_KEY = "toolIds"
FALLBACK_ORIGIN = (100.0, 100.0)
FALLBACK_STEP = (250.0, 100.0)


class WorkflowLoadError(ValueError):
    """Raised when stored workflow data cannot be turned into workflows."""


def fallback_position(index: int) -> dict[str, float]:
    return {
        "x": FALLBACK_ORIGIN[0] + index * FALLBACK_STEP[0],
        "y": FALLBACK_ORIGIN[1] + index * FALLBACK_STEP[1],
    }


def migrate_step(raw: Mapping[str, Any], index: int) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        msg = f"Step record at index {index} must be an object"
        raise WorkflowLoadError(msg)
    step = dict(raw)
    legacy_ids = step.pop(LEGACY_TOOL_IDS_KEY, None)
    if isinstance(legacy_ids, list):
        step["tools"] = [{"toolId": str(tool_id), "quantity": 1} for tool_id in legacy_ids]
    elif not isinstance(step.get("tools"), list):
        step["tools"] = []
    if not _is_position(step.get("position")):
        step["position"] = fallback_position(index)
    if not isinstance(step.get("connections"), list):
        step["connections"] = []
    return step


def migrate_workflow_record(raw: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        msg = "Workflow record must be an object"
        raise WorkflowLoadError(msg)
    record = dict(raw)
    steps = record.get("steps", [])
    if not isinstance(steps, list):
        msg = f"Workflow {record.get('id')!r} has invalid steps: expected a list"
        raise WorkflowLoadError(msg)
    record["steps"] = [migrate_step(step, idx) for idx, step in enumerate(steps)]
    record.setdefault("description", "")
    record.setdefault("status", "planning")
    return record


def migrate_workflow_records(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        msg = "Workflow data must be a list of workflow records"
        raise WorkflowLoadError(msg)
    return [migrate_workflow_record(record) for record in raw]


def load_workflows(raw: Any) -> list[Workflow]:
    records = migrate_workflow_records(raw)
    try:
        workflows = [Workflow.model_validate(record) for record in records]
    except ValidationError as exc:
        msg = f"Invalid workflow record: {exc}"
        raise WorkflowLoadError(msg) from exc
    logger.debug("Loaded %d workflows", len(workflows))
    return workflows


def _is_position(value: object) -> bool:
    if not isinstance(value, Mapping):
        return False
    return all(
        isinstance(value.get(axis), (int, float)) and not isinstance(value.get(axis), bool)
        for axis in ("x", "y")
    )
