from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import orjson
from filelock import FileLock

from adapters.filesystem.json_utils import load_json_value, unwrap_bundle, write_json_atomic
from domain.models import Workflow
from domain.ports.repositories import WorkflowRepository
from domain.services.migrate_workflows import (
    WorkflowLoadError,
    load_workflows,
    migrate_workflow_records,
)

logger = logging.getLogger(__name__)


class FileSystemWorkflowRepository(WorkflowRepository):
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[Workflow]:
        if not self.path.exists():
            logger.info("No workflow file at %s, starting empty", self.path)
            return []
        workflows = load_workflows(self._load_raw())
        logger.info("Loaded %d workflows from %s", len(workflows), self.path)
        return workflows

    def load_records(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        return migrate_workflow_records(self._load_raw())

    def save(self, workflows: Sequence[Workflow]) -> None:
        self.save_records([workflow.to_record() for workflow in workflows])

    def save_records(self, records: Sequence[dict[str, Any]]) -> None:
        lock_path = self.path.with_suffix(f"{self.path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(self.path, list(records))
        logger.info("Saved %d workflows to %s", len(records), self.path)

    def _load_raw(self) -> Any:
        try:
            payload = load_json_value(self.path)
        except orjson.JSONDecodeError as exc:
            msg = f"Workflow file {self.path} is not valid JSON: {exc}"
            raise WorkflowLoadError(msg) from exc
        return unwrap_bundle(payload, "workflows")
