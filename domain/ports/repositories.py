from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.catalog import ToolCatalog
from domain.models import ExcalidrawDocument, Workflow


class WorkflowRepository(Protocol):
    def load(self) -> list[Workflow]: ...

    def save(self, workflows: Sequence[Workflow]) -> None: ...


class ToolCatalogRepository(Protocol):
    def load(self) -> ToolCatalog: ...


class ExcalidrawRepository(Protocol):
    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...
