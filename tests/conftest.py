from __future__ import annotations

import itertools
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, ExportSettings, StorageSettings
from domain.catalog import ToolCatalog
from domain.models import Point, PricingModel, Tool, ToolConfig, Workflow, WorkflowStep


def _clear_toolverse_env() -> None:
    for key in list(os.environ):
        if key.startswith("TOOLVERSE_"):
            os.environ.pop(key, None)


_clear_toolverse_env()


@pytest.fixture(autouse=True)
def clear_toolverse_env() -> Generator[None, None, None]:
    _clear_toolverse_env()
    yield
    _clear_toolverse_env()


@pytest.fixture
def catalog() -> ToolCatalog:
    return ToolCatalog(
        [
            Tool(
                id="printer",
                name="3D Printer",
                pricing_models=[
                    PricingModel(id="pla", action_name="PLA print", unit="g", price_per_unit=0.05),
                    PricingModel(id="resin", action_name="Resin print", unit="ml", price_per_unit=0.2),
                ],
            ),
            Tool(
                id="scanner",
                name="Page Scanner",
                pricing_models=[
                    PricingModel(id="scan", action_name="Scan", unit="page", price_per_unit=2.5),
                ],
            ),
            Tool(id="notes", name="Notebook"),
        ]
    )


@pytest.fixture
def step_factory() -> Callable[..., WorkflowStep]:
    def _factory(
        step_id: str,
        *,
        x: float = 0.0,
        y: float = 0.0,
        tools: list[ToolConfig] | None = None,
        connections: list[str] | None = None,
        title: str | None = None,
    ) -> WorkflowStep:
        return WorkflowStep(
            id=step_id,
            title=title if title is not None else f"Step {step_id}",
            tools=tools or [],
            position=Point(x, y),
            connections=connections or [],
        )

    return _factory


@pytest.fixture
def workflow_factory() -> Callable[..., Workflow]:
    def _factory(*steps: WorkflowStep, workflow_id: str = "wf-1", name: str = "Launch") -> Workflow:
        return Workflow(id=workflow_id, name=name, steps=list(steps))

    return _factory


@pytest.fixture
def two_step_workflow(
    step_factory: Callable[..., WorkflowStep], workflow_factory: Callable[..., Workflow]
) -> Workflow:
    return workflow_factory(
        step_factory("a", x=0, y=0),
        step_factory("b", x=500, y=0),
    )


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        storage=StorageSettings(
            workflows_path=tmp_path / "workflows.json",
            tools_path=tmp_path / "tools.json",
        ),
        export=ExportSettings(
            excalidraw_base_url="http://testserver/excalidraw",
            excalidraw_out_dir=tmp_path / "excalidraw_out",
        ),
    )
