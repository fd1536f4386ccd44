from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationInfo, field_validator

METADATA_SCHEMA_VERSION = "1.0"
CUSTOM_DATA_KEY = "toolverse"

WorkflowStatus = Literal["planning", "in-progress", "completed"]


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


class PricingModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    action_name: str = Field("", alias="actionName")
    unit: str = ""
    price_per_unit: float = Field(0.0, alias="pricePerUnit", ge=0)


class Tool(BaseModel):
    """A catalog entry that can be attached to workflow steps.

    Full tool records carry subscription and bookkeeping fields as well; the
    canvas only reads the ones declared here and ignores the rest.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    description: str = ""
    currency: str = "EUR"
    pricing_models: List[PricingModel] = Field(default_factory=list, alias="pricingModels")

    @field_validator("pricing_models", mode="before")
    @classmethod
    def default_pricing_models(cls, value: object) -> object:
        return [] if value is None else value

    def pricing_model(self, model_id: str | None) -> Optional[PricingModel]:
        if not model_id:
            return None
        for model in self.pricing_models:
            if model.id == model_id:
                return model
        return None

    def default_pricing_model_id(self) -> Optional[str]:
        return self.pricing_models[0].id if self.pricing_models else None

    @property
    def has_pricing_models(self) -> bool:
        return bool(self.pricing_models)


class ToolConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    tool_id: str = Field(..., min_length=1, alias="toolId")
    quantity: float = 1.0
    pricing_model_id: Optional[str] = Field(None, alias="pricingModelId")

    @field_validator("quantity", mode="before")
    @classmethod
    def ensure_valid_quantity(cls, value: object) -> float:
        return normalize_quantity(value)

    @field_validator("pricing_model_id", mode="before")
    @classmethod
    def empty_pricing_model_is_unset(cls, value: object) -> object:
        return None if value == "" else value

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"toolId": self.tool_id, "quantity": self.quantity}
        if self.pricing_model_id is not None:
            record["pricingModelId"] = self.pricing_model_id
        return record


class WorkflowStep(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    title: str = ""
    tools: List[ToolConfig] = Field(default_factory=list)
    position: Point
    connections: List[str] = Field(default_factory=list)

    @field_validator("tools", mode="after")
    @classmethod
    def ensure_unique_tools(cls, tools: List[ToolConfig]) -> List[ToolConfig]:
        seen: Set[str] = set()
        unique: List[ToolConfig] = []
        for config in tools:
            if config.tool_id in seen:
                continue
            seen.add(config.tool_id)
            unique.append(config)
        return unique

    @field_validator("connections", mode="after")
    @classmethod
    def ensure_valid_targets(cls, connections: List[str], info: ValidationInfo) -> List[str]:
        own_id = info.data.get("id")
        return _unique_targets(connections, exclude=own_id)

    def tool_config(self, tool_id: str) -> Optional[ToolConfig]:
        for config in self.tools:
            if config.tool_id == tool_id:
                return config
        return None

    def has_tool(self, tool_id: str) -> bool:
        return self.tool_config(tool_id) is not None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tools": [config.to_record() for config in self.tools],
            "position": {"x": self.position.x, "y": self.position.y},
            "connections": list(self.connections),
        }


class Workflow(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    status: WorkflowStatus = "planning"
    steps: List[WorkflowStep] = Field(default_factory=list)

    _step_index: Dict[str, int] = PrivateAttr(default_factory=dict)

    @field_validator("steps", mode="after")
    @classmethod
    def ensure_unique_step_ids(cls, steps: List[WorkflowStep]) -> List[WorkflowStep]:
        seen: Set[str] = set()
        for step in steps:
            if step.id in seen:
                msg = f"Duplicate step id found: {step.id}"
                raise ValueError(msg)
            seen.add(step.id)
        return steps

    def model_post_init(self, __context: Any) -> None:
        self._step_index = {step.id: idx for idx, step in enumerate(self.steps)}

    def get_step(self, step_id: str) -> Optional[WorkflowStep]:
        idx = self._step_index.get(step_id)
        return None if idx is None else self.steps[idx]

    def has_step(self, step_id: str) -> bool:
        return step_id in self._step_index

    def step_position(self, step_id: str) -> Optional[int]:
        return self._step_index.get(step_id)

    def with_steps(self, steps: Iterable[WorkflowStep]) -> Workflow:
        return type(self)(
            id=self.id,
            name=self.name,
            description=self.description,
            status=self.status,
            steps=list(steps),
        )

    def edges(self) -> List[tuple[str, str]]:
        return [(step.id, target) for step in self.steps for target in step.connections]

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "steps": [step.to_record() for step in self.steps],
        }


def normalize_quantity(value: object) -> float:
    """Coerce user input to a non-negative finite quantity; anything else is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        quantity = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(quantity) or quantity < 0:
        return 0.0
    return quantity


def _unique_targets(targets: Iterable[str], exclude: str | None = None) -> List[str]:
    seen: Set[str] = set()
    unique: List[str] = []
    for target in targets:
        if target == exclude or target in seen:
            continue
        seen.add(target)
        unique.append(target)
    return unique


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "toolverse-workflow-canvas",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }
