from __future__ import annotations

import random
import uuid
from typing import Any, List

from domain.catalog import ToolCatalog
from domain.models import (
    CUSTOM_DATA_KEY,
    METADATA_SCHEMA_VERSION,
    ExcalidrawDocument,
    Point,
    Size,
    Workflow,
)
from domain.services.connection_paths import connection_views
from domain.services.cost_calculation import format_cost, total_cost
from domain.services.step_layout import StepLayoutConfig
from domain.services.step_views import StepView, ToolRowView, build_step_views

HEADER_COLOR = "#f3f4f6"
STEP_COLOR = "#ffffff"
TOOL_ROW_COLOR = "#eef2ff"
CONNECTION_COLOR = "#9ca3af"
COST_COLOR = "#16a34a"
ARROW_SEGMENTS = 16


class WorkflowToExcalidrawConverter:
    def __init__(self, layout: StepLayoutConfig | None = None) -> None:
        self.layout = layout or StepLayoutConfig()
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "toolverse-workflow-canvas")

    def convert(self, workflow: Workflow, catalog: ToolCatalog) -> ExcalidrawDocument:
        elements: List[dict] = []
        base_metadata = {
            "schema_version": METADATA_SCHEMA_VERSION,
            "workflow_id": workflow.id,
        }

        rect_ids: dict[str, str] = {}
        for view in build_step_views(workflow, catalog, self.layout):
            rect_ids[view.step_id] = self._build_step(view, elements, base_metadata)

        element_index = {element["id"]: element for element in elements}
        for connection in connection_views(workflow, self.layout):
            points = connection.curve.sample(ARROW_SEGMENTS)
            arrow = self._arrow_element(
                points=points,
                metadata={
                    **base_metadata,
                    "role": "connection",
                    "source_step_id": connection.source_id,
                    "target_step_id": connection.target_id,
                },
                start_binding=rect_ids.get(connection.source_id),
                end_binding=rect_ids.get(connection.target_id),
            )
            elements.append(arrow)
            self._bind_arrow(element_index, arrow)

        summary = f"{workflow.name} · {format_cost(total_cost(workflow, catalog))}"
        elements.append(
            self._text_element(
                element_id=self._stable_id("summary", workflow.id),
                text=summary,
                origin=self._summary_origin(workflow),
                width=max(200.0, len(summary) * 11.0),
                metadata={**base_metadata, "role": "summary"},
                font_size=24.0,
                stroke_color=COST_COLOR,
            )
        )

        app_state = {
            "viewBackgroundColor": "#ffffff",
            "gridSize": 20,
            "currentItemFontFamily": 1,
            "currentItemFontSize": 20,
            "currentItemStrokeColor": "#1e1e1e",
        }
        return ExcalidrawDocument(elements=elements, app_state=app_state, files={})

    def _build_step(self, view: StepView, elements: List[dict], base_metadata: dict) -> str:
        group_id = self._stable_id("group", view.step_id)
        rect_id = self._stable_id("step", view.step_id)
        step_meta = {**base_metadata, "step_id": view.step_id}
        elements.append(
            self._rectangle_element(
                element_id=rect_id,
                position=view.position,
                size=view.size,
                group_ids=[group_id],
                metadata={**step_meta, "role": "step", "cost": view.cost},
                background_color=STEP_COLOR,
            )
        )
        elements.append(
            self._rectangle_element(
                element_id=self._stable_id("step-header", view.step_id),
                position=view.position,
                size=Size(view.size.width, self.layout.header_height),
                group_ids=[group_id],
                metadata={**step_meta, "role": "step_header"},
                background_color=HEADER_COLOR,
            )
        )
        elements.append(
            self._text_element(
                element_id=self._stable_id("step-title", view.step_id),
                text=view.title,
                origin=Point(view.position.x + 8, view.position.y + 10),
                width=view.size.width - 100,
                metadata={**step_meta, "role": "step_title"},
                group_ids=[group_id],
                text_align="left",
            )
        )
        elements.append(
            self._text_element(
                element_id=self._stable_id("step-cost", view.step_id),
                text=format_cost(view.cost),
                origin=Point(view.position.x + view.size.width - 88, view.position.y + 12),
                width=80,
                metadata={**step_meta, "role": "step_cost"},
                group_ids=[group_id],
                font_size=16.0,
                text_align="right",
            )
        )
        y = view.position.y + self.layout.header_height + 8
        for row in view.tool_rows:
            elements.append(
                self._text_element(
                    element_id=self._stable_id("tool", view.step_id, row.tool_id),
                    text=self._tool_row_label(row),
                    origin=Point(view.position.x + 8, y),
                    width=view.size.width - 16,
                    metadata={**step_meta, "role": "tool", "tool_id": row.tool_id},
                    group_ids=[group_id],
                    font_size=14.0,
                    text_align="left",
                    background_color=TOOL_ROW_COLOR,
                )
            )
            y += 24
        return rect_id

    def _tool_row_label(self, row: ToolRowView) -> str:
        if row.cost is None:
            return row.name
        unit = f" {row.unit}" if row.unit else ""
        return f"{row.name}: {row.quantity:g}{unit} = {format_cost(row.cost)}"

    def _summary_origin(self, workflow: Workflow) -> Point:
        if not workflow.steps:
            return Point(0.0, -80.0)
        left = min(step.position.x for step in workflow.steps)
        top = min(step.position.y for step in workflow.steps)
        return Point(left, top - 80.0)

    def _rectangle_element(
        self,
        element_id: str,
        position: Point,
        size: Size,
        group_ids: List[str],
        metadata: dict,
        background_color: str,
    ) -> dict:
        return {
            **self._base_element(element_id, "rectangle", position, size.width, size.height),
            "strokeColor": "#d1d5db",
            "backgroundColor": background_color,
            "fillStyle": "solid",
            "groupIds": group_ids,
            "roundness": {"type": 3},
            "boundElements": [],
            "customData": {CUSTOM_DATA_KEY: metadata},
        }

    def _text_element(
        self,
        element_id: str,
        text: str,
        origin: Point,
        width: float,
        metadata: dict,
        group_ids: List[str] | None = None,
        font_size: float = 18.0,
        text_align: str = "center",
        stroke_color: str = "#1e1e1e",
        background_color: str = "transparent",
    ) -> dict:
        height = font_size * 1.3
        return {
            **self._base_element(element_id, "text", origin, width, height),
            "strokeColor": stroke_color,
            "backgroundColor": background_color,
            "fillStyle": "solid",
            "groupIds": group_ids or [],
            "roundness": None,
            "boundElements": [],
            "text": text,
            "fontSize": font_size,
            "fontFamily": 1,
            "textAlign": text_align,
            "verticalAlign": "top",
            "baseline": height * 0.8,
            "containerId": None,
            "customData": {CUSTOM_DATA_KEY: metadata},
        }

    def _arrow_element(
        self,
        points: List[Point],
        metadata: dict,
        start_binding: str | None = None,
        end_binding: str | None = None,
    ) -> dict:
        start = points[0]
        relative = [[point.x - start.x, point.y - start.y] for point in points]
        xs = [point[0] for point in relative]
        ys = [point[1] for point in relative]
        arrow_id = self._stable_id(
            "arrow", metadata.get("source_step_id", ""), metadata.get("target_step_id", "")
        )
        return {
            **self._base_element(
                arrow_id, "arrow", start, max(xs) - min(xs), max(ys) - min(ys)
            ),
            "strokeColor": CONNECTION_COLOR,
            "backgroundColor": "transparent",
            "fillStyle": "solid",
            "strokeWidth": 2,
            "groupIds": [],
            "roundness": {"type": 2},
            "boundElements": [],
            "points": relative,
            "startBinding": (
                {"elementId": start_binding, "focus": 0.0, "gap": 4} if start_binding else None
            ),
            "endBinding": (
                {"elementId": end_binding, "focus": 0.0, "gap": 4} if end_binding else None
            ),
            "startArrowhead": None,
            "endArrowhead": "arrow",
            "customData": {CUSTOM_DATA_KEY: metadata},
        }

    def _base_element(
        self, element_id: str, type_name: str, position: Point, width: float, height: float
    ) -> dict[str, Any]:
        return {
            "id": element_id,
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "frameId": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "locked": False,
        }

    def _bind_arrow(self, element_index: dict[str, dict], arrow: dict) -> None:
        for key in ("startBinding", "endBinding"):
            binding = arrow.get(key)
            if not binding:
                continue
            target = element_index.get(binding["elementId"])
            if target is not None:
                target.setdefault("boundElements", []).append({"id": arrow["id"], "type": "arrow"})

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _rand_seed(self) -> int:
        return random.randint(1, 2**31 - 1)
