from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from domain.catalog import ToolCatalog
from domain.models import Size, Workflow
from domain.services import interaction
from domain.services import workflow_editing as editing
from domain.services.connection_paths import HIT_TOLERANCE
from domain.services.interaction import CanvasState, PointerEvent, WheelEvent
from domain.services.step_layout import StepLayoutConfig
from domain.services.step_views import CanvasScene, build_scene
from domain.services.viewport import ZOOM_STEP, Viewport

logger = logging.getLogger(__name__)

ChangeListener = Callable[[list[Workflow]], None]


class WorkflowCanvas:
    """Editing session over a collection of workflows.

    The canvas owns the open workflow while it is being edited and hands the
    complete updated collection to ``on_change`` after every committed
    mutation. Ignored interactions never trigger the callback.
    """

    def __init__(
        self,
        workflows: Sequence[Workflow],
        catalog: ToolCatalog,
        on_change: ChangeListener,
        *,
        layout: StepLayoutConfig | None = None,
        hit_tolerance: float = HIT_TOLERANCE,
        default_view_size: Size | None = None,
        id_factory: editing.IdFactory = editing.new_id,
    ) -> None:
        self.catalog = catalog
        self.layout = layout or StepLayoutConfig()
        self.hit_tolerance = hit_tolerance
        self.default_view_size = default_view_size
        self._workflows: list[Workflow] = list(workflows)
        self._on_change = on_change
        self._id_factory = id_factory
        self._active_id: str | None = None
        self._state = CanvasState()
        self._open_menu_step_id: str | None = None

    @property
    def workflows(self) -> list[Workflow]:
        return list(self._workflows)

    @property
    def state(self) -> CanvasState:
        return self._state

    @property
    def viewport(self) -> Viewport:
        return self._state.viewport

    @property
    def open_menu_step_id(self) -> str | None:
        return self._open_menu_step_id

    @property
    def active_workflow(self) -> Workflow | None:
        if self._active_id is None:
            return None
        for workflow in self._workflows:
            if workflow.id == self._active_id:
                return workflow
        return None

    # Workflow collection

    def open(self, workflow_id: str) -> Workflow:
        for workflow in self._workflows:
            if workflow.id == workflow_id:
                self._active_id = workflow_id
                self.reset_view()
                self._open_menu_step_id = None
                return workflow
        msg = f"Unknown workflow: {workflow_id}"
        raise KeyError(msg)

    def close(self) -> None:
        self._active_id = None
        self._state = CanvasState(viewport=self._state.viewport)
        self._open_menu_step_id = None

    def create_workflow(self, name: str) -> Workflow:
        workflow = editing.create_workflow(name, id_factory=self._id_factory)
        self._commit_collection([*self._workflows, workflow])
        self.open(workflow.id)
        return workflow

    def delete_workflow(self, workflow_id: str) -> None:
        remaining = editing.remove_workflow(self._workflows, workflow_id)
        if len(remaining) == len(self._workflows):
            return
        if self._active_id == workflow_id:
            self.close()
        self._commit_collection(remaining)

    # View

    def zoom_in(self) -> None:
        self._set_viewport(self.viewport.zoomed_by(ZOOM_STEP))

    def zoom_out(self) -> None:
        self._set_viewport(self.viewport.zoomed_by(-ZOOM_STEP))

    def reset_view(self) -> None:
        self._state = CanvasState(viewport=Viewport.reset())

    def scene(self) -> CanvasScene | None:
        workflow = self.active_workflow
        if workflow is None:
            return None
        return build_scene(
            workflow,
            self.catalog,
            self._state,
            self.layout,
            open_menu_step_id=self._open_menu_step_id,
        )

    # Pointer input

    def pointer_down(self, event: PointerEvent) -> None:
        workflow = self.active_workflow
        if workflow is None:
            return
        if not event.over_overlay:
            self._open_menu_step_id = None
        result = interaction.pointer_down(
            self._state, workflow, event, self.layout, self.catalog, self.hit_tolerance
        )
        self._state = result.state
        self._commit(workflow, result.workflow)

    def pointer_move(self, event: PointerEvent) -> None:
        workflow = self.active_workflow
        if workflow is None:
            return
        result = interaction.pointer_move(self._state, workflow, event)
        self._state = result.state
        self._commit(workflow, result.workflow)

    def pointer_up(self, event: PointerEvent) -> None:
        workflow = self.active_workflow
        if workflow is None:
            return
        result = interaction.pointer_up(self._state, workflow, event, self.layout)
        self._state = result.state
        self._commit(workflow, result.workflow)

    def pointer_leave(self) -> None:
        workflow = self.active_workflow
        if workflow is None:
            return
        self._state = interaction.pointer_leave(self._state, workflow).state

    def wheel(self, event: WheelEvent) -> bool:
        result = interaction.wheel(self._state, event)
        self._state = result.state
        return result.consumed

    # Step editing

    def add_step(self, view_size: Size | None = None) -> str | None:
        workflow = self.active_workflow
        if workflow is None:
            return None
        step_id = self._id_factory()
        center = self.viewport.view_center(view_size or self.default_view_size)
        updated = editing.add_step(workflow, center, step_id=step_id)
        if updated is workflow:
            return None
        self._commit(workflow, updated)
        return step_id

    def delete_step(self, step_id: str) -> None:
        self._apply(lambda workflow: editing.delete_step(workflow, step_id))

    def rename_step(self, step_id: str, title: str) -> None:
        self._apply(lambda workflow: editing.rename_step(workflow, step_id, title))

    def toggle_tool_menu(self, step_id: str) -> None:
        self._open_menu_step_id = None if self._open_menu_step_id == step_id else step_id

    def attach_tool(self, step_id: str, tool_id: str) -> None:
        self._apply(lambda workflow: editing.attach_tool(workflow, step_id, tool_id, self.catalog))
        self._open_menu_step_id = None

    def drop_tool(self, step_id: str, tool_id: str) -> None:
        self.attach_tool(step_id, tool_id)

    def detach_tool(self, step_id: str, tool_id: str) -> None:
        self._apply(lambda workflow: editing.detach_tool(workflow, step_id, tool_id))

    def select_pricing_model(self, step_id: str, tool_id: str, pricing_model_id: str) -> None:
        self._apply(
            lambda workflow: editing.configure_tool(
                workflow, step_id, tool_id, self.catalog, pricing_model_id=pricing_model_id
            )
        )

    def set_quantity(self, step_id: str, tool_id: str, quantity: float | str) -> None:
        self._apply(
            lambda workflow: editing.configure_tool(
                workflow, step_id, tool_id, self.catalog, quantity=quantity
            )
        )

    def delete_connection(self, source_id: str, target_id: str) -> None:
        self._apply(lambda workflow: editing.disconnect(workflow, source_id, target_id))

    # Internals

    def _set_viewport(self, viewport: Viewport) -> None:
        self._state = CanvasState(
            viewport=viewport, mode=self._state.mode, last_pointer=self._state.last_pointer
        )

    def _apply(self, operation: Callable[[Workflow], Workflow]) -> None:
        workflow = self.active_workflow
        if workflow is None:
            return
        self._commit(workflow, operation(workflow))

    def _commit(self, before: Workflow, after: Workflow) -> None:
        if after is before:
            return
        self._commit_collection(editing.replace_workflow(self._workflows, after))

    def _commit_collection(self, workflows: list[Workflow]) -> None:
        self._workflows = workflows
        logger.debug("Workflow collection changed (%d workflows)", len(workflows))
        self._on_change(list(workflows))
