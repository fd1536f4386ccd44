"""Pointer interaction state machine of the workflow canvas.

Transitions are pure: each handler receives the current ``CanvasState`` and
``Workflow`` and returns replacements for both. Input arrives as toolkit
neutral ``PointerEvent``/``WheelEvent`` values in screen coordinates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import FrozenSet, Union

from domain.catalog import ToolCatalog
from domain.models import Point, Workflow
from domain.services.connection_paths import HIT_TOLERANCE, find_connection_at
from domain.services.step_layout import (
    HeaderHit,
    OutputPortHit,
    StepLayoutConfig,
    hit_test,
    input_port_at,
)
from domain.services.viewport import Viewport
from domain.services.workflow_editing import connect, disconnect, translate_step

logger = logging.getLogger(__name__)


class PointerButton(IntEnum):
    PRIMARY = 0
    MIDDLE = 1
    SECONDARY = 2


class Modifier(str, Enum):
    SHIFT = "shift"
    CTRL = "ctrl"
    META = "meta"
    ALT = "alt"


PAN_MODIFIERS: FrozenSet[Modifier] = frozenset({Modifier.SHIFT})
ZOOM_MODIFIERS: FrozenSet[Modifier] = frozenset({Modifier.CTRL, Modifier.META})


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float
    button: PointerButton = PointerButton.PRIMARY
    modifiers: FrozenSet[Modifier] = frozenset()
    over_overlay: bool = False

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class WheelEvent:
    delta_y: float
    modifiers: FrozenSet[Modifier] = frozenset()


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    pass


@dataclass(frozen=True)
class DraggingStep:
    step_id: str


@dataclass(frozen=True)
class Connecting:
    source_id: str
    cursor: Point


InteractionMode = Union[Idle, Panning, DraggingStep, Connecting]
IDLE = Idle()


@dataclass(frozen=True)
class CanvasState:
    viewport: Viewport = field(default_factory=Viewport)
    mode: InteractionMode = IDLE
    last_pointer: Point | None = None


@dataclass(frozen=True)
class InteractionResult:
    state: CanvasState
    workflow: Workflow


@dataclass(frozen=True)
class WheelResult:
    state: CanvasState
    consumed: bool


def is_pan_gesture(event: PointerEvent) -> bool:
    if event.button == PointerButton.MIDDLE:
        return True
    return event.button == PointerButton.PRIMARY and bool(event.modifiers & PAN_MODIFIERS)


def pointer_down(
    state: CanvasState,
    workflow: Workflow,
    event: PointerEvent,
    config: StepLayoutConfig,
    catalog: ToolCatalog | None = None,
    tolerance: float = HIT_TOLERANCE,
) -> InteractionResult:
    if event.over_overlay:
        return InteractionResult(state, workflow)

    screen = event.position
    world = state.viewport.screen_to_world(screen)
    hit = hit_test(workflow, world, config, catalog)

    if hit is not None:
        mode: InteractionMode = IDLE
        if event.button == PointerButton.PRIMARY:
            if isinstance(hit, OutputPortHit):
                mode = Connecting(source_id=hit.step_id, cursor=world)
            elif isinstance(hit, HeaderHit):
                mode = DraggingStep(step_id=hit.step_id)
        return InteractionResult(replace(state, mode=mode, last_pointer=screen), workflow)

    if is_pan_gesture(event):
        return InteractionResult(replace(state, mode=Panning(), last_pointer=screen), workflow)

    if event.button == PointerButton.PRIMARY:
        # The click band is measured in screen pixels, whatever the zoom.
        edge = find_connection_at(workflow, world, config, tolerance / state.viewport.scale)
        if edge is not None:
            workflow = disconnect(workflow, *edge)
    return InteractionResult(replace(state, mode=IDLE, last_pointer=screen), workflow)


def pointer_move(
    state: CanvasState,
    workflow: Workflow,
    event: PointerEvent,
) -> InteractionResult:
    screen = event.position
    previous = state.last_pointer or screen
    dx = screen.x - previous.x
    dy = screen.y - previous.y
    mode = state.mode
    viewport = state.viewport

    if isinstance(mode, Panning):
        viewport = viewport.panned_by(dx, dy)
    elif isinstance(mode, DraggingStep):
        delta = viewport.screen_delta_to_world(dx, dy)
        if delta.x or delta.y:
            workflow = translate_step(workflow, mode.step_id, delta.x, delta.y)
    elif isinstance(mode, Connecting):
        mode = replace(mode, cursor=viewport.screen_to_world(screen))

    return InteractionResult(
        CanvasState(viewport=viewport, mode=mode, last_pointer=screen), workflow
    )


def pointer_up(
    state: CanvasState,
    workflow: Workflow,
    event: PointerEvent,
    config: StepLayoutConfig,
) -> InteractionResult:
    mode = state.mode
    if isinstance(mode, Connecting):
        world = state.viewport.screen_to_world(event.position)
        target_id = input_port_at(workflow, world, config)
        if target_id is None:
            logger.debug("Discarding connection from %s without target", mode.source_id)
        else:
            workflow = connect(workflow, mode.source_id, target_id)
    return InteractionResult(
        replace(state, mode=IDLE, last_pointer=event.position), workflow
    )


def pointer_leave(state: CanvasState, workflow: Workflow) -> InteractionResult:
    return InteractionResult(replace(state, mode=IDLE), workflow)


def wheel(state: CanvasState, event: WheelEvent) -> WheelResult:
    if not event.modifiers & ZOOM_MODIFIERS:
        return WheelResult(state, consumed=False)
    viewport = state.viewport.wheel_zoom(event.delta_y)
    return WheelResult(replace(state, viewport=viewport), consumed=True)
