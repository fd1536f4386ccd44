from __future__ import annotations

import orjson

from app.config import AppSettings
from app.wiring import build_canvas, build_workflow_repository
from domain.services.interaction import PointerEvent


def test_canvas_persists_every_commit(app_settings: AppSettings) -> None:
    app_settings.storage.tools_path.write_bytes(
        orjson.dumps([{"id": "notes", "name": "Notebook"}])
    )
    canvas = build_canvas(app_settings)
    assert canvas.workflows == []

    workflow = canvas.create_workflow("Relaunch")
    step_id = canvas.add_step()
    canvas.attach_tool(step_id, "notes")

    (stored,) = build_workflow_repository(app_settings).load()
    assert stored.id == workflow.id
    assert stored.get_step(step_id).position.x == 250
    assert stored.get_step(step_id).tool_config("notes") is not None


def test_custom_listener_replaces_saving(app_settings: AppSettings) -> None:
    seen: list[int] = []
    canvas = build_canvas(app_settings, on_change=lambda workflows: seen.append(len(workflows)))

    canvas.create_workflow("Draft")
    canvas.pointer_down(PointerEvent(10, 10))

    assert seen == [1]
    assert not app_settings.storage.workflows_path.exists()
