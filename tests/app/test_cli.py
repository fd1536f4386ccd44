from __future__ import annotations

from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from app.cli import app

runner = CliRunner()


def _text(output: str) -> str:
    return " ".join(output.split())


TOOLS = [
    {
        "id": "scanner",
        "name": "Page Scanner",
        "pricingModels": [{"id": "scan", "actionName": "Scan", "unit": "page", "pricePerUnit": 2.5}],
    }
]

WORKFLOWS = [
    {
        "id": "w1",
        "name": "Archive",
        "status": "planning",
        "steps": [
            {
                "id": "s1",
                "title": "Digitise",
                "tools": [{"toolId": "scanner", "quantity": 4, "pricingModelId": "scan"}],
                "position": {"x": 0, "y": 0},
                "connections": ["s2"],
            },
            {"id": "s2", "title": "File", "position": {"x": 400, "y": 0}},
        ],
    }
]


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "toolverse.yaml"
    path.write_text(
        "storage:\n"
        f"  workflows_path: {tmp_path / 'workflows.json'}\n"
        f"  tools_path: {tmp_path / 'tools.json'}\n"
        "export:\n"
        "  excalidraw_base_url: http://testserver/excalidraw\n"
        f"  excalidraw_out_dir: {tmp_path / 'scenes'}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def populated(tmp_path: Path, config_path: Path) -> Path:
    (tmp_path / "tools.json").write_bytes(orjson.dumps(TOOLS))
    (tmp_path / "workflows.json").write_bytes(orjson.dumps(WORKFLOWS))
    return config_path


def test_list_without_data(config_path: Path) -> None:
    result = runner.invoke(app, ["list", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "No workflows found" in _text(result.stdout)


def test_list_shows_workflows_with_cost(populated: Path) -> None:
    result = runner.invoke(app, ["list", "--config", str(populated)])

    assert result.exit_code == 0
    assert "Archive" in result.stdout
    assert "€10.00" in result.stdout


def test_cost_breakdown(populated: Path) -> None:
    result = runner.invoke(app, ["cost", "w1", "--config", str(populated)])

    assert result.exit_code == 0
    assert "Digitise" in result.stdout
    assert "Total" in result.stdout
    assert "€10.00" in result.stdout


def test_unknown_workflow_fails(populated: Path) -> None:
    result = runner.invoke(app, ["cost", "nope", "--config", str(populated)])

    assert result.exit_code == 1
    assert "Workflow not found" in _text(result.stdout)


def test_missing_config_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["list", "--config", str(tmp_path / "absent.yaml")])

    assert result.exit_code == 1


def test_migrate_rewrites_legacy_file(tmp_path: Path, config_path: Path) -> None:
    workflows_path = tmp_path / "workflows.json"
    workflows_path.write_bytes(
        orjson.dumps([{"id": "w", "name": "Old", "steps": [{"id": "s", "toolIds": ["scanner"]}]}])
    )

    result = runner.invoke(app, ["migrate", "--config", str(config_path)])

    assert result.exit_code == 0
    (stored,) = orjson.loads(workflows_path.read_bytes())
    step = stored["steps"][0]
    assert "toolIds" not in step
    assert step["tools"] == [{"toolId": "scanner", "quantity": 1.0}]
    assert step["position"] == {"x": 100.0, "y": 100.0}
    assert stored["status"] == "planning"


def test_validate_reports_problems(tmp_path: Path) -> None:
    good = tmp_path / "good.json"
    good.write_bytes(orjson.dumps(WORKFLOWS))
    bad = tmp_path / "bad.json"
    bad.write_bytes(orjson.dumps([{"id": "w", "steps": [{"id": "s"}, {"id": "s"}]}]))

    ok = runner.invoke(app, ["validate", str(good)])
    failed = runner.invoke(app, ["validate", str(bad)])

    assert ok.exit_code == 0
    assert "(1 workflows)" in _text(ok.stdout)
    assert failed.exit_code == 1
    assert "Validation failed" in failed.stdout


def test_export_writes_scene_and_prints_url(tmp_path: Path, populated: Path) -> None:
    result = runner.invoke(app, ["export", "w1", "--config", str(populated)])

    assert result.exit_code == 0
    scene_path = tmp_path / "scenes" / "w1.excalidraw"
    assert scene_path.exists()
    assert orjson.loads(scene_path.read_bytes())["type"] == "excalidraw"
    assert "http://testserver/excalidraw#json=" in result.stdout


def test_export_warns_when_url_is_too_long(
    tmp_path: Path, populated: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TOOLVERSE_EXPORT__EXCALIDRAW_MAX_URL_LENGTH", "20")
    out_dir = tmp_path / "elsewhere"

    result = runner.invoke(
        app, ["export", "w1", "--output-dir", str(out_dir), "--config", str(populated)]
    )

    assert result.exit_code == 0
    assert (out_dir / "w1.excalidraw").exists()
    assert "#json=" not in result.stdout
    assert "longer than the configured limit" in _text(result.stdout)
