from __future__ import annotations

import logging
from pathlib import Path

import orjson
from pydantic import ValidationError

from adapters.filesystem.json_utils import load_json_value, unwrap_bundle
from domain.catalog import ToolCatalog
from domain.ports.repositories import ToolCatalogRepository

logger = logging.getLogger(__name__)


class ToolCatalogLoadError(ValueError):
    """Raised when the stored tool list cannot be read."""


class FileSystemToolCatalogRepository(ToolCatalogRepository):
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> ToolCatalog:
        if not self.path.exists():
            logger.info("No tool file at %s, using an empty catalog", self.path)
            return ToolCatalog()
        try:
            payload = unwrap_bundle(load_json_value(self.path), "tools")
        except orjson.JSONDecodeError as exc:
            msg = f"Tool file {self.path} is not valid JSON: {exc}"
            raise ToolCatalogLoadError(msg) from exc
        if not isinstance(payload, list):
            msg = f"Tool file {self.path} must contain a list of tools"
            raise ToolCatalogLoadError(msg)
        try:
            catalog = ToolCatalog.from_records(
                [record for record in payload if isinstance(record, dict)]
            )
        except ValidationError as exc:
            msg = f"Invalid tool record in {self.path}: {exc}"
            raise ToolCatalogLoadError(msg) from exc
        logger.info("Loaded %d tools from %s", len(catalog), self.path)
        return catalog
