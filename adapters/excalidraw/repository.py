from __future__ import annotations

import logging
from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import write_json_atomic
from domain.models import ExcalidrawDocument
from domain.ports.repositories import ExcalidrawRepository

logger = logging.getLogger(__name__)


class FileSystemExcalidrawRepository(ExcalidrawRepository):
    def save(self, document: ExcalidrawDocument, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, document.to_dict())
        logger.info("Wrote Excalidraw scene %s (%d elements)", path, len(document.elements))

    def scene_path(self, directory: Path, workflow_id: str) -> Path:
        safe_name = "".join(char if char.isalnum() or char in "-_" else "_" for char in workflow_id)
        return directory / f"{safe_name or 'workflow'}.excalidraw"
