from __future__ import annotations

import json
from typing import Any, cast

from lzstring import LZString  # type: ignore[import-untyped]


def encode_scene_payload(scene: dict[str, Any]) -> str:
    payload = json.dumps(scene, ensure_ascii=True, separators=(",", ":"))
    return cast(str, LZString().compressToEncodedURIComponent(payload))


def build_excalidraw_url(base_url: str, scene: dict[str, Any]) -> str:
    """Return a share link that opens ``scene`` in an Excalidraw instance."""
    clean_base = base_url.split("#", 1)[0]
    return f"{clean_base}#json={encode_scene_payload(scene)}"


def fits_url_limit(url: str, max_length: int) -> bool:
    return max_length <= 0 or len(url) <= max_length
