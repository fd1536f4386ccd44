from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from domain.models import PricingModel, Tool, ToolConfig


@dataclass(frozen=True)
class PaletteEntry:
    tool_id: str
    name: str
    cheapest_price: float | None
    unit: str | None

    def price_hint(self) -> str:
        if self.cheapest_price is None:
            return ""
        unit = f" / {self.unit}" if self.unit else ""
        return f"ab {_format_price(self.cheapest_price)}€{unit}"


class ToolCatalog:
    """Read-only collection of tools offered to the canvas."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._index: dict[str, Tool] = {}
        for tool in self._tools:
            self._index.setdefault(tool.id, tool)

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> ToolCatalog:
        return cls(Tool.model_validate(dict(record)) for record in records)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._index

    def get(self, tool_id: str) -> Tool | None:
        return self._index.get(tool_id)

    def resolve_pricing_model(self, config: ToolConfig) -> PricingModel | None:
        tool = self._index.get(config.tool_id)
        if tool is None:
            return None
        return tool.pricing_model(config.pricing_model_id)

    def palette_entries(self) -> list[PaletteEntry]:
        entries: list[PaletteEntry] = []
        for tool in self._tools:
            if tool.pricing_models:
                cheapest = min(model.price_per_unit for model in tool.pricing_models)
                unit = tool.pricing_models[0].unit or None
            else:
                cheapest, unit = None, None
            entries.append(
                PaletteEntry(tool_id=tool.id, name=tool.name, cheapest_price=cheapest, unit=unit)
            )
        return entries


def _format_price(value: float) -> str:
    return f"{value:g}"
