from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Engine-specific pointer event, passed through untouched
ClickEvent = Any

# field id -> selected value(s); empty when nothing is selected
SelectionEvent = Mapping[str, Any]


@dataclass(frozen=True)
class GeomClick:
    values: SelectionEvent
    event: ClickEvent


def has_selection(values: Optional[SelectionEvent]) -> bool:
    return isinstance(values, Mapping) and len(values) > 0
