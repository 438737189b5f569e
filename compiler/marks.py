# chart_trellis/compiler/marks.py
from __future__ import annotations

from typing import Dict, Sequence, Tuple

DEFAULT_MARK = "point"

# keyed by the alphabetically sorted semantic-type pair
_MARK_BY_TYPES: Dict[Tuple[str, str], str] = {
    ("nominal", "quantitative"): "bar",
    ("ordinal", "quantitative"): "bar",
    ("quantitative", "quantitative"): "circle",
    ("quantitative", "temporal"): "line",
    ("nominal", "nominal"): "point",
    ("nominal", "ordinal"): "point",
    ("nominal", "temporal"): "point",
    ("ordinal", "ordinal"): "point",
    ("ordinal", "temporal"): "point",
    ("temporal", "temporal"): "point",
}


def auto_mark(semantic_types: Sequence[str]) -> str:
    """
    Pick a default mark for the x/y semantic types (unused axes skipped).
    Fewer than two types fall back to DEFAULT_MARK.
    """
    if len(semantic_types) < 2:
        return DEFAULT_MARK

    a, b = sorted(semantic_types[:2])
    return _MARK_BY_TYPES.get((a, b), DEFAULT_MARK)
