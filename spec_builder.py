# chart_trellis/spec_builder.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from schemas.chart_spec import ViewSpec
from schemas.field import FieldDescriptor, is_null_field

SELECTION_NAME = "geom"
SCALE_BINDING_NAME = "grid"

Dataset = Union[pd.DataFrame, Sequence[Mapping[str, Any]], None]


def _json_safe(v: Any) -> Any:
    # pandas Timestamp / datetime64
    if isinstance(v, pd.Timestamp):
        # Date-only values: keep them clean
        return v.date().isoformat() if v == v.normalize() and v.tzinfo is None else v.isoformat()

    # pandas missing datetime
    if v is pd.NaT:
        return None

    # numpy scalars
    if isinstance(v, np.bool_):
        return bool(v)
    if isinstance(v, (np.integer,)):
        return int(v)
    if isinstance(v, (np.floating,)):
        x = float(v)
        if np.isnan(x) or np.isinf(x):
            return None
        return x

    # python float NaN/inf
    if isinstance(v, float) and (np.isnan(v) or np.isinf(v)):
        return None

    return v


def dataset_records(data: Dataset) -> List[Dict[str, Any]]:
    """
    Dataset rows as JSON-safe dicts, in their original order.
    """
    if data is None:
        return []

    if isinstance(data, pd.DataFrame):
        rows = data.to_dict(orient="records")
    else:
        rows = [dict(r) for r in data]

    return [{str(k): _json_safe(v) for k, v in row.items()} for row in rows]


def bound_field_ids(
    rows: Iterable[FieldDescriptor],
    columns: Iterable[FieldDescriptor],
    color: Optional[FieldDescriptor] = None,
    opacity: Optional[FieldDescriptor] = None,
    size: Optional[FieldDescriptor] = None,
) -> List[str]:
    ids: List[str] = []
    for f in [*rows, *columns, color, opacity, size]:
        if is_null_field(f) or f.fid in ids:
            continue
        ids.append(f.fid)
    return ids


def build_root_spec(
    data: Dataset,
    field_ids: Sequence[str],
    *,
    interactive_scale: bool = False,
    selection_name: str = SELECTION_NAME,
) -> Dict[str, Any]:
    """
    Specification shared by every view: the embedded dataset plus the point
    selection (and, optionally, the scale-bound pan/zoom interval).
    """
    params: List[Dict[str, Any]] = [
        {
            "name": selection_name,
            "select": {"type": "point", "fields": list(field_ids)},
        }
    ]
    if interactive_scale:
        params.append(
            {"name": SCALE_BINDING_NAME, "select": "interval", "bind": "scales"}
        )

    return {
        "data": {"values": dataset_records(data)},
        "params": params,
    }


def merge_view(root: Mapping[str, Any], view: ViewSpec) -> Dict[str, Any]:
    return {**root, **view.to_dict()}
