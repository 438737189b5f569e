from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from charts.engine import RenderEngine

_PX_BY_MARK: Dict[str, Callable[..., go.Figure]] = {
    "line": px.line,
    "area": px.area,
    "bar": px.bar,
    "point": px.scatter,
    "circle": px.scatter,
    "square": px.scatter,
    "tick": px.scatter,
}

# Vega-Lite aggregate op -> pandas aggregation
_AGG_FUNCS: Dict[str, str] = {
    "sum": "sum",
    "mean": "mean",
    "average": "mean",
    "median": "median",
    "min": "min",
    "max": "max",
    "count": "count",
    "distinct": "nunique",
    "stdev": "std",
    "variance": "var",
}

# Vega-Lite channel -> plotly express argument
_PX_ARGS: Dict[str, str] = {
    "x": "x",
    "y": "y",
    "color": "color",
    "row": "facet_row",
    "column": "facet_col",
}


def _aggregate(d: pd.DataFrame, encoding: Mapping[str, Mapping[str, Any]]) -> pd.DataFrame:
    agg: Dict[str, str] = {}
    for enc in encoding.values():
        op = enc.get("aggregate")
        if not op:
            continue
        if op not in _AGG_FUNCS:
            raise ValueError(f"Unsupported aggregate: {op}")
        agg[enc["field"]] = _AGG_FUNCS[op]

    if not agg:
        return d

    keys: List[str] = []
    for enc in encoding.values():
        f = enc["field"]
        if f not in agg and f not in keys:
            keys.append(f)

    if keys:
        return d.groupby(keys, as_index=False, dropna=False).agg(agg)
    return d.agg(agg).to_frame().T


def render_plotly(spec: Mapping[str, Any]) -> go.Figure:
    """
    Draw a merged Vega-Lite style specification with plotly express.
    """
    values = spec.get("data", {}).get("values") or []
    encoding = spec.get("encoding") or {}
    mark = spec.get("mark") or {}
    if isinstance(mark, str):
        mark = {"type": mark}

    if not values or not ("x" in encoding or "y" in encoding):
        fig = go.Figure()
        fig.update_layout(title="No data to chart")
        return fig

    mark_type = mark.get("type")
    if mark_type not in _PX_BY_MARK:
        raise ValueError(f"Unsupported mark type: {mark_type}")

    d = pd.DataFrame(values)

    # Ensure datetime for temporal channels
    for enc in encoding.values():
        if enc.get("type") == "temporal" and enc["field"] in d.columns:
            d[enc["field"]] = pd.to_datetime(d[enc["field"]], errors="coerce")

    d = _aggregate(d, encoding)

    kwargs: Dict[str, Any] = {
        arg: encoding[channel]["field"]
        for channel, arg in _PX_ARGS.items()
        if channel in encoding
    }
    if "size" in encoding and _PX_BY_MARK[mark_type] is px.scatter:
        kwargs["size"] = encoding["size"]["field"]

    labels = {enc["field"]: enc["title"] for enc in encoding.values() if enc.get("title")}

    fig = _PX_BY_MARK[mark_type](d, labels=labels, **kwargs)

    unstacked = any(
        channel in encoding and "stack" in encoding[channel] and encoding[channel]["stack"] is None
        for channel in ("x", "y")
    )
    if unstacked and mark_type == "bar":
        fig.update_layout(barmode="group")

    fig.update_traces(opacity=mark.get("opacity", 1.0))
    fig.update_layout(margin=dict(l=20, r=20, t=50, b=20))
    return fig


class PlotlyEngine(RenderEngine):
    name = "plotly"

    def build(self, spec: Mapping[str, Any], *, actions: bool = False) -> go.Figure:
        fig = render_plotly(spec)
        if not actions:
            fig.update_layout(modebar_remove=["toImage"])
        return fig
