# chart_trellis/compiler/single_view.py
from __future__ import annotations

from typing import List

from compiler.channels import channel_aggregate, channel_encode, channel_stack
from compiler.marks import auto_mark
from schemas.chart_spec import (
    AUTO_GEOM,
    MARK_OPACITY,
    ChannelAssignment,
    ChartOptions,
    MarkSpec,
    ViewSpec,
)
from schemas.field import is_null_field


def resolve_mark(assignment: ChannelAssignment, geom_type: str) -> str:
    if geom_type != AUTO_GEOM:
        return geom_type

    types: List[str] = []
    if not is_null_field(assignment.x):
        types.append(assignment.x.semantic_type)
    if not is_null_field(assignment.y):
        types.append(assignment.y.semantic_type)
    return auto_mark(types)


def build_single_view(
    assignment: ChannelAssignment, options: ChartOptions
) -> ViewSpec:
    """
    Compile one channel assignment into mark + encoding.

    Steps run in a fixed order: mark inference, encoding, aggregation (when
    `default_aggregated`), stack removal (when not `default_stack`). A new
    encoding map is built on every call.
    """
    mark_type = resolve_mark(assignment, options.geom_type)

    encoding = channel_encode(assignment)
    if options.default_aggregated:
        channel_aggregate(encoding, assignment.fields())
    if not options.default_stack:
        channel_stack(encoding)

    return ViewSpec(
        mark=MarkSpec(type=mark_type, opacity=MARK_OPACITY, tooltip=True),
        encoding=encoding,
    )
