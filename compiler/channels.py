# chart_trellis/compiler/channels.py
from __future__ import annotations

from typing import Iterable, Mapping, Union

from schemas.chart_spec import ChannelAssignment, EncodingMap
from schemas.field import FieldDescriptor, is_null_field

FieldLookup = Union[Mapping[str, FieldDescriptor], Iterable[FieldDescriptor]]


def channel_encode(assignment: ChannelAssignment) -> EncodingMap:
    """
    One encoding entry per bound role. Roles holding the null field are left
    out entirely rather than emitted as empty entries.
    """
    encoding: EncodingMap = {}
    for channel, field in assignment.channels():
        if is_null_field(field):
            continue
        encoding[channel] = {
            "field": field.fid,
            "title": field.name,
            "type": field.semantic_type,
        }
    return encoding


def _as_lookup(fields: FieldLookup) -> Mapping[str, FieldDescriptor]:
    if isinstance(fields, Mapping):
        return fields
    return {f.fid: f for f in fields if not is_null_field(f)}


def channel_aggregate(encoding: EncodingMap, fields: FieldLookup) -> None:
    """
    Attach `aggregate` and an "agg(name)" title to every entry bound to a
    measure. Ids missing from `fields` are left as they are.
    """
    lookup = _as_lookup(fields)
    for entry in encoding.values():
        target = lookup.get(entry.get("field", ""))
        if target is None or target.analytic_type != "measure":
            continue
        entry["title"] = f"{target.agg_name}({target.name})"
        entry["aggregate"] = target.agg_name


def channel_stack(encoding: EncodingMap) -> None:
    # Vega-Lite stacks quantitative x/y implicitly; null turns that off
    for channel in ("x", "y"):
        entry = encoding.get(channel)
        if entry is not None and entry.get("type") == "quantitative":
            entry["stack"] = None
