# chart_trellis/compiler/trellis.py
"""
Trellis layout: decide how many small-multiple views a row/column field
assignment needs and which fields each view binds.

The last field of each shelf is its primary positional field. Measures on a
shelf are repeated (one view per measure); a shelf holding only dimensions
contributes its trailing dimension as a single repeat entry. Dimensions in
front of the trailing field become facet candidates, of which only the one
nearest to the trailing field is used as the row/column facet channel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from schemas.chart_spec import ChannelAssignment
from schemas.field import NULL_FIELD, FieldDescriptor, is_null_field, or_null


def _split(fields: Sequence[FieldDescriptor]) -> Tuple[List[FieldDescriptor], List[FieldDescriptor]]:
    dims = [f for f in fields if f.analytic_type == "dimension"]
    meas = [f for f in fields if f.analytic_type == "measure"]
    return dims, meas


def _facet_field(fields: Sequence[FieldDescriptor]) -> FieldDescriptor:
    leading_dims = [f for f in fields[:-1] if f.analytic_type == "dimension"]
    return leading_dims[-1] if leading_dims else NULL_FIELD


@dataclass(frozen=True)
class TrellisPlan:
    row_facet_candidates: Tuple[FieldDescriptor, ...]
    col_facet_candidates: Tuple[FieldDescriptor, ...]
    row_facet_field: FieldDescriptor
    col_facet_field: FieldDescriptor
    row_repeat_fields: Tuple[FieldDescriptor, ...]
    col_repeat_fields: Tuple[FieldDescriptor, ...]
    x_field: FieldDescriptor
    y_field: FieldDescriptor

    @property
    def view_count(self) -> int:
        return max(1, len(self.row_repeat_fields) * len(self.col_repeat_fields))

    @property
    def is_single_view(self) -> bool:
        return self.view_count == 1

    def view_index(self, i: int, j: int) -> int:
        return i * len(self.col_repeat_fields) + j

    def view_assignments(
        self,
        color: Optional[FieldDescriptor] = None,
        opacity: Optional[FieldDescriptor] = None,
        size: Optional[FieldDescriptor] = None,
    ) -> List[ChannelAssignment]:
        """
        Channel assignments for every planned view, row-major.

        The single view binds x/y to the shelves' trailing fields; repeated
        views bind x/y to the (row, column) repeat pair. All views share the
        same facet row/column.
        """
        shared = dict(
            color=or_null(color),
            opacity=or_null(opacity),
            size=or_null(size),
            row=self.row_facet_field,
            column=self.col_facet_field,
        )

        if self.is_single_view:
            return [ChannelAssignment(x=self.x_field, y=self.y_field, **shared)]

        return [
            ChannelAssignment(x=col_field, y=row_field, **shared)
            for row_field in self.row_repeat_fields
            for col_field in self.col_repeat_fields
        ]


def plan_trellis(
    rows: Sequence[FieldDescriptor], columns: Sequence[FieldDescriptor]
) -> TrellisPlan:
    # a null placeholder on a shelf is not a field
    rows = [f for f in rows if not is_null_field(f)]
    columns = [f for f in columns if not is_null_field(f)]

    row_dims, row_meas = _split(rows)
    col_dims, col_meas = _split(columns)

    return TrellisPlan(
        row_facet_candidates=tuple(row_dims[:-1]),
        col_facet_candidates=tuple(col_dims[:-1]),
        row_facet_field=_facet_field(rows),
        col_facet_field=_facet_field(columns),
        row_repeat_fields=tuple(row_meas or row_dims[-1:]),
        col_repeat_fields=tuple(col_meas or col_dims[-1:]),
        x_field=columns[-1] if columns else NULL_FIELD,
        y_field=rows[-1] if rows else NULL_FIELD,
    )
