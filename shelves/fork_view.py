# chart_trellis/shelves/fork_view.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

from schemas.field import DEFAULT_AGG, FieldCatalog, FieldDescriptor

logger = logging.getLogger(__name__)

Role = Literal["dimensions", "measures"]


def _fallback_field(fid: str, role: Role) -> FieldDescriptor:
    if role == "dimensions":
        return FieldDescriptor(
            fid=fid, name=fid, semantic_type="nominal", analytic_type="dimension"
        )
    return FieldDescriptor(
        fid=fid, name=fid, semantic_type="quantitative", analytic_type="measure"
    )


@dataclass
class ForkView:
    """
    Field ids the user placed on the chart, plus one aggregation op per
    measure (same index as `measures`).
    """

    dimensions: List[str] = field(default_factory=list)
    measures: List[str] = field(default_factory=list)
    ops: List[str] = field(default_factory=list)

    def add_field(
        self, role: Role, fid: str, catalog: Optional[FieldCatalog] = None
    ) -> None:
        ids = self._ids(role)
        if fid in ids:
            return
        if catalog is not None and fid not in catalog:
            logger.warning("field %s is not in the catalog; displaying its id", fid)

        ids.append(fid)
        if role == "measures":
            known = catalog.get(fid) if catalog is not None else None
            self.ops.append((known.agg_name if known else None) or DEFAULT_AGG)

    def remove_field(self, role: Role, fid: str) -> None:
        ids = self._ids(role)
        if fid not in ids:
            return
        index = ids.index(fid)
        del ids[index]
        if role == "measures":
            del self.ops[index]

    def set_op(self, fid: str, op: str) -> None:
        self.ops[self.measures.index(fid)] = op

    def labels(self, catalog: FieldCatalog, aggregated: bool) -> Tuple[List[str], List[str]]:
        """
        Display texts for (dimensions, measures); measures read "name(op)"
        when aggregation is on.
        """
        dims = [catalog.display_name(fid) for fid in self.dimensions]
        meas = [
            f"{catalog.display_name(fid)}({op})" if aggregated else catalog.display_name(fid)
            for fid, op in zip(self.measures, self.ops)
        ]
        return dims, meas

    def shelves(
        self, catalog: FieldCatalog
    ) -> Tuple[List[FieldDescriptor], List[FieldDescriptor]]:
        """
        (rows, columns): measures go to rows with their current op, dimensions
        to columns.
        """
        rows = [
            self._resolve(catalog, fid, "measures").with_aggregation(op)
            for fid, op in zip(self.measures, self.ops)
        ]
        columns = [self._resolve(catalog, fid, "dimensions") for fid in self.dimensions]
        return rows, columns

    def _ids(self, role: Role) -> List[str]:
        if role == "dimensions":
            return self.dimensions
        if role == "measures":
            return self.measures
        raise ValueError(f"Unknown role: {role}")

    @staticmethod
    def _resolve(catalog: FieldCatalog, fid: str, role: Role) -> FieldDescriptor:
        known = catalog.get(fid)
        return known if known is not None else _fallback_field(fid, role)
