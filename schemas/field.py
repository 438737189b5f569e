# chart_trellis/schemas/field.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SemanticType = Literal["quantitative", "nominal", "ordinal", "temporal"]
AnalyticType = Literal["dimension", "measure"]

DEFAULT_AGG = "sum"


class FieldDescriptor(BaseModel):
    """
    One field of the dataset as the chart compiler sees it.
    """

    model_config = ConfigDict(frozen=True)

    fid: str = Field(..., description="Unique key; empty string marks an unused channel")

    name: str = Field(default="", description="Display name")

    semantic_type: SemanticType

    analytic_type: AnalyticType

    agg_name: Optional[str] = Field(
        default=None, description="Aggregation function, measures only"
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_agg(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("analytic_type") == "dimension":
            data["agg_name"] = None
        elif not data.get("agg_name"):
            data["agg_name"] = DEFAULT_AGG
        return data

    def with_aggregation(self, agg_name: str) -> "FieldDescriptor":
        return self.model_copy(update={"agg_name": agg_name})

    @property
    def is_measure(self) -> bool:
        return self.analytic_type == "measure"


NULL_FIELD = FieldDescriptor(
    fid="",
    name="",
    semantic_type="quantitative",
    analytic_type="measure",
    agg_name=DEFAULT_AGG,
)


def is_null_field(field: Optional[FieldDescriptor]) -> bool:
    return field is None or field.fid == ""


def or_null(field: Optional[FieldDescriptor]) -> FieldDescriptor:
    return NULL_FIELD if field is None else field


class FieldCatalog(Mapping[str, FieldDescriptor]):
    """
    Authoritative fid -> FieldDescriptor mapping.

    Validated once when built: ids must be unique and non-empty. Lookups of
    unknown ids are not errors; `display_name` falls back to the id.
    """

    def __init__(self, fields: Iterable[FieldDescriptor] = ()):
        self._fields: Dict[str, FieldDescriptor] = {}
        for f in fields:
            self.register(f)

    def register(self, field: FieldDescriptor) -> None:
        if is_null_field(field):
            raise ValueError("Cannot register a field with an empty fid")
        if field.fid in self._fields:
            raise ValueError(f"Duplicate field id: {field.fid}")
        self._fields[field.fid] = field

    def __getitem__(self, fid: str) -> FieldDescriptor:
        return self._fields[fid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def display_name(self, fid: str) -> str:
        field = self._fields.get(fid)
        return (field.name if field else fid) or fid

    def dimensions(self) -> List[FieldDescriptor]:
        return [f for f in self._fields.values() if f.analytic_type == "dimension"]

    def measures(self) -> List[FieldDescriptor]:
        return [f for f in self._fields.values() if f.analytic_type == "measure"]
