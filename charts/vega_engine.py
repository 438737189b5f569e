# chart_trellis/charts/vega_engine.py
from __future__ import annotations

from typing import Any, Mapping

import altair as alt

from charts.engine import RenderEngine

VEGA_LITE_SCHEMA = "https://vega.github.io/schema/vega-lite/v5.json"


class AltairEngine(RenderEngine):
    """
    Vega-Lite engine: the merged specification becomes an altair Chart,
    validated against the Vega-Lite schema unless `validate=False`.
    """

    name = "vega-lite"

    def __init__(self, *, validate: bool = True):
        self.validate = validate

    def build(self, spec: Mapping[str, Any], *, actions: bool = False) -> alt.Chart:
        dct = {"$schema": VEGA_LITE_SCHEMA, **spec}
        if not actions:
            dct["usermeta"] = {"embedOptions": {"actions": False}}
        return alt.Chart.from_dict(dct, validate=self.validate)
