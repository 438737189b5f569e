"""Shared fixtures for the chart compiler and orchestrator tests."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, List, Mapping, Optional

import pytest

from charts.engine import RenderEngine, RenderedView, RenderTarget
from interaction.bus import InteractionBus
from schemas.field import FieldCatalog, FieldDescriptor


class RecordingEngine(RenderEngine):
    """Engine double: records every spec and optionally delays or fails."""

    name = "recording"

    def __init__(
        self,
        *,
        delay: float = 0.0,
        fail_on: Optional[set] = None,
        delay_for: Optional[Callable[[Mapping[str, Any]], float]] = None,
    ):
        self.delay = delay
        self.fail_on = fail_on or set()
        self.delay_for = delay_for
        self.rendered: List[Mapping[str, Any]] = []
        self.build_threads: List[int] = []
        self.views: List[RenderedView] = []

    async def render(self, target: RenderTarget, spec, *, mode="vega-lite", actions=False):
        delay = self.delay_for(spec) if self.delay_for else self.delay
        if delay:
            await asyncio.sleep(delay)
        if target.index in self.fail_on:
            raise RuntimeError(f"boom on {target.index}")
        view = await super().render(target, spec, mode=mode, actions=actions)
        self.views.append(view)
        return view

    def build(self, spec, *, actions=False):
        self.build_threads.append(threading.get_ident())
        self.rendered.append(spec)
        return spec


@pytest.fixture
def region() -> FieldDescriptor:
    return FieldDescriptor(
        fid="Region", name="Region", semantic_type="nominal", analytic_type="dimension"
    )


@pytest.fixture
def category() -> FieldDescriptor:
    return FieldDescriptor(
        fid="Category", name="Category", semantic_type="nominal", analytic_type="dimension"
    )


@pytest.fixture
def date() -> FieldDescriptor:
    return FieldDescriptor(
        fid="Date", name="Date", semantic_type="temporal", analytic_type="dimension"
    )


@pytest.fixture
def sales() -> FieldDescriptor:
    return FieldDescriptor(
        fid="Sales",
        name="Sales",
        semantic_type="quantitative",
        analytic_type="measure",
        agg_name="sum",
    )


@pytest.fixture
def profit() -> FieldDescriptor:
    return FieldDescriptor(
        fid="Profit",
        name="Profit",
        semantic_type="quantitative",
        analytic_type="measure",
        agg_name="mean",
    )


@pytest.fixture
def catalog(region, category, date, sales, profit) -> FieldCatalog:
    return FieldCatalog([region, category, date, sales, profit])


@pytest.fixture
def rows_data() -> List[dict]:
    return [
        {"Region": "East", "Category": "A", "Date": "2024-01-01", "Sales": 10, "Profit": 2.0},
        {"Region": "East", "Category": "B", "Date": "2024-01-02", "Sales": 5, "Profit": 1.5},
        {"Region": "West", "Category": "A", "Date": "2024-01-01", "Sales": 7, "Profit": -1.0},
    ]


@pytest.fixture
def bus():
    with InteractionBus() as b:
        yield b


@pytest.fixture
def recording_engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def engine_factory():
    return RecordingEngine
