# chart_trellis/orchestrator.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from reactivex.abc import DisposableBase

from charts.engine import RenderedView, RenderEngine, RenderTarget
from compiler.single_view import build_single_view
from compiler.trellis import TrellisPlan, plan_trellis
from interaction.bus import InteractionBus
from schemas.chart_spec import ChartOptions
from schemas.field import FieldDescriptor
from spec_builder import (
    SELECTION_NAME,
    Dataset,
    bound_field_ids,
    build_root_spec,
    merge_view,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderInputs:
    """
    Everything a render pass depends on.

    The dataset is compared by identity, the rest by value.
    """

    data: Dataset = None
    rows: Tuple[FieldDescriptor, ...] = ()
    columns: Tuple[FieldDescriptor, ...] = ()
    color: Optional[FieldDescriptor] = None
    opacity: Optional[FieldDescriptor] = None
    size: Optional[FieldDescriptor] = None
    options: ChartOptions = field(default_factory=ChartOptions)

    def same_as(self, other: Optional["RenderInputs"]) -> bool:
        if other is None:
            return False
        return self.data is other.data and (
            self.rows,
            self.columns,
            self.color,
            self.opacity,
            self.size,
            self.options,
        ) == (
            other.rows,
            other.columns,
            other.color,
            other.opacity,
            other.size,
            other.options,
        )

    def plan(self) -> TrellisPlan:
        return plan_trellis(self.rows, self.columns)


class MultiViewOrchestrator:
    """
    Keeps one RenderTarget per planned view and re-renders all of them when
    the inputs change.

    Renders are started, not awaited: each completion attaches the view's
    click and selection listeners to the bus. Failures while rendering or
    attaching are logged and do not affect other views.
    """

    def __init__(
        self,
        *,
        engine: RenderEngine,
        bus: InteractionBus,
        selection_name: str = SELECTION_NAME,
        coalesce_delay: float = 0.0,
        guard_stale_renders: bool = True,
    ):
        self.engine = engine
        self.bus = bus
        self.selection_name = selection_name
        self.coalesce_delay = coalesce_delay
        self.guard_stale_renders = guard_stale_renders

        self.targets: List[RenderTarget] = []
        self._inputs: Optional[RenderInputs] = None
        self._generation = 0
        self._pending: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._subscriptions: List[DisposableBase] = []

    # -------------------------
    # Public API
    # -------------------------

    @property
    def inputs(self) -> Optional[RenderInputs]:
        return self._inputs

    @property
    def generation(self) -> int:
        return self._generation

    def update(
        self,
        *,
        data: Dataset = None,
        rows: Sequence[FieldDescriptor] = (),
        columns: Sequence[FieldDescriptor] = (),
        color: Optional[FieldDescriptor] = None,
        opacity: Optional[FieldDescriptor] = None,
        size: Optional[FieldDescriptor] = None,
        options: Optional[ChartOptions] = None,
    ) -> bool:
        """
        Record new inputs and schedule a render pass if anything changed.

        Must be called from a running event loop. Returns False when the
        inputs equal the previous ones (no pass is scheduled).
        """
        inputs = RenderInputs(
            data=data,
            rows=tuple(rows),
            columns=tuple(columns),
            color=color,
            opacity=opacity,
            size=size,
            options=options or ChartOptions(),
        )
        if inputs.same_as(self._inputs):
            return False

        # schedule first: without a running loop nothing is recorded
        self._schedule()
        self._inputs = inputs
        return True

    def compile(self, inputs: RenderInputs) -> List[Dict[str, Any]]:
        """
        Merged root + view specification for every planned view, row-major.
        """
        plan = inputs.plan()
        root = build_root_spec(
            inputs.data,
            bound_field_ids(
                inputs.rows, inputs.columns, inputs.color, inputs.opacity, inputs.size
            ),
            interactive_scale=inputs.options.interactive_scale,
            selection_name=self.selection_name,
        )
        return [
            merge_view(root, build_single_view(assignment, inputs.options))
            for assignment in plan.view_assignments(
                inputs.color, inputs.opacity, inputs.size
            )
        ]

    def recompute(self) -> List[asyncio.Task]:
        """
        Run one build-and-render cycle for the current inputs.
        """
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

        if self._inputs is None:
            return []

        inputs = self._inputs
        self._sync_targets(inputs.plan().view_count)
        specs = self.compile(inputs)

        self._generation += 1
        generation = self._generation
        logger.debug("render pass %d: %d view(s)", generation, len(specs))

        started: List[asyncio.Task] = []
        for index, (target, spec) in enumerate(zip(self.targets, specs)):
            task = asyncio.ensure_future(
                self.engine.render(
                    target,
                    spec,
                    mode="vega-lite",
                    actions=inputs.options.show_actions,
                )
            )
            self._tasks.add(task)
            task.add_done_callback(partial(self._on_rendered, generation, index))
            started.append(task)
        return started

    async def wait_idle(self) -> None:
        """
        Wait until the scheduled pass has run and its renders finished.
        """
        while self._pending is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self.coalesce_delay or 0)

    def on_geom_click(self, handler: Callable[[Any, Any], Any]) -> DisposableBase:
        subscription = self.bus.subscribe_geom_click(handler)
        self._subscriptions.append(subscription)
        return subscription

    def close(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        for task in list(self._tasks):
            task.cancel()
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        self.targets = []

    # -------------------------
    # Internal helpers
    # -------------------------

    def _schedule(self) -> None:
        # one pending pass absorbs every update made before it runs
        if self._pending is not None:
            return
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.coalesce_delay, self._run_pending)

    def _run_pending(self) -> None:
        self._pending = None
        self.recompute()

    def _sync_targets(self, count: int) -> None:
        if count == len(self.targets):
            return
        self.targets = [
            self.targets[i] if i < len(self.targets) else RenderTarget(index=i)
            for i in range(count)
        ]

    def _on_rendered(self, generation: int, index: int, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logger.error("render failed for view %d", index, exc_info=error)
            return

        if self.guard_stale_renders and generation != self._generation:
            logger.debug("dropping stale render %d for view %d", generation, index)
            return

        view = task.result()
        view.target.view = view
        view.target.renders += 1
        self._attach_listeners(view, index)

    def _attach_listeners(self, view: RenderedView, index: int) -> None:
        try:
            view.add_event_listener("click", self.bus.push_click)
            view.add_signal_listener(
                self.selection_name, lambda _name, values: self.bus.push_selection(values)
            )
        except Exception:
            logger.warning("could not attach listeners to view %d", index, exc_info=True)
