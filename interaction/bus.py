# chart_trellis/interaction/bus.py
"""
Interaction event bus shared by all views of one chart.

Two source channels receive raw events from every rendered view:

- `clicks`: pointer clicks, unfiltered.
- `selections`: changes of the point-selection signal.

`geom_clicks` combines the latest of both and only lets a pair through when
the most recent selection holds at least one key, so clearing a selection
(clicking empty space) is never forwarded.

A bus belongs to one chart instance and is handed to whatever renders into
it; separate charts get separate buses.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Tuple

import reactivex as rx
from reactivex import Observable
from reactivex import operators as ops
from reactivex.abc import DisposableBase
from reactivex.subject import Subject

from schemas.events import ClickEvent, GeomClick, SelectionEvent, has_selection

logger = logging.getLogger(__name__)


class InteractionBus:
    def __init__(self) -> None:
        self._clicks: Subject[ClickEvent] = Subject()
        self._selections: Subject[SelectionEvent] = Subject()
        self._closed = False

        self._geom_clicks: Observable[GeomClick] = rx.combine_latest(
            self._selections, self._clicks
        ).pipe(
            ops.filter(lambda pair: has_selection(pair[0])),
            ops.map(lambda pair: GeomClick(values=pair[0], event=pair[1])),
        )

    # -------------------------
    # Streams
    # -------------------------

    @property
    def clicks(self) -> Observable[ClickEvent]:
        return self._clicks

    @property
    def selections(self) -> Observable[SelectionEvent]:
        return self._selections

    @property
    def geom_clicks(self) -> Observable[GeomClick]:
        return self._geom_clicks

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------
    # Writers (called from view listeners)
    # -------------------------

    def push_click(self, event: ClickEvent) -> None:
        self._clicks.on_next(event)

    def push_selection(self, values: SelectionEvent) -> None:
        self._selections.on_next(values)

    # -------------------------
    # Subscriptions; dispose the returned handle on teardown
    # -------------------------

    def subscribe_geom_click(
        self, handler: Callable[[SelectionEvent, ClickEvent], Any]
    ) -> DisposableBase:
        return self._geom_clicks.subscribe(
            on_next=lambda gc: handler(gc.values, gc.event),
            on_error=self._log_error,
        )

    def subscribe_clicks(self, handler: Callable[[ClickEvent], Any]) -> DisposableBase:
        return self._clicks.subscribe(on_next=handler, on_error=self._log_error)

    def subscribe_selections(
        self, handler: Callable[[SelectionEvent], Any]
    ) -> DisposableBase:
        return self._selections.subscribe(on_next=handler, on_error=self._log_error)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._clicks.on_completed()
        self._selections.on_completed()

    def __enter__(self) -> "InteractionBus":
        return self

    def __exit__(self, *exc_info: Tuple[Any, ...]) -> None:
        self.close()

    @staticmethod
    def _log_error(error: Exception) -> None:
        logger.error("interaction stream failed: %s", error)
