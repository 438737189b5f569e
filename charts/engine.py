# chart_trellis/charts/engine.py
"""
Boundary to the rendering engines.

An engine turns a merged (root + view) specification into a rendered
artifact for one RenderTarget and hands back a RenderedView, the object
listeners are attached to. Front ends that own the actual canvas deliver
their pointer events and signal changes through `dispatch_event` and
`dispatch_signal`.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]
SignalHandler = Callable[[str, Any], None]


class ListenerError(RuntimeError):
    """Raised when a listener cannot be attached to a rendered view."""


@dataclass(eq=False)
class RenderTarget:
    """
    One addressable surface. Only the orchestrator assigns `view` and counts
    `renders`; targets are reused by position.
    """

    index: int
    view: Optional["RenderedView"] = None
    renders: int = 0

    @property
    def artifact(self) -> Any:
        return self.view.artifact if self.view is not None else None


@dataclass(eq=False)
class RenderedView:
    target: RenderTarget
    spec: Mapping[str, Any]
    artifact: Any
    supported_events: FrozenSet[str] = frozenset({"click"})
    _event_handlers: Dict[str, List[EventHandler]] = field(default_factory=dict, init=False, repr=False)
    _signal_handlers: Dict[str, List[SignalHandler]] = field(default_factory=dict, init=False, repr=False)

    @property
    def signal_names(self) -> List[str]:
        return [p["name"] for p in self.spec.get("params", []) if "name" in p]

    def add_event_listener(self, event_name: str, handler: EventHandler) -> None:
        if event_name not in self.supported_events:
            raise ListenerError(f"Unsupported event: {event_name}")
        self._event_handlers.setdefault(event_name, []).append(handler)

    def add_signal_listener(self, name: str, handler: SignalHandler) -> None:
        if name not in self.signal_names:
            raise ListenerError(f"Unknown signal: {name}")
        self._signal_handlers.setdefault(name, []).append(handler)

    def dispatch_event(self, event_name: str, event: Any) -> None:
        for handler in list(self._event_handlers.get(event_name, [])):
            handler(event)

    def dispatch_signal(self, name: str, value: Any) -> None:
        for handler in list(self._signal_handlers.get(name, [])):
            handler(name, value)


class RenderEngine(ABC):
    name: str = ""
    modes: FrozenSet[str] = frozenset({"vega-lite"})
    supported_events: FrozenSet[str] = frozenset({"click"})

    async def render(
        self,
        target: RenderTarget,
        spec: Mapping[str, Any],
        *,
        mode: str = "vega-lite",
        actions: bool = False,
    ) -> RenderedView:
        if mode not in self.modes:
            raise ValueError(f"{self.name} engine does not support mode: {mode}")

        # schema validation and figure building run off the event loop
        artifact = await asyncio.to_thread(self.build, spec, actions=actions)
        logger.debug("%s rendered target %d", self.name, target.index)
        return RenderedView(
            target=target,
            spec=spec,
            artifact=artifact,
            supported_events=self.supported_events,
        )

    @abstractmethod
    def build(self, spec: Mapping[str, Any], *, actions: bool = False) -> Any:
        raise NotImplementedError


# Engine registry
_ENGINES: Dict[str, type[RenderEngine]] = {}


def register_engine(name: str, engine_class: type[RenderEngine]) -> None:
    """
    Register a rendering engine.

    Args:
        name: Engine name (e.g., "vega-lite", "plotly")
        engine_class: RenderEngine subclass
    """
    _ENGINES[name] = engine_class


def get_engine(name: str, **kwargs: Any) -> RenderEngine:
    """
    Get an engine instance by name.

    Raises:
        ValueError: If the engine is not registered
    """
    _register_builtin_engines()
    if name not in _ENGINES:
        raise ValueError(
            f"Unsupported engine: {name}. Available engines: {', '.join(_ENGINES)}"
        )
    return _ENGINES[name](**kwargs)


def list_engines() -> List[str]:
    _register_builtin_engines()
    return list(_ENGINES)


def _register_builtin_engines() -> None:
    # imported lazily: both engine modules import this one
    if "vega-lite" not in _ENGINES:
        from charts.vega_engine import AltairEngine

        register_engine("vega-lite", AltairEngine)

    if "plotly" not in _ENGINES:
        from charts.plotly_renderer import PlotlyEngine

        register_engine("plotly", PlotlyEngine)
