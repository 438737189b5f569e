# chart_trellis/container.py
from __future__ import annotations

from typing import Optional

from charts.engine import RenderEngine, get_engine
from interaction.bus import InteractionBus
from orchestrator import MultiViewOrchestrator
from utils.settings import Settings, load_settings


def build_orchestrator(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[RenderEngine] = None,
    bus: Optional[InteractionBus] = None,
) -> MultiViewOrchestrator:
    """
    Build one chart instance: engine, its own interaction bus and the
    orchestrator tying them together.
    """
    settings = settings or load_settings()

    return MultiViewOrchestrator(
        engine=engine or get_engine(settings.engine),
        bus=bus or InteractionBus(),
        selection_name=settings.selection_name,
        coalesce_delay=settings.coalesce_delay,
        guard_stale_renders=settings.guard_stale_renders,
    )
