"""Tests for the interaction event bus."""

from __future__ import annotations

import itertools

import pytest

from interaction.bus import InteractionBus

pytestmark = pytest.mark.unit


def test_geom_click_pairs_latest_selection_and_click(bus) -> None:
    """A non-empty selection plus a click emits one (values, event) pair."""

    received = []
    bus.subscribe_geom_click(lambda values, event: received.append((values, event)))

    bus.push_click("click-1")
    bus.push_selection({"Region": ["East"]})

    assert received == [({"Region": ["East"]}, "click-1")]


def test_geom_click_skips_cleared_selection(bus) -> None:
    """Clearing the selection is not forwarded; later clicks are not either."""

    received = []
    bus.subscribe_geom_click(lambda values, event: received.append(values))

    bus.push_selection({"Region": ["East"]})
    bus.push_click("c1")
    bus.push_selection({})
    bus.push_click("c2")

    assert received == [{"Region": ["East"]}]


@pytest.mark.parametrize(
    "order",
    list(itertools.permutations([("sel", {}), ("click", "a"), ("click", "b"), ("sel", {})])),
)
def test_geom_click_never_emits_for_empty_selection(order) -> None:
    """No interleaving of empty selections and clicks produces output."""

    with InteractionBus() as bus:
        received = []
        bus.subscribe_geom_click(lambda values, event: received.append(values))
        for kind, payload in order:
            if kind == "sel":
                bus.push_selection(payload)
            else:
                bus.push_click(payload)

    assert received == []


def test_raw_streams_are_unfiltered(bus) -> None:
    """Raw subscribers see every click and every selection, empty ones included."""

    clicks, selections = [], []
    bus.subscribe_clicks(clicks.append)
    bus.subscribe_selections(selections.append)

    bus.push_selection({})
    bus.push_click("c")

    assert selections == [{}]
    assert clicks == ["c"]


def test_disposed_subscription_stops_receiving(bus) -> None:
    """Released subscriptions get nothing more."""

    received = []
    sub = bus.subscribe_geom_click(lambda values, event: received.append(event))

    bus.push_selection({"Sales": [1]})
    bus.push_click("first")
    sub.dispose()
    bus.push_click("second")

    assert received == ["first"]


def test_separate_buses_do_not_cross_talk() -> None:
    """Events pushed to one bus never reach another bus's subscribers."""

    with InteractionBus() as a, InteractionBus() as b:
        seen = []
        b.subscribe_geom_click(lambda values, event: seen.append(event))

        a.push_selection({"Region": ["West"]})
        a.push_click("on-a")

        assert seen == []


def test_close_completes_streams() -> None:
    """After close the bus ignores pushes."""

    bus = InteractionBus()
    received = []
    bus.subscribe_clicks(received.append)

    bus.close()
    bus.push_click("late")

    assert bus.closed
    assert received == []
