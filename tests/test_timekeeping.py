import random

import pytest

from chronos.state import GameState
from chronos.timekeeping import (
    MAX_TICK_DELTA,
    advance,
    apply_elapsed,
    clamp_wall_delta,
    format_clock,
)
from chronos.world import HUB, VAULT, TimeEffect, generate


@pytest.fixture
def graph():
    return generate(random.Random(0))


@pytest.mark.parametrize("delta", [0.5, 1.0, 3.0, 7.25, 10.0])
def test_accelerated_location_scales_game_time_by_modifier(graph, delta: float) -> None:
    place = graph.get("Bermuda Triangle")
    step = advance(graph, place.name, delta)
    assert step.game_time_delta == delta * place.modifier
    assert step.location_timer_delta == delta


def test_decelerated_location_slows_game_time(graph) -> None:
    step = advance(graph, "Stonehenge", 4.0)
    assert step.game_time_delta == 2.0
    assert step.location_timer_delta == 4.0


@pytest.mark.parametrize("modifier", [-1.0, 0.5, 3.0])
def test_reverse_runs_backward_regardless_of_modifier(graph, modifier: float) -> None:
    graph.get("Crooked Forest").modifier = modifier
    step = advance(graph, "Crooked Forest", 6.0)
    assert step.game_time_delta == -6.0
    assert step.location_timer_delta == 6.0


def test_normal_effect_in_timed_location(graph) -> None:
    place = graph.get("Stonehenge")
    place.time_effect = TimeEffect.NORMAL
    assert advance(graph, place.name, 2.0).game_time_delta == 2.0


@pytest.mark.parametrize("name", [HUB, VAULT])
def test_safe_locations_have_no_countdown(graph, name: str) -> None:
    step = advance(graph, name, 5.0)
    assert step.game_time_delta == 5.0
    assert step.location_timer_delta == 0.0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(25.0, MAX_TICK_DELTA), (-3.0, 0.0), ("nope", 0.0), (None, 0.0), (float("nan"), 0.0), (2.5, 2.5)],
)
def test_clamp_wall_delta(raw, expected: float) -> None:
    assert clamp_wall_delta(raw) == expected


def test_large_gap_is_clamped_to_ten_seconds(graph) -> None:
    step = advance(graph, "Bermuda Triangle", 3600.0)
    assert step.location_timer_delta == MAX_TICK_DELTA
    assert step.game_time_delta == MAX_TICK_DELTA * 1.5


def test_apply_elapsed_stops_countdown_at_exactly_zero(graph) -> None:
    state = GameState(location="Bermuda Triangle", location_timer=4.0)
    assert apply_elapsed(state, graph, 9.0) is True
    assert state.location_timer == 0.0
    assert state.game_time == pytest.approx(6.0)
    assert state.real_time == pytest.approx(4.0)


def test_apply_elapsed_in_hub_leaves_timer_alone(graph) -> None:
    state = GameState(location=HUB, location_timer=0.0)
    assert apply_elapsed(state, graph, 5.0) is False
    assert state.location_timer == 0.0
    assert state.game_time == 5.0


def test_timer_never_negative_over_many_ticks(graph) -> None:
    state = GameState(location="Crooked Forest", location_timer=120.0)
    rng = random.Random(5)
    expired = False
    while not expired:
        expired = apply_elapsed(state, graph, rng.uniform(0.0, 12.0))
        assert state.location_timer >= 0.0
    assert state.location_timer == 0.0


def test_ticks_decompose_like_a_single_gap(graph) -> None:
    whole = GameState(location="Bermuda Triangle", location_timer=50.0)
    pieces = GameState(location="Bermuda Triangle", location_timer=50.0)

    apply_elapsed(whole, graph, 8.0)
    for _ in range(8):
        apply_elapsed(pieces, graph, 1.0)

    assert pieces.game_time == pytest.approx(whole.game_time)
    assert pieces.location_timer == pytest.approx(whole.location_timer)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00:00"), (59.9, "00:00:59"), (3725, "01:02:05"), (-90, "-00:01:30")],
)
def test_format_clock(seconds: float, expected: str) -> None:
    assert format_clock(seconds) == expected
