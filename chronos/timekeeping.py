"""Timekeeping utilities for Chronos.

Every path that turns wall-clock seconds into game time goes through
:func:`advance`, and every path that commits the result to a game state goes
through :func:`apply_elapsed`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .world import LocationGraph, TimeEffect

if TYPE_CHECKING:
    from .state import GameState

MAX_TICK_DELTA = 10.0
LOCATION_TIME_LIMIT = 120.0


@dataclass(frozen=True)
class TimeAdvance:
    game_time_delta: float
    location_timer_delta: float


def clamp_wall_delta(value: object, *, limit: float = MAX_TICK_DELTA) -> float:
    try:
        delta = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(delta) or delta <= 0:
        return 0.0
    return min(delta, limit)


def advance(graph: LocationGraph, location: str, wall_delta: float) -> TimeAdvance:
    wall = clamp_wall_delta(wall_delta)
    place = graph.get(location)
    if not place.timed:
        return TimeAdvance(game_time_delta=wall, location_timer_delta=0.0)

    effect = place.time_effect
    if effect is TimeEffect.REVERSE:
        game_delta = -wall
    elif effect in (TimeEffect.ACCELERATED, TimeEffect.DECELERATED):
        game_delta = wall * place.modifier
    else:
        game_delta = wall
    return TimeAdvance(game_time_delta=game_delta, location_timer_delta=wall)


def apply_elapsed(state: "GameState", graph: LocationGraph, wall_delta: float) -> bool:
    """Commit *wall_delta* seconds to *state*; returns True when the countdown expired.

    Inside a timed location only the time left on the countdown is simulated,
    so the timer lands on exactly 0 and splitting a gap into smaller ticks
    gives the same totals as one large tick.
    """
    wall = clamp_wall_delta(wall_delta)
    place = graph.get(state.location)
    expired = False
    if place.timed:
        remaining = max(float(state.location_timer), 0.0)
        if wall >= remaining:
            wall = remaining
            expired = True

    step = advance(graph, state.location, wall)
    state.game_time += step.game_time_delta
    state.real_time += wall
    if place.timed:
        state.location_timer = 0.0 if expired else state.location_timer - step.location_timer_delta
    return expired


def format_clock(seconds: float) -> str:
    total = abs(float(seconds))
    hours = int(total // 3600)
    minutes = int((total % 3600) // 60)
    secs = int(total % 60)
    sign = "-" if seconds < 0 else ""
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
