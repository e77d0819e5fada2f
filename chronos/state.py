"""Game state record and its persisted (camelCase) representation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .timekeeping import LOCATION_TIME_LIMIT
from .world import HUB, REQUIRED_KEYS, LocationGraph

MAX_HEALTH = 100


class Outcome(str, Enum):
    WON = "won"
    TIME_EXPIRED = "time_expired"


REQUIRED_FIELDS = (
    "health",
    "keys",
    "location",
    "gameTime",
    "locationTimer",
    "awaitingAnswer",
    "currentQuestion",
    "visitedLocations",
    "active",
    "score",
    "lastTickTimestamp",
    "timeEffectStart",
)


def _unique(values) -> List[str]:
    seen: List[str] = []
    for value in values or []:
        if isinstance(value, str) and value not in seen:
            seen.append(value)
    return seen


def _as_number(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field '{key}' must be a number.")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Field '{key}' must be finite.")
    return float(value)


def _as_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be a boolean.")
    return value


def _as_str_list(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Field '{key}' must be a list of strings.")
    return _unique(value)


@dataclass
class GameState:
    """Everything about a run that changes over time."""

    health: int = MAX_HEALTH
    keys: List[str] = field(default_factory=list)
    location: str = HUB
    game_time: float = 0.0
    location_timer: float = LOCATION_TIME_LIMIT
    awaiting_answer: bool = False
    current_question: Optional[str] = None
    visited_locations: List[str] = field(default_factory=lambda: [HUB])
    active: bool = True
    score: int = 0
    last_tick_timestamp: float = 0.0
    time_effect_start: Optional[float] = None
    real_time: float = 0.0
    outcome: Optional[Outcome] = None

    @classmethod
    def fresh(cls, now: float) -> "GameState":
        return cls(last_tick_timestamp=float(now))

    def has_all_keys(self) -> bool:
        return set(self.keys) == set(REQUIRED_KEYS)

    def visit(self, name: str) -> None:
        if name not in self.visited_locations:
            self.visited_locations.append(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "health": self.health,
            "keys": list(self.keys),
            "location": self.location,
            "gameTime": self.game_time,
            "locationTimer": self.location_timer,
            "awaitingAnswer": self.awaiting_answer,
            "currentQuestion": self.current_question,
            "visitedLocations": list(self.visited_locations),
            "active": self.active,
            "score": self.score,
            "lastTickTimestamp": self.last_tick_timestamp,
            "timeEffectStart": self.time_effect_start,
            "realTime": self.real_time,
            "outcome": self.outcome.value if self.outcome else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameState":
        if not isinstance(data, Mapping):
            raise ValueError("State block must be an object.")
        missing = [key for key in REQUIRED_FIELDS if key not in data]
        if missing:
            raise ValueError(f"Missing fields: {', '.join(missing)}")

        location = data.get("location")
        if not isinstance(location, str) or not location:
            raise ValueError("Field 'location' must be a non-empty string.")
        question = data.get("currentQuestion")
        if question is not None and not isinstance(question, str):
            raise ValueError("Field 'currentQuestion' must be a string or null.")
        effect_start = data.get("timeEffectStart")
        if effect_start is not None:
            effect_start = _as_number(data, "timeEffectStart")

        outcome = data.get("outcome")
        try:
            outcome = Outcome(outcome) if outcome else None
        except ValueError as exc:
            raise ValueError(f"Unknown outcome {outcome!r}.") from exc

        real_time = 0.0
        if data.get("realTime") is not None:
            real_time = _as_number(data, "realTime")

        return cls(
            health=int(_as_number(data, "health")),
            keys=_as_str_list(data, "keys"),
            location=location,
            game_time=_as_number(data, "gameTime"),
            location_timer=_as_number(data, "locationTimer"),
            awaiting_answer=_as_bool(data, "awaitingAnswer"),
            current_question=question,
            visited_locations=_as_str_list(data, "visitedLocations"),
            active=_as_bool(data, "active"),
            score=int(_as_number(data, "score")),
            last_tick_timestamp=_as_number(data, "lastTickTimestamp"),
            time_effect_start=effect_start,
            real_time=float(real_time),
            outcome=outcome,
        )

    def ensure_consistency(self, graph: LocationGraph) -> None:
        if self.location not in graph:
            raise ValueError(f"Unknown location '{self.location}'.")
        self.health = max(0, min(MAX_HEALTH, int(self.health)))
        self.keys = [key for key in _unique(self.keys) if key in REQUIRED_KEYS]
        self.visited_locations = [name for name in _unique(self.visited_locations) if name in graph]
        self.visit(self.location)
        self.location_timer = max(0.0, float(self.location_timer))

        place = graph.get(self.location)
        if not place.timed:
            self.time_effect_start = None
        if self.active and place.has_open_riddle:
            self.awaiting_answer = True
            self.current_question = place.riddle.question  # type: ignore[union-attr]
        else:
            self.awaiting_answer = False
            self.current_question = None
        if self.active:
            self.outcome = None
