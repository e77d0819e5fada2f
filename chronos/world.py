"""Location graph for Chronos: the fixed template and its randomized portals."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Sequence


class TimeEffect(str, Enum):
    NORMAL = "normal"
    ACCELERATED = "accelerated"
    DECELERATED = "decelerated"
    REVERSE = "reverse"


HUB = "Central Hub"
VAULT = "Treasure Vault"
SAFE_LOCATIONS = frozenset({HUB, VAULT})
SPECIAL_LOCATIONS = ("Bermuda Triangle", "Stonehenge", "Crooked Forest")
REQUIRED_KEYS = ("Triangle Key", "Stone Key", "Forest Key")

PORTAL_DIRECTIONS = ("north", "south", "east")
MOVEMENT_DIRECTIONS = ("north", "south", "east", "west", "treasure")
TREASURE_EXIT = "treasure"

_OPPOSITES = {
    "north": "south",
    "south": "north",
    "east": "west",
    "west": "east",
}


def reverse_direction(direction: str) -> str:
    return _OPPOSITES.get(direction, "")


@dataclass
class Riddle:
    question: str
    answer: str
    answered: bool = False

    def matches(self, response: str) -> bool:
        """Case-insensitive containment check: the reply only has to mention the answer."""
        if not response:
            return False
        return self.answer.lower() in response.lower()


@dataclass
class Location:
    """One node of the world graph."""

    name: str
    description: str
    welcome: str
    time_effect: TimeEffect = TimeEffect.NORMAL
    modifier: float = 1.0
    key_item: Optional[str] = None
    riddle: Optional[Riddle] = None
    exits: Dict[str, str] = field(default_factory=dict)

    @property
    def timed(self) -> bool:
        return self.name not in SAFE_LOCATIONS

    @property
    def has_open_riddle(self) -> bool:
        return self.riddle is not None and not self.riddle.answered


LOCATION_TEMPLATES: Sequence[Mapping[str, object]] = (
    {
        "name": HUB,
        "description": "A mystical nexus where time flows normally. Portals shimmer in all directions.",
        "welcome": "Welcome to the Central Hub! Choose your time adventure wisely.",
    },
    {
        "name": "Bermuda Triangle",
        "description": (
            "A mysterious triangular vortex where time accelerates dramatically. "
            "Reality bends around you."
        ),
        "welcome": "Entering Bermuda Triangle! Time is speeding up - move quickly!",
        "key_item": "Triangle Key",
        "time_effect": TimeEffect.ACCELERATED,
        "modifier": 1.5,
        "question": "What phenomenon is the Bermuda Triangle famous for?",
        "answer": "disappearances",
    },
    {
        "name": "Stonehenge",
        "description": "Ancient stone circles where time moves sluggishly, as if weighted by millennia.",
        "welcome": "Welcome to Stonehenge! Time drags heavily here - use it wisely.",
        "key_item": "Stone Key",
        "time_effect": TimeEffect.DECELERATED,
        "modifier": 0.5,
        "question": "How many stones form the main circle of Stonehenge?",
        "answer": "30",
    },
    {
        "name": "Crooked Forest",
        "description": "A twisted woodland where time flows in reverse, undoing moments as they pass.",
        "welcome": "Entering Crooked Forest! Time flows backward - reality unravels!",
        "key_item": "Forest Key",
        "time_effect": TimeEffect.REVERSE,
        "modifier": -1.0,
        "question": "In which country is the famous Crooked Forest located?",
        "answer": "poland",
    },
    {
        "name": VAULT,
        "description": (
            "The legendary treasure vault, accessible only to those who have "
            "mastered time itself!"
        ),
        "welcome": "TREASURE VAULT UNLOCKED! Congratulations, Time Master!",
    },
)


def _build_location(template: Mapping[str, object]) -> Location:
    riddle = None
    if template.get("question"):
        riddle = Riddle(str(template["question"]), str(template["answer"]))
    return Location(
        name=str(template["name"]),
        description=str(template["description"]),
        welcome=str(template["welcome"]),
        time_effect=TimeEffect(template.get("time_effect", TimeEffect.NORMAL)),
        modifier=float(template.get("modifier", 1.0)),  # type: ignore[arg-type]
        key_item=template.get("key_item"),  # type: ignore[arg-type]
        riddle=riddle,
    )


class LocationGraph:
    """The five-node world. Only riddle ``answered`` flags change after generation."""

    def __init__(self, locations: Sequence[Location]) -> None:
        self.locations: Dict[str, Location] = {loc.name: loc for loc in locations}

    def __contains__(self, name: object) -> bool:
        return name in self.locations

    def __iter__(self) -> Iterator[Location]:
        return iter(self.locations.values())

    def get(self, name: str) -> Location:
        try:
            return self.locations[name]
        except KeyError:
            raise KeyError(f"Unknown location '{name}'.") from None

    def destination(self, origin: str, direction: str) -> Optional[str]:
        return self.get(origin).exits.get(direction)

    def mark_answered(self, name: str) -> None:
        riddle = self.get(name).riddle
        if riddle is not None:
            riddle.answered = True

    def answered_riddles(self) -> List[str]:
        return [loc.name for loc in self if loc.riddle is not None and loc.riddle.answered]

    def layout(self) -> Dict[str, object]:
        hub = self.get(HUB)
        return {
            "portals": {
                direction: hub.exits[direction]
                for direction in PORTAL_DIRECTIONS
                if direction in hub.exits
            },
            "effects": {
                name: {
                    "effect": self.get(name).time_effect.value,
                    "modifier": self.get(name).modifier,
                }
                for name in SPECIAL_LOCATIONS
            },
            "answered": self.answered_riddles(),
        }

    @classmethod
    def from_layout(cls, layout: Mapping[str, object]) -> "LocationGraph":
        if not isinstance(layout, Mapping):
            raise ValueError("World layout must be an object.")
        portals = layout.get("portals")
        if not isinstance(portals, Mapping):
            raise ValueError("World layout is missing 'portals'.")
        if set(portals) != set(PORTAL_DIRECTIONS):
            raise ValueError("World layout must assign north, south and east.")
        targets = list(portals.values())
        if not all(isinstance(t, str) for t in targets) or sorted(targets) != sorted(SPECIAL_LOCATIONS):
            raise ValueError("World layout portals must cover each special location once.")

        graph = cls([_build_location(template) for template in LOCATION_TEMPLATES])
        for direction in PORTAL_DIRECTIONS:
            graph._link(direction, str(portals[direction]))
        graph.get(HUB).exits[TREASURE_EXIT] = VAULT

        effects = layout.get("effects") or {}
        if not isinstance(effects, Mapping):
            raise ValueError("World layout 'effects' must be an object.")
        for name, entry in effects.items():
            if name not in SPECIAL_LOCATIONS or not isinstance(entry, Mapping):
                raise ValueError(f"Invalid effect entry for '{name}'.")
            location = graph.get(name)
            try:
                location.time_effect = TimeEffect(entry.get("effect"))
                location.modifier = float(entry.get("modifier", location.modifier))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid effect entry for '{name}': {exc}") from exc
            if not math.isfinite(location.modifier):
                raise ValueError(f"Invalid modifier for '{name}'.")

        answered = layout.get("answered") or []
        if not isinstance(answered, list):
            raise ValueError("World layout 'answered' must be a list.")
        for name in answered:
            if not isinstance(name, str) or name not in graph:
                raise ValueError(f"Unknown answered location '{name}'.")
            graph.mark_answered(name)
        return graph

    def _link(self, direction: str, special: str) -> None:
        self.get(HUB).exits[direction] = special
        self.get(special).exits[reverse_direction(direction)] = HUB


def generate(rng: Optional[random.Random] = None, *, shuffle_effects: bool = False) -> LocationGraph:
    rng = rng or random.Random()
    graph = LocationGraph([_build_location(template) for template in LOCATION_TEMPLATES])

    specials = list(SPECIAL_LOCATIONS)
    rng.shuffle(specials)
    for direction, special in zip(PORTAL_DIRECTIONS, specials):
        graph._link(direction, special)
    graph.get(HUB).exits[TREASURE_EXIT] = VAULT

    if shuffle_effects:
        pairs = [(graph.get(name).time_effect, graph.get(name).modifier) for name in SPECIAL_LOCATIONS]
        rng.shuffle(pairs)
        for name, (effect, modifier) in zip(SPECIAL_LOCATIONS, pairs):
            graph.get(name).time_effect = effect
            graph.get(name).modifier = modifier
    return graph
