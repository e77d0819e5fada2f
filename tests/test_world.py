import random
from collections import Counter

import pytest

from chronos.world import (
    HUB,
    PORTAL_DIRECTIONS,
    SPECIAL_LOCATIONS,
    VAULT,
    LocationGraph,
    TimeEffect,
    generate,
    reverse_direction,
)


def test_generate_links_each_special_location_with_reciprocal_exit() -> None:
    graph = generate(random.Random(7))
    hub = graph.get(HUB)

    assert sorted(hub.exits[d] for d in PORTAL_DIRECTIONS) == sorted(SPECIAL_LOCATIONS)
    for direction in PORTAL_DIRECTIONS:
        special = graph.get(hub.exits[direction])
        assert special.exits == {reverse_direction(direction): HUB}


def test_treasure_exit_always_present_and_safe_locations_untimed() -> None:
    for seed in range(10):
        graph = generate(random.Random(seed))
        assert graph.get(HUB).exits["treasure"] == VAULT
        assert not graph.get(HUB).timed
        assert not graph.get(VAULT).timed
        assert graph.get(HUB).riddle is None
        assert graph.get(VAULT).riddle is None


def test_portal_assignment_covers_every_permutation() -> None:
    rng = random.Random(1234)
    seen: Counter = Counter()
    for _ in range(600):
        hub = generate(rng).get(HUB)
        seen[tuple(hub.exits[d] for d in PORTAL_DIRECTIONS)] += 1
    assert len(seen) == 6
    assert min(seen.values()) > 50


def test_shuffle_effects_keeps_the_same_set_of_effects() -> None:
    graph = generate(random.Random(3), shuffle_effects=True)
    effects = sorted(graph.get(name).time_effect.value for name in SPECIAL_LOCATIONS)
    assert effects == ["accelerated", "decelerated", "reverse"]


def test_default_effects_follow_the_template() -> None:
    graph = generate(random.Random(0))
    assert graph.get("Bermuda Triangle").time_effect is TimeEffect.ACCELERATED
    assert graph.get("Bermuda Triangle").modifier == 1.5
    assert graph.get("Stonehenge").time_effect is TimeEffect.DECELERATED
    assert graph.get("Crooked Forest").time_effect is TimeEffect.REVERSE


def test_mark_answered_flips_only_the_target_riddle() -> None:
    graph = generate(random.Random(0))
    graph.mark_answered("Stonehenge")
    assert graph.answered_riddles() == ["Stonehenge"]
    assert graph.get("Crooked Forest").has_open_riddle


def test_layout_round_trip_preserves_portals_and_answers() -> None:
    graph = generate(random.Random(11), shuffle_effects=True)
    graph.mark_answered("Crooked Forest")

    restored = LocationGraph.from_layout(graph.layout())

    assert restored.get(HUB).exits == graph.get(HUB).exits
    assert restored.answered_riddles() == ["Crooked Forest"]
    for name in SPECIAL_LOCATIONS:
        assert restored.get(name).time_effect is graph.get(name).time_effect
        assert restored.get(name).exits == graph.get(name).exits


@pytest.mark.parametrize(
    ("layout", "match"),
    [
        ({}, "portals"),
        ({"portals": {"north": "Stonehenge"}}, "north, south and east"),
        (
            {"portals": {"north": "Stonehenge", "south": "Stonehenge", "east": "Crooked Forest"}},
            "each special location",
        ),
        (
            {
                "portals": {"north": "Stonehenge", "south": "Bermuda Triangle", "east": "Crooked Forest"},
                "answered": ["Atlantis"],
            },
            "Unknown answered",
        ),
    ],
)
def test_from_layout_rejects_inconsistent_layouts(layout: dict, match: str) -> None:
    with pytest.raises(ValueError, match=match):
        LocationGraph.from_layout(layout)


def test_riddle_matching_is_case_insensitive_substring() -> None:
    riddle = generate(random.Random(0)).get("Bermuda Triangle").riddle
    assert riddle is not None
    assert riddle.matches("It was the DISAPPEARANCES")
    assert not riddle.matches("storms")
    assert not riddle.matches("")
