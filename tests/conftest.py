import random

import pytest

from chronos.session import GameSession
from chronos.settings import Settings
from chronos.world import HUB, LocationGraph


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def direction_to(graph: LocationGraph, name: str) -> str:
    for direction, target in graph.get(HUB).exits.items():
        if target == name:
            return direction
    raise AssertionError(f"No hub exit leads to {name}.")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(clock: FakeClock) -> GameSession:
    return GameSession(Settings(), rng=random.Random(0), clock=clock)


@pytest.fixture
def go():
    """Walk from the hub into *name* through whichever portal leads there."""

    def _go(session: GameSession, name: str):
        return session.submit(direction_to(session.graph, name))

    return _go
