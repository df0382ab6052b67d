"""Shared fixtures: a known-good standard fleet, a two-ship duel fleet and deterministic ids."""

from __future__ import annotations

import itertools
from uuid import UUID

import pytest
from seabattle.engine.geometry import Position, Rectangle
from seabattle.engine.ship import Ship

# Lengths 4, 3, 3, 2, 2, 2, 1, 1, 1, 1 with at least one empty cell between
# any two ships; rows 5-9 stay free.
STANDARD_LAYOUT = [
    ((0, 0), (0, 3)),
    ((0, 5), (0, 7)),
    ((2, 0), (2, 2)),
    ((2, 4), (2, 5)),
    ((2, 7), (2, 8)),
    ((4, 0), (4, 1)),
    ((4, 3), (4, 3)),
    ((4, 5), (4, 5)),
    ((4, 7), (4, 7)),
    ((4, 9), (4, 9)),
]


def make_ship(first: tuple[int, int], last: tuple[int, int]) -> Ship:
    return Ship(Rectangle(Position(*first), Position(*last)))


@pytest.fixture
def standard_fleet() -> list[Ship]:
    return [make_ship(first, last) for first, last in STANDARD_LAYOUT]


@pytest.fixture
def duel_fleet() -> list[Ship]:
    """One length-2 ship at A1-A2 and one length-1 ship at C4."""
    return [make_ship((0, 0), (0, 1)), make_ship((2, 3), (2, 3))]


@pytest.fixture
def sequential_ids():
    """Deterministic session ids: 00..01, 00..02, ..."""
    counter = itertools.count(1)
    return lambda: UUID(int=next(counter))


@pytest.fixture(name="make_ship")
def make_ship_fixture():
    return make_ship
