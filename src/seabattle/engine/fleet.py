"""Fleet composition rules and the per-player ship catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .errors import PlacementError
from .result import Err, Ok, Result
from .ship import Ship


@dataclass(frozen=True)
class Ruleset:
    """How many ships of each length a complete fleet holds.

    ``counts[i]`` is the number of ships of length ``i + 1``.
    """

    name: str
    counts: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.counts:
            raise ValueError("A ruleset needs at least one ship length.")
        if any(count < 0 for count in self.counts):
            raise ValueError("Ship counts cannot be negative.")
        if self.total == 0:
            raise ValueError("A ruleset needs at least one ship.")

    @property
    def max_length(self) -> int:
        return len(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts)

    def required(self, length: int) -> int:
        """Number of ships of ``length`` a full fleet needs (0 for unknown lengths)."""
        if 1 <= length <= self.max_length:
            return self.counts[length - 1]
        return 0

    def allows(self, length: int) -> bool:
        return self.required(length) > 0


POST_SOVIET_RULES = Ruleset("post_soviet", (4, 3, 2, 1))
AMERICAN_RULES = Ruleset("american", (0, 1, 2, 1, 1))

RULESETS: dict[str, Ruleset] = {
    POST_SOVIET_RULES.name: POST_SOVIET_RULES,
    AMERICAN_RULES.name: AMERICAN_RULES,
}


@dataclass
class Fleet:
    """Append-only collection of committed ships with running per-length counts."""

    ruleset: Ruleset = POST_SOVIET_RULES
    ships: list[Ship] = field(default_factory=list, init=False)
    counts: list[int] = field(init=False)

    def __post_init__(self) -> None:
        self.counts = [0] * self.ruleset.max_length

    @property
    def capacity(self) -> int:
        return self.ruleset.total

    def push(self, ship: Ship) -> Result[None, PlacementError]:
        """Append a ship, counting it under its length."""
        if not self.ruleset.allows(ship.length):
            return Err(PlacementError.WRONG_LENGTH)
        self.ships.append(ship)
        self.counts[ship.length - 1] += 1
        return Ok()

    def count(self, length: int) -> int:
        if 1 <= length <= len(self.counts):
            return self.counts[length - 1]
        return 0

    def quota_met(self, length: int) -> bool:
        """True when no more ships of ``length`` are allowed."""
        return self.count(length) >= self.ruleset.required(length)

    def is_full(self) -> bool:
        return len(self.ships) == self.capacity and tuple(self.counts) == self.ruleset.counts

    def __len__(self) -> int:
        return len(self.ships)

    def __iter__(self) -> Iterator[Ship]:
        return iter(self.ships)
