"""Ship domain model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .geometry import Offset, Position, Rectangle


@dataclass(frozen=True)
class Ship:
    """A ship is nothing more than its footprint on the grid.

    Orientation is not stored: a ship whose zone is one cell tall lies
    horizontally, one cell wide lies vertically, and a single cell is both.
    """

    zone: Rectangle

    @classmethod
    def from_bow(cls, start: Position, length: int, direction: Offset = Offset.RIGHT) -> Ship:
        """Build a ship from its first cell, extending ``length`` cells along ``direction``."""
        if length < 1:
            raise ValueError("Ship length must be at least 1.")
        return cls(Rectangle(start, start + direction * (length - 1)))

    @property
    def length(self) -> int:
        return max(self.zone.width, self.zone.height)

    def is_straight(self) -> bool:
        """Return True if the footprint is a single row or a single column."""
        return min(self.zone.width, self.zone.height) == 1

    def cells(self) -> Iterator[Position]:
        return iter(self.zone)

    def touches(self, other: Ship) -> bool:
        return self.zone.touches_or_intersects(other.zone)
