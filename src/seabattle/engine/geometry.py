"""Grid geometry primitives shared by boards, ships and fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterator


@dataclass(frozen=True)
class Offset:
    """Signed step between two positions."""

    rows: int
    cols: int

    UP: ClassVar[Offset]
    DOWN: ClassVar[Offset]
    LEFT: ClassVar[Offset]
    RIGHT: ClassVar[Offset]

    def __mul__(self, factor: int) -> Offset:
        return Offset(self.rows * factor, self.cols * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Offset:
        return Offset(-self.rows, -self.cols)


Offset.UP = Offset(-1, 0)
Offset.DOWN = Offset(1, 0)
Offset.LEFT = Offset(0, -1)
Offset.RIGHT = Offset(0, 1)


@dataclass(frozen=True, order=True)
class Position:
    """Immutable grid cell, ordered row-major.

    No clamping happens here: stepping off the grid yields negative or
    oversized components, which boards treat as out of bounds.
    """

    row: int
    col: int

    def __add__(self, offset: Offset) -> Position:
        if not isinstance(offset, Offset):
            return NotImplemented
        return Position(self.row + offset.rows, self.col + offset.cols)

    def __sub__(self, offset: Offset) -> Position:
        if not isinstance(offset, Offset):
            return NotImplemented
        return Position(self.row - offset.rows, self.col - offset.cols)


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned, inclusive box between two positions.

    The corners are normalised component-wise so that ``first`` is the
    top-left cell and ``last`` the bottom-right one, whatever order they
    were given in. Iterating a rectangle yields its cells row-major and can
    be repeated any number of times.
    """

    first: Position
    last: Position

    def __post_init__(self) -> None:
        top, bottom = sorted((self.first.row, self.last.row))
        left, right = sorted((self.first.col, self.last.col))
        object.__setattr__(self, "first", Position(top, left))
        object.__setattr__(self, "last", Position(bottom, right))

    @property
    def width(self) -> int:
        return self.last.col - self.first.col + 1

    @property
    def height(self) -> int:
        return self.last.row - self.first.row + 1

    def __len__(self) -> int:
        return self.width * self.height

    def __iter__(self) -> Iterator[Position]:
        for row in range(self.first.row, self.last.row + 1):
            for col in range(self.first.col, self.last.col + 1):
                yield Position(row, col)

    def contains(self, other: Position | Rectangle) -> bool:
        """Check whether a point, or a whole rectangle, lies inside this one."""
        if isinstance(other, Rectangle):
            return self.contains(other.first) and self.contains(other.last)
        return (
            self.first.row <= other.row <= self.last.row
            and self.first.col <= other.col <= self.last.col
        )

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, (Position, Rectangle)):
            return False
        return self.contains(item)

    def intersects(self, other: Rectangle) -> bool:
        return (
            self.first.row <= other.last.row
            and other.first.row <= self.last.row
            and self.first.col <= other.last.col
            and other.first.col <= self.last.col
        )

    def inflate(self, amount: int = 1) -> Rectangle:
        """Grow the rectangle by ``amount`` cells on every side."""
        step = Offset(1, 1) * amount
        return Rectangle(self.first - step, self.last + step)

    def touches_or_intersects(self, other: Rectangle) -> bool:
        """True when the rectangles overlap or are adjacent, diagonals included."""
        return self.inflate().intersects(other)
