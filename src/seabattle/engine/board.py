"""Single-player playing surface with ship and shot layers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TypeAlias

import numpy as np
import numpy.typing as npt

from seabattle.telemetry import get_meter

from .geometry import Position, Rectangle

logger = logging.getLogger(__name__)
meter = get_meter("seabattle.engine.board")

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_board_shots",
    unit="1",
    description="Shots recorded on a board",
)

Layer: TypeAlias = npt.NDArray[np.bool_]

ROWS = 10
COLS = 10


@dataclass(eq=False)
class Board:
    """A ``rows`` x ``cols`` grid holding two boolean layers.

    Cells are addressed by ``row * cols + col``. The ship layer is only ever
    set, never cleared. Setting a shot twice is harmless. Out-of-bounds
    positions read as empty and writes to them are ignored.
    """

    rows: int = ROWS
    cols: int = COLS
    owner: str = "unknown"
    _ships: Layer = field(init=False, repr=False)
    _shots: Layer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Board dimensions must be positive.")
        self._ships = np.zeros(self.rows * self.cols, dtype=np.bool_)
        self._shots = np.zeros(self.rows * self.cols, dtype=np.bool_)

    @property
    def rect(self) -> Rectangle:
        """Full extent of the board."""
        return Rectangle(Position(0, 0), Position(self.rows - 1, self.cols - 1))

    def contains(self, target: Position | Rectangle) -> bool:
        return self.rect.contains(target)

    def place_ship(self, pos: Position) -> bool:
        index = self._index(pos)
        if index is not None:
            self._ships[index] = True
        return index is not None

    def has_ship(self, pos: Position) -> bool:
        index = self._index(pos)
        return index is not None and bool(self._ships[index])

    def place_shot(self, pos: Position) -> bool:
        """Mark a shot; the return value says whether it landed on the board."""
        index = self._index(pos)
        if index is None:
            logger.debug(
                "shot_out_of_bounds",
                extra={"row": pos.row, "col": pos.col, "owner": self.owner},
            )
            SHOT_COUNTER.add(1, attributes={"accepted": False, "owner": self.owner})
            return False
        self._shots[index] = True
        SHOT_COUNTER.add(1, attributes={"accepted": True, "owner": self.owner})
        return True

    def has_shot(self, pos: Position) -> bool:
        index = self._index(pos)
        return index is not None and bool(self._shots[index])

    def all_ships_sunk(self) -> bool:
        """Check whether every occupied cell has been shot."""
        return bool(np.all(self._shots[self._ships]))

    def ship_count(self) -> int:
        return int(np.count_nonzero(self._ships))

    def ship_bits(self) -> str:
        return _to_bits(self._ships)

    def shot_bits(self) -> str:
        return _to_bits(self._shots)

    def _index(self, pos: Position) -> int | None:
        if 0 <= pos.row < self.rows and 0 <= pos.col < self.cols:
            return self.cols * pos.row + pos.col
        return None


def _to_bits(layer: Layer) -> str:
    return "".join("1" if bit else "0" for bit in layer)
