"""Wire-facing models for fleets and board state."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from seabattle.engine.field import PlayerField
from seabattle.engine.geometry import Position, Rectangle
from seabattle.engine.ship import Ship

Coordinate = tuple[Annotated[int, Field(ge=0)], Annotated[int, Field(ge=0)]]

SESSION_TOKEN_SIZE = 16


class RectangleModel(BaseModel):
    """A ship footprint as two ``[row, col]`` corners."""

    first: Coordinate
    last: Coordinate

    @classmethod
    def from_rectangle(cls, rect: Rectangle) -> "RectangleModel":
        return cls(first=(rect.first.row, rect.first.col), last=(rect.last.row, rect.last.col))

    def to_rectangle(self) -> Rectangle:
        return Rectangle(Position(*self.first), Position(*self.last))


class FleetSubmission(BaseModel):
    """Ships a player asks to start a game with, in placement order."""

    ships: list[RectangleModel] = Field(default_factory=list)

    def to_ships(self) -> list[Ship]:
        return [Ship(model.to_rectangle()) for model in self.ships]


class FieldSnapshot(BaseModel):
    """One player's board: both layers as row-major bit strings, plus the fleet."""

    rows: int
    cols: int
    ships: str
    shots: str
    fleet: list[RectangleModel]

    @classmethod
    def from_field(cls, player_field: PlayerField) -> "FieldSnapshot":
        board = player_field.board
        return cls(
            rows=board.rows,
            cols=board.cols,
            ships=board.ship_bits(),
            shots=board.shot_bits(),
            fleet=[RectangleModel.from_rectangle(ship.zone) for ship in player_field.fleet],
        )

    def cell(self, layer: str, pos: Position) -> bool:
        """Read one cell of the ``"ships"`` or ``"shots"`` layer."""
        bits = self.ships if layer == "ships" else self.shots
        if not (0 <= pos.row < self.rows and 0 <= pos.col < self.cols):
            return False
        return bits[pos.row * self.cols + pos.col] == "1"


class StartGameResponse(BaseModel):
    session_id: UUID
    field: FieldSnapshot


def session_token(session_id: UUID) -> bytes:
    """Opaque 16-byte token a client sends back with every request."""
    return session_id.bytes


def parse_session_token(token: bytes) -> UUID | None:
    if len(token) != SESSION_TOKEN_SIZE:
        return None
    return UUID(bytes=bytes(token))
