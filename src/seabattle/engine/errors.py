"""Error kinds reported by the engine and the lobby.

None of these are raised. They travel inside ``Err`` values and the caller
decides how to present them.
"""

from __future__ import annotations

from enum import Enum


class PlacementError(Enum):
    """Reasons a ship or a whole fleet was refused."""

    WRONG_LENGTH = "wrong_length"
    OUT_OF_BOUNDS = "out_of_bounds"
    OVERLAP = "overlap"
    TOO_MANY_SHIPS = "too_many_ships"
    INCOMPLETE_FLEET = "incomplete_fleet"


class AuthError(Enum):
    UNKNOWN_SESSION = "unknown_session"


class TurnError(Enum):
    """The request is well formed but the match is not in a state to accept it."""

    NOT_YOUR_TURN = "not_your_turn"
    AWAITING_OPPONENT = "awaiting_opponent"
    GAME_FINISHED = "game_finished"


class ShotError(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"


class RoomError(Enum):
    """Internal inconsistency between the room map and a room record."""

    NO_OPPONENT_MAPPED = "no_opponent_mapped"
