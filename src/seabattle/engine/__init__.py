"""Game-state engine: geometry, boards, fleets, fields and rooms."""

from .board import Board
from .errors import AuthError, PlacementError, RoomError, ShotError, TurnError
from .field import PlayerField
from .fleet import AMERICAN_RULES, POST_SOVIET_RULES, RULESETS, Fleet, Ruleset
from .geometry import Offset, Position, Rectangle
from .result import Err, Ok, Result
from .room import Room, RoomPhase, ShotOutcome
from .ship import Ship

__all__ = [
    "AMERICAN_RULES",
    "AuthError",
    "Board",
    "Err",
    "Fleet",
    "Offset",
    "Ok",
    "POST_SOVIET_RULES",
    "PlacementError",
    "PlayerField",
    "Position",
    "RULESETS",
    "Rectangle",
    "Result",
    "Room",
    "RoomError",
    "RoomPhase",
    "Ruleset",
    "Ship",
    "ShotError",
    "ShotOutcome",
    "TurnError",
]
