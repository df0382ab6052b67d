"""Session lobby: identities, matchmaking and the request-level service."""

from .directory import SessionDirectory, SessionId
from .service import FIELD_ACCESS_POLICIES, GameService, StartedGame, always, turn_holder_only
from .snapshot import FieldSnapshot, FleetSubmission, RectangleModel, StartGameResponse

__all__ = [
    "FIELD_ACCESS_POLICIES",
    "FieldSnapshot",
    "FleetSubmission",
    "GameService",
    "RectangleModel",
    "SessionDirectory",
    "SessionId",
    "StartGameResponse",
    "StartedGame",
    "always",
    "turn_holder_only",
]
