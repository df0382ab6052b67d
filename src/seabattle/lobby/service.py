"""Request-level game operations on top of the session directory."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from seabattle.config import GameSettings
from seabattle.engine.board import COLS, ROWS
from seabattle.engine.errors import AuthError, PlacementError, RoomError, ShotError, TurnError
from seabattle.engine.fleet import POST_SOVIET_RULES, Ruleset
from seabattle.engine.field import PlayerField
from seabattle.engine.geometry import Position
from seabattle.engine.result import Err, Ok, Result
from seabattle.engine.room import Room, ShotOutcome
from seabattle.engine.ship import Ship
from seabattle.telemetry import get_tracer, record_duration, record_game_metric

from .directory import SessionDirectory, SessionId
from .snapshot import FieldSnapshot

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.lobby.service")

FieldAccessPolicy = Callable[[Room | None, SessionId], bool]


def turn_holder_only(room: Room[SessionId] | None, session_id: SessionId) -> bool:
    """Only the player holding the move may look at their own field."""
    return room is not None and room.is_my_move(session_id)


def always(room: Room[SessionId] | None, session_id: SessionId) -> bool:
    return True


FIELD_ACCESS_POLICIES: dict[str, FieldAccessPolicy] = {
    "turn_holder": turn_holder_only,
    "always": always,
}


@dataclass(frozen=True)
class StartedGame:
    session_id: SessionId
    field: FieldSnapshot


class GameService:
    """StartGame, Shoot, GetField and Leave, as seen by a transport.

    Every method returns ``Ok`` or ``Err``; nothing is raised for a rejected
    request. One instance owns one ``SessionDirectory`` for the lifetime of
    the process.
    """

    def __init__(
        self,
        directory: SessionDirectory | None = None,
        *,
        rows: int = ROWS,
        cols: int = COLS,
        ruleset: Ruleset = POST_SOVIET_RULES,
        field_access: FieldAccessPolicy = turn_holder_only,
    ) -> None:
        self.directory = directory or SessionDirectory()
        self.rows = rows
        self.cols = cols
        self.ruleset = ruleset
        self.field_access = field_access

    @classmethod
    def from_settings(
        cls, settings: GameSettings, directory: SessionDirectory | None = None
    ) -> GameService:
        return cls(
            directory,
            rows=settings.rows,
            cols=settings.cols,
            ruleset=settings.rules,
            field_access=FIELD_ACCESS_POLICIES[settings.field_access],
        )

    def start_game(self, ships: Iterable[Ship]) -> Result[StartedGame, PlacementError]:
        """Validate a fleet, register it and queue the player for a match."""
        started = time.perf_counter()
        with tracer.start_as_current_span("service.start_game") as span:
            built = PlayerField.try_from_ships(
                ships, rows=self.rows, cols=self.cols, ruleset=self.ruleset
            )
            if isinstance(built, Err):
                return self._reject_fleet(built.error, span)
            player_field = built.value
            if not player_field.is_ready():
                return self._reject_fleet(PlacementError.INCOMPLETE_FLEET, span)

            session_id = self.directory.register(player_field)
            span.set_attribute("session.id", str(session_id))
            record_game_metric("seabattle_games_started_total", 1, {"ruleset": self.ruleset.name})
            record_duration("seabattle_start_game_seconds", time.perf_counter() - started)
            return Ok(StartedGame(session_id, FieldSnapshot.from_field(player_field)))

    def shoot(
        self, session_id: SessionId, target: Position
    ) -> Result[ShotOutcome, AuthError | TurnError | ShotError | RoomError]:
        """Fire at the opponent's board on behalf of ``session_id``."""
        with tracer.start_as_current_span("service.shoot") as span:
            span.set_attribute("session.id", str(session_id))
            looked_up = self._room_and_enemy(session_id)
            if isinstance(looked_up, Err):
                return looked_up
            room, enemy = looked_up.value

            with room.lock:
                if room.finished:
                    return Err(TurnError.GAME_FINISHED)
                enemy_field = self.directory.field(enemy)
                if isinstance(enemy_field, Err):
                    return self._room_fault(session_id, "opponent_field_missing")
                outcome = room.shoot(session_id, enemy_field.value.board, target)

            if isinstance(outcome, Ok):
                result = "hit" if outcome.value.hit else "miss"
                record_game_metric("seabattle_shots_total", 1, {"result": result})
                if outcome.value.finished:
                    record_game_metric("seabattle_games_finished_total", 1)
            else:
                record_game_metric(
                    "seabattle_shots_rejected_total", 1, {"reason": outcome.error.value}
                )
            return outcome

    def get_field(
        self, session_id: SessionId
    ) -> Result[FieldSnapshot, AuthError | TurnError | RoomError]:
        """Snapshot the caller's own board, if the access policy allows it."""
        with tracer.start_as_current_span("service.get_field") as span:
            span.set_attribute("session.id", str(session_id))
            own = self.directory.field(session_id)
            if isinstance(own, Err):
                return own
            room = self.directory.room(session_id)
            if room is not None and room.my_enemy(session_id) is None:
                return self._room_fault(session_id, "room_without_session")
            if not self.field_access(room, session_id):
                span.set_attribute("field.denied", True)
                return Err(TurnError.AWAITING_OPPONENT if room is None else TurnError.NOT_YOUR_TURN)
            if room is None:
                return Ok(FieldSnapshot.from_field(own.value))
            with room.lock:
                return Ok(FieldSnapshot.from_field(own.value))

    def leave(self, session_id: SessionId) -> Result[None, AuthError]:
        with tracer.start_as_current_span("service.leave") as span:
            span.set_attribute("session.id", str(session_id))
            return self.directory.leave(session_id)

    def _room_and_enemy(
        self, session_id: SessionId
    ) -> Result[tuple[Room[SessionId], SessionId], AuthError | TurnError | RoomError]:
        if session_id not in self.directory:
            logger.warning("unknown_session", extra={"session": str(session_id)})
            return Err(AuthError.UNKNOWN_SESSION)
        room = self.directory.room(session_id)
        if room is None:
            return Err(TurnError.AWAITING_OPPONENT)
        enemy = room.my_enemy(session_id)
        if enemy is None:
            return self._room_fault(session_id, "room_without_session")
        return Ok((room, enemy))

    def _reject_fleet(self, error: PlacementError, span) -> Err[PlacementError]:
        span.set_attribute("placement.error", error.value)
        record_game_metric("seabattle_fleets_rejected_total", 1, {"reason": error.value})
        logger.info("fleet_rejected", extra={"reason": error.value})
        return Err(error)

    def _room_fault(self, session_id: SessionId, detail: str) -> Err[RoomError]:
        logger.error(
            "room_inconsistent",
            extra={"session": str(session_id), "detail": detail},
        )
        return Err(RoomError.NO_OPPONENT_MAPPED)
