"""Two-player room: turn order, shot resolution and win detection."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Hashable, TypeVar

from seabattle.telemetry import get_meter, get_tracer

from .board import Board
from .errors import ShotError, TurnError
from .geometry import Position
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.room")
meter = get_meter("seabattle.engine.room")

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_room_shots",
    unit="1",
    description="Shots resolved inside rooms",
)

PlayerId = TypeVar("PlayerId", bound=Hashable)


class RoomPhase(Enum):
    """Lifecycle of a room."""

    AWAITING_FIRST_MOVE = "awaiting_first_move"
    AWAITING_SHOT = "awaiting_shot"
    FINISHED = "finished"


@dataclass(frozen=True)
class ShotOutcome:
    """What a resolved shot did."""

    hit: bool
    finished: bool = False


@dataclass(eq=False)
class Room(Generic[PlayerId]):
    """Pairs two players and arbitrates whose move it is.

    The first player holds the first move. A hit keeps the move with the
    shooter; a miss hands it to the opponent. Mutations go through ``lock``
    so a concurrent reader never sees a shot without its turn change.
    """

    player1: PlayerId
    player2: PlayerId
    move: PlayerId = field(init=False)
    phase: RoomPhase = field(init=False, default=RoomPhase.AWAITING_FIRST_MOVE)
    winner: PlayerId | None = field(init=False, default=None)
    lock: threading.RLock = field(init=False, repr=False, default_factory=threading.RLock)

    def __post_init__(self) -> None:
        if self.player1 == self.player2:
            raise ValueError("A room needs two distinct players.")
        self.move = self.player1

    def is_my_move(self, player: PlayerId) -> bool:
        return player == self.move

    def my_enemy(self, player: PlayerId) -> PlayerId | None:
        if player == self.player1:
            return self.player2
        if player == self.player2:
            return self.player1
        return None

    @property
    def finished(self) -> bool:
        return self.phase is RoomPhase.FINISHED

    def shoot(
        self, shooter: PlayerId, target_board: Board, target: Position
    ) -> Result[ShotOutcome, TurnError | ShotError]:
        """Resolve one shot from ``shooter`` against the opponent's board."""
        with self.lock, tracer.start_as_current_span("room.shoot") as span:
            span.set_attribute("shot.row", target.row)
            span.set_attribute("shot.col", target.col)
            if self.finished:
                logger.info("shot_rejected_game_finished", extra={"shooter": str(shooter)})
                return Err(TurnError.GAME_FINISHED)
            if not self.is_my_move(shooter):
                logger.info(
                    "shot_rejected_wrong_player",
                    extra={"shooter": str(shooter), "current": str(self.move)},
                )
                return Err(TurnError.NOT_YOUR_TURN)
            if not target_board.contains(target):
                logger.info(
                    "shot_rejected_out_of_bounds",
                    extra={"shooter": str(shooter), "row": target.row, "col": target.col},
                )
                return Err(ShotError.OUT_OF_BOUNDS)

            hit = target_board.has_ship(target)
            target_board.place_shot(target)
            span.set_attribute("shot.outcome", "hit" if hit else "miss")
            SHOT_COUNTER.add(1, attributes={"outcome": "hit" if hit else "miss"})

            if target_board.all_ships_sunk():
                self.phase = RoomPhase.FINISHED
                self.winner = shooter
                span.set_attribute("room.winner", str(shooter))
                logger.info("room_finished", extra={"winner": str(shooter)})
                return Ok(ShotOutcome(hit=hit, finished=True))

            self.phase = RoomPhase.AWAITING_SHOT
            if not hit:
                self.move = self.my_enemy(shooter)
            span.set_attribute("room.next_mover", str(self.move))
            return Ok(ShotOutcome(hit=hit))

    def forfeit(self, player: PlayerId) -> bool:
        """End the match in favour of ``player``'s opponent.

        Returns False when the room was already finished or ``player`` is
        not part of it.
        """
        with self.lock:
            opponent = self.my_enemy(player)
            if opponent is None or self.finished:
                return False
            self.phase = RoomPhase.FINISHED
            self.winner = opponent
            self.move = opponent
            logger.info(
                "room_forfeited",
                extra={"leaver": str(player), "winner": str(opponent)},
            )
            return True
