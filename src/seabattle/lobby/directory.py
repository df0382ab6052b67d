"""Session directory: identities, the waiting queue and room formation."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from typing import Callable
from uuid import UUID

from seabattle.engine.errors import AuthError
from seabattle.engine.field import PlayerField
from seabattle.engine.result import Err, Ok, Result
from seabattle.engine.room import Room
from seabattle.telemetry import get_meter, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.lobby.directory")
meter = get_meter("seabattle.lobby.directory")

ROOM_COUNTER = meter.create_counter(
    "seabattle_lobby_rooms_formed",
    unit="1",
    description="Rooms created by pairing two waiting sessions",
)

SessionId = UUID


class SessionDirectory:
    """Process-wide registry shared by every request.

    Holds the session -> field map, the FIFO of sessions waiting for an
    opponent and the session -> room map. One lock covers all three, so
    enqueueing and pairing happen atomically and no session can land in
    two rooms.
    """

    def __init__(self, id_factory: Callable[[], SessionId] = uuid.uuid4) -> None:
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._fields: dict[SessionId, PlayerField] = {}
        self._queue: deque[SessionId] = deque()
        self._rooms: dict[SessionId, Room[SessionId]] = {}

    def register(self, player_field: PlayerField) -> SessionId:
        """Store a ready field under a fresh identity and queue it for a match."""
        if not player_field.is_ready():
            raise ValueError("Only a field with a complete fleet can be registered.")
        with self._lock, tracer.start_as_current_span("directory.register") as span:
            session_id = self._mint()
            # Stamp the owner before the field becomes reachable by other sessions.
            player_field.owner = player_field.board.owner = str(session_id)
            self._fields[session_id] = player_field
            self._queue.append(session_id)
            span.set_attribute("session.queue_length", len(self._queue))
            logger.info(
                "session_registered",
                extra={"session": str(session_id), "queue_length": len(self._queue)},
            )
            self._pair_waiting()
            return session_id

    def field(self, session_id: SessionId) -> Result[PlayerField, AuthError]:
        with self._lock:
            player_field = self._fields.get(session_id)
        if player_field is None:
            logger.warning("unknown_session", extra={"session": str(session_id)})
            return Err(AuthError.UNKNOWN_SESSION)
        return Ok(player_field)

    def room(self, session_id: SessionId) -> Room[SessionId] | None:
        with self._lock:
            return self._rooms.get(session_id)

    def waiting(self) -> list[SessionId]:
        """Sessions still waiting for an opponent, oldest first."""
        with self._lock:
            return list(self._queue)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._fields

    def __len__(self) -> int:
        with self._lock:
            return len(self._fields)

    def leave(self, session_id: SessionId) -> Result[None, AuthError]:
        """Forget a session, forfeiting its match if one is still running.

        A paired session is forfeited under the room lock before its entries
        are dropped, so an opponent never sees a running room whose other
        field is gone.
        """
        with self._lock:
            if session_id not in self._fields:
                return Err(AuthError.UNKNOWN_SESSION)
            room = self._rooms.get(session_id)
            if room is None:
                del self._fields[session_id]
                self._queue.remove(session_id)
                logger.info("session_left_queue", extra={"session": str(session_id)})
                return Ok()

        # A session's room never changes once formed. Lock order: room, then directory.
        with room.lock:
            forfeited = room.forfeit(session_id)
            with self._lock:
                if self._fields.pop(session_id, None) is None:
                    return Err(AuthError.UNKNOWN_SESSION)
                self._rooms.pop(session_id, None)
        logger.info(
            "session_left_room",
            extra={"session": str(session_id), "forfeited": forfeited},
        )
        return Ok()

    def _mint(self) -> SessionId:
        session_id = self._id_factory()
        while session_id in self._fields:
            session_id = self._id_factory()
        return session_id

    def _pair_waiting(self) -> None:
        # Caller holds self._lock.
        while len(self._queue) >= 2:
            first = self._queue.popleft()
            second = self._queue.popleft()
            room: Room[SessionId] = Room(first, second)
            self._rooms[first] = room
            self._rooms[second] = room
            ROOM_COUNTER.add(1)
            logger.info(
                "room_formed",
                extra={"player1": str(first), "player2": str(second)},
            )
