"""One player's board and fleet, plus the ship placement pipeline."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable

from seabattle.telemetry import get_meter, get_tracer

from .board import COLS, ROWS, Board
from .errors import PlacementError
from .fleet import POST_SOVIET_RULES, Fleet, Ruleset
from .geometry import Offset, Position
from .result import Err, Ok, Result
from .ship import Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.field")
meter = get_meter("seabattle.engine.field")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

_RANDOM_ATTEMPTS_PER_SHIP = 200
_RANDOM_RESTARTS = 50


@dataclass(eq=False)
class PlayerField:
    """A player's private grid together with the ships committed to it.

    Every accepted ship has all its cells marked on ``board``, and no two
    accepted ships overlap or touch, not even diagonally. Once the fleet is
    full the field is ready and only incoming shots change it.
    """

    rows: int = ROWS
    cols: int = COLS
    ruleset: Ruleset = POST_SOVIET_RULES
    owner: str = "unknown"
    board: Board = field(init=False)
    fleet: Fleet = field(init=False)

    def __post_init__(self) -> None:
        self.board = Board(rows=self.rows, cols=self.cols, owner=self.owner)
        self.fleet = Fleet(ruleset=self.ruleset)

    def is_out_of_bounds(self, ship: Ship) -> bool:
        return not self.board.contains(ship.zone)

    def overlaps(self, ship: Ship) -> bool:
        """Check the footprint grown by one cell against ships already placed."""
        return any(self.board.has_ship(pos) for pos in ship.zone.inflate())

    def is_full(self) -> bool:
        return self.fleet.is_full()

    is_ready = is_full

    def check_ship(self, ship: Ship) -> PlacementError | None:
        """Run the placement rules without touching any state."""
        if not ship.is_straight() or not self.ruleset.allows(ship.length):
            return PlacementError.WRONG_LENGTH
        if self.is_out_of_bounds(ship):
            return PlacementError.OUT_OF_BOUNDS
        if self.overlaps(ship):
            return PlacementError.OVERLAP
        if self.is_full() or self.fleet.quota_met(ship.length):
            return PlacementError.TOO_MANY_SHIPS
        return None

    def try_place_ship(self, ship: Ship) -> Result[None, PlacementError]:
        """Validate ``ship`` and, if every rule passes, commit it to board and fleet."""
        with tracer.start_as_current_span("field.try_place_ship") as span:
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.first.row", ship.zone.first.row)
            span.set_attribute("ship.first.col", ship.zone.first.col)
            span.set_attribute("field.owner", self.owner)

            error = self.check_ship(ship)
            if error is not None:
                span.set_attribute("placement.error", error.value)
                PLACEMENT_COUNTER.add(1, attributes={"result": error.value, "owner": self.owner})
                logger.debug(
                    "ship_placement_rejected",
                    extra={
                        "owner": self.owner,
                        "reason": error.value,
                        "first": (ship.zone.first.row, ship.zone.first.col),
                        "last": (ship.zone.last.row, ship.zone.last.col),
                    },
                )
                return Err(error)

            for pos in ship.cells():
                self.board.place_ship(pos)
            self.fleet.push(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.debug(
                "ship_placed",
                extra={"owner": self.owner, "length": ship.length, "ships": len(self.fleet)},
            )
            return Ok()

    @classmethod
    def try_from_ships(
        cls,
        ships: Iterable[Ship],
        *,
        rows: int = ROWS,
        cols: int = COLS,
        ruleset: Ruleset = POST_SOVIET_RULES,
        owner: str = "unknown",
    ) -> Result[PlayerField, PlacementError]:
        """Build a field by placing ``ships`` in order, stopping at the first rejection."""
        player_field = cls(rows=rows, cols=cols, ruleset=ruleset, owner=owner)
        for ship in ships:
            result = player_field.try_place_ship(ship)
            if isinstance(result, Err):
                return result
        return Ok(player_field)

    @classmethod
    def random(
        cls,
        rng: random.Random,
        *,
        rows: int = ROWS,
        cols: int = COLS,
        ruleset: Ruleset = POST_SOVIET_RULES,
        owner: str = "unknown",
    ) -> PlayerField:
        """Randomly place a complete fleet, longest ships first."""
        with tracer.start_as_current_span("field.random") as span:
            span.set_attribute("field.owner", owner)
            lengths = [
                length
                for length in range(ruleset.max_length, 0, -1)
                for _ in range(ruleset.required(length))
            ]
            for restart in range(_RANDOM_RESTARTS):
                player_field = cls(rows=rows, cols=cols, ruleset=ruleset, owner=owner)
                if all(player_field._place_randomly(length, rng) for length in lengths):
                    logger.debug(
                        "random_fleet_placed",
                        extra={"owner": owner, "restarts": restart},
                    )
                    return player_field
            raise ValueError(
                f"Could not fit the {ruleset.name} fleet on a {rows}x{cols} board."
            )

    def _place_randomly(self, length: int, rng: random.Random) -> bool:
        for _ in range(_RANDOM_ATTEMPTS_PER_SHIP):
            direction = rng.choice((Offset.RIGHT, Offset.DOWN))
            start = Position(rng.randrange(self.rows), rng.randrange(self.cols))
            if self.try_place_ship(Ship.from_bow(start, length, direction)).is_ok():
                return True
        return False
