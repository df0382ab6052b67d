"""Command-line driver: play a match against a random opponent through GameService."""

from __future__ import annotations

import argparse
import logging
import random
from string import ascii_uppercase
from typing import Sequence

from seabattle.config import GameSettings
from seabattle.engine.errors import PlacementError
from seabattle.engine.field import PlayerField
from seabattle.engine.geometry import Offset, Position
from seabattle.engine.result import Err
from seabattle.engine.ship import Ship
from seabattle.lobby.directory import SessionId
from seabattle.lobby.service import GameService
from seabattle.lobby.snapshot import FieldSnapshot
from seabattle.telemetry import configure_console_logging, init_telemetry

ROW_LABELS = ascii_uppercase

PLACEMENT_MESSAGES = {
    PlacementError.WRONG_LENGTH: "that length is not part of this fleet",
    PlacementError.OUT_OF_BOUNDS: "the ship would leave the board",
    PlacementError.OVERLAP: "ships may not touch, not even at a corner",
    PlacementError.TOO_MANY_SHIPS: "you already have enough ships of that length",
    PlacementError.INCOMPLETE_FLEET: "the fleet is incomplete",
}


def parse_coordinate(text: str, rows: int, cols: int) -> Position:
    """Accept ``A5`` style labels or a ``"row col"`` pair of zero-based numbers."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        row = ROW_LABELS.find(cleaned[0])
        if row < 0 or row >= rows:
            raise ValueError(f"Row must be between A and {ROW_LABELS[rows - 1]}.")
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {cols}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        row, col = map(int, parts)
    if row not in range(rows) or col not in range(cols):
        raise ValueError(f"Coordinates must be within the {rows}x{cols} board.")
    return Position(row, col)


def format_label(pos: Position) -> str:
    return f"{ROW_LABELS[pos.row]}{pos.col + 1}"


def format_own_board(snapshot: FieldSnapshot) -> str:
    rows = [_header(snapshot.cols)]
    for row in range(snapshot.rows):
        symbols = []
        for col in range(snapshot.cols):
            pos = Position(row, col)
            ship = snapshot.cell("ships", pos)
            shot = snapshot.cell("shots", pos)
            if ship and shot:
                symbol = "X"
            elif shot:
                symbol = "o"
            else:
                symbol = "S" if ship else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def format_enemy_waters(shots: dict[Position, bool], rows: int, cols: int) -> str:
    lines = [_header(cols)]
    for row in range(rows):
        symbols = []
        for col in range(cols):
            hit = shots.get(Position(row, col))
            symbol = "." if hit is None else ("X" if hit else "o")
            symbols.append(f"{symbol:>2}")
        lines.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(lines)


def _header(cols: int) -> str:
    return "    " + " ".join(f"{col + 1:>2}" for col in range(cols))


def _prompt_direction(length: int) -> Offset:
    if length == 1:
        return Offset.RIGHT
    while True:
        raw = input(f"Place a ship of length {length}. Orientation [H/V]: ").strip().upper()
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Offset.RIGHT
        if raw in {"V", "VER", "VERTICAL"}:
            return Offset.DOWN
        print("Please enter H for horizontal or V for vertical.")


def _manual_fleet(settings: GameSettings) -> list[Ship]:
    draft = PlayerField(rows=settings.rows, cols=settings.cols, ruleset=settings.rules)
    rules = settings.rules
    for length in range(rules.max_length, 0, -1):
        for _ in range(rules.required(length)):
            while True:
                print("\nCurrent layout:")
                print(format_own_board(FieldSnapshot.from_field(draft)))
                direction = _prompt_direction(length)
                raw = input("Enter the bow coordinate (e.g., A1): ")
                try:
                    bow = parse_coordinate(raw, settings.rows, settings.cols)
                except ValueError as exc:
                    print(f"Invalid coordinate: {exc}")
                    continue
                result = draft.try_place_ship(Ship.from_bow(bow, length, direction))
                if isinstance(result, Err):
                    print(f"Ship cannot be placed there: {PLACEMENT_MESSAGES[result.error]}.")
                    continue
                break
    return list(draft.fleet)


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_target(settings: GameSettings, fired: dict[Position, bool]) -> Position:
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            pos = parse_coordinate(raw, settings.rows, settings.cols)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if pos in fired:
            print("That cell has already been targeted. Choose another.")
            continue
        return pos


def _start(service: GameService, ships: Sequence[Ship]) -> SessionId:
    result = service.start_game(ships)
    if isinstance(result, Err):
        raise SystemExit(f"Fleet rejected: {PLACEMENT_MESSAGES[result.error]}.")
    return result.value.session_id


def play_game(settings: GameSettings, seed: int | None = None, random_fleet: bool = False) -> None:
    print("Welcome to Sea Battle!\n")
    rng = random.Random(seed)
    service = GameService.from_settings(settings)

    def random_ships() -> list[Ship]:
        placed = PlayerField.random(
            rng, rows=settings.rows, cols=settings.cols, ruleset=settings.rules
        )
        return list(placed.fleet)

    if not random_fleet and _prompt_manual_setup():
        human_ships = _manual_fleet(settings)
    else:
        human_ships = random_ships()
        print("\nYour ships have been positioned automatically.")

    human = _start(service, human_ships)
    ai = _start(service, random_ships())
    room = service.directory.room(human)
    if room is None:
        raise SystemExit("Could not pair you with an opponent.")

    human_shots: dict[Position, bool] = {}
    ai_targets = [
        Position(row, col) for row in range(settings.rows) for col in range(settings.cols)
    ]
    rng.shuffle(ai_targets)

    while not room.finished:
        if room.is_my_move(human):
            own = service.get_field(human)
            if not isinstance(own, Err):
                print("\nYour Board:")
                print(format_own_board(own.value))
            print("\nEnemy Waters:")
            print(format_enemy_waters(human_shots, settings.rows, settings.cols))
            target = _prompt_target(settings, human_shots)
            shooter, label = human, "You"
        else:
            target = ai_targets.pop()
            shooter, label = ai, "The AI"

        outcome = service.shoot(shooter, target)
        if isinstance(outcome, Err):
            print(f"Shot rejected: {outcome.error.value}")
            continue
        if shooter == human:
            human_shots[target] = outcome.value.hit
        verdict = "hit, and shoots again" if outcome.value.hit else "miss"
        print(f"{label} fired at {format_label(target)}: {verdict}")

    if room.winner == human:
        print("\nCongratulations, you won!")
    else:
        print("\nThe AI won this time. Better luck next battle!")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Sea Battle via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--ruleset", choices=["post_soviet", "american"], default=None, help="Fleet composition."
    )
    parser.add_argument(
        "--field-access",
        choices=["turn_holder", "always"],
        default=None,
        help="Who may view their own board.",
    )
    parser.add_argument(
        "--random-fleet", action="store_true", help="Skip manual placement."
    )
    args = parser.parse_args(argv)

    configure_console_logging(logging.WARNING)
    init_telemetry()
    settings = GameSettings.from_env(ruleset=args.ruleset, field_access=args.field_access)
    play_game(settings, seed=args.seed, random_fleet=args.random_fleet)


if __name__ == "__main__":
    main()
