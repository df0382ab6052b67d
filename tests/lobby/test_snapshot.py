"""Tests for the wire-facing models."""

from uuid import UUID

import pytest
from pydantic import ValidationError
from seabattle.engine.field import PlayerField
from seabattle.engine.geometry import Position, Rectangle
from seabattle.lobby.snapshot import (
    FieldSnapshot,
    FleetSubmission,
    RectangleModel,
    StartGameResponse,
    parse_session_token,
    session_token,
)


def test_fleet_submission_builds_ships_in_order() -> None:
    submission = FleetSubmission.model_validate(
        {"ships": [{"first": [0, 3], "last": [0, 0]}, {"first": [5, 5], "last": [5, 5]}]}
    )
    ships = submission.to_ships()
    assert [ship.length for ship in ships] == [4, 1]
    assert ships[0].zone == Rectangle(Position(0, 0), Position(0, 3))


def test_negative_coordinates_are_rejected() -> None:
    with pytest.raises(ValidationError):
        RectangleModel.model_validate({"first": [-1, 0], "last": [0, 0]})


def test_field_snapshot_layers(standard_fleet) -> None:
    player_field = PlayerField.try_from_ships(standard_fleet).value
    player_field.board.place_shot(Position(0, 0))
    player_field.board.place_shot(Position(9, 9))
    snapshot = FieldSnapshot.from_field(player_field)

    assert (snapshot.rows, snapshot.cols) == (10, 10)
    assert len(snapshot.ships) == len(snapshot.shots) == 100
    assert snapshot.ships.count("1") == 20
    assert snapshot.shots == "1" + "0" * 98 + "1"
    assert snapshot.cell("ships", Position(0, 3))
    assert not snapshot.cell("ships", Position(0, 4))
    assert snapshot.cell("shots", Position(9, 9))
    assert not snapshot.cell("shots", Position(10, 0))
    assert snapshot.fleet[0] == RectangleModel(first=(0, 0), last=(0, 3))
    assert len(snapshot.fleet) == 10


def test_start_game_response_serialises_session_id(standard_fleet) -> None:
    player_field = PlayerField.try_from_ships(standard_fleet).value
    response = StartGameResponse(
        session_id=UUID(int=5), field=FieldSnapshot.from_field(player_field)
    )
    dumped = response.model_dump(mode="json")
    assert dumped["session_id"] == str(UUID(int=5))
    assert dumped["field"]["fleet"][1] == {"first": [0, 5], "last": [0, 7]}


def test_session_token_is_sixteen_opaque_bytes() -> None:
    session_id = UUID("12345678-1234-5678-1234-567812345678")
    token = session_token(session_id)
    assert len(token) == 16
    assert parse_session_token(token) == session_id
    assert parse_session_token(b"short") is None
