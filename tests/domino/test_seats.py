"""Unit tests for /src/domino/seats.py"""

import pytest

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import TurnDirection
from src.domino.seats import (
    SEATS,
    next_seat,
    partner_of,
    seats_of_team,
    team_of,
    validate_seat,
)


@pytest.mark.parametrize("seat, team", [(0, 0), (1, 1), (2, 0), (3, 1)])
def test_team_by_seat_parity(seat: int, team: int) -> None:
    assert team_of(seat) == team
    assert seat in seats_of_team(team)


@pytest.mark.parametrize("seat, partner", [(0, 2), (1, 3), (2, 0), (3, 1)])
def test_partners_sit_opposite(seat: int, partner: int) -> None:
    assert partner_of(seat) == partner
    assert team_of(seat) == team_of(partner)


@pytest.mark.parametrize("seat, expected", [(0, 1), (1, 2), (2, 3), (3, 0)])
def test_next_seat_ascending(seat: int, expected: int) -> None:
    assert next_seat(seat, TurnDirection.ASCENDING) == expected


@pytest.mark.parametrize("seat, expected", [(0, 3), (3, 2), (2, 1), (1, 0)])
def test_next_seat_descending(seat: int, expected: int) -> None:
    assert next_seat(seat, TurnDirection.DESCENDING) == expected


def test_full_circle_visits_every_seat_once() -> None:
    for direction in TurnDirection:
        seat, visited = 2, []
        for _ in SEATS:
            visited.append(seat)
            seat = next_seat(seat, direction)
        assert sorted(visited) == list(SEATS)
        assert seat == 2


def test_turns_alternate_teams() -> None:
    """Whatever the direction, the two teams take turns."""
    for direction in TurnDirection:
        for seat in SEATS:
            assert team_of(next_seat(seat, direction)) != team_of(seat)


@pytest.mark.parametrize("seat", [-1, 4, 10])
def test_validate_seat(seat: int) -> None:
    with pytest.raises(InvalidRequestError):
        validate_seat(seat)
    assert validate_seat(3) == 3
