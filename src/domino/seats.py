"""
Seats, teams and turn order.

Seats 0/2 are Team 0, seats 1/3 are Team 1 (partners sit opposite each other).
"""

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import TurnDirection

NUM_SEATS = 4
SEATS: tuple[int, ...] = tuple(range(NUM_SEATS))
TEAMS: tuple[int, ...] = (0, 1)

_STEP: dict[TurnDirection, int] = {
    TurnDirection.ASCENDING: 1,
    TurnDirection.DESCENDING: -1,
}


def validate_seat(seat: int) -> int:
    if seat not in SEATS:
        raise InvalidRequestError(f"Seat must be one of {list(SEATS)}, got {seat!r}.")
    return seat


def team_of(seat: int) -> int:
    return seat % 2


def partner_of(seat: int) -> int:
    return (seat + 2) % NUM_SEATS


def seats_of_team(team: int) -> tuple[int, int]:
    return (team, team + 2)


def next_seat(seat: int, direction: TurnDirection = TurnDirection.ASCENDING) -> int:
    return (seat + _STEP[direction]) % NUM_SEATS
