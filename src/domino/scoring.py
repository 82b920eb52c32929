"""
Round scoring.

* Domino: the winner's team scores every pip left in the other three hands.
* Blocked (tranca): the team with fewer pips (both partners combined) wins and scores the difference.
  Equal totals --> nobody wins, nobody scores.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from src.domino.seats import TEAMS, seats_of_team, team_of
from src.domino.tiles import Tile

Hands = Mapping[int, Iterable[Tile]]


@dataclass(frozen=True)
class BlockResolution:
    winner_seat: Optional[int]
    winning_team: Optional[int]
    points: int
    team_totals: tuple[int, int]


def hand_pips(hand: Iterable[Tile]) -> int:
    return sum(tile.pip_sum for tile in hand)


def seat_pips(hands: Hands) -> dict[int, int]:
    return {seat: hand_pips(hand) for seat, hand in hands.items()}


def team_pips(hands: Hands) -> tuple[int, int]:
    per_seat = seat_pips(hands)
    totals = [0 for _ in TEAMS]
    for seat, pips in per_seat.items():
        totals[team_of(seat)] += pips
    return totals[0], totals[1]


def domino_points(hands: Hands, winner_seat: int) -> int:
    """Pips left in the three hands other than the winner's (the partner's hand counts too)."""
    return sum(pips for seat, pips in seat_pips(hands).items() if seat != winner_seat)


def resolve_block(hands: Hands) -> BlockResolution:
    """
    Decide a blocked round.
    ----

    1. Compare team totals. The lower team wins the round.
    2. Within the winning team, the partner holding fewer pips is the winning seat (lower seat number on a tie).
       That seat opens the next round.
    3. Points = losing team total - winning team total.
    """
    totals = team_pips(hands)
    if totals[0] == totals[1]:
        return BlockResolution(None, None, 0, totals)

    winning_team = 0 if totals[0] < totals[1] else 1
    losing_team = 1 - winning_team
    per_seat = seat_pips(hands)
    winner_seat = min(
        seats_of_team(winning_team), key=lambda seat: (per_seat.get(seat, 0), seat)
    )
    return BlockResolution(
        winner_seat=winner_seat,
        winning_team=winning_team,
        points=totals[losing_team] - totals[winning_team],
        team_totals=totals,
    )
