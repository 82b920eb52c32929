"""
A Room is one match between four seats: who sits where, the team scores, the match phase,
and the single live round (if any).

The Room only stores state. The TurnSequencer changes it during a round and the RoundLifecycle
changes it between rounds.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import Phase, RoundEndReason, TurnDirection
from src.domino.board import Board
from src.domino.seats import SEATS, TEAMS, team_of
from src.domino.tiles import Tile


@dataclass
class Player:
    name: str
    connection_id: str
    seat: int
    connected: bool = True
    hand: list[Tile] = field(default_factory=list)

    @property
    def team(self) -> int:
        return team_of(self.seat)

    def holds(self, tile: Tile) -> bool:
        return tile in self.hand

    def remove_tile(self, tile: Tile) -> None:
        self.hand.remove(tile)

    def pip_total(self) -> int:
        return sum(tile.pip_sum for tile in self.hand)


@dataclass
class RoundOutcome:
    reason: RoundEndReason
    winner_seat: Optional[int]
    # domino win where the last tile fitted both (different) open ends
    capicua: bool = False


@dataclass
class RoundState:
    """The live round: the board, whose turn it is, and the consecutive pass counter."""

    board: Board
    turn_starter: int
    current_seat: Optional[int]
    first_round: bool
    pass_count: int = 0
    outcome: Optional[RoundOutcome] = None

    @property
    def is_over(self) -> bool:
        return self.outcome is not None


@dataclass
class Room:
    room_id: str
    turn_direction: TurnDirection = TurnDirection.ASCENDING
    winning_score: int = 100
    seats: dict[int, Optional[Player]] = field(
        default_factory=lambda: {seat: None for seat in SEATS}
    )
    phase: Phase = Phase.WAITING
    scores: list[int] = field(default_factory=lambda: [0 for _ in TEAMS])
    next_opener: Optional[int] = None
    round: Optional[RoundState] = None
    round_number: int = 0
    winning_team: Optional[int] = None

    # --- SEATS ---
    def player(self, seat: int) -> Optional[Player]:
        return self.seats.get(seat)

    def players(self) -> list[Player]:
        """Seated players (connected or not), in seat order"""
        return [player for seat in SEATS if (player := self.seats[seat]) is not None]

    def open_seats(self) -> list[int]:
        return [seat for seat in SEATS if self.seats[seat] is None]

    def seats_remaining(self) -> int:
        return len(self.open_seats())

    def seat_of(self, name: str) -> Optional[int]:
        """Capability lookup: identity --> seat"""
        return next(
            (player.seat for player in self.players() if player.name == name), None
        )

    def all_seats_connected(self) -> bool:
        return all(
            player is not None and player.connected for player in self.seats.values()
        )

    def has_connected_players(self) -> bool:
        return any(player.connected for player in self.players())

    def is_empty(self) -> bool:
        return not self.players()

    # --- HANDS ---
    def hands(self) -> dict[int, list[Tile]]:
        return {player.seat: list(player.hand) for player in self.players()}

    def hand_sizes(self) -> dict[int, int]:
        return {player.seat: len(player.hand) for player in self.players()}

    # --- MATCH ---
    @property
    def is_first_round(self) -> bool:
        return self.round_number <= 1

    def credit(self, team: int, points: int) -> None:
        self.scores[team] += points

    def team_reached_winning_score(self) -> Optional[int]:
        """Team with the higher score among those past the threshold (None if nobody is)."""
        reached = [team for team in TEAMS if self.scores[team] >= self.winning_score]
        if not reached:
            return None
        return max(reached, key=lambda team: self.scores[team])
