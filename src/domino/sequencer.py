"""
The TurnSequencer is the single authority over a live round.

States:
* AwaitingPlayerTurn(seat)  --> round.current_seat is set, round.outcome is None
* RoundOver(reason, winner)  --> round.current_seat is None, round.outcome is set

Every request is validated here against the actual room state, whatever the requester claims.
All checks happen before anything is mutated, so a rejected request leaves the room exactly as it was.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.exceptions import (
    ForcedPassInvalidError,
    IllegalMoveError,
    NotYourTurnError,
)
from src.core.shared_types import RoundEndReason, Side
from src.domino.room import Player, Room, RoundOutcome, RoundState
from src.domino.scoring import resolve_block
from src.domino.seats import NUM_SEATS, next_seat
from src.domino.tiles import DOUBLE_SIX, Tile

# Four passes in a row: nobody can move
BLOCK_PASS_COUNT = NUM_SEATS


@dataclass
class MoveResult:
    seat: int
    tile: Tile
    side: Side
    next_seat: Optional[int]
    outcome: Optional[RoundOutcome] = None


@dataclass
class PassResult:
    seat: int
    pass_count: int
    next_seat: Optional[int]
    outcome: Optional[RoundOutcome] = None


@dataclass
class TurnSequencer:
    room: Room

    # --- QUERIES ---
    @property
    def current_seat(self) -> Optional[int]:
        if self.room.round is None:
            return None
        return self.room.round.current_seat

    @property
    def outcome(self) -> Optional[RoundOutcome]:
        if self.room.round is None:
            return None
        return self.room.round.outcome

    def legal_plays(self, seat: int) -> dict[Tile, list[Side]]:
        """Tiles of the seat's hand that fit the board right now, with the side(s) they fit (regardless of whose turn it is)."""
        round_state = self.room.round
        player = self.room.player(seat)
        if round_state is None or round_state.is_over or player is None:
            return {}
        required_opener = self._required_opener(round_state)
        plays: dict[Tile, list[Side]] = {}
        for tile in player.hand:
            sides = round_state.board.playable_sides(tile, required_opener)
            if sides:
                plays[tile] = sides
        return plays

    def legal_tiles(self, seat: int) -> list[Tile]:
        return list(self.legal_plays(seat))

    def has_legal_move(self, seat: int) -> bool:
        return bool(self.legal_tiles(seat))

    # --- TRANSITIONS ---
    def play(self, seat: int, tile: Tile, side: Optional[Side] = None) -> MoveResult:
        """
        Attempt to play a tile.
        ----

        1. It must be your turn.
        2. You must hold the tile.
        3. The tile must fit (the board raises IllegalMoveError otherwise, without changing).
        4. Move tile from hand to board, reset the pass counter.
        5. Empty hand --> round over (domino). Otherwise the next seat is up.
        """
        round_state = self._live_round()
        self._assert_your_turn(round_state, seat)
        player = self._seated_player(seat)
        if not player.holds(tile):
            raise IllegalMoveError(f"Seat {seat} does not hold tile {tile}.")

        left_before = round_state.board.left_end
        right_before = round_state.board.right_end
        side_used = round_state.board.place(
            tile, side_hint=side, required_opener=self._required_opener(round_state)
        )
        player.remove_tile(tile)
        round_state.pass_count = 0

        if not player.hand:
            capicua = (
                left_before is not None
                and left_before != right_before
                and tile.has_pip(left_before)
                and tile.has_pip(right_before)
            )
            outcome = RoundOutcome(RoundEndReason.DOMINO, seat, capicua=capicua)
            self._end_round(round_state, outcome)
            return MoveResult(seat, tile, side_used, next_seat=None, outcome=outcome)

        self._advance_turn(round_state)
        return MoveResult(seat, tile, side_used, next_seat=round_state.current_seat)

    def pass_turn(self, seat: int) -> PassResult:
        """
        Attempt to pass.
        ----

        A pass must be forced: rejected if any tile in the hand fits the board.
        The fourth consecutive pass blocks the round.
        """
        round_state = self._live_round()
        self._assert_your_turn(round_state, seat)
        if self.has_legal_move(seat):
            raise ForcedPassInvalidError(
                f"Seat {seat} holds a playable tile and cannot pass."
            )

        round_state.pass_count += 1
        if round_state.pass_count >= BLOCK_PASS_COUNT:
            resolution = resolve_block(self.room.hands())
            outcome = RoundOutcome(RoundEndReason.BLOCKED, resolution.winner_seat)
            self._end_round(round_state, outcome)
            return PassResult(seat, round_state.pass_count, None, outcome)

        self._advance_turn(round_state)
        return PassResult(seat, round_state.pass_count, round_state.current_seat)

    # -- PRIVATE HELPERS ---
    def _live_round(self) -> RoundState:
        round_state = self.room.round
        if round_state is None or round_state.is_over:
            raise NotYourTurnError(
                f"No round in progress in room {self.room.room_id}. phase: {self.room.phase}"
            )
        return round_state

    def _assert_your_turn(self, round_state: RoundState, seat: int) -> None:
        if seat != round_state.current_seat:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for seat {round_state.current_seat} to move first."
            )

    def _seated_player(self, seat: int) -> Player:
        player = self.room.player(seat)
        # for the type checker: the current seat of a live round is always occupied
        assert player is not None
        return player

    def _required_opener(self, round_state: RoundState) -> Optional[Tile]:
        """Only the very first round of a match has to be opened with the double-six."""
        return DOUBLE_SIX if round_state.first_round else None

    def _advance_turn(self, round_state: RoundState) -> None:
        assert round_state.current_seat is not None
        round_state.current_seat = next_seat(
            round_state.current_seat, self.room.turn_direction
        )

    def _end_round(self, round_state: RoundState, outcome: RoundOutcome) -> None:
        round_state.outcome = outcome
        round_state.current_seat = None
