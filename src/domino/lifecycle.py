"""
Round lifecycle: dealing a new round and folding a finished one into the match score.

waiting --(4 connected seats)--> active --(round over)--> between rounds --(4 connected seats)--> active ...
                                                   \\--(a team reaches the winning score)--> match over
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import Phase, RoundEndReason
from src.domino.board import Board
from src.domino.room import Room, RoundOutcome, RoundState
from src.domino.scoring import domino_points, resolve_block
from src.domino.seats import SEATS, next_seat, team_of
from src.domino.tiles import DOUBLE_SIX, Tile, deal, new_shuffled_deck

logger = logging.getLogger(__name__)


@dataclass
class RoundStart:
    round_number: int
    opener: int
    hands: dict[int, list[Tile]]
    first_round: bool


@dataclass
class RoundResult:
    round_number: int
    outcome: RoundOutcome
    points_awarded: int
    scoring_team: Optional[int]
    scores: list[int]
    board: list[list[int]]
    final_hands: dict[int, list[Tile]] = field(default_factory=dict)
    match_over: bool = False
    winning_team: Optional[int] = None


class RoundLifecycle:
    """Deals rounds and settles them for a single Room."""

    def __init__(self, room: Room, rng: Optional[random.Random] = None) -> None:
        self.room = room
        self.rng = rng or random.Random()

    def can_deal(self) -> bool:
        return self.room.phase in (
            Phase.WAITING,
            Phase.BETWEEN_ROUNDS,
        ) and self.room.all_seats_connected()

    def start_round(self) -> RoundStart:
        """
        Shuffle, deal 7 tiles to every seat, pick the opener, and go `active`.
        ----

        * First round of the match: whoever holds the double-six opens (and must open with it).
        * Later rounds: the seat decided by the previous round (room.next_opener), free to open with any tile.
        """
        room = self.room
        hands = deal(new_shuffled_deck(self.rng))
        for seat, hand in zip(SEATS, hands):
            player = room.player(seat)
            # for the type checker: can_deal() guarantees four seated players
            assert player is not None
            player.hand = hand

        room.round_number += 1
        first_round = room.is_first_round
        opener = (
            self._double_six_holder() if first_round else self._carried_over_opener()
        )
        room.round = RoundState(
            board=Board(),
            turn_starter=opener,
            current_seat=opener,
            first_round=first_round,
        )
        room.phase = Phase.ACTIVE
        logger.info(
            "room %s: round %d dealt, seat %d opens",
            room.room_id,
            room.round_number,
            opener,
        )
        return RoundStart(
            round_number=room.round_number,
            opener=opener,
            hands=room.hands(),
            first_round=first_round,
        )

    def finish_round(self) -> RoundResult:
        """
        Settle the round that just reached a terminal state.
        ----

        1. Compute the points and credit them to the winning team.
        2. Decide who opens the next round.
        3. match over if a team reached the winning score, between rounds otherwise.
        4. Drop the live round (its board and the final hands travel along in the result).
        """
        room = self.room
        round_state = room.round
        if round_state is None or round_state.outcome is None:
            raise RuntimeError(f"room {room.room_id}: no finished round to settle")

        outcome = round_state.outcome
        final_hands = room.hands()
        points, scoring_team = self._points(outcome, final_hands)
        if scoring_team is not None:
            room.credit(scoring_team, points)

        room.next_opener = (
            outcome.winner_seat
            if outcome.winner_seat is not None
            else next_seat(round_state.turn_starter, room.turn_direction)
        )

        winning_team = room.team_reached_winning_score()
        if winning_team is not None:
            room.phase = Phase.MATCH_OVER
            room.winning_team = winning_team
        else:
            room.phase = Phase.BETWEEN_ROUNDS

        result = RoundResult(
            round_number=room.round_number,
            outcome=outcome,
            points_awarded=points,
            scoring_team=scoring_team,
            scores=list(room.scores),
            board=round_state.board.to_list(),
            final_hands=final_hands,
            match_over=winning_team is not None,
            winning_team=winning_team,
        )
        room.round = None
        for player in room.players():
            player.hand = []

        logger.info(
            "room %s: round %d over (%s, winner seat %s, +%d for team %s), scores %s",
            room.room_id,
            result.round_number,
            outcome.reason,
            outcome.winner_seat,
            points,
            scoring_team,
            room.scores,
        )
        if result.match_over:
            logger.info("room %s: match over, team %d wins", room.room_id, winning_team)
        return result

    # -- PRIVATE HELPERS ---
    def _points(
        self, outcome: RoundOutcome, hands: dict[int, list[Tile]]
    ) -> tuple[int, Optional[int]]:
        if outcome.reason == RoundEndReason.DOMINO:
            assert outcome.winner_seat is not None
            return domino_points(hands, outcome.winner_seat), team_of(outcome.winner_seat)
        resolution = resolve_block(hands)
        return resolution.points, resolution.winning_team

    def _double_six_holder(self) -> int:
        return next(
            player.seat for player in self.room.players() if player.holds(DOUBLE_SIX)
        )

    def _carried_over_opener(self) -> int:
        if self.room.next_opener is None:
            return SEATS[0]
        return self.room.next_opener
