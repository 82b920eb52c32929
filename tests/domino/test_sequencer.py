"""Unit tests for /src/domino/sequencer.py"""

from copy import deepcopy
from typing import Callable

import pytest

from src.core.exceptions import (
    ForcedPassInvalidError,
    IllegalMoveError,
    NotYourTurnError,
)
from src.core.shared_types import RoundEndReason, Side, TurnDirection
from src.domino.room import Room
from src.domino.sequencer import TurnSequencer
from src.domino.tiles import DOUBLE_SIX, Tile

RoomFactory = Callable[..., Room]

# Nobody holds a 0, a 1 or a 2 in the round below, so with ends {1, 2} every seat is stuck.
STUCK_HANDS = {
    0: [(3, 3), (4, 5)],
    1: [(6, 6), (5, 6)],
    2: [(3, 4)],
    3: [(4, 4), (3, 6)],
}


def snapshot(room: Room) -> tuple:
    """Everything a rejected request must leave untouched."""
    assert room.round is not None
    return (
        room.round.board.to_list(),
        room.round.current_seat,
        room.round.pass_count,
        deepcopy(room.hands()),
    )


# -- FIRST ROUND --
def test_first_round_double_six_opens(make_room: RoomFactory) -> None:
    """empty board, first round, seat 2 holds [6|6] --> plays it, ends {6, 6}, seat 3 is up"""
    room = make_room(
        hands={2: [(6, 6), (1, 2)], 3: [(0, 0)]}, current_seat=2, first_round=True
    )
    sequencer = TurnSequencer(room)

    move = sequencer.play(2, DOUBLE_SIX)

    assert move.side == Side.CENTER
    assert room.round.board.ends() == {"left": 6, "right": 6}
    assert move.next_seat == 3
    assert sequencer.current_seat == 3
    assert room.player(2).hand == [Tile(1, 2)]


def test_first_round_descending_turn_order(make_room: RoomFactory) -> None:
    room = make_room(
        hands={2: [(6, 6), (1, 2)]},
        current_seat=2,
        first_round=True,
        turn_direction=TurnDirection.DESCENDING,
    )
    move = TurnSequencer(room).play(2, DOUBLE_SIX)
    assert move.next_seat == 1


def test_first_round_must_open_with_double_six(make_room: RoomFactory) -> None:
    room = make_room(
        hands={2: [(6, 6), (1, 2)]}, current_seat=2, first_round=True
    )
    before = snapshot(room)
    with pytest.raises(IllegalMoveError):
        TurnSequencer(room).play(2, Tile(1, 2))
    assert snapshot(room) == before


def test_later_round_opener_plays_any_tile(make_room: RoomFactory) -> None:
    room = make_room(hands={1: [(1, 2), (3, 3)]}, current_seat=1)
    move = TurnSequencer(room).play(1, Tile(1, 2))
    assert move.side == Side.CENTER
    assert room.round.board.ends() == {"left": 1, "right": 2}


# -- PLAY --
def test_play_defaults_to_right_end(make_room: RoomFactory) -> None:
    """ends {3, 5}, seat holds [5|5], no side hint --> right end, new right end 5"""
    room = make_room(
        hands={0: [(5, 5), (0, 0)]}, board=[[3, 1], [1, 5]], current_seat=0
    )
    move = TurnSequencer(room).play(0, Tile(5, 5))
    assert move.side == Side.RIGHT
    assert room.round.board.right_end == 5
    assert room.round.board.left_end == 3


def test_play_with_side_hint(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(3, 5), (0, 0)]}, board=[[3, 1], [1, 5]])
    move = TurnSequencer(room).play(0, Tile(3, 5), Side.LEFT)
    assert move.side == Side.LEFT
    assert room.round.board.ends() == {"left": 5, "right": 5}


def test_play_out_of_turn(make_room: RoomFactory) -> None:
    room = make_room(
        hands={0: [(1, 1)], 1: [(5, 2)]}, board=[[3, 1], [1, 5]], current_seat=0
    )
    before = snapshot(room)
    with pytest.raises(NotYourTurnError):
        TurnSequencer(room).play(1, Tile(5, 2))
    assert snapshot(room) == before


def test_play_tile_not_in_hand(make_room: RoomFactory) -> None:
    """The requester claims a tile it does not hold (it even fits the board)."""
    room = make_room(hands={0: [(0, 0)], 1: [(5, 2)]}, board=[[3, 1], [1, 5]])
    before = snapshot(room)
    with pytest.raises(IllegalMoveError):
        TurnSequencer(room).play(0, Tile(5, 2))
    assert snapshot(room) == before


def test_play_tile_fitting_neither_end(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(0, 0), (6, 6)]}, board=[[3, 1], [1, 5]])
    before = snapshot(room)
    with pytest.raises(IllegalMoveError):
        TurnSequencer(room).play(0, Tile(6, 6))
    assert snapshot(room) == before


def test_play_with_side_hint_for_wrong_end(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(5, 0), (6, 6)]}, board=[[3, 1], [1, 5]])
    before = snapshot(room)
    with pytest.raises(IllegalMoveError):
        TurnSequencer(room).play(0, Tile(5, 0), Side.LEFT)
    assert snapshot(room) == before


def test_play_resets_pass_counter(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(5, 0), (6, 6)]}, board=[[3, 1], [1, 5]])
    room.round.pass_count = 3
    TurnSequencer(room).play(0, Tile(5, 0))
    assert room.round.pass_count == 0


def test_play_moves_tile_from_hand_to_board(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(5, 0), (6, 6)]}, board=[[3, 1], [1, 5]])
    TurnSequencer(room).play(0, Tile(0, 5))
    assert not room.player(0).holds(Tile(5, 0))
    assert room.round.board.contains(Tile(5, 0))
    assert len(room.round.board) == 3


# -- DOMINO --
def test_emptying_hand_ends_round_with_domino(make_room: RoomFactory) -> None:
    room = make_room(
        hands={0: [(5, 0)], 1: [(1, 1)]}, board=[[3, 1], [1, 5]], current_seat=0
    )
    sequencer = TurnSequencer(room)
    move = sequencer.play(0, Tile(5, 0))

    assert move.outcome is not None
    assert move.outcome.reason == RoundEndReason.DOMINO
    assert move.outcome.winner_seat == 0
    assert move.next_seat is None
    assert sequencer.current_seat is None
    assert room.round.is_over


def test_domino_is_never_blocked_even_after_passes(make_room: RoomFactory) -> None:
    """Three passes in a row, then the last tile goes down: domino, not blocked."""
    room = make_room(
        hands={0: [(5, 0)], 1: [(1, 1)]}, board=[[3, 1], [1, 5]], current_seat=0
    )
    room.round.pass_count = 3
    move = TurnSequencer(room).play(0, Tile(5, 0))
    assert move.outcome.reason == RoundEndReason.DOMINO


def test_no_actions_after_round_over(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(5, 0)], 1: [(5, 5)]}, board=[[3, 1], [1, 5]])
    sequencer = TurnSequencer(room)
    sequencer.play(0, Tile(5, 0))
    with pytest.raises(NotYourTurnError):
        sequencer.play(1, Tile(5, 5))
    with pytest.raises(NotYourTurnError):
        sequencer.pass_turn(1)


def test_capicua(make_room: RoomFactory) -> None:
    """Last tile fits both (different) ends."""
    room = make_room(hands={0: [(3, 5)]}, board=[[3, 1], [1, 5]])
    move = TurnSequencer(room).play(0, Tile(3, 5))
    assert move.outcome.capicua


def test_not_capicua_when_only_one_end_fits(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(5, 0)]}, board=[[3, 1], [1, 5]])
    move = TurnSequencer(room).play(0, Tile(5, 0))
    assert not move.outcome.capicua


def test_not_capicua_when_ends_are_equal(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(6, 2)]}, board=[[6, 6]])
    move = TurnSequencer(room).play(0, Tile(6, 2))
    assert not move.outcome.capicua


# -- PASS --
def test_forced_pass_then_illegal_play(make_room: RoomFactory) -> None:
    """ends {2, 4}: seat 0 holds nothing with a 2 or a 4 --> pass accepted; seat 1 then tries a tile that does not fit."""
    room = make_room(
        hands={0: [(0, 1), (3, 5)], 1: [(6, 6), (2, 3)]},
        board=[[2, 4]],
        current_seat=0,
    )
    sequencer = TurnSequencer(room)

    passed = sequencer.pass_turn(0)
    assert passed.pass_count == 1
    assert passed.next_seat == 1

    with pytest.raises(IllegalMoveError):
        sequencer.play(1, Tile(6, 6))
    assert room.round.pass_count == 1
    assert sequencer.current_seat == 1


def test_pass_while_holding_playable_tile(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(0, 1), (4, 5)]}, board=[[2, 4]])
    before = snapshot(room)
    with pytest.raises(ForcedPassInvalidError):
        TurnSequencer(room).pass_turn(0)
    assert snapshot(room) == before


def test_pass_out_of_turn(make_room: RoomFactory) -> None:
    room = make_room(hands={0: [(0, 1)], 1: [(0, 0)]}, board=[[2, 4]])
    before = snapshot(room)
    with pytest.raises(NotYourTurnError):
        TurnSequencer(room).pass_turn(1)
    assert snapshot(room) == before


def test_stale_pass_is_harmless(make_room: RoomFactory) -> None:
    """The same pass submitted twice: the second one is rejected, nothing changes."""
    room = make_room(hands={0: [(0, 1)], 1: [(2, 3)]}, board=[[2, 4]])
    sequencer = TurnSequencer(room)
    sequencer.pass_turn(0)
    before = snapshot(room)
    with pytest.raises(NotYourTurnError):
        sequencer.pass_turn(0)
    assert snapshot(room) == before


def test_four_passes_block_the_round(make_room: RoomFactory) -> None:
    room = make_room(hands=STUCK_HANDS, board=[[1, 2]], current_seat=0)
    sequencer = TurnSequencer(room)
    for seat in (0, 1, 2):
        result = sequencer.pass_turn(seat)
        assert result.outcome is None
    result = sequencer.pass_turn(3)

    assert result.pass_count == 4
    assert result.outcome is not None
    assert result.outcome.reason == RoundEndReason.BLOCKED
    # team 0: 6 + 9 + 7 = 22, team 1: 12 + 11 + 8 + 9 = 40 --> seat 2 (7 pips) beats its partner (15)
    assert result.outcome.winner_seat == 2
    assert sequencer.current_seat is None


def test_play_in_between_passes_resets_the_count(make_room: RoomFactory) -> None:
    hands = {seat: list(tiles) for seat, tiles in STUCK_HANDS.items()}
    hands[2] = [(3, 4), (2, 0)]
    room = make_room(hands=hands, board=[[1, 2]], current_seat=0)
    sequencer = TurnSequencer(room)

    sequencer.pass_turn(0)
    sequencer.pass_turn(1)
    sequencer.play(2, Tile(2, 0))
    assert room.round.pass_count == 0
    assert sequencer.current_seat == 3


def test_block_exact_tie(make_room: RoomFactory) -> None:
    hands = {0: [(3, 3)], 1: [(3, 4)], 2: [(4, 5)], 3: [(4, 4)]}
    room = make_room(hands=hands, board=[[1, 2]], current_seat=0)
    sequencer = TurnSequencer(room)
    result = None
    for seat in (0, 1, 2, 3):
        result = sequencer.pass_turn(seat)
    assert result.outcome.reason == RoundEndReason.BLOCKED
    assert result.outcome.winner_seat is None


# -- QUERIES --
def test_legal_plays(make_room: RoomFactory) -> None:
    room = make_room(
        hands={0: [(3, 0), (5, 5), (3, 5), (1, 1)]}, board=[[3, 1], [1, 5]]
    )
    plays = TurnSequencer(room).legal_plays(0)
    assert plays == {
        Tile(0, 3): [Side.LEFT],
        Tile(5, 5): [Side.RIGHT],
        Tile(3, 5): [Side.LEFT, Side.RIGHT],
    }
    assert TurnSequencer(room).has_legal_move(0)


def test_legal_tiles_first_round(make_room: RoomFactory) -> None:
    room = make_room(hands={1: [(6, 6), (6, 5)]}, current_seat=1, first_round=True)
    assert TurnSequencer(room).legal_tiles(1) == [DOUBLE_SIX]


def test_no_round_in_progress() -> None:
    room = Room(room_id="ABCD")
    sequencer = TurnSequencer(room)
    assert sequencer.current_seat is None
    assert sequencer.legal_tiles(0) == []
    with pytest.raises(NotYourTurnError):
        sequencer.pass_turn(0)
    with pytest.raises(NotYourTurnError):
        sequencer.play(0, DOUBLE_SIX)
