"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import random
from typing import Callable, Optional, Sequence

import pytest

from src.core.config import Settings
from src.core.shared_types import Phase, TurnDirection
from src.db.room_registry import RoomRegistry
from src.domino.board import Board
from src.domino.room import Player, Room, RoundState
from src.domino.seats import SEATS
from src.domino.tiles import Tile

# seat --> tiles written as pip pairs, e.g. {0: [(6, 6), (1, 2)], 1: [...]}
PipHands = dict[int, Sequence[tuple[int, int]]]
RoomFactory = Callable[..., Room]

SEED = 20240611


def set_up_round(
    room: Room,
    hands: PipHands,
    board: Optional[Sequence[Sequence[int]]] = None,
    current_seat: int = 0,
    first_round: bool = False,
) -> Room:
    """Put a seated room in the middle of a round with exactly the hands and board given."""
    for seat in SEATS:
        player = room.player(seat)
        assert player is not None
        player.hand = [Tile(a, b) for a, b in hands.get(seat, [])]
    room.phase = Phase.ACTIVE
    room.round_number = 1 if first_round else 2
    room.round = RoundState(
        board=Board.from_list(board or []),
        turn_starter=current_seat,
        current_seat=current_seat,
        first_round=first_round,
    )
    return room


@pytest.fixture
def seeded_rng() -> random.Random:
    """Deterministic shuffles. Tests should not depend on *which* tiles land where, only that the seed is fixed."""
    return random.Random(SEED)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def registry(settings: Settings) -> RoomRegistry:
    return RoomRegistry(settings, rng=random.Random(SEED))


@pytest.fixture
def make_room() -> RoomFactory:
    """
    Call the inner function to get a Room in the middle of a round with exactly the hands and board you ask for.
    NOTE: These rooms do not hold the full set of 28 tiles. Tile-count conservation is tested on dealt rounds.
    """

    def _make_room(
        hands: PipHands,
        board: Optional[Sequence[Sequence[int]]] = None,
        current_seat: int = 0,
        first_round: bool = False,
        turn_direction: TurnDirection = TurnDirection.ASCENDING,
        winning_score: int = 100,
        room_id: str = "TEST",
    ) -> Room:
        room = Room(
            room_id=room_id,
            turn_direction=turn_direction,
            winning_score=winning_score,
        )
        for seat in SEATS:
            room.seats[seat] = Player(
                name=f"player_{seat}", connection_id=f"sid_{seat}", seat=seat
            )
        return set_up_round(room, hands, board, current_seat, first_round)

    return _make_room


@pytest.fixture
def make_registered_room(registry: RoomRegistry) -> RoomFactory:
    """
    Same as make_room, but the room lives in the `registry` fixture and its four players were seated through it
    (player_{seat} on connection sid_{seat}), so service calls can find it.
    """

    def _make_registered_room(
        hands: PipHands,
        board: Optional[Sequence[Sequence[int]]] = None,
        current_seat: int = 0,
        first_round: bool = False,
        room_id: str = "TEST",
    ) -> Room:
        room = registry.create_room(room_id)
        for seat in SEATS:
            registry.assign_seat(room, f"player_{seat}", f"sid_{seat}")
        return set_up_round(room, hands, board, current_seat, first_round)

    return _make_registered_room
