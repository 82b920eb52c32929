"""Requests, Responses and outbound event payload models"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import ErrorCode, Phase, RoundEndReason, Side
from src.domino.seats import SEATS
from src.domino.tiles import MAX_PIPS

RoomId = str
PlayerName = str
Pips = list[int]

MAX_NAME_LENGTH = 32


class WireModel(BaseModel):
    """Accepts (and emits, with by_alias=True) camelCase keys, as the browser client speaks them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_seat(value: Optional[int]) -> Optional[int]:
    if value is not None and value not in SEATS:
        raise InvalidRequestError(f"Seat must be one of {list(SEATS)}, got {value!r}.")
    return value


# --- REQUEST MODELS ---
class JoinRequest(WireModel):
    player_name: PlayerName
    connection_id: str
    room_id: Optional[RoomId] = None
    reconnect_seat: Optional[int] = None

    @field_validator("player_name")
    @classmethod
    def validate_player_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise InvalidRequestError("Player name cannot be empty.")
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidRequestError(
                f"Player name is longer than {MAX_NAME_LENGTH} characters."
            )
        return name

    @field_validator("room_id")
    @classmethod
    def validate_room_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if not value.strip().isalnum():
            raise InvalidRequestError(f"Room ID {value!r} must be alphanumeric.")
        return value.strip().upper()

    @field_validator("reconnect_seat")
    @classmethod
    def validate_reconnect_seat(cls, value: Optional[int]) -> Optional[int]:
        return _validate_seat(value)


class SeatRequest(WireModel):
    """Anything a seated player asks for in a given room."""

    room_id: RoomId
    seat: int
    # Filled in by the gateway (never by the client). When present it must own the seat.
    connection_id: Optional[str] = None

    @field_validator("room_id")
    @classmethod
    def normalize_room_id(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("seat")
    @classmethod
    def validate_seat(cls, value: int) -> int:
        _validate_seat(value)
        return value


class PlayRequest(SeatRequest):
    tile: Pips
    side: Optional[Side] = None

    @field_validator("tile")
    @classmethod
    def validate_tile(cls, value: Pips) -> Pips:
        if len(value) != 2:
            raise InvalidRequestError(
                f"A tile has exactly two pip values, got {value!r}."
            )
        if not all(0 <= pip <= MAX_PIPS for pip in value):
            raise InvalidRequestError(f"Pip values must lie in 0-{MAX_PIPS}: {value!r}.")
        return value


class PassRequest(SeatRequest):
    pass


class LegalMovesRequest(SeatRequest):
    pass


class GetRoomRequest(WireModel):
    room_id: RoomId

    @field_validator("room_id")
    @classmethod
    def normalize_room_id(cls, value: str) -> str:
        return value.strip().upper()


# --- RESPONSE MODELS ---
class JoinResponse(WireModel):
    room_id: RoomId
    seat: int
    reconnected: bool = False


class AckResponse(WireModel):
    room_id: RoomId
    seat: int
    accepted: bool = True


class LegalMovesResponse(WireModel):
    room_id: RoomId
    seat: int
    is_your_turn: bool
    playable: list[Pips]
    # side(s) each tile in `playable` fits, same order
    sides: list[list[Side]]


class SeatView(WireModel):
    seat: int
    name: PlayerName
    connected: bool


class RoomResponse(WireModel):
    room_id: RoomId
    phase: Phase
    players: list[SeatView]
    scores: list[int]
    round_number: int
    board: list[Pips]
    current_seat: Optional[int]
    hand_sizes: dict[int, int]
    winning_team: Optional[int]


# --- OUTBOUND EVENT PAYLOADS ---
class RoomJoinedPayload(WireModel):
    room_id: RoomId
    seat: int


class LobbyUpdatePayload(WireModel):
    players: list[SeatView]
    seats_remaining: int


class RoundStartPayload(WireModel):
    your_hand: list[Pips]
    starting_seat: int
    scores: list[int]
    hand_sizes: dict[int, int]
    round_number: int


class ReconnectPayload(WireModel):
    seat: int
    your_hand: list[Pips]
    board: list[Pips]
    current_seat: Optional[int]
    scores: list[int]
    hand_sizes: dict[int, int]
    phase: Phase


class TurnChangedPayload(WireModel):
    seat: int


class BroadcastMovePayload(WireModel):
    seat: int
    tile: Pips
    side: Side
    board: list[Pips]
    hand_sizes_by_seat: dict[int, int]
    pip_counts: dict[int, int]


class PlayerPassedPayload(WireModel):
    seat: int


class RoundEndedPayload(WireModel):
    winner_seat: Optional[int]
    reason: RoundEndReason
    board: list[Pips]
    scores: list[int]
    points_awarded: int
    capicua: bool
    round_number: int


class FinalHand(WireModel):
    seat: int
    hand: list[Pips]


class FinalHandsPayload(WireModel):
    hands: list[FinalHand]


class GameOverPayload(WireModel):
    winning_team: int
    scores: list[int]


class ErrorMessagePayload(WireModel):
    code: ErrorCode
    text: str
