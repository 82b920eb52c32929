"""
Exceptions raised by the domain, registry and service layers.

Every error is local to the request that caused it: the room is left untouched and only the requester is told.
The gateway turns a GameError into an `errorMessage` using its `code`.
"""

from src.core.shared_types import ErrorCode


class GameError(Exception):
    """Top-level exception for anything a request can do wrong."""

    code: ErrorCode = ErrorCode.INVALID_REQUEST


class InvalidRequestError(GameError):
    """Malformed request payload (seat out of range, unknown side, etc.)."""

    code = ErrorCode.INVALID_REQUEST


class RoomFullError(GameError):
    code = ErrorCode.ROOM_FULL


class NotYourTurnError(GameError):
    code = ErrorCode.NOT_YOUR_TURN


class IllegalMoveError(GameError):
    """Tile not held, fits neither open end, or the side hint names an end it does not fit."""

    code = ErrorCode.ILLEGAL_MOVE


class InvalidTileError(IllegalMoveError):
    """Pip values outside of the double-six set."""


class ForcedPassInvalidError(GameError):
    """A pass was attempted while the seat still holds a playable tile."""

    code = ErrorCode.FORCED_PASS_INVALID


class RepositoryError(GameError):
    code = ErrorCode.UNKNOWN_ROOM


class UnknownRoomError(RepositoryError):
    code = ErrorCode.UNKNOWN_ROOM
