"""
Type definitions used across layers
"""

from enum import StrEnum


class Phase(StrEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    BETWEEN_ROUNDS = "between rounds"
    MATCH_OVER = "match over"


class RoundEndReason(StrEnum):
    DOMINO = "domino"
    BLOCKED = "blocked"


class Side(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    # only used for the opening tile of a round
    CENTER = "center"


class TurnDirection(StrEnum):
    """Seat rotation. Chosen once per match."""

    ASCENDING = "ascending"  # 0 -> 1 -> 2 -> 3
    DESCENDING = "descending"  # 0 -> 3 -> 2 -> 1


class ErrorCode(StrEnum):
    ROOM_FULL = "ROOM_FULL"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    FORCED_PASS_INVALID = "FORCED_PASS_INVALID"
    UNKNOWN_ROOM = "UNKNOWN_ROOM"
    INVALID_REQUEST = "INVALID_REQUEST"


class EventName(StrEnum):
    """Outbound notification names, as the clients listen for them."""

    ROOM_JOINED = "roomJoined"
    LOBBY_UPDATE = "lobbyUpdate"
    RECONNECT_SUCCESS = "reconnectSuccess"
    ROUND_START = "roundStart"
    TURN_CHANGED = "turnChanged"
    BROADCAST_MOVE = "broadcastMove"
    PLAYER_PASSED = "playerPassed"
    ROUND_ENDED = "roundEnded"
    SHOW_FINAL_HANDS = "showFinalHands"
    GAME_OVER = "gameOver"
    ERROR_MESSAGE = "errorMessage"
