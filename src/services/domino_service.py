"""Orchestration of communication from the gateway to the domain and registry layers (and the notifications going back)."""

import logging
import random
from typing import Optional

from pydantic import BaseModel

from src.api.models import (
    AckResponse,
    BroadcastMovePayload,
    FinalHand,
    FinalHandsPayload,
    GameOverPayload,
    GetRoomRequest,
    JoinRequest,
    JoinResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    LobbyUpdatePayload,
    PassRequest,
    PlayerPassedPayload,
    PlayRequest,
    ReconnectPayload,
    RoomJoinedPayload,
    RoomResponse,
    RoundEndedPayload,
    RoundStartPayload,
    SeatRequest,
    SeatView,
    TurnChangedPayload,
)
from src.core.config import Settings
from src.core.exceptions import (
    NotYourTurnError,
    RoomFullError,
    UnknownRoomError,
)
from src.core.models import Notification, ServiceResult
from src.core.shared_types import EventName, Phase
from src.db.room_registry import RoomRegistry
from src.domino.lifecycle import RoundLifecycle, RoundResult, RoundStart
from src.domino.room import Room
from src.domino.sequencer import TurnSequencer
from src.domino.tiles import Tile

logger = logging.getLogger(__name__)


class DominoService:
    """Orchestration of layers for a domino match."""

    def __init__(
        self,
        registry: RoomRegistry,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or registry.settings
        self.rng = rng or random.Random()

    # -- Inbound requests ---
    def join(self, request: JoinRequest) -> ServiceResult[JoinResponse]:
        """
        A player asks for a seat (new or reconnecting).
        ----

        Deals the first round (or the next one, if the match was waiting on a reconnect) as soon as all four seats are connected.
        A resubmitted join from an already seated connection gets its seat back, nothing else changes.
        Joining a different room leaves the old one, but only once a seat in the new room is secured.
        """
        location = self.registry.seat_for_connection(request.connection_id)
        if location is not None and request.room_id in (None, location[0]):
            return self._resubmitted_join(self._fetch_room(location[0]), location[1])

        room = self.registry.find_or_create_room(request.room_id)
        # Once the match is underway seats are never freed, so every join is a reconnect
        reconnected = room.phase != Phase.WAITING
        seat = self.registry.assign_seat(
            room,
            name=request.player_name,
            connection_id=request.connection_id,
            preferred_seat=request.reconnect_seat,
        )
        if seat is None:
            if room.is_empty():
                self.registry.delete_room(room.room_id)
            raise RoomFullError(f"Room {room.room_id} is full.")

        notifications: list[Notification] = []
        if location is not None:
            left = self.registry.get_room(location[0])
            if left is not None:
                notifications.append(self._lobby_update(left))
        notifications.extend(
            [
                self._private(
                    room,
                    seat,
                    EventName.ROOM_JOINED,
                    RoomJoinedPayload(room_id=room.room_id, seat=seat),
                ),
                self._lobby_update(room),
            ]
        )
        if reconnected:
            notifications.append(self._reconnect(room, seat))
        notifications.extend(self._deal_if_ready(room))

        return ServiceResult(
            JoinResponse(room_id=room.room_id, seat=seat, reconnected=reconnected),
            notifications,
        )

    def play(self, request: PlayRequest) -> ServiceResult[AckResponse]:
        """Make a play attempt."""
        room = self._fetch_room(request.room_id)
        self._assert_owns_seat(room, request)
        tile = Tile.from_pips(request.tile)

        move = TurnSequencer(room).play(request.seat, tile, request.side)
        assert room.round is not None  # the round is only discarded by finish_round below
        logger.debug(
            "room %s: seat %d played %s on the %s",
            room.room_id,
            move.seat,
            move.tile,
            move.side,
        )

        notifications = [
            self._broadcast(
                room,
                EventName.BROADCAST_MOVE,
                BroadcastMovePayload(
                    seat=move.seat,
                    tile=move.tile.to_list(),
                    side=move.side,
                    board=room.round.board.to_list(),
                    hand_sizes_by_seat=room.hand_sizes(),
                    pip_counts=room.round.board.pip_counts(),
                ),
            )
        ]
        if move.outcome is not None:
            notifications.extend(self._settle_round(room))
        else:
            assert move.next_seat is not None
            notifications.append(self._turn_changed(room, move.next_seat))

        return ServiceResult(
            AckResponse(room_id=room.room_id, seat=request.seat), notifications
        )

    def pass_turn(self, request: PassRequest) -> ServiceResult[AckResponse]:
        """Make a (forced) pass attempt."""
        room = self._fetch_room(request.room_id)
        self._assert_owns_seat(room, request)

        passed = TurnSequencer(room).pass_turn(request.seat)
        logger.debug(
            "room %s: seat %d passed (%d in a row)",
            room.room_id,
            passed.seat,
            passed.pass_count,
        )

        notifications = [
            self._broadcast(
                room,
                EventName.PLAYER_PASSED,
                PlayerPassedPayload(seat=passed.seat),
            )
        ]
        if passed.outcome is not None:
            notifications.extend(self._settle_round(room))
        else:
            assert passed.next_seat is not None
            notifications.append(self._turn_changed(room, passed.next_seat))

        return ServiceResult(
            AckResponse(room_id=room.room_id, seat=request.seat), notifications
        )

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Tiles of the seat's hand that fit the board, and on which side(s)."""
        room = self._fetch_room(request.room_id)
        self._assert_owns_seat(room, request)

        sequencer = TurnSequencer(room)
        plays = sequencer.legal_plays(request.seat)
        return LegalMovesResponse(
            room_id=room.room_id,
            seat=request.seat,
            is_your_turn=sequencer.current_seat == request.seat,
            playable=[tile.to_list() for tile in plays],
            sides=list(plays.values()),
        )

    def get_room_state(self, request: GetRoomRequest) -> RoomResponse:
        """Public view of a room (no hands)."""
        return self._create_room_response(self._fetch_room(request.room_id))

    def disconnect(self, connection_id: str) -> list[Notification]:
        """The transport lost a connection. The seat (and hand) is kept for a later reconnect."""
        affected = self.registry.disconnect(connection_id)
        if affected is None:
            return []
        room, _ = affected
        if self.registry.get_room(room.room_id) is None:
            # destroyed: nobody left to notify
            return []
        return [self._lobby_update(room)]

    # -- Internal helpers --
    def _fetch_room(self, room_id: str) -> Room:
        """Attempt to find the room in the registry and raise error if it fails."""
        room = self.registry.get_room(room_id)
        if room is None:
            raise UnknownRoomError(f"Room with {room_id=} not found.")
        return room

    def _resubmitted_join(self, room: Room, seat: int) -> ServiceResult[JoinResponse]:
        """Re-acknowledge the seat to its owner only. The room is not touched."""
        logger.debug("room %s: join resubmitted for seat %d", room.room_id, seat)
        return ServiceResult(
            JoinResponse(room_id=room.room_id, seat=seat),
            [
                self._private(
                    room,
                    seat,
                    EventName.ROOM_JOINED,
                    RoomJoinedPayload(room_id=room.room_id, seat=seat),
                )
            ],
        )

    def _assert_owns_seat(self, room: Room, request: SeatRequest) -> None:
        """A connection may only ever act for the seat it was given."""
        if request.connection_id is None:
            return
        location = self.registry.seat_for_connection(request.connection_id)
        if location != (room.room_id, request.seat):
            logger.warning(
                "room %s: connection %s tried to act for seat %d",
                room.room_id,
                request.connection_id,
                request.seat,
            )
            raise NotYourTurnError(f"You are not seated at seat {request.seat}.")

    def _deal_if_ready(self, room: Room) -> list[Notification]:
        lifecycle = RoundLifecycle(room, self.rng)
        if not lifecycle.can_deal():
            return []
        return self._round_started(room, lifecycle.start_round())

    def _settle_round(self, room: Room) -> list[Notification]:
        """Round hit a terminal state: score it, then either end the match or deal the next round."""
        result = RoundLifecycle(room, self.rng).finish_round()
        notifications = self._round_ended(room, result)
        if result.match_over:
            assert result.winning_team is not None
            notifications.append(
                self._broadcast(
                    room,
                    EventName.GAME_OVER,
                    GameOverPayload(winning_team=result.winning_team, scores=result.scores),
                )
            )
            return notifications
        notifications.extend(self._deal_if_ready(room))
        return notifications

    def _round_started(self, room: Room, start: RoundStart) -> list[Notification]:
        hand_sizes = {seat: len(hand) for seat, hand in start.hands.items()}
        notifications = [
            self._private(
                room,
                seat,
                EventName.ROUND_START,
                RoundStartPayload(
                    your_hand=[tile.to_list() for tile in hand],
                    starting_seat=start.opener,
                    scores=list(room.scores),
                    hand_sizes=hand_sizes,
                    round_number=start.round_number,
                ),
            )
            for seat, hand in start.hands.items()
        ]
        notifications.append(self._turn_changed(room, start.opener))
        return notifications

    def _round_ended(self, room: Room, result: RoundResult) -> list[Notification]:
        return [
            self._broadcast(
                room,
                EventName.ROUND_ENDED,
                RoundEndedPayload(
                    winner_seat=result.outcome.winner_seat,
                    reason=result.outcome.reason,
                    board=result.board,
                    scores=result.scores,
                    points_awarded=result.points_awarded,
                    capicua=result.outcome.capicua,
                    round_number=result.round_number,
                ),
            ),
            self._broadcast(
                room,
                EventName.SHOW_FINAL_HANDS,
                FinalHandsPayload(
                    hands=[
                        FinalHand(seat=seat, hand=[tile.to_list() for tile in hand])
                        for seat, hand in result.final_hands.items()
                    ]
                ),
            ),
        ]

    def _turn_changed(self, room: Room, seat: int) -> Notification:
        return self._broadcast(room, EventName.TURN_CHANGED, TurnChangedPayload(seat=seat))

    def _lobby_update(self, room: Room) -> Notification:
        return self._broadcast(
            room,
            EventName.LOBBY_UPDATE,
            LobbyUpdatePayload(
                players=self._seat_views(room),
                seats_remaining=room.seats_remaining(),
            ),
        )

    def _reconnect(self, room: Room, seat: int) -> Notification:
        """Everything a returning player needs to redraw the table."""
        player = room.player(seat)
        assert player is not None
        board = room.round.board.to_list() if room.round else []
        current_seat = room.round.current_seat if room.round else None
        return self._private(
            room,
            seat,
            EventName.RECONNECT_SUCCESS,
            ReconnectPayload(
                seat=seat,
                your_hand=[tile.to_list() for tile in player.hand],
                board=board,
                current_seat=current_seat,
                scores=list(room.scores),
                hand_sizes=room.hand_sizes(),
                phase=room.phase,
            ),
        )

    def _seat_views(self, room: Room) -> list[SeatView]:
        return [
            SeatView(seat=player.seat, name=player.name, connected=player.connected)
            for player in room.players()
        ]

    def _create_room_response(self, room: Room) -> RoomResponse:
        return RoomResponse(
            room_id=room.room_id,
            phase=room.phase,
            players=self._seat_views(room),
            scores=list(room.scores),
            round_number=room.round_number,
            board=room.round.board.to_list() if room.round else [],
            current_seat=room.round.current_seat if room.round else None,
            hand_sizes=room.hand_sizes(),
            winning_team=room.winning_team,
        )

    def _broadcast(self, room: Room, event: EventName, payload: BaseModel) -> Notification:
        return Notification(event=event, payload=self._dump(payload), room_id=room.room_id)

    def _private(
        self, room: Room, seat: int, event: EventName, payload: BaseModel
    ) -> Notification:
        recipient = self.registry.connection_for_seat(room, seat)
        # private events only ever go to seats that are connected right now (never a broadcast by accident)
        assert recipient is not None
        return Notification(
            event=event,
            payload=self._dump(payload),
            room_id=room.room_id,
            recipient=recipient,
        )

    @staticmethod
    def _dump(payload: BaseModel) -> dict:
        return payload.model_dump(by_alias=True, mode="json")
