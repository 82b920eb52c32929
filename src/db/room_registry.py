"""In-memory implementation of the RoomRepository, plus seat assignment and connection tracking"""

import logging
import random
import string
from typing import Optional

from src.core.config import Settings
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Phase
from src.domino.room import Player, Room
from src.domino.seats import validate_seat

logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 4
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """
    Finds or creates rooms, seats players, and tracks which connection sits where.
    ----

    Rooms are created on demand and destroyed once nobody connected is left in them.
    """

    def __init__(
        self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None
    ) -> None:
        self.settings = settings or Settings()
        self.rng = rng or random.Random()
        self._rooms: dict[str, Room] = {}
        # connection id --> (room id, seat)
        self._connections: dict[str, tuple[str, int]] = {}

    # --- RoomRepository ---
    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(self._normalize(room_id))

    def create_room(self, room_id: Optional[str] = None) -> Room:
        room_id = self._normalize(room_id) if room_id else self._generate_room_id()
        if room_id in self._rooms:
            raise InvalidRequestError(f"Room {room_id} already exists.")
        room = Room(
            room_id=room_id,
            turn_direction=self.settings.turn_direction,
            winning_score=self.settings.winning_score,
        )
        self._rooms[room_id] = room
        logger.info("room %s created", room_id)
        return room

    def delete_room(self, room_id: str) -> Room | None:
        room = self._rooms.pop(self._normalize(room_id), None)
        if room is None:
            return None
        for connection_id, (connected_room, _) in list(self._connections.items()):
            if connected_room == room.room_id:
                del self._connections[connection_id]
        logger.info("room %s destroyed", room.room_id)
        return room

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    # --- LOOKUP ---
    def find_or_create_room(self, candidate_id: Optional[str] = None) -> Room:
        """
        1. Candidate ID given: that room, created if it does not exist yet.
        2. No ID: the oldest room still waiting for players.
        3. Otherwise a brand-new room.
        """
        if candidate_id:
            return self.get_room(candidate_id) or self.create_room(candidate_id)

        waiting = next(
            (
                room
                for room in self._rooms.values()
                if room.phase == Phase.WAITING and room.open_seats()
            ),
            None,
        )
        return waiting or self.create_room()

    def seat_for_connection(self, connection_id: str) -> Optional[tuple[str, int]]:
        """Capability lookup: connection --> (room id, seat)"""
        return self._connections.get(connection_id)

    def connection_for_seat(self, room: Room, seat: int) -> Optional[str]:
        player = room.player(seat)
        if player is None or not player.connected:
            return None
        return player.connection_id

    # --- SEATING ---
    def assign_seat(
        self,
        room: Room,
        name: str,
        connection_id: str,
        preferred_seat: Optional[int] = None,
    ) -> Optional[int]:
        """
        Seat a player, returning the seat, or None (FULL) when no seat is free for this identity.
        ----

        0. A connection that already sits in this room keeps its seat (resubmitted join).
           One seated elsewhere leaves its old room once it has a seat in this one.
        1. Preferred seat (reconnection): honoured if empty, or held by this same identity while disconnected.
        2. The seat this identity already holds while disconnected.
        3. The lowest empty seat.

        A disconnected player's seat (and hand) is reserved for that player: nobody else is seated there.
        """
        location = self._connections.get(connection_id)
        if location is not None and location[0] == room.room_id:
            return location[1]

        seat = self._choose_seat(room, name, preferred_seat)
        if seat is None:
            logger.warning("room %s full, %r turned away", room.room_id, name)
            return None
        if location is not None:
            self.disconnect(connection_id)

        previous = room.player(seat)
        if previous is None:
            room.seats[seat] = Player(name=name, connection_id=connection_id, seat=seat)
        else:
            # Reconnect: the hand stays, only the connection is refreshed
            self._connections.pop(previous.connection_id, None)
            previous.connection_id = connection_id
            previous.connected = True
        self._connections[connection_id] = (room.room_id, seat)
        logger.info(
            "room %s: %r %s seat %d",
            room.room_id,
            name,
            "took" if previous is None else "reclaimed",
            seat,
        )
        return seat

    def disconnect(self, connection_id: str) -> Optional[tuple[Room, int]]:
        """
        Mark the connection's player as gone.
        ----

        * Before the match starts the seat is simply freed.
        * Once the match is underway the player record (and hand) stays so they can come back mid-round.
        * The room is destroyed when no connected player is left.

        Returns the room and seat that were affected (None if the connection was not seated anywhere).
        """
        location = self._connections.pop(connection_id, None)
        if location is None:
            return None
        room_id, seat = location
        room = self._rooms.get(room_id)
        if room is None:
            return None

        player = room.player(seat)
        if player is not None and player.connection_id == connection_id:
            if room.phase == Phase.WAITING:
                room.seats[seat] = None
            else:
                player.connected = False
            logger.info("room %s: seat %d disconnected", room_id, seat)

        if not room.has_connected_players():
            self.delete_room(room_id)
        return room, seat

    # -- PRIVATE HELPERS ---
    def _choose_seat(
        self, room: Room, name: str, preferred_seat: Optional[int]
    ) -> Optional[int]:
        if preferred_seat is not None:
            validate_seat(preferred_seat)
            occupant = room.player(preferred_seat)
            if occupant is None or (not occupant.connected and occupant.name == name):
                return preferred_seat

        own_seat = room.seat_of(name)
        if own_seat is not None:
            occupant = room.player(own_seat)
            if occupant is not None and not occupant.connected:
                return own_seat

        empty = room.open_seats()
        return empty[0] if empty else None

    def _generate_room_id(self) -> str:
        while True:
            code = "".join(self.rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    @staticmethod
    def _normalize(room_id: str) -> str:
        return room_id.strip().upper()
