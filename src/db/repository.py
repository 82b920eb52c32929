"""Protocol repository (in-memory for now; rooms only live as long as the process)"""

from typing import Optional, Protocol

from src.domino.room import Room


class RoomRepository(Protocol):
    """Room storage + lifecycle"""

    def get_room(self, room_id: str) -> Room | None:
        """Get room by ID, if it exists."""
        ...

    def create_room(self, room_id: Optional[str] = None) -> Room:
        """Create a fresh room (with a generated ID unless one is given)."""
        ...

    def delete_room(self, room_id: str) -> Room | None:
        """Destroy a room."""
        ...

    def list_rooms(self) -> list[Room]:
        """All live rooms, oldest first."""
        ...
