"""
Boundary layer data model(s).

The Service hands these to whoever sits above it (the Socket.IO gateway, tests, ...).
They carry plain, transport-safe data only: dictionaries of JSON-friendly values, room ids and connection ids.
(Decouples the domain objects from what gets sent across the wire)
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from src.core.shared_types import EventName

# Type aliases to make Notification easier to read
RoomId = str
ConnectionId = str

ResponseT = TypeVar("ResponseT")


@dataclass
class Notification:
    """
    Outbound state delta.

    recipient is None: broadcast to every connection in the room.
    Otherwise only the connection with that id receives it (private hands, join acks).
    """

    event: EventName
    payload: dict[str, Any]
    room_id: RoomId
    recipient: Optional[ConnectionId] = None

    @property
    def is_broadcast(self) -> bool:
        return self.recipient is None


@dataclass
class ServiceResult(Generic[ResponseT]):
    """What the requester gets back + what everybody else needs to hear about."""

    response: ResponseT
    notifications: list[Notification] = field(default_factory=list)

    def events(self) -> list[EventName]:
        """convenience method: the event names, in emission order"""
        return [notification.event for notification in self.notifications]
