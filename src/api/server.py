"""
Socket.IO gateway mounted on a FastAPI app.

Thin on purpose: parse the payload into a request model, call the DominoService, emit the notifications it returns.
Every rule lives below this layer.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import socketio
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ValidationError

from src.api.models import (
    ErrorMessagePayload,
    GetRoomRequest,
    JoinRequest,
    LegalMovesRequest,
    PassRequest,
    PlayRequest,
    RoomResponse,
)
from src.core.config import Settings
from src.core.exceptions import GameError, UnknownRoomError
from src.core.models import Notification
from src.core.shared_types import ErrorCode, EventName
from src.db.room_registry import RoomRegistry
from src.domino.sequencer import TurnSequencer
from src.services.domino_service import DominoService

logger = logging.getLogger(__name__)


class SocketGateway:
    """Binds Socket.IO events to DominoService calls."""

    def __init__(
        self,
        service: DominoService,
        sio: socketio.AsyncServer,
        settings: Optional[Settings] = None,
    ) -> None:
        self.service = service
        self.sio = sio
        self.settings = settings or service.settings

    def register(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        self.sio.on("findRoom", self.on_find_room)
        self.sio.on("playTile", self.on_play_tile)
        self.sio.on("passTurn", self.on_pass_turn)
        self.sio.on("legalMoves", self.on_legal_moves)

    # --- EVENT HANDLERS ---
    async def on_connect(self, sid: str, environ: Any = None, auth: Any = None) -> None:
        logger.debug("connected %s", sid)

    async def on_disconnect(self, sid: str, *args: Any) -> None:
        logger.debug("disconnected %s", sid)
        await self.dispatch(self.service.disconnect(sid))

    async def on_find_room(self, sid: str, data: Any) -> Optional[dict]:
        async def _join() -> dict:
            request = JoinRequest.model_validate({**self._as_dict(data), "connectionId": sid})
            previous = self.service.registry.seat_for_connection(sid)
            result = self.service.join(request)
            if previous is not None and previous[0] != result.response.room_id:
                await self.sio.leave_room(sid, previous[0])
            await self.sio.enter_room(sid, result.response.room_id)
            await self.dispatch(result.notifications)
            return result.response.model_dump(by_alias=True, mode="json")

        return await self._guarded(sid, data, _join)

    async def on_play_tile(self, sid: str, data: Any) -> Optional[dict]:
        async def _play() -> dict:
            request = PlayRequest.model_validate({**self._as_dict(data), "connectionId": sid})
            result = self.service.play(request)
            await self.dispatch(result.notifications)
            return result.response.model_dump(by_alias=True, mode="json")

        return await self._guarded(sid, data, _play)

    async def on_pass_turn(self, sid: str, data: Any) -> Optional[dict]:
        async def _pass() -> dict:
            request = PassRequest.model_validate({**self._as_dict(data), "connectionId": sid})
            result = self.service.pass_turn(request)
            await self.dispatch(result.notifications)
            return result.response.model_dump(by_alias=True, mode="json")

        return await self._guarded(sid, data, _pass)

    async def on_legal_moves(self, sid: str, data: Any) -> Optional[dict]:
        async def _legal_moves() -> dict:
            request = LegalMovesRequest.model_validate(
                {**self._as_dict(data), "connectionId": sid}
            )
            return self.service.legal_moves(request).model_dump(by_alias=True, mode="json")

        return await self._guarded(sid, data, _legal_moves)

    # --- OUTBOUND ---
    async def dispatch(self, notifications: list[Notification]) -> None:
        """Emit in order. Broadcasts go to the Socket.IO room, private ones to a single sid."""
        for notification in notifications:
            if notification.is_broadcast:
                await self.sio.emit(
                    notification.event, notification.payload, room=notification.room_id
                )
            else:
                await self.sio.emit(
                    notification.event, notification.payload, to=notification.recipient
                )
            if notification.event == EventName.TURN_CHANGED:
                self._maybe_schedule_auto_pass(notification)

    async def send_error(self, sid: str, code: ErrorCode, text: str) -> None:
        payload = ErrorMessagePayload(code=code, text=text)
        await self.sio.emit(
            EventName.ERROR_MESSAGE, payload.model_dump(by_alias=True, mode="json"), to=sid
        )

    # -- PRIVATE HELPERS ---
    async def _guarded(
        self, sid: str, data: Any, action: Callable[[], Awaitable[dict]]
    ) -> Optional[dict]:
        """Run the action; any rejection goes back to the requester only, as errorMessage."""
        try:
            return await action()
        except GameError as error:
            logger.warning("rejected request from %s: %s (%s)", sid, error.code, error)
            await self.send_error(sid, error.code, str(error))
        except ValidationError as error:
            logger.warning("malformed request from %s: %s", sid, data)
            await self.send_error(sid, ErrorCode.INVALID_REQUEST, str(error))
        return None

    @staticmethod
    def _as_dict(data: Any) -> dict:
        return dict(data) if isinstance(data, dict) else {}

    def _maybe_schedule_auto_pass(self, notification: Notification) -> None:
        """
        Soft timeout: a seat with no legal move gets passed for after a delay.
        Informational only. The pass still goes through the normal server-side checks, so a stale one is just rejected.
        """
        delay = self.settings.auto_pass_seconds
        if delay <= 0:
            return
        room = self.service.registry.get_room(notification.room_id)
        seat = notification.payload.get("seat")
        if room is None or seat is None or TurnSequencer(room).has_legal_move(seat):
            return
        self.sio.start_background_task(self._auto_pass, room.room_id, seat, delay)

    async def _auto_pass(self, room_id: str, seat: int, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            result = self.service.pass_turn(PassRequest(room_id=room_id, seat=seat))
        except GameError as error:
            logger.debug("auto-pass for room %s seat %d dropped: %s", room_id, seat, error)
            return
        logger.info("room %s: auto-passed seat %d", room_id, seat)
        await self.dispatch(result.notifications)


def create_app(
    settings: Optional[Settings] = None, service: Optional[DominoService] = None
) -> socketio.ASGIApp:
    """FastAPI (HTTP: health + read-only room state) wrapped by the Socket.IO ASGI app."""
    settings = settings or Settings.from_env()
    service = service or DominoService(RoomRegistry(settings), settings)

    cors_origins: str | list[str] = (
        "*" if settings.cors_origins == ["*"] else settings.cors_origins
    )
    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=cors_origins)
    gateway = SocketGateway(service, sio, settings)
    gateway.register()

    fastapi_app = FastAPI(title="Dominoes")
    fastapi_app.state.gateway = gateway

    @fastapi_app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "rooms": len(service.registry.list_rooms())}

    @fastapi_app.get("/rooms/{room_id}", response_model=RoomResponse)
    def room_state(room_id: str) -> BaseModel:
        try:
            return service.get_room_state(GetRoomRequest(room_id=room_id))
        except UnknownRoomError as error:
            raise HTTPException(status_code=404, detail=str(error))

    return socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
