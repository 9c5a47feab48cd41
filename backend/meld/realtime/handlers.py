from __future__ import annotations

import logging

from flask import request
from flask_socketio import ConnectionRefusedError, SocketIO, disconnect

from ..game.service import RoomRegistry, normalize_room_code


log = logging.getLogger(__name__)

MESSAGE_EVENT = "message"


def make_sender(socketio: SocketIO):
    def _send(sid: str, message: dict) -> None:
        socketio.emit(MESSAGE_EVENT, message, to=sid)

    return _send


def register_socketio_handlers(socketio: SocketIO, rooms: RoomRegistry) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        raw_code = request.args.get("room")
        if not raw_code and isinstance(auth, dict):
            raw_code = auth.get("roomCode")

        code = normalize_room_code(raw_code)
        if code is None:
            log.info("refused connection %s: invalid room code %r", request.sid, raw_code)
            raise ConnectionRefusedError("invalid_room")

        rooms.attach(request.sid, code)
        log.info("connection %s joined room %s", request.sid, code)

    @socketio.on(MESSAGE_EVENT)
    def on_message(data=None):
        room = rooms.room_for_sid(request.sid)
        if room is None:
            return
        room.receive(request.sid, data)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        room = rooms.detach(request.sid)
        if room is not None:
            log.info("connection %s left room %s", request.sid, room.code)

    @socketio.on_error_default
    def on_error(exc):
        # Close the connection; the disconnect handler runs the usual cleanup.
        log.warning("handler error on %s", request.sid, exc_info=exc)
        disconnect()
