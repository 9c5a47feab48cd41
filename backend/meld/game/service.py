from __future__ import annotations

import logging
import re
import secrets
from threading import RLock

from ..storage import Store, state_key
from .models import WinCondition
from .room import Room, SendFn


log = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 4
_ROOM_CODE_RE = re.compile(r"^[A-Z0-9]{4}$")


def normalize_room_code(raw) -> str | None:
    if not isinstance(raw, str):
        return None
    code = raw.strip().upper()
    if not _ROOM_CODE_RE.match(code):
        return None
    return code


def generate_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


class RoomRegistry:
    """Room code -> Room, plus which room each live connection belongs to.

    Rooms are created lazily on first connect and dropped when their last
    connection closes; the room state itself lives on in the store. The
    registry lock only guards the maps; game state is serialized by each
    room's own lock.
    """

    def __init__(
        self,
        store: Store,
        send: SendFn,
        *,
        key_prefix: str = "meld",
        min_players: int = 2,
        max_name_length: int = 20,
        default_win_condition: WinCondition = "exact",
    ) -> None:
        self._store = store
        self._send = send
        self._room_options = {
            "key_prefix": key_prefix,
            "min_players": min_players,
            "max_name_length": max_name_length,
            "default_win_condition": default_win_condition,
        }
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._sid_rooms: dict[str, str] = {}

    def get(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def get_or_create(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code, self._store, self._send, **self._room_options)
                self._rooms[code] = room
            return room

    def create_room_code(self) -> str:
        """A code with no live room and no saved state. Nothing is registered."""
        with self._lock:
            code = generate_room_code()
            while code in self._rooms or self._store.get(self._state_key(code)) is not None:
                code = generate_room_code()
            return code

    def snapshot(self, code: str) -> dict | None:
        room = self.get(code)
        if room is not None:
            return room.snapshot()
        # Evicted or never connected: read what the store holds, if anything.
        if self._store.get(self._state_key(code)) is None:
            return None
        return Room(code, self._store, self._send, **self._room_options).snapshot()

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def room_for_sid(self, sid: str) -> Room | None:
        with self._lock:
            code = self._sid_rooms.get(sid)
            return self._rooms.get(code) if code else None

    def attach(self, sid: str, code: str) -> Room:
        with self._lock:
            room = self.get_or_create(code)
            self._sid_rooms[sid] = code
            room.connect(sid)
        return room

    def detach(self, sid: str) -> Room | None:
        with self._lock:
            code = self._sid_rooms.pop(sid, None)
            room = self._rooms.get(code) if code else None
        if room is None:
            return None

        room.disconnect(sid)

        # The Room wrapper goes once it is empty; its state stays in the store.
        with self._lock:
            if not room.connected_ids() and self._rooms.get(code) is room:
                del self._rooms[code]
                log.debug("room %s evicted", code)
        return room

    def _state_key(self, code: str) -> str:
        return state_key(self._room_options["key_prefix"], code)
