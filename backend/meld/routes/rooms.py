from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.service import RoomRegistry, normalize_room_code

bp = Blueprint("rooms", __name__)


def _registry() -> RoomRegistry:
    return current_app.extensions["meld.rooms"]


@bp.post("/rooms")
def create_room():
    # Only hands out a free code; the room comes into being on first connect.
    return jsonify({"roomCode": _registry().create_room_code()})


@bp.get("/rooms/<code>")
def get_room(code: str):
    normalized = normalize_room_code(code)
    state = _registry().snapshot(normalized) if normalized else None
    if state is None:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(state)
