from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from ..game.models import WIN_CONDITIONS, WinCondition


@dataclass(frozen=True)
class Join:
    player_name: str


@dataclass(frozen=True)
class Start:
    win_condition: WinCondition | None = None


@dataclass(frozen=True)
class Submit:
    word: str


@dataclass(frozen=True)
class Retract:
    pass


@dataclass(frozen=True)
class RestartRequest:
    pass


@dataclass(frozen=True)
class RestartCancel:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Ping:
    pass


ClientMessage = Union[Join, Start, Submit, Retract, RestartRequest, RestartCancel, Reset, Ping]


def _join(payload: dict) -> Join | None:
    name = payload.get("playerName")
    if not isinstance(name, str):
        return None
    return Join(player_name=name)


def _start(payload: dict) -> Start | None:
    win_condition = payload.get("winCondition")
    # An empty value means "keep the current config".
    if not win_condition:
        return Start()
    if win_condition not in WIN_CONDITIONS:
        return None
    return Start(win_condition=win_condition)


def _submit(payload: dict) -> Submit | None:
    word = payload.get("word")
    if not isinstance(word, str):
        return None
    return Submit(word=word)


_PARSERS = {
    "join": _join,
    "start": _start,
    "submit": _submit,
    "retract": lambda _: Retract(),
    "restart_request": lambda _: RestartRequest(),
    "restart_cancel": lambda _: RestartCancel(),
    "reset": lambda _: Reset(),
    "ping": lambda _: Ping(),
}


def parse_client_message(raw: Any) -> ClientMessage | None:
    """Decode one inbound payload. Returns None for anything that should be dropped."""
    payload = raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            payload = json.loads(raw)
        except ValueError:
            return None

    if not isinstance(payload, dict):
        return None

    msg_type = payload.get("type")
    if not isinstance(msg_type, str):
        return None

    parser = _PARSERS.get(msg_type)
    if parser is None:
        return None
    return parser(payload)


def welcome(player_id: str) -> dict:
    return {"type": "welcome", "playerId": player_id}


def error(message: str) -> dict:
    return {"type": "error", "message": message}


def pong() -> dict:
    return {"type": "pong"}
