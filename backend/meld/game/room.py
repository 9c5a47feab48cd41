from __future__ import annotations

import logging
from collections.abc import Callable
from threading import RLock

from ..realtime import events
from ..realtime.events import (
    ClientMessage,
    Join,
    Ping,
    Reset,
    RestartCancel,
    RestartRequest,
    Retract,
    Start,
    Submit,
)
from ..storage import Store, state_key
from .models import GameConfig, RoomState, RoundEntry, Submission, WinCondition, fresh_game
from .rules import dedupe_name, normalize_name, normalize_word, resolve_win


log = logging.getLogger(__name__)

SendFn = Callable[[str, dict], None]


class Room:
    """Authoritative controller for one room.

    Every inbound message, connect and disconnect runs under the room lock from
    load to broadcast, so handlers never interleave within a room. The lock is
    per room; rooms share nothing.
    """

    def __init__(
        self,
        code: str,
        store: Store,
        send: SendFn,
        *,
        key_prefix: str = "meld",
        min_players: int = 2,
        max_name_length: int = 20,
        default_win_condition: WinCondition = "exact",
    ) -> None:
        self.code = code
        self._store = store
        self._send = send
        self._key = state_key(key_prefix, code)
        self._min_players = min_players
        self._max_name_length = max_name_length
        self._default_win_condition = default_win_condition
        self._lock = RLock()
        # Live connection ids in connect order.
        self._connections: dict[str, None] = {}

        self._handlers: dict[type, Callable[[str, ClientMessage, RoomState], None]] = {
            Join: self._on_join,
            Start: self._on_start,
            Submit: self._on_submit,
            Retract: self._on_retract,
            RestartRequest: self._on_restart_request,
            RestartCancel: self._on_restart_cancel,
            Reset: self._on_reset,
        }

    # -- connection registry -------------------------------------------------

    def connected_ids(self) -> list[str]:
        return list(self._connections)

    def connect(self, sid: str) -> None:
        with self._lock:
            self._connections[sid] = None

    # -- persistence ---------------------------------------------------------

    def load(self) -> RoomState:
        data = self._store.get(self._key)
        if data is None:
            return RoomState(config=GameConfig(win_condition=self._default_win_condition))
        return RoomState.from_dict(data)

    def save(self, state: RoomState) -> None:
        self._store.put(self._key, state.to_dict())

    # -- broadcast -----------------------------------------------------------

    def _named_ids(self, state: RoomState) -> list[str]:
        return [pid for pid in self._connections if pid in state.player_names]

    def state_message(self, state: RoomState) -> dict:
        return {
            "type": "state",
            "phase": state.phase,
            "players": [
                {
                    "id": pid,
                    "name": state.player_names[pid],
                    "submitted": state.player_submitted.get(pid, False),
                }
                for pid in self._named_ids(state)
            ],
            "roundHistory": [r.to_dict() for r in state.round_history],
            "restartVotes": list(state.restart_votes),
            "config": state.config.to_dict(),
        }

    def snapshot(self) -> dict:
        with self._lock:
            return self.state_message(self.load())

    def _send_to(self, sid: str, message: dict) -> None:
        try:
            self._send(sid, message)
        except Exception:
            log.debug("room %s: send to %s failed", self.code, sid, exc_info=True)

    def broadcast_state(self, state: RoomState) -> None:
        message = self.state_message(state)
        for sid in self.connected_ids():
            self._send_to(sid, message)

    def _commit(self, state: RoomState) -> None:
        self.save(state)
        self.broadcast_state(state)

    # -- inbound -------------------------------------------------------------

    def receive(self, sid: str, raw) -> None:
        message = events.parse_client_message(raw)
        if message is None:
            log.debug("room %s: dropped malformed message from %s", self.code, sid)
            return

        with self._lock:
            if sid not in self._connections:
                return

            if isinstance(message, Ping):
                self._send_to(sid, events.pong())
                return

            state = self.load()
            self._handlers[type(message)](sid, message, state)

    def _on_join(self, sid: str, message: Join, state: RoomState) -> None:
        name = normalize_name(message.player_name, self._max_name_length)
        taken = [
            state.player_names[pid]
            for pid in self._connections
            if pid != sid and pid in state.player_names
        ]
        name = dedupe_name(name, taken)

        state.player_names[sid] = name
        # A re-join keeps an in-flight submission.
        state.player_submitted.setdefault(sid, False)

        self.save(state)
        self._send_to(sid, events.welcome(sid))
        self.broadcast_state(state)

    def _on_start(self, sid: str, message: Start, state: RoomState) -> None:
        if state.phase != "lobby" or len(self._connections) < self._min_players:
            log.debug("room %s: start ignored (phase=%s)", self.code, state.phase)
            return

        state.phase = "playing"
        if message.win_condition:
            state.config = GameConfig(win_condition=message.win_condition)
        state.current_submissions = {}
        for pid in self._connections:
            state.player_submitted[pid] = False

        log.info("room %s: game started (%s)", self.code, state.config.win_condition)
        self._commit(state)

    def _on_submit(self, sid: str, message: Submit, state: RoomState) -> None:
        if state.phase != "playing" or state.player_submitted.get(sid):
            return
        if sid not in state.player_names:
            return

        word = normalize_word(message.word)
        if not word:
            return

        # Same-round duplicates are the win signal; only earlier rounds count.
        if word in state.used_words:
            self._send_to(sid, events.error(f'"{word}" was used in a previous round.'))
            return

        state.player_submitted[sid] = True
        state.current_submissions[sid] = word
        self.save(state)

        if self._all_submitted(state):
            self._resolve_round(state)
        else:
            self.broadcast_state(state)

    def _on_retract(self, sid: str, message: Retract, state: RoomState) -> None:
        if state.phase != "playing" or not state.player_submitted.get(sid):
            return

        state.current_submissions.pop(sid, None)
        state.player_submitted[sid] = False
        self._commit(state)

    def _on_restart_request(self, sid: str, message: RestartRequest, state: RoomState) -> None:
        if state.phase != "playing" or sid not in state.player_names:
            return
        if sid in state.restart_votes:
            return

        state.restart_votes.append(sid)
        if self._restart_agreed(state):
            self._start_fresh_game(state)
        else:
            self._commit(state)

    def _on_restart_cancel(self, sid: str, message: RestartCancel, state: RoomState) -> None:
        if state.phase != "playing":
            return

        state.restart_votes = []
        self._commit(state)

    def _on_reset(self, sid: str, message: Reset, state: RoomState) -> None:
        self._start_fresh_game(state)

    # -- round resolution ----------------------------------------------------

    def _all_submitted(self, state: RoomState) -> bool:
        return all(state.player_submitted.get(pid, False) for pid in self._connections)

    def _restart_agreed(self, state: RoomState) -> bool:
        named = self._named_ids(state)
        return bool(named) and all(pid in state.restart_votes for pid in named)

    def _start_fresh_game(self, state: RoomState) -> None:
        names = {pid: state.player_names[pid] for pid in self._named_ids(state)}
        fresh = fresh_game(names, state.config)
        log.info("room %s: fresh game for %d players", self.code, len(names))
        self._commit(fresh)

    def _resolve_round(self, state: RoomState) -> None:
        for pid in list(state.current_submissions):
            if pid not in state.player_names:
                del state.current_submissions[pid]

        submissions = [
            Submission(id=pid, name=state.player_names[pid], word=word)
            for pid, word in state.current_submissions.items()
        ]
        words = [s.word for s in submissions]
        winning_word = resolve_win(words, state.config.win_condition)

        for word in words:
            if word not in state.used_words:
                state.used_words.append(word)

        state.round_history.append(
            RoundEntry(submissions=submissions, won=winning_word is not None, winning_word=winning_word)
        )

        if winning_word is not None:
            state.phase = "won"
            log.info("room %s: won in round %d", self.code, len(state.round_history))
        else:
            state.phase = "playing"
            state.current_submissions = {}
            for pid in self._connections:
                state.player_submitted[pid] = False

        self._commit(state)

    # -- disconnect ----------------------------------------------------------

    def disconnect(self, sid: str) -> None:
        with self._lock:
            if sid not in self._connections:
                return
            del self._connections[sid]

            state = self.load()
            state.player_names.pop(sid, None)
            state.player_submitted.pop(sid, None)
            state.current_submissions.pop(sid, None)
            state.restart_votes = [pid for pid in state.restart_votes if pid != sid]

            if not self._connections:
                state.phase = "lobby"
                state.restart_votes = []
                self.save(state)
                log.info("room %s: empty, back to lobby", self.code)
                return

            if state.phase == "playing" and state.restart_votes and self._restart_agreed(state):
                self._start_fresh_game(state)
                return

            if state.phase == "playing" and state.current_submissions and self._all_submitted(state):
                self._resolve_round(state)
                return

            self._commit(state)
