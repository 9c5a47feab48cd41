from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


Phase = Literal["lobby", "playing", "won"]
WinCondition = Literal["exact", "majority"]

WIN_CONDITIONS: tuple[str, ...] = ("exact", "majority")
DEFAULT_WIN_CONDITION: WinCondition = "exact"


@dataclass
class GameConfig:
    win_condition: WinCondition = DEFAULT_WIN_CONDITION

    def to_dict(self) -> dict:
        return {"winCondition": self.win_condition}

    @classmethod
    def from_dict(cls, data: Any) -> GameConfig:
        if not isinstance(data, dict):
            return cls()
        win_condition = data.get("winCondition")
        if win_condition not in WIN_CONDITIONS:
            return cls()
        return cls(win_condition=win_condition)


@dataclass
class Submission:
    id: str
    name: str
    word: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "word": self.word}


@dataclass
class RoundEntry:
    submissions: list[Submission] = field(default_factory=list)
    won: bool = False
    winning_word: str | None = None

    def to_dict(self) -> dict:
        return {
            "submissions": [s.to_dict() for s in self.submissions],
            "won": self.won,
            "winningWord": self.winning_word,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RoundEntry:
        submissions = [
            Submission(id=str(s["id"]), name=str(s["name"]), word=str(s["word"]))
            for s in data.get("submissions", [])
        ]
        # Entries written before winningWord existed read as null.
        return cls(
            submissions=submissions,
            won=bool(data.get("won", False)),
            winning_word=data.get("winningWord"),
        )


@dataclass
class RoomState:
    """The single persisted entity of a room.

    Maps keep insertion order, which is the order players joined or submitted.
    ``used_words`` and ``restart_votes`` are kept as ordered lists so the
    stored blob is stable JSON; membership is what matters.
    """

    phase: Phase = "lobby"
    player_names: dict[str, str] = field(default_factory=dict)
    player_submitted: dict[str, bool] = field(default_factory=dict)
    current_submissions: dict[str, str] = field(default_factory=dict)
    used_words: list[str] = field(default_factory=list)
    round_history: list[RoundEntry] = field(default_factory=list)
    restart_votes: list[str] = field(default_factory=list)
    config: GameConfig = field(default_factory=GameConfig)

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "playerNames": dict(self.player_names),
            "playerSubmitted": dict(self.player_submitted),
            "currentSubmissions": dict(self.current_submissions),
            "usedWords": list(self.used_words),
            "roundHistory": [r.to_dict() for r in self.round_history],
            "restartVotes": list(self.restart_votes),
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> RoomState:
        # Blobs saved before restartVotes / config existed get defaults.
        phase = data.get("phase", "lobby")
        if phase not in ("lobby", "playing", "won"):
            phase = "lobby"
        return cls(
            phase=phase,
            player_names=dict(data.get("playerNames") or {}),
            player_submitted={k: bool(v) for k, v in (data.get("playerSubmitted") or {}).items()},
            current_submissions=dict(data.get("currentSubmissions") or {}),
            used_words=list(data.get("usedWords") or []),
            round_history=[RoundEntry.from_dict(r) for r in data.get("roundHistory") or []],
            restart_votes=list(data.get("restartVotes") or []),
            config=GameConfig.from_dict(data.get("config")),
        )


def fresh_game(player_names: dict[str, str], config: GameConfig) -> RoomState:
    """A new game in the playing phase for exactly ``player_names``."""
    return RoomState(
        phase="playing",
        player_names=dict(player_names),
        player_submitted={pid: False for pid in player_names},
        config=GameConfig(win_condition=config.win_condition),
    )
