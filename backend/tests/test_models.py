from meld.game.models import GameConfig, RoomState, RoundEntry, Submission, fresh_game


def test_empty_state_defaults():
    state = RoomState()
    assert state.to_dict() == {
        "phase": "lobby",
        "playerNames": {},
        "playerSubmitted": {},
        "currentSubmissions": {},
        "usedWords": [],
        "roundHistory": [],
        "restartVotes": [],
        "config": {"winCondition": "exact"},
    }


def test_state_survives_serialization():
    state = RoomState(
        phase="won",
        player_names={"a": "Alice", "b": "Bob"},
        player_submitted={"a": True, "b": True},
        current_submissions={"a": "apple", "b": "apple"},
        used_words=["apple"],
        round_history=[
            RoundEntry(
                submissions=[Submission("a", "Alice", "apple"), Submission("b", "Bob", "apple")],
                won=True,
                winning_word="apple",
            )
        ],
        restart_votes=[],
        config=GameConfig("majority"),
    )
    assert RoomState.from_dict(state.to_dict()) == state


def test_from_dict_fills_fields_missing_from_old_blobs():
    state = RoomState.from_dict(
        {
            "phase": "playing",
            "playerNames": {"a": "Alice"},
            "playerSubmitted": {"a": False},
            "usedWords": [],
            "currentSubmissions": {},
            "roundHistory": [{"submissions": [{"id": "a", "name": "Alice", "word": "x"}], "won": False}],
        }
    )
    assert state.restart_votes == []
    assert state.config == GameConfig("exact")
    assert state.round_history[0].winning_word is None


def test_unknown_config_falls_back_to_default():
    assert GameConfig.from_dict({"winCondition": "closest"}) == GameConfig()
    assert GameConfig.from_dict(None) == GameConfig()


def test_fresh_game():
    state = fresh_game({"a": "Alice", "b": "Bob"}, GameConfig("majority"))
    assert state.phase == "playing"
    assert state.player_submitted == {"a": False, "b": False}
    assert state.round_history == []
    assert state.used_words == []
    assert state.config.win_condition == "majority"
