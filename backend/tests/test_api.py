from meld.game.service import ROOM_CODE_ALPHABET


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_create_room_hands_out_free_code(client, connect):
    res = client.post("/api/rooms")
    assert res.status_code == 200
    code = res.get_json()["roomCode"]
    assert len(code) == 4
    assert set(code) <= set(ROOM_CODE_ALPHABET)

    # Nothing exists until someone connects with the code.
    assert client.get(f"/api/rooms/{code}").status_code == 404

    connect(code)
    res = client.get(f"/api/rooms/{code}")
    assert res.status_code == 200
    state = res.get_json()
    assert state["type"] == "state"
    assert state["phase"] == "lobby"
    assert state["players"] == []


def test_unknown_room_is_404(client):
    res = client.get("/api/rooms/ZZZZ")
    assert res.status_code == 404
    assert res.get_json() == {"error": "room_not_found"}

    res = client.get("/api/rooms/not-a-code")
    assert res.status_code == 404


def test_room_state_reflects_socket_players(client, connect):
    alice = connect("WOLF")
    alice.emit("message", {"type": "join", "playerName": "Alice"})

    res = client.get("/api/rooms/wolf")
    assert res.status_code == 200
    assert [p["name"] for p in res.get_json()["players"]] == ["Alice"]


def test_cors_headers_on_api(client):
    res = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
    assert res.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:3000")


def test_room_state_outlives_its_connections(flask_app, client, connect):
    alice = connect("WOLF")
    alice.emit("message", {"type": "join", "playerName": "Alice"})
    alice.disconnect()

    assert flask_app.extensions["meld.rooms"].get("WOLF") is None
    res = client.get("/api/rooms/WOLF")
    assert res.status_code == 200
    assert res.get_json()["phase"] == "lobby"
    assert res.get_json()["players"] == []
