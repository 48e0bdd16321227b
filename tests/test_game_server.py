"""
Tests for the Flask-SocketIO front end.
"""

import pytest

from mafia_host.config.game_config import GameConfig
from mafia_host.web.game_server import GameServer


@pytest.fixture
def server():
    return GameServer(GameConfig(use_announcements=False, record_events=False))


def received(client, name):
    return [packet["args"][0] for packet in client.get_received() if packet["name"] == name]


def test_status_route(server):
    """Test the status route reports the session summary."""
    response = server.app.test_client().get("/status")

    assert response.status_code == 200
    data = response.get_json()
    assert data["phase"] == "lobby"
    assert data["round"] == 0
    assert data["paused"] is False
    assert data["clients_connected"] == 0


def test_join_over_socket(server):
    """Test a socket join seats the player and confirms it privately."""
    client = server.socketio.test_client(server.app)
    assert client.is_connected()

    client.emit("joinGame", {"name": "Alice"})

    joined = received(client, "joinedGame")
    assert len(joined) == 1
    assert joined[0]["playerName"] == "Alice"
    assert joined[0]["isHost"] is True
    assert len(server.session.game_state.roster) == 1


def test_malformed_event_returns_error(server):
    """Test a bad payload is answered with an error event."""
    client = server.socketio.test_client(server.app)

    client.emit("godMarkKill", {"wrong": 1})

    errors = received(client, "error")
    assert errors and errors[0]["kind"] == "malformed"


def test_disconnect_leaves_lobby(server):
    """Test a dropped socket leaves the lobby."""
    client = server.socketio.test_client(server.app)
    client.emit("joinGame", {"name": "Alice"})
    client.disconnect()

    assert len(server.session.game_state.roster) == 0
    assert server.clients_connected == 0
