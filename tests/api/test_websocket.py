"""Tests for the paced WebSocket adapter."""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

import api.websocket as websocket_module
from api.main import app
from api.session import get_session_store
from api.websocket import _parse_action
from config import AppConfig, GameConfig
from core.errors import IllegalAction, InvalidBet
from core.game import Action


@pytest.fixture
def no_delay(monkeypatch):
    """Stream steps without pausing."""
    monkeypatch.setattr(websocket_module, "config", AppConfig(game=GameConfig(step_delay_ms=0)))


@pytest.fixture
def session_id():
    """A signed session token with a stored game."""
    return get_session_store().create()


@pytest.fixture
def ws(no_delay, session_id):
    """Open a connection and consume the initial state."""
    client = TestClient(app)
    with client.websocket_connect(f"/ws/game/{session_id}") as websocket:
        initial = websocket.receive_json()
        assert initial["type"] == "state_update"
        yield websocket


class TestParseAction:
    """Tests for mapping client messages to engine actions."""

    def test_chip(self):
        assert _parse_action({"type": "chip", "amount": 25}) == (Action.PLACE_CHIP, 25)

    def test_betting_shortcuts(self):
        assert _parse_action({"type": "max_bet"}) == (Action.MAX_BET, None)
        assert _parse_action({"type": "repeat_bet"}) == (Action.REPEAT_BET, None)
        assert _parse_action({"type": "deal"}) == (Action.DEAL, None)

    def test_player_action(self):
        assert _parse_action({"type": "action", "action": "double"}) == (Action.DOUBLE, None)

    @pytest.mark.parametrize("amount", ["abc", 2.5, True, [25]])
    def test_bad_chip_amount(self, amount):
        with pytest.raises(InvalidBet):
            _parse_action({"type": "chip", "amount": amount})

    def test_unknown_action(self):
        with pytest.raises(IllegalAction):
            _parse_action({"type": "action", "action": "surrender"})

    def test_unknown_type(self):
        with pytest.raises(IllegalAction):
            _parse_action({"type": "insurance"})


def test_initial_state(no_delay, session_id):
    client = TestClient(app)
    with client.websocket_connect(f"/ws/game/{session_id}") as websocket:
        message = websocket.receive_json()

    assert message["type"] == "state_update"
    assert message["state"]["phase"] == "betting"
    assert message["state"]["available_actions"] == ["chip", "clear", "max"]


def test_chip_updates_state(ws):
    ws.send_json({"type": "chip", "amount": 100})
    message = ws.receive_json()
    assert message["type"] == "state_update"
    assert message["state"]["current_bet"] == 100


def test_deal_streams_steps(ws, session_id, stack):
    stack(get_session_store().get(session_id).deck, "10S", "7H", "9S", "10H")

    ws.send_json({"type": "chip", "amount": 100})
    ws.receive_json()
    ws.send_json({"type": "deal"})

    steps = [ws.receive_json() for _ in range(6)]
    assert [s["type"] for s in steps] == ["step"] * 6
    assert [s["index"] for s in steps] == list(range(6))
    assert steps[-1]["state"]["phase"] == "player_turn"

    final = ws.receive_json()
    assert final["type"] == "state_update"
    assert final["state"]["in_progress"] is False
    assert final["state"]["available_actions"] == ["hit", "stand", "double"]


def test_stand_settles_round(ws, session_id, stack):
    game = get_session_store().get(session_id)
    stack(game.deck, "10S", "7H", "9S", "10H")
    bankroll = game.bankroll

    ws.send_json({"type": "chip", "amount": 100})
    ws.receive_json()
    ws.send_json({"type": "deal"})
    for _ in range(7):
        ws.receive_json()

    ws.send_json({"type": "action", "action": "stand"})
    steps = [ws.receive_json() for _ in range(5)]
    final = ws.receive_json()

    assert steps[3]["state"]["phase"] == "end_round"
    assert final["state"]["phase"] == "betting"
    assert final["state"]["bankroll"] == bankroll + 100
    assert final["state"]["last_result"]["message"] == "Hand 1 wins (+100)!"


def test_illegal_action_reports_error(ws):
    ws.send_json({"type": "action", "action": "hit"})
    message = ws.receive_json()
    assert message == {
        "type": "error",
        "error": "IllegalAction",
        "message": message["message"],
    }


def test_over_bankroll_chip_reports_error(ws):
    ws.send_json({"type": "chip", "amount": 10**9})
    message = ws.receive_json()
    assert message["type"] == "error"
    assert message["error"] == "InvalidBet"


def test_non_object_message(ws):
    ws.send_text("not json")
    assert ws.receive_json()["error"] == "BadMessage"

    ws.send_text("[1, 2]")
    assert ws.receive_json()["error"] == "BadMessage"


def test_get_state(ws):
    ws.send_json({"type": "get_state"})
    message = ws.receive_json()
    assert message["type"] == "state_update"
    assert message["state"]["phase"] == "betting"


def test_reset_game(ws, session_id):
    ws.send_json({"type": "chip", "amount": 100})
    ws.receive_json()

    ws.send_json({"type": "reset_game"})
    message = ws.receive_json()
    assert message["state"]["current_bet"] == 0
    assert get_session_store().get(session_id).current_bet == 0


@pytest.mark.parametrize("session_id", ["forged", "ws-not-signed"])
def test_unsigned_session_rejected(no_delay, session_id):
    client = TestClient(app)

    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect(f"/ws/game/{session_id}") as websocket:
            websocket.receive_json()

    assert excinfo.value.code == 1008
    assert get_session_store().get(session_id) is None


def test_expired_signed_session_gets_fresh_game(no_delay):
    token = get_session_store().create()
    get_session_store().delete(token)

    client = TestClient(app)
    with client.websocket_connect(f"/ws/game/{token}") as websocket:
        message = websocket.receive_json()

    assert message["state"]["phase"] == "betting"
    assert get_session_store().get(token) is not None
