"""WebSocket adapter streaming engine steps at presentation pace."""

import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from typing import Any

from api.session import extract_session_id, get_session_store, new_game
from config import config
from core.errors import BlackjackError, IllegalAction, InvalidBet
from core.game import Action, BlackjackGame, GameSnapshot, Resolution, available_actions, dispatch

logger = logging.getLogger(__name__)

router = APIRouter()

# Client message types mapped onto engine actions
MESSAGE_ACTIONS: dict[str, Action] = {
    "chip": Action.PLACE_CHIP,
    "clear_bet": Action.CLEAR_BET,
    "max_bet": Action.MAX_BET,
    "repeat_bet": Action.REPEAT_BET,
    "deal": Action.DEAL,
}


class ConnectionManager:
    """Manage WebSocket connections."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections[session_id] = websocket

    def disconnect(self, session_id: str) -> None:
        """Remove a connection. The game stays in the store for reconnection."""
        self._connections.pop(session_id, None)

    def get_or_create_game(self, session_id: str) -> BlackjackGame:
        """Get the session's game, creating one when a signed session has expired."""
        store = get_session_store()
        game = store.get(session_id)
        if game is None:
            game = new_game()
            store.set(session_id, game)
        return game

    def reset_game(self, session_id: str) -> BlackjackGame:
        """Start the session over with a fresh bankroll."""
        game = new_game()
        get_session_store().set(session_id, game)
        return game

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        if session_id in self._connections:
            await self._connections[session_id].send_json(message)

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()


def _state_message(game: BlackjackGame) -> dict[str, Any]:
    state = game.snapshot().to_dict()
    state["available_actions"] = [a.value for a in available_actions(game)]
    return {"type": "state_update", "state": state}


def _step_message(snapshot: GameSnapshot, index: int) -> dict[str, Any]:
    return {"type": "step", "index": index, "state": snapshot.to_dict()}


async def _stream(session_id: str, resolution: Resolution, delay: float) -> None:
    """Send each step of a resolution, pausing between them."""
    for index, snapshot in enumerate(resolution):
        await manager.send_message(session_id, _step_message(snapshot, index))
        if delay > 0:
            await asyncio.sleep(delay)


def _parse_action(message: dict[str, Any]) -> tuple[Action, int | None]:
    msg_type = message.get("type")
    if msg_type == "action":
        try:
            return Action(message.get("action")), None
        except ValueError:
            raise IllegalAction(f"Unknown action: {message.get('action')}") from None
    if msg_type in MESSAGE_ACTIONS:
        amount = message.get("amount")
        if amount is None:
            return MESSAGE_ACTIONS[msg_type], None
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidBet(f"Invalid chip amount: {amount!r}")
        return MESSAGE_ACTIONS[msg_type], amount
    raise IllegalAction(f"Unknown message type: {msg_type}")


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for paced game updates.

    The path must carry a session token issued by `POST /api/game/new`;
    anything else is closed with a policy violation.

    Messages from client:
    - {"type": "chip", "amount": 25}
    - {"type": "clear_bet"} / {"type": "max_bet"} / {"type": "repeat_bet"}
    - {"type": "deal"}
    - {"type": "action", "action": "hit"|"stand"|"double"|"split"}
    - {"type": "reset_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "step", "index": n, "state": {...}}  one per engine step
    - {"type": "state_update", "state": {...}}
    - {"type": "error", "error": "...", "message": "..."}
    """
    if extract_session_id(session_id) is None:
        logger.warning("Rejected WebSocket with an unsigned session id")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, session_id)
    game = manager.get_or_create_game(session_id)
    delay = config.game.step_delay_ms / 1000

    await manager.send_message(session_id, _state_message(game))

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None
            if not isinstance(message, dict):
                await manager.send_message(session_id, {
                    "type": "error",
                    "error": "BadMessage",
                    "message": "Messages must be JSON objects",
                })
                continue

            msg_type = message.get("type")

            if msg_type == "get_state":
                await manager.send_message(session_id, _state_message(game))
                continue

            if msg_type == "reset_game":
                game = manager.reset_game(session_id)
                await manager.send_message(session_id, _state_message(game))
                continue

            try:
                action, amount = _parse_action(message)
                result = dispatch(game, action, amount)
                if isinstance(result, Resolution):
                    await _stream(session_id, result, delay)
            except BlackjackError as exc:
                await manager.send_message(session_id, {
                    "type": "error",
                    "error": type(exc).__name__,
                    "message": str(exc),
                })
                continue

            await manager.send_message(session_id, _state_message(game))

    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected")
    finally:
        # A committed round always runs to settlement
        game.finish_pending()
        manager.disconnect(session_id)
