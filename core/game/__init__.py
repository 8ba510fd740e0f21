"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GamePhase
from core.game.snapshot import GameSnapshot, HandSnapshot
from core.game.resolution import Resolution
from core.game.engine import BlackjackGame
from core.game.adapter import Action, GameObserver, attach_observer, available_actions, dispatch

__all__ = [
    "GameEvent",
    "EventType",
    "GamePhase",
    "GameSnapshot",
    "HandSnapshot",
    "Resolution",
    "BlackjackGame",
    "Action",
    "GameObserver",
    "attach_observer",
    "available_actions",
    "dispatch",
]
