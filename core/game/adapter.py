"""Boundary between the engine and whatever presents it."""

from enum import Enum
from typing import Protocol

from core.errors import IllegalAction
from core.game.engine import BlackjackGame
from core.game.events import GameEvent
from core.game.resolution import Resolution
from core.game.snapshot import GameSnapshot
from core.game.state import GamePhase


class Action(Enum):
    """Commands a presentation layer can issue."""

    PLACE_CHIP = "chip"
    CLEAR_BET = "clear"
    MAX_BET = "max"
    REPEAT_BET = "repeat"
    DEAL = "deal"
    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"

    @property
    def advances_round(self) -> bool:
        """Check if the action returns a Resolution rather than a snapshot."""
        return self in ROUND_ACTIONS


ROUND_ACTIONS = frozenset({Action.DEAL, Action.HIT, Action.STAND, Action.DOUBLE, Action.SPLIT})


class GameObserver(Protocol):
    """Anything that renders snapshots, one per engine step."""

    def on_snapshot(self, snapshot: GameSnapshot) -> None:
        ...


def dispatch(
    game: BlackjackGame,
    action: Action,
    amount: int | None = None,
) -> GameSnapshot | Resolution:
    """
    Route a typed action to the engine.

    Betting actions return the new snapshot; round actions return the
    ``Resolution`` to step through.
    """
    if action is Action.PLACE_CHIP:
        if amount is None:
            raise IllegalAction("A chip amount is required")
        return game.place_bet_chip(amount)
    if action is Action.CLEAR_BET:
        return game.clear_bet()
    if action is Action.MAX_BET:
        return game.set_max_bet()
    if action is Action.REPEAT_BET:
        return game.repeat_last_bet()
    if action is Action.DEAL:
        return game.deal()
    if action is Action.HIT:
        return game.hit()
    if action is Action.STAND:
        return game.stand()
    if action is Action.DOUBLE:
        return game.double_down()
    if action is Action.SPLIT:
        return game.split()
    raise IllegalAction(f"Unknown action: {action!r}")


def available_actions(game: BlackjackGame) -> list[Action]:
    """List the actions the engine would accept right now."""
    if game.in_progress:
        return []

    if game.phase is GamePhase.BETTING:
        actions = [Action.PLACE_CHIP, Action.CLEAR_BET, Action.MAX_BET]
        if 0 < game.last_bet <= game.bankroll:
            actions.append(Action.REPEAT_BET)
        if game.can_deal:
            actions.append(Action.DEAL)
        return actions

    actions = []
    if game.can_hit:
        actions.append(Action.HIT)
    if game.can_stand:
        actions.append(Action.STAND)
    if game.can_double:
        actions.append(Action.DOUBLE)
    if game.can_split:
        actions.append(Action.SPLIT)
    return actions


def attach_observer(game: BlackjackGame, observer: GameObserver) -> None:
    """Forward every engine step to ``observer``."""

    def _forward(event: GameEvent) -> None:
        if event.step and event.snapshot is not None:
            observer.on_snapshot(event.snapshot)

    game.subscribe(_forward)
