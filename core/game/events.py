"""Game events for the event system."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

from core.game.snapshot import GameSnapshot

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    # Betting events
    BET_CHANGED = auto()
    BET_PLACED = auto()

    # Round flow events
    ROUND_STARTED = auto()
    PHASE_CHANGED = auto()
    ROUND_ENDED = auto()
    GAME_OVER = auto()

    # Card events
    CARD_DEALT = auto()
    DECK_SHUFFLED = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    HAND_ADVANCED = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # Outcome events
    HAND_SETTLED = auto()

    # Error events
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()
    ROUND_ABORTED = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the primary communication mechanism between the core engine
    and the presentation layer. Every event raised by a state change carries
    the snapshot taken right after it.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    snapshot: GameSnapshot | None = None
    step: bool = False  # True when the event marks one step of a resolution
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Simple event emitter for game events.

    Allows subscribing to specific event types or all events. Only the most
    recent events are kept in the history.
    """

    HISTORY_LIMIT = 256

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        """Initialize the event emitter."""
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: deque[GameEvent] = deque(maxlen=history_limit)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Unsubscribe from events.

        Args:
            handler: Handler to remove
            event_type: Event type to unsubscribe from
        """
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and skipped; it never interrupts the
        engine or the other handlers.

        Args:
            event: The event to emit
        """
        self._event_history.append(event)

        # Typed handlers first, then catch-all handlers
        handlers = self._handlers.get(event.event_type, []) + self._handlers.get(None, [])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed on %s", handler, event.event_type.name)

    def emit_new(
        self,
        event_type: EventType,
        snapshot: GameSnapshot | None = None,
        step: bool = False,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Args:
            event_type: Type of event
            snapshot: State right after the change, if any
            step: Whether the change is a discrete step of a resolution
            **data: Event data

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data, snapshot=snapshot, step=step)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return list(self._event_history)

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()
