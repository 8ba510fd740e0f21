"""Read-only views of the game handed to the presentation layer."""

from dataclasses import dataclass
from typing import Any

from core.cards import Card
from core.game.state import GamePhase
from core.hand import Hand, hand_sum
from core.settlement import RoundResult


def _card_to_dict(card: Card) -> dict[str, Any]:
    return {"rank": str(card.rank), "suit": str(card.suit), "value": card.value}


@dataclass(frozen=True)
class HandSnapshot:
    """Frozen copy of a player hand."""

    cards: tuple[Card, ...]
    bet: int
    finished: bool
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool

    @classmethod
    def from_hand(cls, hand: Hand) -> "HandSnapshot":
        return cls(
            cards=tuple(hand.cards),
            bet=hand.bet,
            finished=hand.finished,
            value=hand.value,
            is_soft=hand.is_soft,
            is_blackjack=hand.is_blackjack,
            is_busted=hand.is_busted,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cards": [_card_to_dict(c) for c in self.cards],
            "bet": self.bet,
            "finished": self.finished,
            "value": self.value,
            "is_soft": self.is_soft,
            "is_blackjack": self.is_blackjack,
            "is_busted": self.is_busted,
        }


@dataclass(frozen=True)
class GameSnapshot:
    """
    Immutable picture of the session after one state change.

    The dealer's hole card is never exposed, only whether one is held.
    """

    bankroll: int
    current_bet: int
    last_bet: int
    phase: GamePhase
    dealer_cards: tuple[Card, ...]
    dealer_has_hidden_card: bool
    player_hands: tuple[HandSnapshot, ...]
    current_hand_index: int
    in_progress: bool
    cards_remaining: int
    last_result: RoundResult | None = None

    @property
    def dealer_value(self) -> int:
        """Total of the dealer's visible cards."""
        return hand_sum(self.dealer_cards)

    @property
    def current_hand(self) -> HandSnapshot | None:
        if self.phase is GamePhase.PLAYER_TURN and 0 <= self.current_hand_index < len(self.player_hands):
            return self.player_hands[self.current_hand_index]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "bankroll": self.bankroll,
            "current_bet": self.current_bet,
            "last_bet": self.last_bet,
            "phase": self.phase.value,
            "dealer_cards": [_card_to_dict(c) for c in self.dealer_cards],
            "dealer_has_hidden_card": self.dealer_has_hidden_card,
            "dealer_value": self.dealer_value,
            "player_hands": [h.to_dict() for h in self.player_hands],
            "current_hand_index": self.current_hand_index,
            "in_progress": self.in_progress,
            "cards_remaining": self.cards_remaining,
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }
