"""Per-hand outcome classification and payout computation."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Sequence

from core.cards import Card
from core.hand import Hand, hand_sum

BLACKJACK_PAYOUT = Decimal("1.5")


class Outcome(Enum):
    """Result of one hand against the dealer."""

    BLACKJACK = "blackjack"
    WIN = "win"
    PUSH = "push"
    LOSE = "lose"
    BUST = "bust"

    @property
    def is_win(self) -> bool:
        return self in (Outcome.BLACKJACK, Outcome.WIN)


@dataclass(frozen=True)
class HandResult:
    """Settlement of a single hand."""

    hand_index: int
    outcome: Outcome
    bet: int
    player_value: int
    win_amount: int = 0
    credited: int = 0  # Amount returned to the bankroll (stake + winnings)

    @property
    def net(self) -> int:
        """Net effect of the hand on the bankroll over the whole round."""
        return self.credited - self.bet

    def describe(self) -> str:
        n = self.hand_index + 1
        if self.outcome is Outcome.BUST:
            return f"Hand {n} busts (-{self.bet})."
        if self.outcome is Outcome.LOSE:
            return f"Hand {n} loses (-{self.bet})."
        if self.outcome is Outcome.PUSH:
            return f"Hand {n} is a push."
        if self.outcome is Outcome.BLACKJACK:
            return f"Hand {n} Blackjack! (+{self.win_amount})"
        return f"Hand {n} wins (+{self.win_amount})!"

    def to_dict(self) -> dict[str, Any]:
        return {
            "hand_index": self.hand_index,
            "outcome": self.outcome.value,
            "bet": self.bet,
            "player_value": self.player_value,
            "win_amount": self.win_amount,
            "credited": self.credited,
            "net": self.net,
        }


@dataclass(frozen=True)
class RoundResult:
    """Settlement of every hand in a round."""

    hands: tuple[HandResult, ...]
    dealer_value: int
    house_edge: float

    @property
    def total_credited(self) -> int:
        return sum(h.credited for h in self.hands)

    @property
    def net(self) -> int:
        """Total net winnings across all hands (display only)."""
        return sum(h.net for h in self.hands)

    @property
    def message(self) -> str:
        return " ".join(h.describe() for h in self.hands)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hands": [h.to_dict() for h in self.hands],
            "dealer_value": self.dealer_value,
            "house_edge": self.house_edge,
            "net": self.net,
            "message": self.message,
        }


def normalize_house_edge(value: Any) -> float:
    """
    Coerce an externally supplied house edge into [0, 1).

    Anything non-numeric, NaN or out of range becomes 0. Numeric strings
    are accepted since the value usually comes from an operator control.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        edge = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(edge) or not 0.0 <= edge < 1.0:
        return 0.0
    return edge


def win_amount(bet: int, house_edge: float, blackjack: bool = False) -> int:
    """
    Net winnings for a winning hand.

    ``round_half_up(base * (1 - house_edge))`` where base is the bet, or
    1.5x the bet for a blackjack.
    """
    base = Decimal(bet) * (BLACKJACK_PAYOUT if blackjack else Decimal(1))
    amount = base * (Decimal(1) - Decimal(str(house_edge)))
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def settle_hand(
    index: int,
    hand: Hand,
    dealer_value: int,
    house_edge: float,
    sole_hand: bool = True,
) -> HandResult:
    """
    Classify one hand against the dealer's final total.

    The 3:2 bonus is only paid on a two-card 21 when it is the only hand in
    the round; a split hand reaching 21 with two cards is a regular win.
    """
    player_value = hand.value

    if player_value > 21:
        return HandResult(index, Outcome.BUST, hand.bet, player_value)

    if dealer_value > 21 or player_value > dealer_value:
        natural = sole_hand and hand.is_blackjack
        amount = win_amount(hand.bet, house_edge, blackjack=natural)
        return HandResult(
            index,
            Outcome.BLACKJACK if natural else Outcome.WIN,
            hand.bet,
            player_value,
            win_amount=amount,
            credited=hand.bet + amount,
        )

    if player_value < dealer_value:
        return HandResult(index, Outcome.LOSE, hand.bet, player_value)

    return HandResult(index, Outcome.PUSH, hand.bet, player_value, credited=hand.bet)


def settle_round(
    hands: Sequence[Hand],
    dealer_cards: Sequence[Card],
    house_edge: Any = 0.0,
) -> RoundResult:
    """Settle every player hand independently against the dealer."""
    edge = normalize_house_edge(house_edge)
    dealer_value = hand_sum(dealer_cards)
    sole_hand = len(hands) == 1
    results = tuple(
        settle_hand(i, hand, dealer_value, edge, sole_hand=sole_hand)
        for i, hand in enumerate(hands)
    )
    return RoundResult(hands=results, dealer_value=dealer_value, house_edge=edge)
