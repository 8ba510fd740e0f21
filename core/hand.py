"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from core.cards import Card


def card_value(card: Card) -> int:
    """Return the point value of a single card (Ace counts 11)."""
    return card.rank.blackjack_value


def hand_sum(cards: Iterable[Card]) -> int:
    """
    Calculate the best total for a sequence of cards.

    Aces start at 11 and each one is demoted to 1 at most once while the
    total is over 21. A busted total is returned as is.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card_value(card)

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_soft(cards: Iterable[Card]) -> bool:
    """Check if an ace is still counted as 11 in the best total."""
    cards = list(cards)
    if not any(card.is_ace for card in cards):
        return False
    total_hard = sum(1 if card.is_ace else card_value(card) for card in cards)
    return total_hard + 10 <= 21


@dataclass
class Hand:
    """One player hand slot in a round."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    finished: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def finish(self) -> None:
        """Mark the hand as done for this round."""
        self.finished = True

    @property
    def value(self) -> int:
        """Best total of the hand."""
        return hand_sum(self.cards)

    @property
    def is_soft(self) -> bool:
        return is_soft(self.cards)

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > 21

    @property
    def is_blackjack(self) -> bool:
        """
        Check for a two-card 21.

        Whether it pays the 3:2 bonus also depends on the number of hands in
        the round, see ``core.settlement``.
        """
        return len(self.cards) == 2 and self.value == 21

    @property
    def is_pair(self) -> bool:
        """Check for two cards of equal point value (10 and K qualify)."""
        return (
            len(self.cards) == 2
            and card_value(self.cards[0]) == card_value(self.cards[1])
        )

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the hand."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, bet={self.bet}, finished={self.finished})"
