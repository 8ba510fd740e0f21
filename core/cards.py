"""Card and Deck classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

from core.errors import DeckExhausted


class Suit(Enum):
    """Card suits, in canonical deck order."""

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    """Card ranks, in canonical deck order."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10♥'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str == "T":
            rank_str = "10"

        suit_letters = {"S": Suit.SPADES, "H": Suit.HEARTS, "D": Suit.DIAMONDS, "C": Suit.CLUBS}

        try:
            rank = Rank(rank_str)
        except ValueError:
            raise ValueError(f"Invalid rank: {rank_str}") from None

        if suit_str in suit_letters:
            suit = suit_letters[suit_str]
        else:
            try:
                suit = Suit(suit_str)
            except ValueError:
                raise ValueError(f"Invalid suit: {suit_str}") from None

        return cls(rank, suit)


def parse_cards(*specs: str) -> list[Card]:
    """Parse several card strings at once, e.g. ``parse_cards("AS", "10H")``."""
    return [Card.from_string(s) for s in specs]


def build_deck() -> list[Card]:
    """Return all 52 cards in canonical order (suit-major, Ace first)."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """A single 52-card deck used as a draw stack (top = end of list)."""

    def __init__(self, rng: Random | None = None) -> None:
        """Initialize a new deck in canonical order."""
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Rebuild the deck with all 52 cards in canonical order."""
        self._cards = build_deck()

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the remaining cards."""
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        """Remove and return the top card."""
        if not self._cards:
            raise DeckExhausted("Cannot draw from an empty deck")
        return self._cards.pop()

    def stack(self, cards: Iterable[Card]) -> None:
        """
        Replace the remaining cards with an explicit order.

        The first card given is the first card drawn.
        """
        self._cards = list(reversed(list(cards)))

    def needs_reshuffle(self, threshold: int) -> bool:
        """Check if fewer than ``threshold`` cards remain."""
        return len(self._cards) < threshold

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)
