"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Deck, Rank, Suit, build_deck, parse_cards
from core.errors import BlackjackError, DeckExhausted, IllegalAction, InvalidBet
from core.hand import Hand, card_value, hand_sum

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "build_deck",
    "parse_cards",
    "Hand",
    "card_value",
    "hand_sum",
    "BlackjackError",
    "InvalidBet",
    "IllegalAction",
    "DeckExhausted",
]
