"""Pytest fixtures for blackjack engine tests."""

import pytest
from random import Random

from core.cards import Deck, build_deck, parse_cards
from core.hand import Hand
from core.game import BlackjackGame


def stack_deck(deck: Deck, *specs: str) -> None:
    """
    Put the given cards on top of a full deck.

    The rest of the 52 cards follow in canonical order, so the deck never
    drops under the reshuffle threshold.
    """
    top = parse_cards(*specs)
    rest = [c for c in build_deck() if c not in top]
    deck.stack(top + rest)


@pytest.fixture
def stack():
    """The ``stack_deck`` helper, for tests that get their game elsewhere."""
    return stack_deck


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards=parse_cards("AS", "KH"), bet=100)


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards=parse_cards("AS", "6H"), bet=100)


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards=parse_cards("10S", "6H"), bet=100)


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand(cards=parse_cards("8S", "8H"), bet=100)


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards=parse_cards("10S", "6H", "KC"), bet=100)


@pytest.fixture
def game(rng):
    """A new game instance with the default 500 bankroll."""
    return BlackjackGame(starting_bankroll=500, rng=rng)


@pytest.fixture
def stacked_game(rng):
    """
    Factory for a game whose next cards are known.

    Deal order is player, dealer up, player, dealer hole, then any draws.
    """

    def _make(*specs: str, bankroll: int = 500, **kwargs) -> BlackjackGame:
        g = BlackjackGame(starting_bankroll=bankroll, rng=rng, **kwargs)
        stack_deck(g.deck, *specs)
        return g

    return _make


@pytest.fixture
def dealt_game(stacked_game):
    """Factory: stacked game with a bet placed and the deal fully resolved."""

    def _make(*specs: str, bet: int = 100, **kwargs) -> BlackjackGame:
        g = stacked_game(*specs, **kwargs)
        g.place_bet_chip(bet)
        g.deal().complete()
        return g

    return _make
