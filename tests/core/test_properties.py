"""Property-based tests for the engine invariants."""

from random import Random

from hypothesis import given, settings
from hypothesis import strategies as st

from core.cards import Deck, build_deck
from core.errors import BlackjackError
from core.game import Action, BlackjackGame, GamePhase, dispatch
from core.game.resolution import Resolution
from core.hand import hand_sum

ALL_CARDS = build_deck()

seeds = st.integers(min_value=0, max_value=2**32 - 1)
card_lists = st.lists(st.sampled_from(ALL_CARDS), max_size=12)
actions = st.lists(
    st.tuples(st.sampled_from(list(Action)), st.sampled_from([1, 5, 25, 100, 500])),
    max_size=80,
)


@given(seed=seeds)
def test_shuffle_is_a_permutation(seed):
    deck = Deck(rng=Random(seed))
    deck.shuffle()
    cards = list(deck)
    assert len(cards) == 52
    assert set(cards) == set(ALL_CARDS)


@given(cards=card_lists)
def test_hand_sum_only_busts_without_soft_aces(cards):
    total = hand_sum(cards)
    hard = sum(1 if c.is_ace else c.value for c in cards)
    assert total >= hard
    assert (total - hard) % 10 == 0
    if total > 21:
        assert total == hard


@settings(max_examples=60, deadline=None)
@given(seed=seeds, moves=actions)
def test_random_play_keeps_invariants(seed, moves):
    game = BlackjackGame(rng=Random(seed))

    for action, amount in moves:
        try:
            result = dispatch(game, action, amount)
            if isinstance(result, Resolution):
                result.complete()
        except BlackjackError:
            pass

        assert not game.in_progress
        assert game.bankroll >= 0
        assert game.current_bet >= 0
        if game.phase is GamePhase.BETTING:
            assert game.round.hands == []
            assert game.current_bet <= game.bankroll
        if game.phase is GamePhase.PLAYER_TURN:
            hands = game.round.hands
            assert 1 <= len(hands) <= game.max_hands
            assert all(h.bet > 0 for h in hands)
            assert not game.round.current_hand.finished
            assert game.round.dealer_hidden_card is not None
        if game.phase is GamePhase.GAME_OVER:
            break
