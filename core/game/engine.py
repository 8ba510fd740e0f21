"""Blackjack game engine with state machine."""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any, Callable, Iterator, NoReturn

from transitions import Machine

from core.cards import Card, Deck
from core.errors import BlackjackError, DeckExhausted, IllegalAction, InvalidBet
from core.hand import Hand, hand_sum
from core.settlement import RoundResult, settle_round
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.resolution import Resolution
from core.game.snapshot import GameSnapshot, HandSnapshot
from core.game.state import GamePhase

logger = logging.getLogger(__name__)

DEALER_STANDS_ON = 17


@dataclass
class Round:
    """Cards and hands of the round being played."""

    hands: list[Hand] = field(default_factory=list)
    current_hand_index: int = 0
    dealer_cards: list[Card] = field(default_factory=list)
    dealer_hidden_card: Card | None = None

    @property
    def current_hand(self) -> Hand | None:
        """Get the current active hand."""
        if 0 <= self.current_hand_index < len(self.hands):
            return self.hands[self.current_hand_index]
        return None

    @property
    def all_busted(self) -> bool:
        """Check if every player hand is over 21."""
        return bool(self.hands) and all(h.is_busted for h in self.hands)


class BlackjackGame:
    """
    Blackjack session engine using a state machine.

    Owns the deck, the bankroll and the live round. This is the core game
    logic, completely UI-agnostic: betting calls return a snapshot, round
    actions return a ``Resolution`` that the caller steps through.
    """

    # State machine states
    STATES = [p.value for p in GamePhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "start_play", "source": "betting", "dest": "player_turn"},
        {"trigger": "next_hand", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "dealer_done", "source": "dealer_turn", "dest": "end_round"},
        {"trigger": "new_round", "source": "end_round", "dest": "betting"},
        {"trigger": "bankrupt", "source": "end_round", "dest": "game_over"},
        {"trigger": "abort", "source": "*", "dest": "game_over"},
    ]

    def __init__(
        self,
        starting_bankroll: int = 500,
        house_edge: Any = 0.0,
        reshuffle_threshold: int = 20,
        max_hands: int = 4,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new session.

        Args:
            starting_bankroll: Chips the player sits down with
            house_edge: Fraction shaved off winnings, or a zero-argument
                callable returning it; read at every settlement
            reshuffle_threshold: Rebuild the deck before a round when fewer
                cards than this remain
            max_hands: Maximum number of hands reachable by splitting
            rng: Random number generator for reproducible games
        """
        if starting_bankroll <= 0:
            raise ValueError("starting_bankroll must be positive")
        if max_hands < 1:
            raise ValueError("max_hands must be at least 1")

        self.bankroll = starting_bankroll
        self.current_bet = 0
        self.last_bet = 0
        self.house_edge = house_edge
        self.reshuffle_threshold = reshuffle_threshold
        self.max_hands = max_hands

        self.deck = Deck(rng=rng)
        self.deck.shuffle()

        self.round = Round()
        self.last_result: RoundResult | None = None
        self.events = EventEmitter()
        self._pending: Resolution | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="betting",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> GamePhase:
        """Get current phase as enum."""
        return GamePhase(self._machine_state)  # type: ignore[attr-defined]

    @property
    def in_progress(self) -> bool:
        """Check if an action is still being resolved."""
        return self._pending is not None

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def snapshot(self) -> GameSnapshot:
        """Return an immutable view of the session."""
        rnd = self.round
        return GameSnapshot(
            bankroll=self.bankroll,
            current_bet=self.current_bet,
            last_bet=self.last_bet,
            phase=self.phase,
            dealer_cards=tuple(rnd.dealer_cards),
            dealer_has_hidden_card=rnd.dealer_hidden_card is not None,
            player_hands=tuple(HandSnapshot.from_hand(h) for h in rnd.hands),
            current_hand_index=rnd.current_hand_index,
            in_progress=self.in_progress,
            cards_remaining=self.deck.cards_remaining,
            last_result=self.last_result,
        )

    # Betting

    def place_bet_chip(self, amount: int) -> GameSnapshot:
        """Add a chip to the current bet."""
        self._require_betting("place a bet")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            self._reject(InvalidBet(f"Chip amount must be a positive integer, got {amount!r}"))
        if self.current_bet + amount > self.bankroll:
            self._reject(
                InvalidBet(f"Bet of {self.current_bet + amount} exceeds bankroll of {self.bankroll}"),
                EventType.INSUFFICIENT_FUNDS,
                required=self.current_bet + amount,
                available=self.bankroll,
            )
        self.current_bet += amount
        return self._step(EventType.BET_CHANGED, current_bet=self.current_bet)

    def clear_bet(self) -> GameSnapshot:
        """Reset the current bet to zero."""
        self._require_betting("clear the bet")
        self.current_bet = 0
        return self._step(EventType.BET_CHANGED, current_bet=0)

    def set_max_bet(self) -> GameSnapshot:
        """Bet the whole bankroll."""
        self._require_betting("set the bet")
        self.current_bet = self.bankroll
        return self._step(EventType.BET_CHANGED, current_bet=self.current_bet)

    def repeat_last_bet(self) -> GameSnapshot:
        """Reuse the bet of the previous round."""
        self._require_betting("repeat the bet")
        if self.last_bet <= 0:
            self._reject(InvalidBet("No previous bet to repeat"))
        if self.last_bet > self.bankroll:
            self._reject(
                InvalidBet(f"Previous bet of {self.last_bet} exceeds bankroll of {self.bankroll}"),
                EventType.INSUFFICIENT_FUNDS,
                required=self.last_bet,
                available=self.bankroll,
            )
        self.current_bet = self.last_bet
        return self._step(EventType.BET_CHANGED, current_bet=self.current_bet)

    # Round actions

    def deal(self) -> Resolution:
        """Commit the current bet and deal a new round."""
        self._require_betting("deal")
        if self.current_bet <= 0:
            self._reject(InvalidBet("Place a bet before dealing"))
        if self.current_bet > self.bankroll:
            self._reject(
                InvalidBet(f"Bet of {self.current_bet} exceeds bankroll of {self.bankroll}"),
                EventType.INSUFFICIENT_FUNDS,
                required=self.current_bet,
                available=self.bankroll,
            )
        return self._begin(self._deal_steps())

    def hit(self) -> Resolution:
        """Draw one card into the current hand."""
        hand = self._require_playable("hit")
        return self._begin(self._hit_steps(hand))

    def stand(self) -> Resolution:
        """Finish the current hand without drawing."""
        hand = self._require_playable("stand")
        return self._begin(self._stand_steps(hand))

    def double_down(self) -> Resolution:
        """Double the bet, draw exactly one card and finish the hand."""
        hand = self._require_playable("double down")
        if len(hand.cards) != 2:
            self._reject(IllegalAction("Can only double down on two cards"))
        if self.bankroll < hand.bet:
            self._reject(
                IllegalAction("Not enough funds to double down"),
                EventType.INSUFFICIENT_FUNDS,
                required=hand.bet,
                available=self.bankroll,
            )
        return self._begin(self._double_steps(hand))

    def split(self) -> Resolution:
        """Split a pair into two hands, each receiving one new card."""
        hand = self._require_playable("split")
        if not hand.is_pair:
            self._reject(IllegalAction("Can only split two cards of equal value"))
        if len(self.round.hands) >= self.max_hands:
            self._reject(IllegalAction(f"Cannot play more than {self.max_hands} hands"))
        if self.bankroll < hand.bet:
            self._reject(
                IllegalAction("Not enough funds to split"),
                EventType.INSUFFICIENT_FUNDS,
                required=hand.bet,
                available=self.bankroll,
            )
        return self._begin(self._split_steps(hand))

    def finish_pending(self) -> GameSnapshot | None:
        """Run any in-flight resolution to its end."""
        if self._pending is None:
            return None
        return self._pending.complete()

    @property
    def can_deal(self) -> bool:
        """Check if dealing is allowed."""
        return (
            not self.in_progress
            and self.phase is GamePhase.BETTING
            and 0 < self.current_bet <= self.bankroll
        )

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self._playable_hand() is not None

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self._playable_hand() is not None

    @property
    def can_double(self) -> bool:
        """Check if doubling down is allowed."""
        hand = self._playable_hand()
        return hand is not None and len(hand.cards) == 2 and self.bankroll >= hand.bet

    @property
    def can_split(self) -> bool:
        """Check if splitting is allowed."""
        hand = self._playable_hand()
        return (
            hand is not None
            and hand.is_pair
            and len(self.round.hands) < self.max_hands
            and self.bankroll >= hand.bet
        )

    # Step generators

    def _deal_steps(self) -> Iterator[GameSnapshot]:
        bet = self.current_bet
        self.bankroll -= bet
        self.last_bet = bet
        self.last_result = None
        self.round = Round(hands=[Hand(bet=bet)])
        logger.info("Round started with a bet of %d, bankroll now %d", bet, self.bankroll)
        yield self._step(EventType.BET_PLACED, amount=bet)

        if self.deck.needs_reshuffle(self.reshuffle_threshold):
            self.deck.reset()
            self.deck.shuffle()
            logger.debug("Deck rebuilt and shuffled")
            yield self._step(EventType.DECK_SHUFFLED)

        hand = self.round.hands[0]
        yield self._deal_to(hand)
        yield self._deal_to_dealer()
        yield self._deal_to(hand)
        yield self._deal_to_dealer(hidden=True)

        self.start_play()
        yield self._step(EventType.ROUND_STARTED, hand_value=hand.value)

        if hand.value == 21:
            hand.finish()
            self.events.emit_new(EventType.PLAYER_BLACKJACK, snapshot=self.snapshot(), hand_index=0)
            yield from self._advance_steps()

    def _hit_steps(self, hand: Hand) -> Iterator[GameSnapshot]:
        yield self._deal_to(hand, EventType.PLAYER_HIT)
        if hand.value >= 21:
            hand.finish()
            if hand.is_busted:
                self.events.emit_new(
                    EventType.PLAYER_BUSTS,
                    snapshot=self.snapshot(),
                    hand_index=self.round.current_hand_index,
                )
            yield from self._advance_steps()

    def _stand_steps(self, hand: Hand) -> Iterator[GameSnapshot]:
        hand.finish()
        yield self._step(
            EventType.PLAYER_STAND,
            hand_index=self.round.current_hand_index,
            hand_value=hand.value,
        )
        yield from self._advance_steps()

    def _double_steps(self, hand: Hand) -> Iterator[GameSnapshot]:
        self.bankroll -= hand.bet
        hand.bet *= 2
        yield self._step(
            EventType.PLAYER_DOUBLE,
            hand_index=self.round.current_hand_index,
            new_bet=hand.bet,
        )
        yield self._deal_to(hand)
        hand.finish()
        if hand.is_busted:
            self.events.emit_new(
                EventType.PLAYER_BUSTS,
                snapshot=self.snapshot(),
                hand_index=self.round.current_hand_index,
            )
        yield from self._advance_steps()

    def _split_steps(self, hand: Hand) -> Iterator[GameSnapshot]:
        index = self.round.current_hand_index
        self.bankroll -= hand.bet
        new_hand = Hand(cards=[hand.cards.pop()], bet=hand.bet)
        self.round.hands.insert(index + 1, new_hand)
        yield self._step(EventType.PLAYER_SPLIT, hand_index=index, new_hand_index=index + 1)
        yield self._deal_to(hand)
        yield self._deal_to(new_hand)

    def _advance_steps(self) -> Iterator[GameSnapshot]:
        """Move to the next unfinished hand, or hand over to the dealer."""
        rnd = self.round
        for index in range(rnd.current_hand_index + 1, len(rnd.hands)):
            if not rnd.hands[index].finished:
                rnd.current_hand_index = index
                self.next_hand()
                yield self._step(EventType.HAND_ADVANCED, hand_index=index)
                return

        self.player_done()
        yield self._step(EventType.PHASE_CHANGED, phase=self.phase.value)
        yield from self._dealer_steps()

    def _dealer_steps(self) -> Iterator[GameSnapshot]:
        rnd = self.round
        if rnd.dealer_hidden_card is not None:
            card = rnd.dealer_hidden_card
            rnd.dealer_cards.append(card)
            rnd.dealer_hidden_card = None
            yield self._step(
                EventType.DEALER_REVEALS,
                card=str(card),
                hand_value=hand_sum(rnd.dealer_cards),
            )

        # Nothing left to beat once every hand is bust
        if not rnd.all_busted:
            while hand_sum(rnd.dealer_cards) < DEALER_STANDS_ON:
                yield self._deal_to_dealer(event_type=EventType.DEALER_HITS)

            dealer_value = hand_sum(rnd.dealer_cards)
            self.events.emit_new(
                EventType.DEALER_BUSTS if dealer_value > 21 else EventType.DEALER_STANDS,
                snapshot=self.snapshot(),
                hand_value=dealer_value,
            )

        yield from self._settle_steps()

    def _settle_steps(self) -> Iterator[GameSnapshot]:
        rnd = self.round
        raw_edge = self.house_edge() if callable(self.house_edge) else self.house_edge
        result = settle_round(rnd.hands, rnd.dealer_cards, raw_edge)

        self.bankroll += result.total_credited
        self.last_result = result
        self.dealer_done()

        snapshot = self.snapshot()
        for hand_result in result.hands:
            self.events.emit_new(EventType.HAND_SETTLED, snapshot=snapshot, **hand_result.to_dict())
        self.events.emit_new(
            EventType.ROUND_ENDED,
            snapshot=snapshot,
            step=True,
            net=result.net,
            bankroll=self.bankroll,
            message=result.message,
        )
        logger.info("Round settled: net %+d, bankroll %d", result.net, self.bankroll)
        yield snapshot

        if self.bankroll <= 0:
            self.bankrupt()
            logger.info("Bankroll exhausted, game over")
            yield self._step(EventType.GAME_OVER, reason="bankrupt")
            return

        self.current_bet = 0
        self.round = Round()
        self.new_round()
        yield self._step(EventType.PHASE_CHANGED, phase=self.phase.value)

    # Helpers

    def _deal_to(self, hand: Hand, event_type: EventType = EventType.CARD_DEALT) -> GameSnapshot:
        card = self.deck.draw()
        hand.add_card(card)
        return self._step(
            event_type,
            card=str(card),
            target="player",
            hand_index=self._index_of(hand),
            hand_value=hand.value,
        )

    def _deal_to_dealer(
        self,
        hidden: bool = False,
        event_type: EventType = EventType.CARD_DEALT,
    ) -> GameSnapshot:
        card = self.deck.draw()
        if hidden:
            self.round.dealer_hidden_card = card
        else:
            self.round.dealer_cards.append(card)
        return self._step(
            event_type,
            card="??" if hidden else str(card),
            target="dealer",
            hand_value=hand_sum(self.round.dealer_cards),
        )

    def _index_of(self, hand: Hand) -> int:
        return next(i for i, h in enumerate(self.round.hands) if h is hand)

    def _step(self, event_type: EventType, **data: Any) -> GameSnapshot:
        snapshot = self.snapshot()
        logger.debug("%s %s", event_type.name, data)
        self.events.emit_new(event_type, snapshot=snapshot, step=True, **data)
        return snapshot

    def _begin(self, steps: Iterator[GameSnapshot]) -> Resolution:
        resolution = Resolution(self._guarded(steps))
        self._pending = resolution
        return resolution

    def _guarded(self, steps: Iterator[GameSnapshot]) -> Iterator[GameSnapshot]:
        try:
            yield from steps
        except DeckExhausted as exc:
            logger.error("Deck exhausted mid-round, aborting: %s", exc)
            self._abort_round(exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected error mid-round, aborting")
            self._abort_round(exc)
            raise
        finally:
            self._pending = None

    def _abort_round(self, exc: Exception) -> None:
        """Halt a round that can no longer reach settlement."""
        self.abort()
        self.events.emit_new(EventType.ROUND_ABORTED, snapshot=self.snapshot(), reason=str(exc))

    def _reject(
        self,
        error: BlackjackError,
        event_type: EventType = EventType.INVALID_ACTION,
        **data: Any,
    ) -> NoReturn:
        logger.warning("Rejected action: %s", error)
        self.events.emit_new(event_type, snapshot=self.snapshot(), message=str(error), **data)
        raise error

    def _require_idle(self) -> None:
        if self._pending is not None:
            self._reject(IllegalAction("Another action is still being resolved"))

    def _require_betting(self, action: str) -> None:
        self._require_idle()
        if self.phase is not GamePhase.BETTING:
            self._reject(IllegalAction(f"Cannot {action} during {self.phase}"))

    def _require_playable(self, action: str) -> Hand:
        self._require_idle()
        if self.phase is not GamePhase.PLAYER_TURN:
            self._reject(IllegalAction(f"Cannot {action} during {self.phase}"))
        hand = self.round.current_hand
        if hand is None or hand.finished:
            self._reject(IllegalAction(f"Cannot {action}: current hand is finished"))
        return hand

    def _playable_hand(self) -> Hand | None:
        if self.in_progress or self.phase is not GamePhase.PLAYER_TURN:
            return None
        hand = self.round.current_hand
        if hand is None or hand.finished:
            return None
        return hand
