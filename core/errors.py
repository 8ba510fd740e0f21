"""Engine error taxonomy.

Every error except ``DeckExhausted`` is raised before any state is touched,
so the caller can simply offer the action again.
"""


class BlackjackError(Exception):
    """Base class for all engine errors."""


class InvalidBet(BlackjackError):
    """Bet is zero, not a positive integer, or exceeds the bankroll."""


class IllegalAction(BlackjackError):
    """Action is not valid in the current phase or for the current hand."""


class DeckExhausted(BlackjackError):
    """A card was drawn from an empty deck.

    The reshuffle threshold makes this unreachable in a normal round. Seeing
    it means an invariant was broken and the round can no longer be trusted.
    """
