"""Round phase enumeration."""

from enum import Enum


class GamePhase(Enum):
    """
    Round state machine phases.

    Flow: BETTING → PLAYER_TURN → DEALER_TURN → END_ROUND → BETTING,
    with GAME_OVER reached from END_ROUND once the bankroll is empty.
    """

    # No live hands, bet being assembled
    BETTING = "betting"

    # Player acting on the current hand
    PLAYER_TURN = "player_turn"

    # Dealer reveals and draws
    DEALER_TURN = "dealer_turn"

    # Hands settled, bankroll credited
    END_ROUND = "end_round"

    # Bankroll exhausted, or the round was aborted on a broken invariant
    GAME_OVER = "game_over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid phase transitions
VALID_TRANSITIONS: dict[GamePhase, list[GamePhase]] = {
    GamePhase.BETTING: [GamePhase.PLAYER_TURN],
    GamePhase.PLAYER_TURN: [GamePhase.PLAYER_TURN, GamePhase.DEALER_TURN],
    GamePhase.DEALER_TURN: [GamePhase.END_ROUND],
    GamePhase.END_ROUND: [GamePhase.BETTING, GamePhase.GAME_OVER],
    GamePhase.GAME_OVER: [],  # Terminal state
}


def is_valid_transition(from_phase: GamePhase, to_phase: GamePhase) -> bool:
    """
    Check if a phase transition is valid.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])
