"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal


class ChipRequest(BaseModel):
    """Request to add a chip to the current bet."""

    amount: int = Field(..., ge=1, description="Chip amount")


class ActionRequest(BaseModel):
    """Request for a round action."""

    action: Literal["hit", "stand", "double", "split"]


class HouseEdgeRequest(BaseModel):
    """Operator-supplied house edge; anything unusable counts as zero."""

    value: Any = None


class HouseEdgeResponse(BaseModel):
    """Effective house edge after normalisation."""

    house_edge: float


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    bet: int
    finished: bool
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool


class HandResultResponse(BaseModel):
    """Settlement of one hand."""

    hand_index: int
    outcome: Literal["blackjack", "win", "push", "lose", "bust"]
    bet: int
    player_value: int
    win_amount: int
    credited: int
    net: int


class RoundResultResponse(BaseModel):
    """Settlement of a whole round."""

    hands: list[HandResultResponse]
    dealer_value: int
    house_edge: float
    net: int
    message: str


class GameStateResponse(BaseModel):
    """Snapshot of a session."""

    bankroll: int
    current_bet: int
    last_bet: int
    phase: Literal["betting", "player_turn", "dealer_turn", "end_round", "game_over"]
    dealer_cards: list[CardResponse]
    dealer_has_hidden_card: bool
    dealer_value: int
    player_hands: list[HandResponse]
    current_hand_index: int
    in_progress: bool
    cards_remaining: int
    last_result: RoundResultResponse | None = None
    available_actions: list[str] = []


class ResolutionResponse(BaseModel):
    """Every intermediate snapshot of an action, followed by the final state."""

    steps: list[GameStateResponse]
    state: GameStateResponse


class NewGameResponse(BaseModel):
    """Created session."""

    session_id: str
    state: GameStateResponse


class ErrorResponse(BaseModel):
    """Rejected action."""

    detail: str
    error: str
