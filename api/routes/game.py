"""Game API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Header
from typing import Annotated

from api.schemas import (
    ActionRequest,
    ChipRequest,
    GameStateResponse,
    HouseEdgeRequest,
    HouseEdgeResponse,
    NewGameResponse,
    ResolutionResponse,
)
from api.session import extract_session_id, get_session_store
from core.game import Action, BlackjackGame, GameSnapshot, Resolution, available_actions, dispatch
from core.settlement import normalize_house_edge

router = APIRouter()


def _game_state_response(game: BlackjackGame, snapshot: GameSnapshot | None = None) -> GameStateResponse:
    """Convert a snapshot to a response; defaults to the current state."""
    current = snapshot is None
    snapshot = snapshot or game.snapshot()
    data = snapshot.to_dict()
    data["available_actions"] = (
        [a.value for a in available_actions(game)] if current else []
    )
    return GameStateResponse(**data)


def _resolve(game: BlackjackGame, resolution: Resolution) -> ResolutionResponse:
    """Run a resolution to completion, keeping every step."""
    steps = [_game_state_response(game, snapshot) for snapshot in resolution]
    return ResolutionResponse(steps=steps, state=_game_state_response(game))


def get_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> BlackjackGame:
    """Resolve the session header to its live game."""
    if extract_session_id(session_id) is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    game = get_session_store().get(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return game


GameDep = Annotated[BlackjackGame, Depends(get_game)]


@router.post("/new")
async def new_game() -> NewGameResponse:
    """Create a new game session."""
    store = get_session_store()
    session_id = store.create()
    game = store.get(session_id)
    return NewGameResponse(session_id=session_id, state=_game_state_response(game))


@router.get("/state")
async def get_state(game: GameDep) -> GameStateResponse:
    """Get current game state."""
    return _game_state_response(game)


@router.post("/bet/chip")
async def place_chip(request: ChipRequest, game: GameDep) -> GameStateResponse:
    """Add a chip to the current bet."""
    dispatch(game, Action.PLACE_CHIP, request.amount)
    return _game_state_response(game)


@router.post("/bet/clear")
async def clear_bet(game: GameDep) -> GameStateResponse:
    """Clear the current bet."""
    dispatch(game, Action.CLEAR_BET)
    return _game_state_response(game)


@router.post("/bet/max")
async def max_bet(game: GameDep) -> GameStateResponse:
    """Bet the whole bankroll."""
    dispatch(game, Action.MAX_BET)
    return _game_state_response(game)


@router.post("/bet/repeat")
async def repeat_bet(game: GameDep) -> GameStateResponse:
    """Repeat the previous round's bet."""
    dispatch(game, Action.REPEAT_BET)
    return _game_state_response(game)


@router.post("/deal")
async def deal(game: GameDep) -> ResolutionResponse:
    """Commit the bet and deal."""
    return _resolve(game, dispatch(game, Action.DEAL))


@router.post("/action")
async def player_action(request: ActionRequest, game: GameDep) -> ResolutionResponse:
    """Execute a player action."""
    return _resolve(game, dispatch(game, Action(request.action)))


@router.put("/house-edge")
async def set_house_edge(request: HouseEdgeRequest, game: GameDep) -> HouseEdgeResponse:
    """Set the house edge read at the next settlement."""
    game.house_edge = normalize_house_edge(request.value)
    return HouseEdgeResponse(house_edge=game.house_edge)
