# shgame/transport/admin.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from shgame.domain.lifecycle.handlers import build_snapshot
from shgame.store.models import Game

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/games/{game_id}")
async def get_game(game_id: int, request: Request, reveal: bool = False):
    """
    Inspect a game (debug/admin). reveal=true includes secret roles.
    """
    snap = await build_snapshot(request.app.state.store, game_id, reveal_roles=reveal)
    if snap is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return snap.model_dump(mode="json")


@router.get("/games/{game_id}/connections")
async def game_connections(game_id: int, request: Request):
    """
    How many sockets are watching a game, and whether its record still exists.
    """
    game = Game(request.app.state.store, game_id)
    exists = await game.load()
    size = await request.app.state.wsman.room_size(game_id)
    return {"game_id": game_id, "exists": exists, "connections": size}
