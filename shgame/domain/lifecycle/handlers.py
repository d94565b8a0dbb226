# shgame/domain/lifecycle/handlers.py
from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

from shgame.store.models import Game
from shgame.transport.protocols import (
    InHeartbeat,
    InSnapshot,
    OutError,
    OutGameSnapshot,
    OutHeartbeat,
    OutgoingEvent,
)

# Returns: (to_sender, to_room)
Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def build_snapshot(store, game_id: int, *, reveal_roles: bool = False) -> Optional[OutGameSnapshot]:
    """
    Full state of one game: the game record, every seated player and every open vote.
    Roles are hidden unless reveal_roles is set.
    """
    game = Game(store, game_id)
    if not await game.load():
        return None
    await asyncio.gather(game.load_players(), game.load_votes())
    return OutGameSnapshot(
        game=game.serialize(),
        players=game.serialize_players(hide_secrets=not reveal_roles),
        votes=game.serialize_votes(),
    )


async def handle_snapshot(*, app, game_id: int, user_id: int, msg: InSnapshot) -> Result:
    snap = await build_snapshot(app.state.store, game_id)
    if snap is None:
        return [OutError(code="GAME_NOT_FOUND", message="Game not found")], []
    return [snap], []


async def handle_heartbeat(*, app, game_id: int, user_id: int, msg: InHeartbeat) -> Result:
    return [OutHeartbeat()], []
