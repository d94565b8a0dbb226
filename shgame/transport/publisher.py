# shgame/transport/publisher.py
from __future__ import annotations

from typing import Any, Dict

from shgame.domain.common.session import Deltas
from shgame.transport.protocols import OutUpdate
from shgame.transport.ws_manager import WSManager


class RoomPublisher:
    """Announces state deltas to every socket watching a game."""

    def __init__(self, wsman: WSManager) -> None:
        self.wsman = wsman

    async def publish(self, room_id: int, game: Dict[str, Any], players: Deltas, votes: Deltas) -> None:
        await self.wsman.broadcast(room_id, OutUpdate(game=game, players=players, votes=votes))
