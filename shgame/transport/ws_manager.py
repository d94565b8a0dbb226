# shgame/transport/ws_manager.py
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Union

import structlog
from fastapi import WebSocket

from shgame.transport.protocols import OutBase

log = structlog.get_logger(__name__)

Event = Union[OutBase, Dict[str, Any]]


class WSManager:
    """
    Sockets watching each game, keyed game_id -> user_id.
    One socket per user: reconnecting replaces the old one.
    Transport-only: no Redis, no game rules.
    """
    def __init__(self) -> None:
        self._games: Dict[int, Dict[int, WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def add(self, game_id: int, user_id: int, ws: WebSocket) -> None:
        async with self._lock:
            self._games.setdefault(game_id, {})[user_id] = ws

    async def remove(self, game_id: int, user_id: int, ws: Optional[WebSocket] = None) -> None:
        """Forget a user's socket; when ws is given, only if it is still the registered one."""
        async with self._lock:
            sockets = self._games.get(game_id)
            if not sockets:
                return
            if ws is None or sockets.get(user_id) is ws:
                sockets.pop(user_id, None)
            if not sockets:
                self._games.pop(game_id, None)

    async def broadcast(self, game_id: int, event: Event, exclude_user: Optional[int] = None) -> None:
        """
        Send one event to every socket on a game concurrently.
        Sockets whose send fails are dropped from the registry.
        """
        payload = event.model_dump(mode="json") if isinstance(event, OutBase) else event

        async with self._lock:
            targets = [
                (uid, ws) for uid, ws in self._games.get(game_id, {}).items()
                if uid != exclude_user
            ]

        results = await asyncio.gather(
            *(ws.send_json(payload) for _, ws in targets),
            return_exceptions=True,
        )
        for (uid, ws), res in zip(targets, results):
            if isinstance(res, Exception):
                log.info("socket_dropped", game_id=game_id, user_id=uid, error=str(res))
                await self.remove(game_id, uid, ws)

    async def room_size(self, game_id: int) -> int:
        async with self._lock:
            return len(self._games.get(game_id, {}))
