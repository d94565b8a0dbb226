# shgame/transport/ws.py
from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from shgame.settings import get_settings
from shgame.transport.dispatcher import dispatch_message
from shgame.transport.protocols import OutError, OutHello

router = APIRouter()
log = structlog.get_logger(__name__)


def _is_private_ip(host: str) -> bool:
    """Return True if host is a private IP (192.168.x.x, 10.x.x.x, 172.16-31.x.x)."""
    try:
        ip = ipaddress.ip_address(host)
        return ip.is_private
    except ValueError:
        return False


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or origin in allowed:
        return True
    if settings.WS_ALLOW_LAN_ORIGINS:
        o = urlparse(origin)
        if _is_private_ip(o.hostname or "") and o.port == 5173:
            return True
    log.info("ws_origin_rejected", origin=origin)
    await websocket.close(code=1008)
    return False


@router.websocket("/ws/{game_id}")
async def ws_game(websocket: WebSocket, game_id: int, user_id: int):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    wsman = websocket.app.state.wsman
    await wsman.add(game_id, user_id, websocket)
    structlog.contextvars.bind_contextvars(game_id=game_id, user_id=user_id)
    log.info("ws_connected")
    await websocket.send_json(OutHello(game_id=game_id, user_id=user_id).model_dump())

    try:
        while True:
            raw = await websocket.receive_json()
            if not isinstance(raw, dict):
                err = OutError(code="BAD_MESSAGE", message="Message must be a JSON object").model_dump()
                await websocket.send_json(err)
                continue

            to_sender, to_room = await dispatch_message(
                app=websocket.app,
                game_id=game_id,
                user_id=user_id,
                raw=raw,
            )

            # unicast
            for e in to_sender:
                await websocket.send_json(e)

            # broadcast (exclude sender by default to avoid duplicates)
            for e in to_room:
                await wsman.broadcast(game_id, e, exclude_user=user_id)

    except WebSocketDisconnect:
        log.info("ws_disconnected")

    finally:
        await wsman.remove(game_id, user_id, websocket)
        structlog.contextvars.unbind_contextvars("game_id", "user_id")
