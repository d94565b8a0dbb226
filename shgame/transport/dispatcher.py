# shgame/transport/dispatcher.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple

import structlog
from pydantic import ValidationError

from shgame.domain.lifecycle.handlers import handle_heartbeat, handle_snapshot
from shgame.domain.voting.handlers import handle_vote
from shgame.store.errors import StoreError
from shgame.transport.protocols import (
    parse_incoming,
    InHeartbeat,
    InSnapshot,
    InVote,
    OutError,
    OutgoingEvent,
)

log = structlog.get_logger(__name__)

DispatchResult = Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]
# (to_sender_events, to_room_events), each event is JSON dict


async def dispatch_message(
    *,
    app,
    game_id: int,
    user_id: int,
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the correct domain handler
    - Returns (to_sender, to_room) events as JSON dicts

    Store failures end the flow here: they are logged and reported to the sender only.
    """
    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return [err], []

    try:
        if isinstance(msg, InVote):
            to_sender, to_room = await handle_vote(app=app, game_id=game_id, user_id=user_id, msg=msg)
            return _dump(to_sender), _dump(to_room)

        if isinstance(msg, InSnapshot):
            to_sender, to_room = await handle_snapshot(app=app, game_id=game_id, user_id=user_id, msg=msg)
            return _dump(to_sender), _dump(to_room)

        if isinstance(msg, InHeartbeat):
            to_sender, to_room = await handle_heartbeat(app=app, game_id=game_id, user_id=user_id, msg=msg)
            return _dump(to_sender), _dump(to_room)
    except StoreError as e:
        log.error("store_error", game_id=game_id, user_id=user_id, msg_type=msg.type, error=str(e))
        err = OutError(code="STORE_ERROR", message="Game state could not be updated, try again").model_dump()
        return [err], []

    # If protocol exists but we didn't route it yet:
    err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}").model_dump()
    return [err], []


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump(mode="json") for e in events]
