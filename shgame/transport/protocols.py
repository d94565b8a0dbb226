# shgame/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


class InHeartbeat(InBase):
    type: Literal["heartbeat"] = "heartbeat"


class InSnapshot(InBase):
    type: Literal["snapshot"] = "snapshot"


class InVote(InBase):
    type: Literal["vote"] = "vote"
    vote_id: int
    answer: Literal["yes", "no"]


IncomingMessage = Union[
    InHeartbeat,
    InSnapshot,
    InVote,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutHello(OutBase):
    type: Literal["hello"] = "hello"
    game_id: int
    user_id: int


class OutHeartbeat(OutBase):
    type: Literal["heartbeat"] = "heartbeat"


class OutUpdate(OutBase):
    """
    State delta for a room.
    A null value under players/votes tells clients to drop that id.
    """
    type: Literal["update"] = "update"
    game: Dict[str, Any]
    players: Optional[Dict[int, Optional[Dict[str, Any]]]] = None
    votes: Optional[Dict[int, Optional[Dict[str, Any]]]] = None


class OutGameSnapshot(OutBase):
    type: Literal["game_snapshot"] = "game_snapshot"
    game: Dict[str, Any]
    players: Dict[int, Dict[str, Any]]
    votes: Dict[int, Dict[str, Any]]


OutgoingEvent = Union[
    OutError,
    OutHello,
    OutHeartbeat,
    OutUpdate,
    OutGameSnapshot,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "heartbeat": InHeartbeat,
    "snapshot": InSnapshot,
    "vote": InVote,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValueError for an unknown type, ValidationError for a bad payload.
    """
    t = payload.get("type")
    if not isinstance(t, str):
        raise ValueError("Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValueError(f"Unknown message type: {t}")

    return cls.model_validate(payload)
