from __future__ import annotations

from .errors import FieldError, StoreError
from .models import Game, Player, Vote
from .redis_repo import RedisStore

__all__ = [
    "FieldError",
    "StoreError",
    "Game",
    "Player",
    "Vote",
    "RedisStore",
]
