# shgame/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EK:
    """
    Redis key builder for entity-scoped keys.
    """
    kind: str  # "game" | "player" | "vote"
    id: int

    def record(self) -> str:
        return f"{self.kind}:{self.id}"  # HASH field -> encoded value

    def lock(self) -> str:
        return f"lock:{self.kind}:{self.id}"  # redis-py Lock token
