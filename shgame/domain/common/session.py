# shgame/domain/common/session.py
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

# None as a map value is a tombstone: observers drop that id
Deltas = Optional[Dict[int, Optional[Dict[str, Any]]]]


class Publisher(Protocol):
    async def publish(
        self,
        room_id: int,
        game: Dict[str, Any],
        players: Deltas,
        votes: Deltas,
    ) -> None: ...


@dataclass
class Session:
    """
    Everything a request flow needs besides its payload:
    which game it acts on, the store handle and where to announce changes.
    """
    game_id: int
    store: Any
    publisher: Publisher
    rng: random.Random = field(default_factory=random.SystemRandom)

    async def publish(self, game: Dict[str, Any], players: Deltas, votes: Deltas) -> None:
        await self.publisher.publish(self.game_id, game, players, votes)
