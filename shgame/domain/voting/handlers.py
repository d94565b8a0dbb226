# shgame/domain/voting/handlers.py
from __future__ import annotations

from typing import List, Tuple

from shgame.domain.common.session import Session
from shgame.domain.voting.tally import tally_vote
from shgame.transport.protocols import InVote, OutgoingEvent

Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def handle_vote(*, app, game_id: int, user_id: int, msg: InVote) -> Result:
    """
    Ballots never get a direct reply; the room sees the outcome through update events.
    """
    session = Session(game_id=game_id, store=app.state.store, publisher=app.state.publisher)
    await tally_vote(session, msg.vote_id, user_id, msg.answer)
    return [], []
