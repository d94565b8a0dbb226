# shgame/domain/common/validation.py
from __future__ import annotations

from typing import Optional

from shgame.store.models import Game, Vote


def ballot_rejection(game: Game, vote: Vote, user_id: int) -> Optional[str]:
    """
    Return why a ballot may not be counted, or None when it may.
    Checks run in a fixed order so the first failing one is reported.
    """
    if vote.id not in game.votes_in_progress:
        return "vote completed"
    if user_id not in game.turn_order:
        return "user not playing"
    if user_id in vote.yes_voters or user_id in vote.no_voters:
        return "user has already voted"
    if user_id in vote.non_voters:
        return "user is not allowed to vote"
    return None
