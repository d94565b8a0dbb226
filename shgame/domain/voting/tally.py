# shgame/domain/voting/tally.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from shgame.domain.common.session import Session
from shgame.domain.common.types import Answer, TallyOutcome
from shgame.domain.common.validation import ballot_rejection
from shgame.domain.voting.resolution import evaluate_vote
from shgame.store.models import Game, Vote

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TallyResult:
    outcome: TallyOutcome
    reason: Optional[str] = None


def resolve_tally(*, yes: int, no: int, requires: int, to_pass: int, total_eligible: int) -> TallyOutcome:
    """
    Decide a vote from its counts.
    Nothing resolves before `requires` ballots are in. After that, passing and
    failing are checked independently and the vote stays open until one holds.
    """
    if yes + no < requires:
        return "pending"
    if yes >= to_pass:
        return "passed"
    if no > total_eligible - to_pass:
        return "failed"
    return "pending"


async def tally_vote(session: Session, vote_id: int, user_id: int, answer: Answer) -> TallyResult:
    """
    Count one ballot.

    The whole load -> mutate -> save/resolve sequence runs under a per-vote lock,
    so two ballots on the same vote never both start from the same voter lists.
    Invalid ballots are logged and dropped without touching the store.
    """
    store = session.store
    vote = Vote(store, vote_id)

    async with store.lock(vote.keys.lock()):
        game = Game(store, session.game_id)
        _, vote_found = await asyncio.gather(game.load(), vote.load())

        reason = ballot_rejection(game, vote, user_id) if vote_found else "vote completed"
        if reason is not None:
            log.warning("ballot_rejected", game_id=session.game_id, vote_id=vote_id, user_id=user_id, reason=reason)
            return TallyResult("rejected", reason)

        if answer == "yes":
            yes_voters = vote.yes_voters
            yes_voters.append(user_id)
            vote.yes_voters = yes_voters
        else:
            no_voters = vote.no_voters
            no_voters.append(user_id)
            vote.no_voters = no_voters

        outcome = resolve_tally(
            yes=len(vote.yes_voters),
            no=len(vote.no_voters),
            requires=vote.requires,
            to_pass=vote.to_pass,
            total_eligible=len(game.turn_order) - len(vote.non_voters),
        )

        if outcome != "pending":
            # resolution rewrites the game record; serialize with other resolving votes
            async with store.lock(game.keys.lock()):
                await game.load()
                if vote_id not in game.votes_in_progress:
                    log.warning("ballot_rejected", game_id=session.game_id, vote_id=vote_id, user_id=user_id, reason="vote completed")
                    return TallyResult("rejected", "vote completed")
                applied = await evaluate_vote(session, game, vote, outcome == "passed")
            if not applied:
                return TallyResult("dropped", f"no rule for {vote.type} votes during {game.phase}")
            return TallyResult(outcome)

        await vote.save()
        log.info("ballot_counted", game_id=session.game_id, vote_id=vote_id, user_id=user_id, answer=answer)

        # still under the vote lock so updates leave in the order they were saved
        await session.publish(
            {"votes_in_progress": game.votes_in_progress},
            None,
            {vote_id: vote.serialize()},
        )
    return TallyResult("pending")
