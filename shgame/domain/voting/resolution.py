# shgame/domain/voting/resolution.py
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Tuple

import structlog

from shgame.domain.common.session import Session
from shgame.domain.common.types import Phase, VoteType
from shgame.store.models import Game, Player, Vote

log = structlog.get_logger(__name__)

Handler = Callable[[Session, Game, Vote, bool], Awaitable[None]]


def _remove_from_progress(game: Game, vote: Vote) -> None:
    votes = game.votes_in_progress
    if vote.id in votes:
        votes.remove(vote.id)
    game.votes_in_progress = votes


def _seat_key(players: Dict[int, Player]):
    def key(pid: int) -> Tuple[bool, int]:
        seat = players[pid].seat_num
        return (seat is None, seat or 0)
    return key


async def evaluate_join_vote(session: Session, game: Game, vote: Vote, passed: bool) -> None:
    """
    Seat the join candidate if the vote passed and the seat is still free.
    The guards are re-checked here because the table may have changed since the vote opened.
    """
    candidate = Player(session.store, vote.target1)
    _, found = await asyncio.gather(game.load_players(), candidate.load())

    ids = game.turn_order
    seat_taken = any(p.seat_num == candidate.seat_num for p in game.players.values())
    already_seated = candidate.id in ids

    admitted = passed and found and not seat_taken and not already_seated
    if admitted:
        log.info("player_admitted", game_id=game.id, player_id=candidate.id, seat=candidate.seat_num)
        game.players[candidate.id] = candidate
        ids.append(candidate.id)
        ids.sort(key=_seat_key(game.players))
        game.turn_order = ids
    elif not passed:
        log.info("join_denied", game_id=game.id, player_id=candidate.id)
    elif not found:
        log.info("join_candidate_missing", game_id=game.id, player_id=candidate.id)
    elif seat_taken:
        log.info("join_seat_taken", game_id=game.id, player_id=candidate.id, seat=candidate.seat_num)
    else:
        log.info("join_already_seated", game_id=game.id, player_id=candidate.id)

    _remove_from_progress(game, vote)

    # game first: if it fails the vote is still listed and still exists, so a retry can resolve it
    game_delta = await game.save()
    await vote.destroy()
    await session.publish(
        game_delta,
        {candidate.id: candidate.serialize()} if admitted else None,
        {vote.id: None},
    )


async def evaluate_kick_vote(session: Session, game: Game, vote: Vote, passed: bool) -> None:
    target = Player(session.store, vote.target1)

    if passed:
        ids = game.turn_order
        if target.id in ids:
            ids.remove(target.id)
        game.turn_order = ids
        log.info("player_kicked", game_id=game.id, player_id=target.id)
    else:
        log.info("kick_failed", game_id=game.id, player_id=target.id)

    _remove_from_progress(game, vote)

    game_delta = await game.save()
    doomed = [vote.destroy()]
    if passed:
        doomed.append(target.destroy())
    await asyncio.gather(*doomed)

    await session.publish(
        game_delta,
        {target.id: None} if passed else None,
        {vote.id: None},
    )


async def evaluate_confirm_vote(session: Session, game: Game, vote: Vote, passed: bool) -> None:
    # confirmation votes only go one way; the outcome is not consulted
    ids = game.turn_order
    if ids:
        game.president = session.rng.choice(ids)
    else:
        log.warning("confirm_with_empty_table", game_id=game.id)
    game.phase = "nominate"
    log.info("roles_confirmed", game_id=game.id, president=game.president)

    _remove_from_progress(game, vote)

    game_delta = await game.save()
    await vote.destroy()
    await session.publish(game_delta, None, {vote.id: None})


_HANDLERS: Dict[Tuple[VoteType, Phase], Handler] = {
    ("join", "setup"): evaluate_join_vote,
    ("kick", "setup"): evaluate_kick_vote,
    ("confirmRole", "night"): evaluate_confirm_vote,
}


async def evaluate_vote(session: Session, game: Game, vote: Vote, passed: bool) -> bool:
    """
    Apply the consequence of a resolved vote.
    Combinations of vote type and phase without a handler are dropped; returns
    whether a handler ran.
    """
    handler = _HANDLERS.get((vote.type, game.phase))
    if handler is None:
        log.info("vote_resolution_dropped", game_id=game.id, vote_id=vote.id, vote_type=vote.type, phase=game.phase)
        return False
    log.info("vote_resolved", game_id=game.id, vote_id=vote.id, vote_type=vote.type, passed=passed)
    await handler(session, game, vote, passed)
    return True
